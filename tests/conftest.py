"""
Pytest configuration and shared fixtures for wealth_manager tests.

Every test gets a fresh in-memory SQLite database; the API client fixture
routes FastAPI's get_db dependency to the same session.
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wealth_manager.db.core import Base, get_db
from wealth_manager.crud import crud_account, crud_fund, crud_user
from wealth_manager.models.account import AccountCreate
from wealth_manager.models.enums import AccountTypeEnum
from wealth_manager.models.fund import FundCreate
from wealth_manager.models.user import UserCreate


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    """The first user; its db_id matches the placeholder current user (1)."""
    return crud_user.create_db_user(db, UserCreate(email="saver@example.com", display_name="Saver"))


@pytest.fixture
def fund(db):
    return crud_fund.create_db_fund(db, FundCreate(code="110011", name="Mid Cap Mixed", nav=Decimal("12.5000")))


@pytest.fixture
def fund_account(db, user):
    return crud_account.create_db_account(
        db, user.db_id, AccountCreate(name="Brokerage", type=AccountTypeEnum.FUND)
    )


@pytest.fixture
def client(db, user):
    from wealth_manager.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
