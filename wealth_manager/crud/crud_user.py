from sqlalchemy.orm import Session
from typing import Optional
from uuid import uuid4
from datetime import datetime

from wealth_manager.db.core import UserDB, NotFoundError, commit_or_rollback
from wealth_manager.models.user import UserCreate


# ===== DATABASE OPERATIONS =====

def create_db_user(db: Session, user_data: UserCreate) -> UserDB:
    """Create a new user in the database"""

    if read_db_user_by_email(db, user_data.email):
        raise ValueError("Email already registered")

    db_user = UserDB(
        id=uuid4(),
        email=user_data.email,
        display_name=user_data.display_name,
        currency=user_data.currency,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    db.add(db_user)
    commit_or_rollback(db, "User creation")
    db.refresh(db_user)
    return db_user


def read_db_user(db: Session, user_id: int) -> Optional[UserDB]:
    return db.query(UserDB).filter(UserDB.db_id == user_id).first()


def read_db_user_by_email(db: Session, email: str) -> Optional[UserDB]:
    return db.query(UserDB).filter(UserDB.email == email.lower().strip()).first()


def read_db_users(db: Session):
    return db.query(UserDB).order_by(UserDB.db_id).all()


def require_user(db: Session, user_id: int) -> UserDB:
    user = read_db_user(db, user_id)
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")
    return user
