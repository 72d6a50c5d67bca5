import os
from typing import Optional, List
from sqlalchemy import create_engine, ForeignKey, Index, UniqueConstraint, Boolean, Integer, String, Text, JSON, DECIMAL, DateTime, Date
from sqlalchemy.types import Enum
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker, DeclarativeBase, Mapped, relationship, mapped_column
from datetime import datetime, date
from uuid import UUID
from decimal import Decimal
from dotenv import load_dotenv

from wealth_manager.models.enums import (
    AccountTypeEnum,
    FundTypeEnum,
    FundTransactionTypeEnum,
    InvestmentFrequencyEnum,
    CashflowTypeEnum,
    CategoryTypeEnum,
    BudgetPeriodEnum,
    GoalStatusEnum,
    ReminderTypeEnum,
)
from wealth_manager.services.errors import StoreUnavailableError


load_dotenv()

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///wealth_manager.db")


class NotFoundError(Exception):
    pass


class Base(DeclarativeBase):
    pass


class UserDB(Base):
    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_user_email"),
        Index("idx_users_email", "email"),
    )

    db_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[UUID] = mapped_column(unique=True, nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(100))
    currency: Mapped[str] = mapped_column(String(3), default="CNY")

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    accounts = relationship("AssetAccountDB", back_populates="user")
    goals = relationship("FinancialGoalDB", back_populates="user")


class AssetAccountDB(Base):
    __tablename__ = "asset_accounts"

    __table_args__ = (
        Index("idx_asset_accounts_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)

    # Account Details
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[AccountTypeEnum] = mapped_column(Enum(AccountTypeEnum), nullable=False)
    institution: Mapped[Optional[str]] = mapped_column(String(255))
    account_number: Mapped[Optional[str]] = mapped_column(String(50))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Balance is only changed by explicit edits, never by the calculation layer
    balance: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=Decimal("0.00"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="accounts")
    fund_holdings = relationship("FundHoldingDB", back_populates="account")


class FundDB(Base):
    __tablename__ = "funds"

    __table_args__ = (
        UniqueConstraint("code", name="uq_fund_code"),
        Index("idx_funds_code", "code"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False)  # e.g., "110011"
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    fund_type: Mapped[Optional[FundTypeEnum]] = mapped_column(Enum(FundTypeEnum))

    # Latest known NAV only, no history
    nav: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(15, 4))
    nav_date: Mapped[Optional[date]] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    holdings = relationship("FundHoldingDB", back_populates="fund")


class FundHoldingDB(Base):
    __tablename__ = "fund_holdings"

    __table_args__ = (
        # One holding per user/fund/account combination
        UniqueConstraint("user_id", "fund_id", "account_id", name="uq_user_fund_account"),

        Index("idx_holdings_user", "user_id"),
        Index("idx_holdings_fund", "fund_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)
    fund_id: Mapped[int] = mapped_column(ForeignKey("funds.id"), nullable=False)
    account_id: Mapped[Optional[int]] = mapped_column(ForeignKey("asset_accounts.id"))

    # Materialized replay of the fund transaction log
    shares: Mapped[Decimal] = mapped_column(DECIMAL(18, 6), default=Decimal("0"))
    cost_basis: Mapped[Decimal] = mapped_column(DECIMAL(18, 6), default=Decimal("0"))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    fund = relationship("FundDB", back_populates="holdings")
    account = relationship("AssetAccountDB", back_populates="fund_holdings")
    transactions = relationship("FundTransactionDB", back_populates="holding")


class FundTransactionDB(Base):
    __tablename__ = "fund_transactions"

    __table_args__ = (
        Index("idx_fund_transactions_user_fund_date", "user_id", "fund_id", "transaction_date"),
        Index("idx_fund_transactions_holding", "holding_id"),
        Index("idx_fund_transactions_type", "type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)
    fund_id: Mapped[int] = mapped_column(ForeignKey("funds.id"), nullable=False)
    account_id: Mapped[Optional[int]] = mapped_column(ForeignKey("asset_accounts.id"))
    holding_id: Mapped[Optional[int]] = mapped_column(ForeignKey("fund_holdings.id"))

    type: Mapped[FundTransactionTypeEnum] = mapped_column(Enum(FundTransactionTypeEnum), nullable=False)
    shares: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(18, 6))  # split: share delta
    nav: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(15, 4))
    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    fee: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=Decimal("0"))
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    holding = relationship("FundHoldingDB", back_populates="transactions")


class CashflowCategoryDB(Base):
    __tablename__ = "cashflow_categories"

    __table_args__ = (
        Index("idx_categories_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # NULL user_id marks a shared system category
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.db_id"))
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[CategoryTypeEnum] = mapped_column(Enum(CategoryTypeEnum), nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String(50))
    color: Mapped[Optional[str]] = mapped_column(String(7))  # Hex color code
    is_system: Mapped[bool] = mapped_column(Boolean, default=False)
    parent_id: Mapped[Optional[int]] = mapped_column(ForeignKey("cashflow_categories.id"))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    parent = relationship("CashflowCategoryDB", remote_side=[id], back_populates="children")
    children = relationship("CashflowCategoryDB", back_populates="parent")


class CashflowTransactionDB(Base):
    __tablename__ = "cashflow_transactions"

    __table_args__ = (
        Index("idx_cashflow_user_date", "user_id", "transaction_date"),
        Index("idx_cashflow_user_category", "user_id", "category_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)
    account_id: Mapped[Optional[int]] = mapped_column(ForeignKey("asset_accounts.id"))
    category_id: Mapped[Optional[int]] = mapped_column(ForeignKey("cashflow_categories.id"))

    type: Mapped[CashflowTypeEnum] = mapped_column(Enum(CashflowTypeEnum), nullable=False)
    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500))
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    tags: Mapped[Optional[List[str]]] = mapped_column(JSON)
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("CashflowCategoryDB")


class BudgetDB(Base):
    __tablename__ = "budgets"

    __table_args__ = (
        Index("idx_budgets_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)
    # NULL category means the budget covers all expenses
    category_id: Mapped[Optional[int]] = mapped_column(ForeignKey("cashflow_categories.id"))

    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    period: Mapped[BudgetPeriodEnum] = mapped_column(Enum(BudgetPeriodEnum), default=BudgetPeriodEnum.MONTHLY)
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    alert_threshold: Mapped[Decimal] = mapped_column(DECIMAL(3, 2), default=Decimal("0.80"))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("CashflowCategoryDB")


class FinancialGoalDB(Base):
    __tablename__ = "financial_goals"

    __table_args__ = (
        Index("idx_goals_user_status", "user_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    current_amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=Decimal("0"))
    deadline: Mapped[Optional[date]] = mapped_column(Date)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    priority: Mapped[int] = mapped_column(Integer, default=3)  # 1 (highest) - 5
    status: Mapped[GoalStatusEnum] = mapped_column(Enum(GoalStatusEnum), default=GoalStatusEnum.ACTIVE)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserDB", back_populates="goals")


class InvestmentPlanDB(Base):
    __tablename__ = "investment_plans"

    __table_args__ = (
        Index("idx_plans_user_next_date", "user_id", "next_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)
    fund_id: Mapped[int] = mapped_column(ForeignKey("funds.id"), nullable=False)
    account_id: Mapped[Optional[int]] = mapped_column(ForeignKey("asset_accounts.id"))

    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    frequency: Mapped[InvestmentFrequencyEnum] = mapped_column(Enum(InvestmentFrequencyEnum), nullable=False)
    day_of_month: Mapped[Optional[int]] = mapped_column(Integer)  # 1-31, monthly only
    day_of_week: Mapped[Optional[int]] = mapped_column(Integer)  # 0=Sunday, weekly/biweekly only
    next_date: Mapped[Optional[date]] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    fund = relationship("FundDB")


class NetWorthSnapshotDB(Base):
    """
    Append-only record of computed net worth, one row per explicit refresh.
    Rows are never updated in place.
    """
    __tablename__ = "net_worth_snapshots"

    __table_args__ = (
        Index("idx_snapshots_user_date", "user_id", "snapshot_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)

    snapshot_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_assets: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    total_liabilities: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    net_worth: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    breakdown: Mapped[Optional[dict]] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ReminderDB(Base):
    __tablename__ = "reminders"

    __table_args__ = (
        Index("idx_reminders_user_remind_at", "user_id", "remind_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.db_id"), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    remind_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    type: Mapped[Optional[ReminderTypeEnum]] = mapped_column(Enum(ReminderTypeEnum))
    reference_id: Mapped[Optional[int]] = mapped_column(Integer)  # goal/budget/plan id
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(
    DATABASE_URL,
    echo=os.getenv("SQL_ECHO", "false").lower() == "true",
    connect_args=connect_args,
)
session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency to get the database session
def get_db():
    database = session_local()
    try:
        yield database
    finally:
        database.close()


def commit_or_rollback(db: Session, action: str) -> None:
    """
    Commit the session's pending work as one unit. Constraint violations become
    ValueError and connection problems StoreUnavailableError; either way
    nothing from the failed unit is left in the session.
    """
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError(f"{action} failed due to database constraint")
    except OperationalError as e:
        db.rollback()
        raise StoreUnavailableError(f"{action} failed: database unavailable") from e
