from sqlalchemy.orm import Session
from typing import Optional, List
from datetime import datetime

from wealth_manager.crud.crud_cashflow import category_names, read_db_category, read_month_transactions
from wealth_manager.crud.crud_user import require_user
from wealth_manager.db.core import BudgetDB, NotFoundError, commit_or_rollback
from wealth_manager.logging_config import get_logger
from wealth_manager.models.budget import BudgetCreate, BudgetUpdate, BudgetStatus
from wealth_manager.models.enums import BudgetPeriodEnum, CategoryTypeEnum
from wealth_manager.services.budget_monitor import active_for_month, budget_status, sort_by_usage

logger = get_logger(__name__)


# ===== DATABASE OPERATIONS =====

def _find_duplicate(db: Session, user_id: int, category_id: Optional[int], period: BudgetPeriodEnum,
                    exclude_id: Optional[int] = None) -> Optional[BudgetDB]:
    query = db.query(BudgetDB).filter(
        BudgetDB.user_id == user_id,
        BudgetDB.period == BudgetPeriodEnum(period),
    )
    if category_id is None:
        query = query.filter(BudgetDB.category_id.is_(None))
    else:
        query = query.filter(BudgetDB.category_id == category_id)
    if exclude_id is not None:
        query = query.filter(BudgetDB.id != exclude_id)
    return query.first()


def create_db_budget(db: Session, user_id: int, budget_data: BudgetCreate) -> BudgetDB:
    """Create a budget; at most one per user, category and period"""

    require_user(db, user_id)

    if budget_data.category_id is not None:
        category = read_db_category(db, budget_data.category_id, user_id)
        if not category:
            raise NotFoundError(f"Category with id {budget_data.category_id} not found")
        if CategoryTypeEnum(category.type) != CategoryTypeEnum.EXPENSE:
            raise ValueError("Budgets can only track expense categories")

    if _find_duplicate(db, user_id, budget_data.category_id, budget_data.period):
        raise ValueError("A budget already exists for this category and period")

    db_budget = BudgetDB(
        user_id=user_id,
        category_id=budget_data.category_id,
        amount=budget_data.amount,
        period=BudgetPeriodEnum(budget_data.period),
        start_date=budget_data.start_date,
        end_date=budget_data.end_date,
        alert_threshold=budget_data.alert_threshold,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    db.add(db_budget)
    commit_or_rollback(db, "Budget creation")
    db.refresh(db_budget)
    return db_budget


def read_db_budget(db: Session, budget_id: int, user_id: int) -> Optional[BudgetDB]:
    return db.query(BudgetDB).filter(BudgetDB.id == budget_id, BudgetDB.user_id == user_id).first()


def read_db_budgets(db: Session, user_id: int, skip: int = 0, limit: Optional[int] = 100) -> List[BudgetDB]:
    """Budgets in creation order"""
    return db.query(BudgetDB).filter(BudgetDB.user_id == user_id).order_by(BudgetDB.id).offset(skip).limit(limit).all()


def update_db_budget(db: Session, budget_id: int, user_id: int, budget_updates: BudgetUpdate) -> BudgetDB:
    db_budget = read_db_budget(db, budget_id, user_id)
    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")

    update_data = budget_updates.model_dump(exclude_unset=True)

    start_date = update_data.get('start_date', db_budget.start_date)
    end_date = update_data.get('end_date', db_budget.end_date)
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValueError("end_date must not be before start_date")

    for field, value in update_data.items():
        setattr(db_budget, field, value)
    db_budget.updated_at = datetime.utcnow()

    commit_or_rollback(db, "Budget update")
    db.refresh(db_budget)
    return db_budget


def delete_db_budget(db: Session, budget_id: int, user_id: int) -> bool:
    db_budget = read_db_budget(db, budget_id, user_id)
    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")

    db.delete(db_budget)
    commit_or_rollback(db, "Budget deletion")
    return True


# ===== BUDGET MONITOR =====

def get_budget_status(db: Session, user_id: int, year: int, month: int,
                      sort_by_risk: bool = False) -> List[BudgetStatus]:
    """
    Spending against every budget active in the given month. Budgets come back
    in creation order unless `sort_by_risk` asks for highest usage first.
    """
    budgets = [budget for budget in read_db_budgets(db, user_id, limit=None) if active_for_month(budget, year, month)]
    statuses = budget_status(
        budgets,
        read_month_transactions(db, user_id, year, month),
        year,
        month,
        category_names(db, user_id),
    )

    for status in statuses:
        if status.is_over_budget:
            logger.info(f"Budget {status.budget_id} for user {user_id} is over budget in {year}-{month:02d}")

    return sort_by_usage(statuses) if sort_by_risk else statuses
