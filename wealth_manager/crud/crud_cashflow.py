from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional, List, Dict
from datetime import datetime, date

from wealth_manager.crud.crud_account import read_db_account
from wealth_manager.crud.crud_user import require_user
from wealth_manager.db.core import (
    BudgetDB,
    CashflowCategoryDB,
    CashflowTransactionDB,
    NotFoundError,
    commit_or_rollback,
)
from wealth_manager.logging_config import get_logger
from wealth_manager.models.cashflow import (
    CashflowTransactionCreate,
    CashflowTransactionUpdate,
    CashflowTrend,
    CategoryCreate,
    CategoryTreeNode,
    CategoryUpdate,
    MonthlyCashflowSummary,
)
from wealth_manager.models.enums import CashflowTypeEnum, CategoryTypeEnum
from wealth_manager.services.budget_monitor import month_bounds
from wealth_manager.services.cashflow_summary import category_tree, cashflow_trend, monthly_summary, trailing_months

logger = get_logger(__name__)


# ===== CATEGORY OPERATIONS =====

def _visible_categories(db: Session, user_id: int):
    """System categories plus the user's own"""
    return db.query(CashflowCategoryDB).filter(
        or_(CashflowCategoryDB.user_id.is_(None), CashflowCategoryDB.user_id == user_id)
    )


def read_db_category(db: Session, category_id: int, user_id: int) -> Optional[CashflowCategoryDB]:
    return _visible_categories(db, user_id).filter(CashflowCategoryDB.id == category_id).first()


def read_db_categories(db: Session, user_id: int, category_type: Optional[CategoryTypeEnum] = None) -> List[CashflowCategoryDB]:
    query = _visible_categories(db, user_id)
    if category_type:
        query = query.filter(CashflowCategoryDB.type == CategoryTypeEnum(category_type))
    return query.order_by(CashflowCategoryDB.name).all()


def read_db_category_tree(db: Session, user_id: int, category_type: Optional[CategoryTypeEnum] = None) -> List[CategoryTreeNode]:
    return category_tree(read_db_categories(db, user_id, category_type))


def category_names(db: Session, user_id: int) -> Dict[int, str]:
    return {category.id: category.name for category in read_db_categories(db, user_id)}


def create_db_category(db: Session, user_id: int, category_data: CategoryCreate, is_system: bool = False) -> CashflowCategoryDB:
    """
    Create a user category, or a shared system category when `is_system` is set.
    Sub-categories may only hang off a top-level category of the same type.
    """
    owner_id = None if is_system else user_id

    if category_data.parent_id is not None:
        parent = read_db_category(db, category_data.parent_id, user_id)
        if not parent:
            raise NotFoundError(f"Category with id {category_data.parent_id} not found")
        if parent.parent_id is not None:
            raise ValueError("Categories can only be nested one level deep")
        if CategoryTypeEnum(parent.type) != CategoryTypeEnum(category_data.type):
            raise ValueError("A sub-category must have the same type as its parent")

    existing_category = _visible_categories(db, user_id).filter(
        CashflowCategoryDB.name.ilike(category_data.name),
        CashflowCategoryDB.type == CategoryTypeEnum(category_data.type)
    ).first()
    if existing_category:
        raise ValueError(f"Category with name '{category_data.name}' already exists")

    db_category = CashflowCategoryDB(
        user_id=owner_id,
        name=category_data.name,
        type=CategoryTypeEnum(category_data.type),
        icon=category_data.icon,
        color=category_data.color,
        is_system=is_system,
        parent_id=category_data.parent_id,
        created_at=datetime.utcnow()
    )

    db.add(db_category)
    commit_or_rollback(db, "Category creation")
    db.refresh(db_category)
    return db_category


def update_db_category(db: Session, category_id: int, user_id: int, category_updates: CategoryUpdate) -> CashflowCategoryDB:
    db_category = read_db_category(db, category_id, user_id)
    if not db_category:
        raise NotFoundError(f"Category with id {category_id} not found")
    if db_category.is_system:
        raise ValueError("System categories cannot be modified")

    update_data = category_updates.model_dump(exclude_unset=True)
    if 'name' in update_data:
        update_data['name'] = update_data['name'].strip()

    for field, value in update_data.items():
        setattr(db_category, field, value)

    commit_or_rollback(db, "Category update")
    db.refresh(db_category)
    return db_category


def delete_db_category(db: Session, category_id: int, user_id: int) -> bool:
    """Delete a user category that no transaction, budget or sub-category uses"""

    db_category = read_db_category(db, category_id, user_id)
    if not db_category:
        raise NotFoundError(f"Category with id {category_id} not found")
    if db_category.is_system:
        raise ValueError("System categories cannot be deleted")

    in_use = (
        db.query(CashflowTransactionDB).filter(CashflowTransactionDB.category_id == category_id).count()
        + db.query(BudgetDB).filter(BudgetDB.category_id == category_id).count()
        + db.query(CashflowCategoryDB).filter(CashflowCategoryDB.parent_id == category_id).count()
    )
    if in_use:
        logger.warning(f"Refusing to delete category {category_id}: still referenced {in_use} times")
        raise ValueError("Cannot delete category as it is currently in use.")

    db.delete(db_category)
    commit_or_rollback(db, "Category deletion")
    return True


# ===== CASHFLOW TRANSACTION OPERATIONS =====

def _check_references(db: Session, user_id: int, account_id: Optional[int], category_id: Optional[int]) -> None:
    if account_id is not None and not read_db_account(db, account_id, user_id):
        raise NotFoundError(f"Account with id {account_id} not found")
    if category_id is not None and not read_db_category(db, category_id, user_id):
        raise NotFoundError(f"Category with id {category_id} not found")


def create_db_cashflow_transaction(db: Session, user_id: int, transaction_data: CashflowTransactionCreate) -> CashflowTransactionDB:
    require_user(db, user_id)
    _check_references(db, user_id, transaction_data.account_id, transaction_data.category_id)

    db_transaction = CashflowTransactionDB(
        user_id=user_id,
        account_id=transaction_data.account_id,
        category_id=transaction_data.category_id,
        type=CashflowTypeEnum(transaction_data.type),
        amount=transaction_data.amount,
        description=transaction_data.description,
        transaction_date=transaction_data.transaction_date,
        tags=transaction_data.tags,
        is_recurring=transaction_data.is_recurring,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    db.add(db_transaction)
    commit_or_rollback(db, "Cashflow transaction creation")
    db.refresh(db_transaction)
    return db_transaction


def read_db_cashflow_transaction(db: Session, transaction_id: int, user_id: int) -> Optional[CashflowTransactionDB]:
    return db.query(CashflowTransactionDB).filter(
        CashflowTransactionDB.id == transaction_id,
        CashflowTransactionDB.user_id == user_id
    ).first()


def read_db_cashflow_transactions(db: Session, user_id: int,
                                  start_date: Optional[date] = None,
                                  end_date: Optional[date] = None,
                                  transaction_type: Optional[CashflowTypeEnum] = None,
                                  category_id: Optional[int] = None,
                                  account_id: Optional[int] = None,
                                  skip: int = 0, limit: Optional[int] = 100) -> List[CashflowTransactionDB]:
    """Filtered listing, newest first"""

    query = db.query(CashflowTransactionDB).filter(CashflowTransactionDB.user_id == user_id)

    if start_date:
        query = query.filter(CashflowTransactionDB.transaction_date >= start_date)
    if end_date:
        query = query.filter(CashflowTransactionDB.transaction_date <= end_date)
    if transaction_type:
        query = query.filter(CashflowTransactionDB.type == CashflowTypeEnum(transaction_type))
    if category_id:
        query = query.filter(CashflowTransactionDB.category_id == category_id)
    if account_id:
        query = query.filter(CashflowTransactionDB.account_id == account_id)

    query = query.order_by(CashflowTransactionDB.transaction_date.desc(), CashflowTransactionDB.id.desc())
    return query.offset(skip).limit(limit).all()


def update_db_cashflow_transaction(db: Session, transaction_id: int, user_id: int,
                                   transaction_updates: CashflowTransactionUpdate) -> CashflowTransactionDB:
    db_transaction = read_db_cashflow_transaction(db, transaction_id, user_id)
    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    update_data = transaction_updates.model_dump(exclude_unset=True)
    _check_references(db, user_id, update_data.get('account_id'), update_data.get('category_id'))
    if update_data.get('type') is not None:
        update_data['type'] = CashflowTypeEnum(update_data['type'])

    for field, value in update_data.items():
        setattr(db_transaction, field, value)
    db_transaction.updated_at = datetime.utcnow()

    commit_or_rollback(db, "Cashflow transaction update")
    db.refresh(db_transaction)
    return db_transaction


def delete_db_cashflow_transaction(db: Session, transaction_id: int, user_id: int) -> bool:
    db_transaction = read_db_cashflow_transaction(db, transaction_id, user_id)
    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    db.delete(db_transaction)
    commit_or_rollback(db, "Cashflow transaction deletion")
    return True


# ===== STATISTICS =====

def read_month_transactions(db: Session, user_id: int, year: int, month: int) -> List[CashflowTransactionDB]:
    first_day, last_day = month_bounds(year, month)
    return read_db_cashflow_transactions(db, user_id, start_date=first_day, end_date=last_day, limit=None)


def get_monthly_summary(db: Session, user_id: int, year: int, month: int) -> MonthlyCashflowSummary:
    return monthly_summary(read_month_transactions(db, user_id, year, month), year, month, category_names(db, user_id))


def get_cashflow_trend(db: Session, user_id: int, months: int = 6, today: Optional[date] = None) -> List[CashflowTrend]:
    """Income, expense and net per month for the trailing `months` months"""

    if months < 1:
        raise ValueError("months must be at least 1")
    today = today or date.today()
    first_year, first_month = trailing_months(today, months)[0]
    transactions = read_db_cashflow_transactions(
        db, user_id, start_date=date(first_year, first_month, 1), end_date=month_bounds(today.year, today.month)[1], limit=None
    )
    return cashflow_trend(transactions, months, today)
