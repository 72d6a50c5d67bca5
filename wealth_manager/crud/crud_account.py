from sqlalchemy.orm import Session
from typing import Optional, List, Dict
from datetime import datetime
from decimal import Decimal

from wealth_manager.crud.crud_user import require_user
from wealth_manager.db.core import AssetAccountDB, FundHoldingDB, NotFoundError, commit_or_rollback
from wealth_manager.logging_config import get_logger
from wealth_manager.models.account import AccountCreate, AccountUpdate
from wealth_manager.models.enums import AccountTypeEnum

logger = get_logger(__name__)


# ===== DATABASE OPERATIONS =====

def create_db_account(db: Session, user_id: int, account_data: AccountCreate) -> AssetAccountDB:
    """Create a new asset account for a user"""

    require_user(db, user_id)

    existing_account = db.query(AssetAccountDB).filter(
        AssetAccountDB.user_id == user_id,
        AssetAccountDB.name == account_data.name
    ).first()
    if existing_account:
        raise ValueError(f"Account name '{account_data.name}' already exists")

    db_account = AssetAccountDB(
        user_id=user_id,
        name=account_data.name,
        type=AccountTypeEnum(account_data.type),
        balance=account_data.balance,
        institution=account_data.institution,
        account_number=account_data.account_number,
        notes=account_data.notes,
        is_active=account_data.is_active,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    db.add(db_account)
    commit_or_rollback(db, "Account creation")
    db.refresh(db_account)
    return db_account


def read_db_account(db: Session, account_id: int, user_id: Optional[int] = None) -> Optional[AssetAccountDB]:
    """Read an account by ID, optionally filtering by user"""

    query = db.query(AssetAccountDB).filter(AssetAccountDB.id == account_id)

    if user_id:
        query = query.filter(AssetAccountDB.user_id == user_id)

    return query.first()


def read_db_accounts(db: Session, user_id: int, account_type: Optional[AccountTypeEnum] = None,
                     active_only: bool = False, skip: int = 0, limit: int = 100) -> List[AssetAccountDB]:
    """Read accounts for a user, optionally filtered by type"""

    query = db.query(AssetAccountDB).filter(AssetAccountDB.user_id == user_id)

    if account_type:
        query = query.filter(AssetAccountDB.type == AccountTypeEnum(account_type))
    if active_only:
        query = query.filter(AssetAccountDB.is_active.is_(True))

    return query.order_by(AssetAccountDB.created_at, AssetAccountDB.id).offset(skip).limit(limit).all()


def read_all_db_accounts(db: Session, user_id: int) -> List[AssetAccountDB]:
    """Every account including inactive ones; holdings may still point at them."""
    return db.query(AssetAccountDB).filter(AssetAccountDB.user_id == user_id).all()


def update_db_account(db: Session, account_id: int, user_id: int, account_updates: AccountUpdate) -> AssetAccountDB:
    db_account = read_db_account(db, account_id, user_id)
    if not db_account:
        raise NotFoundError(f"Account with id {account_id} not found")

    update_data = account_updates.model_dump(exclude_unset=True)

    if 'name' in update_data:
        existing_account = db.query(AssetAccountDB).filter(
            AssetAccountDB.user_id == user_id,
            AssetAccountDB.name == update_data['name'],
            AssetAccountDB.id != account_id
        ).first()
        if existing_account:
            raise ValueError(f"Account name '{update_data['name']}' already exists")

    if update_data.get('type') is not None:
        update_data['type'] = AccountTypeEnum(update_data['type'])

    for field, value in update_data.items():
        setattr(db_account, field, value)

    db_account.updated_at = datetime.utcnow()

    commit_or_rollback(db, "Account update")
    db.refresh(db_account)
    return db_account


def delete_db_account(db: Session, account_id: int, user_id: int) -> bool:
    """Delete an account that no fund holding refers to"""

    db_account = read_db_account(db, account_id, user_id)
    if not db_account:
        raise NotFoundError(f"Account with id {account_id} not found")

    linked_holdings = db.query(FundHoldingDB).filter(FundHoldingDB.account_id == account_id).count()
    if linked_holdings:
        logger.warning(f"Refusing to delete account {account_id}: {linked_holdings} fund holdings reference it")
        raise ValueError("Cannot delete an account that still has fund holdings; deactivate it instead")

    db.delete(db_account)
    commit_or_rollback(db, "Account deletion")
    return True


def get_balance_by_type(db: Session, user_id: int) -> Dict[str, Decimal]:
    """Sum of active balances per account type; every type is present."""

    totals = {account_type.value: Decimal("0") for account_type in AccountTypeEnum}
    for account in read_db_accounts(db, user_id, active_only=True, limit=None):
        totals[AccountTypeEnum(account.type).value] += account.balance or Decimal("0")
    return totals


def get_total_balance(db: Session, user_id: int) -> Decimal:
    return sum(get_balance_by_type(db, user_id).values(), Decimal("0"))
