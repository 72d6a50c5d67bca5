from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal

from wealth_manager.crud.crud_account import read_db_account
from wealth_manager.crud.crud_user import require_user
from wealth_manager.db.core import FundDB, FundHoldingDB, FundTransactionDB, NotFoundError, commit_or_rollback
from wealth_manager.logging_config import get_logger
from wealth_manager.models.common import round_money, round_nav, round_shares
from wealth_manager.models.enums import FundTransactionTypeEnum, FundTypeEnum
from wealth_manager.models.fund import FundCreate, FundUpdate, FundReturnsReport, HoldingHistoryEntry
from wealth_manager.services import cost_basis
from wealth_manager.services.fund_returns import compute_fund_return, summarize_returns, sort_by_value

logger = get_logger(__name__)


# ===== FUND CATALOG OPERATIONS =====

def create_db_fund(db: Session, fund_data: FundCreate) -> FundDB:
    existing_fund = db.query(FundDB).filter(FundDB.code == fund_data.code).first()
    if existing_fund:
        raise ValueError(f"Fund with code '{fund_data.code}' already exists")

    db_fund = FundDB(
        code=fund_data.code,
        name=fund_data.name,
        fund_type=FundTypeEnum(fund_data.fund_type) if fund_data.fund_type else None,
        nav=fund_data.nav,
        nav_date=fund_data.nav_date,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    db.add(db_fund)
    commit_or_rollback(db, "Fund creation")
    db.refresh(db_fund)
    return db_fund


def read_db_fund(db: Session, fund_id: int) -> Optional[FundDB]:
    return db.query(FundDB).filter(FundDB.id == fund_id).first()


def read_db_fund_by_code(db: Session, code: str) -> Optional[FundDB]:
    return db.query(FundDB).filter(FundDB.code == code.strip()).first()


def read_db_funds(db: Session, search: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[FundDB]:
    """List funds, optionally matching code or name"""

    query = db.query(FundDB)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(FundDB.code.ilike(pattern), FundDB.name.ilike(pattern)))

    return query.order_by(FundDB.code).offset(skip).limit(limit).all()


def update_db_fund(db: Session, fund_id: int, fund_updates: FundUpdate) -> FundDB:
    """Update catalog data, including the latest NAV"""

    db_fund = read_db_fund(db, fund_id)
    if not db_fund:
        raise NotFoundError(f"Fund with id {fund_id} not found")

    update_data = fund_updates.model_dump(exclude_unset=True)
    if update_data.get('fund_type') is not None:
        update_data['fund_type'] = FundTypeEnum(update_data['fund_type'])
    if 'nav' in update_data and 'nav_date' not in update_data:
        update_data['nav_date'] = date.today()

    for field, value in update_data.items():
        setattr(db_fund, field, value)
    db_fund.updated_at = datetime.utcnow()

    commit_or_rollback(db, "Fund update")
    db.refresh(db_fund)
    return db_fund


# ===== HOLDING OPERATIONS =====

def read_db_holding(db: Session, holding_id: int, user_id: int) -> Optional[FundHoldingDB]:
    return db.query(FundHoldingDB).filter(
        FundHoldingDB.id == holding_id,
        FundHoldingDB.user_id == user_id
    ).first()


def read_db_holdings(db: Session, user_id: int, include_empty: bool = False) -> List[FundHoldingDB]:
    """Holdings for a user; fully sold positions are hidden unless asked for"""

    query = db.query(FundHoldingDB).options(joinedload(FundHoldingDB.fund)).filter(FundHoldingDB.user_id == user_id)
    if not include_empty:
        query = query.filter(FundHoldingDB.shares > 0)
    return query.order_by(FundHoldingDB.id).all()


def _get_or_create_holding(db: Session, user_id: int, fund_id: int, account_id: Optional[int]) -> FundHoldingDB:
    query = db.query(FundHoldingDB).filter(
        FundHoldingDB.user_id == user_id,
        FundHoldingDB.fund_id == fund_id,
    )
    if account_id is None:
        query = query.filter(FundHoldingDB.account_id.is_(None))
    else:
        query = query.filter(FundHoldingDB.account_id == account_id)

    holding = query.first()
    if holding:
        return holding

    holding = FundHoldingDB(
        user_id=user_id,
        fund_id=fund_id,
        account_id=account_id,
        shares=Decimal("0"),
        cost_basis=Decimal("0"),
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )
    db.add(holding)
    db.flush()
    return holding


def _holding_log(db: Session, holding_id: int, exclude_id: Optional[int] = None) -> List[FundTransactionDB]:
    query = db.query(FundTransactionDB).filter(FundTransactionDB.holding_id == holding_id)
    if exclude_id is not None:
        query = query.filter(FundTransactionDB.id != exclude_id)
    return query.all()


def _store_state(holding: FundHoldingDB, state: cost_basis.HoldingState) -> None:
    holding.shares = state.shares
    holding.cost_basis = state.cost_basis
    holding.updated_at = datetime.utcnow()


def recompute_db_holding(db: Session, holding_id: int, user_id: int) -> FundHoldingDB:
    """Rebuild a holding's shares and cost basis from its full transaction log"""

    holding = read_db_holding(db, holding_id, user_id)
    if not holding:
        raise NotFoundError(f"Holding with id {holding_id} not found")

    try:
        state = cost_basis.replay(_holding_log(db, holding_id))
    except ValueError:
        db.rollback()
        logger.warning(f"Transaction log for holding {holding_id} no longer replays cleanly")
        raise

    _store_state(holding, state)
    commit_or_rollback(db, "Holding recompute")
    db.refresh(holding)
    logger.info(f"Recomputed holding {holding_id}: shares={state.shares} cost_basis={state.cost_basis}")
    return holding


# ===== FUND TRANSACTION OPERATIONS =====

def create_db_fund_transaction(db: Session, user_id: int, transaction_data) -> FundTransactionDB:
    """
    Record a buy/sell/dividend/split and rebuild the holding it belongs to.

    The whole log, including the new row, is replayed before anything is
    committed; a transaction that would leave the holding invalid (selling more
    shares than held at that date) is rolled back and rejected.
    """
    require_user(db, user_id)

    fund = read_db_fund(db, transaction_data.fund_id)
    if not fund:
        raise NotFoundError(f"Fund with id {transaction_data.fund_id} not found")

    if transaction_data.account_id is not None and not read_db_account(db, transaction_data.account_id, user_id):
        raise NotFoundError(f"Account with id {transaction_data.account_id} not found")

    kind = FundTransactionTypeEnum(transaction_data.type)
    # Quantized to column scale so the replay sees the values that get persisted
    amount = round_money(transaction_data.amount)
    nav = round_nav(transaction_data.nav)
    shares = round_shares(transaction_data.shares)
    if shares is None and kind in (FundTransactionTypeEnum.BUY, FundTransactionTypeEnum.SELL):
        shares = cost_basis.derive_shares(amount, nav)

    db_transaction = FundTransactionDB(
        user_id=user_id,
        fund_id=fund.id,
        account_id=transaction_data.account_id,
        type=kind,
        shares=shares,
        nav=nav,
        amount=amount,
        fee=round_money(transaction_data.fee),
        transaction_date=transaction_data.transaction_date,
        notes=transaction_data.notes,
        created_at=datetime.utcnow()
    )
    cost_basis.validate_transaction(db_transaction)

    holding = _get_or_create_holding(db, user_id, fund.id, transaction_data.account_id)
    db_transaction.holding_id = holding.id
    db.add(db_transaction)
    db.flush()
    db.expire(db_transaction)

    try:
        state = cost_basis.replay(_holding_log(db, holding.id))
    except ValueError as e:
        db.rollback()
        logger.warning(f"Rejected {kind.value} of fund {fund.code} for user {user_id}: {e}")
        raise

    _store_state(holding, state)
    commit_or_rollback(db, "Fund transaction creation")
    db.refresh(db_transaction)
    logger.info(f"Recorded {kind.value} for holding {holding.id}: shares={state.shares} cost_basis={state.cost_basis}")
    return db_transaction


def read_db_fund_transaction(db: Session, transaction_id: int, user_id: int) -> Optional[FundTransactionDB]:
    return db.query(FundTransactionDB).filter(
        FundTransactionDB.id == transaction_id,
        FundTransactionDB.user_id == user_id
    ).first()


def read_db_fund_transactions(db: Session, user_id: int, fund_id: Optional[int] = None,
                              holding_id: Optional[int] = None,
                              transaction_type: Optional[FundTransactionTypeEnum] = None,
                              skip: int = 0, limit: int = 100) -> List[FundTransactionDB]:
    """Newest first"""

    query = db.query(FundTransactionDB).filter(FundTransactionDB.user_id == user_id)
    if fund_id:
        query = query.filter(FundTransactionDB.fund_id == fund_id)
    if holding_id:
        query = query.filter(FundTransactionDB.holding_id == holding_id)
    if transaction_type:
        query = query.filter(FundTransactionDB.type == FundTransactionTypeEnum(transaction_type))

    query = query.order_by(FundTransactionDB.transaction_date.desc(), FundTransactionDB.id.desc())
    return query.offset(skip).limit(limit).all()


def delete_db_fund_transaction(db: Session, transaction_id: int, user_id: int) -> bool:
    """Delete a transaction unless the remaining log would no longer replay"""

    db_transaction = read_db_fund_transaction(db, transaction_id, user_id)
    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    holding = db_transaction.holding
    if holding is not None:
        try:
            state = cost_basis.replay(_holding_log(db, holding.id, exclude_id=transaction_id))
        except ValueError as e:
            logger.warning(f"Rejected deletion of fund transaction {transaction_id}: {e}")
            raise ValueError(f"Deleting this transaction would invalidate later transactions: {e}") from e
        _store_state(holding, state)

    db.delete(db_transaction)
    commit_or_rollback(db, "Fund transaction deletion")
    return True


def get_holding_history(db: Session, holding_id: int, user_id: int) -> List[HoldingHistoryEntry]:
    """Running shares, cost basis and realized gain after each transaction"""

    holding = read_db_holding(db, holding_id, user_id)
    if not holding:
        raise NotFoundError(f"Holding with id {holding_id} not found")

    return [HoldingHistoryEntry(**entry) for entry in cost_basis.history(_holding_log(db, holding_id))]


# ===== RETURNS =====

def get_fund_returns(db: Session, user_id: int) -> FundReturnsReport:
    """Per-holding unrealized returns at the latest NAV, largest position first"""

    returns = [compute_fund_return(holding, holding.fund) for holding in read_db_holdings(db, user_id)]
    return FundReturnsReport(summary=summarize_returns(returns), holdings=sort_by_value(returns))
