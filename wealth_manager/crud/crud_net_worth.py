from sqlalchemy.orm import Session
from typing import Optional, List
from datetime import datetime, date

from wealth_manager.crud.crud_account import read_all_db_accounts
from wealth_manager.crud.crud_fund import read_db_holdings
from wealth_manager.crud.crud_user import require_user
from wealth_manager.db.core import NetWorthSnapshotDB, commit_or_rollback
from wealth_manager.logging_config import get_logger
from wealth_manager.models.net_worth import AssetAllocation, NetWorthResult
from wealth_manager.services.cashflow_summary import trailing_months
from wealth_manager.services.fund_returns import compute_fund_return
from wealth_manager.services.net_worth import asset_allocation, breakdown_for_storage, compute_net_worth

logger = get_logger(__name__)


# ===== NET-WORTH AGGREGATOR =====

def calculate_net_worth(db: Session, user_id: int) -> NetWorthResult:
    """Net worth from current balances and holdings, read in one session"""

    accounts = read_all_db_accounts(db, user_id)
    fund_returns = [compute_fund_return(holding, holding.fund) for holding in read_db_holdings(db, user_id)]
    return compute_net_worth(accounts, fund_returns)


def get_asset_allocation(db: Session, user_id: int) -> AssetAllocation:
    return asset_allocation(calculate_net_worth(db, user_id))


def create_net_worth_snapshot(db: Session, user_id: int, snapshot_date: Optional[date] = None) -> NetWorthSnapshotDB:
    """
    Compute net worth and append one snapshot row. Reads and the insert share
    the session's transaction and are committed once.
    """
    require_user(db, user_id)

    result = calculate_net_worth(db, user_id)
    db_snapshot = NetWorthSnapshotDB(
        user_id=user_id,
        snapshot_date=snapshot_date or date.today(),
        total_assets=result.total_assets,
        total_liabilities=result.total_liabilities,
        net_worth=result.net_worth,
        breakdown=breakdown_for_storage(result.breakdown),
        created_at=datetime.utcnow()
    )

    db.add(db_snapshot)
    commit_or_rollback(db, "Net worth snapshot")
    db.refresh(db_snapshot)
    logger.info(f"Net worth snapshot {db_snapshot.id} for user {user_id}: net_worth={result.net_worth}")
    return db_snapshot


def read_db_net_worth_history(db: Session, user_id: int, months: int = 12,
                              today: Optional[date] = None) -> List[NetWorthSnapshotDB]:
    """Snapshots from the last `months` months, oldest first"""

    first_year, first_month = trailing_months(today or date.today(), max(months, 1))[0]
    since = date(first_year, first_month, 1)
    return db.query(NetWorthSnapshotDB).filter(
        NetWorthSnapshotDB.user_id == user_id,
        NetWorthSnapshotDB.snapshot_date >= since
    ).order_by(NetWorthSnapshotDB.snapshot_date, NetWorthSnapshotDB.id).all()


def read_db_latest_snapshot(db: Session, user_id: int) -> Optional[NetWorthSnapshotDB]:
    return db.query(NetWorthSnapshotDB).filter(
        NetWorthSnapshotDB.user_id == user_id
    ).order_by(NetWorthSnapshotDB.snapshot_date.desc(), NetWorthSnapshotDB.id.desc()).first()
