from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from wealth_manager.crud import crud_dashboard, crud_net_worth
from wealth_manager.models import dashboard as dashboard_models
from wealth_manager.models import net_worth as net_worth_models
from wealth_manager.db.core import get_db, NotFoundError
from wealth_manager.routers.dependencies import get_current_user_id

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
)


@router.get("/", response_model=dashboard_models.DashboardSummary)
def read_dashboard(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_dashboard.get_dashboard_summary(db=db, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/net-worth", response_model=net_worth_models.NetWorthResult)
def read_net_worth(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Net worth computed from current balances and holdings, without storing it.
    """
    return crud_net_worth.calculate_net_worth(db=db, user_id=user_id)


@router.get("/allocation", response_model=net_worth_models.AssetAllocation)
def read_asset_allocation(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_net_worth.get_asset_allocation(db=db, user_id=user_id)


@router.post("/snapshots", response_model=net_worth_models.NetWorthSnapshotResponse, status_code=status.HTTP_201_CREATED)
def create_snapshot(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Compute net worth and append it to the snapshot history.
    """
    try:
        return crud_net_worth.create_net_worth_snapshot(db=db, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/snapshots", response_model=List[net_worth_models.NetWorthSnapshotResponse])
def read_snapshot_history(
    months: int = Query(12, ge=1, le=120),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_net_worth.read_db_net_worth_history(db=db, user_id=user_id, months=months)


@router.get("/snapshots/latest", response_model=Optional[net_worth_models.NetWorthSnapshotResponse])
def read_latest_snapshot(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_net_worth.read_db_latest_snapshot(db=db, user_id=user_id)
