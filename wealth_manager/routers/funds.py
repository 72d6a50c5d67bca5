from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from wealth_manager.crud import crud_fund
from wealth_manager.models import fund as fund_models
from wealth_manager.models.enums import FundTransactionTypeEnum
from wealth_manager.db.core import get_db, NotFoundError
from wealth_manager.routers.dependencies import get_current_user_id

router = APIRouter(
    prefix="/funds",
    tags=["funds"],
)


# ===== HOLDINGS =====

@router.get("/holdings/", response_model=List[fund_models.FundHoldingResponse])
def read_holdings(
    include_empty: bool = False,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Current holdings. Fully sold positions are hidden unless include_empty is set.
    """
    return crud_fund.read_db_holdings(db=db, user_id=user_id, include_empty=include_empty)


@router.get("/holdings/{holding_id}/history", response_model=List[fund_models.HoldingHistoryEntry])
def read_holding_history(
    holding_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_fund.get_holding_history(db=db, holding_id=holding_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/holdings/{holding_id}/recompute", response_model=fund_models.FundHoldingResponse)
def recompute_holding(
    holding_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Rebuild shares and cost basis by replaying the holding's transaction log.
    """
    try:
        return crud_fund.recompute_db_holding(db=db, holding_id=holding_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/returns", response_model=fund_models.FundReturnsReport)
def read_fund_returns(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Unrealized profit/loss of every holding at the latest known NAV.
    """
    return crud_fund.get_fund_returns(db=db, user_id=user_id)


# ===== TRANSACTIONS =====

@router.post("/transactions/", response_model=fund_models.FundTransactionResponse, status_code=status.HTTP_201_CREATED)
def create_fund_transaction(
    transaction: fund_models.FundTransactionCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Record a buy, sell, dividend or split. The holding is rebuilt from its full
    log; a sell of more shares than held is rejected with 400.
    """
    try:
        return crud_fund.create_db_fund_transaction(db=db, user_id=user_id, transaction_data=transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/transactions/", response_model=List[fund_models.FundTransactionResponse])
def read_fund_transactions(
    fund_id: Optional[int] = None,
    holding_id: Optional[int] = None,
    transaction_type: Optional[FundTransactionTypeEnum] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_fund.read_db_fund_transactions(
        db=db, user_id=user_id, fund_id=fund_id, holding_id=holding_id,
        transaction_type=transaction_type, skip=skip, limit=limit
    )


@router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_fund_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_fund.delete_db_fund_transaction(db=db, transaction_id=transaction_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ===== FUND CATALOG =====

@router.post("/", response_model=fund_models.FundResponse, status_code=status.HTTP_201_CREATED)
def create_fund(
    fund: fund_models.FundCreate,
    db: Session = Depends(get_db)
):
    try:
        return crud_fund.create_db_fund(db=db, fund_data=fund)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[fund_models.FundResponse])
def read_funds(
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db)
):
    """
    List funds, optionally searching by code or name.
    """
    return crud_fund.read_db_funds(db=db, search=search, skip=skip, limit=limit)


@router.get("/{fund_id}", response_model=fund_models.FundResponse)
def read_fund(
    fund_id: int,
    db: Session = Depends(get_db)
):
    db_fund = crud_fund.read_db_fund(db=db, fund_id=fund_id)
    if db_fund is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fund not found")
    return db_fund


@router.put("/{fund_id}", response_model=fund_models.FundResponse)
def update_fund(
    fund_id: int,
    fund: fund_models.FundUpdate,
    db: Session = Depends(get_db)
):
    """
    Update catalog data or record a new NAV.
    """
    try:
        return crud_fund.update_db_fund(db=db, fund_id=fund_id, fund_updates=fund)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
