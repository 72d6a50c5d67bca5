from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from wealth_manager.crud import crud_cashflow
from wealth_manager.models import cashflow as cashflow_models
from wealth_manager.models.enums import CashflowTypeEnum, CategoryTypeEnum
from wealth_manager.db.core import get_db, NotFoundError
from wealth_manager.routers.dependencies import get_current_user_id

router = APIRouter(
    prefix="/cashflow",
    tags=["cashflow"],
)


# ===== CATEGORIES =====

@router.get("/categories/", response_model=List[cashflow_models.CategoryResponse])
def read_categories(
    category_type: Optional[CategoryTypeEnum] = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    System categories plus the current user's own.
    """
    return crud_cashflow.read_db_categories(db=db, user_id=user_id, category_type=category_type)


@router.get("/categories/tree", response_model=List[cashflow_models.CategoryTreeNode])
def read_category_tree(
    category_type: Optional[CategoryTypeEnum] = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_cashflow.read_db_category_tree(db=db, user_id=user_id, category_type=category_type)


@router.post("/categories/", response_model=cashflow_models.CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category: cashflow_models.CategoryCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_cashflow.create_db_category(db=db, user_id=user_id, category_data=category)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/categories/{category_id}", response_model=cashflow_models.CategoryResponse)
def update_category(
    category_id: int,
    category: cashflow_models.CategoryUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_cashflow.update_db_category(db=db, category_id=category_id, user_id=user_id, category_updates=category)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_cashflow.delete_db_category(db=db, category_id=category_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ===== STATISTICS =====

@router.get("/summary", response_model=cashflow_models.MonthlyCashflowSummary)
def read_monthly_summary(
    year: Optional[int] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Income and expense totals for one month (defaults to the current month).
    Transfers are excluded.
    """
    today = date.today()
    return crud_cashflow.get_monthly_summary(db=db, user_id=user_id, year=year or today.year, month=month or today.month)


@router.get("/trend", response_model=List[cashflow_models.CashflowTrend])
def read_cashflow_trend(
    months: int = Query(6, ge=1, le=60),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_cashflow.get_cashflow_trend(db=db, user_id=user_id, months=months)


# ===== TRANSACTIONS =====

@router.post("/transactions/", response_model=cashflow_models.CashflowTransactionResponse, status_code=status.HTTP_201_CREATED)
def create_cashflow_transaction(
    transaction: cashflow_models.CashflowTransactionCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_cashflow.create_db_cashflow_transaction(db=db, user_id=user_id, transaction_data=transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/transactions/", response_model=List[cashflow_models.CashflowTransactionResponse])
def read_cashflow_transactions(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    transaction_type: Optional[CashflowTypeEnum] = None,
    category_id: Optional[int] = None,
    account_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_cashflow.read_db_cashflow_transactions(
        db=db, user_id=user_id, start_date=start_date, end_date=end_date,
        transaction_type=transaction_type, category_id=category_id, account_id=account_id,
        skip=skip, limit=limit
    )


@router.get("/transactions/{transaction_id}", response_model=cashflow_models.CashflowTransactionResponse)
def read_cashflow_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    db_transaction = crud_cashflow.read_db_cashflow_transaction(db=db, transaction_id=transaction_id, user_id=user_id)
    if db_transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return db_transaction


@router.put("/transactions/{transaction_id}", response_model=cashflow_models.CashflowTransactionResponse)
def update_cashflow_transaction(
    transaction_id: int,
    transaction: cashflow_models.CashflowTransactionUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_cashflow.update_db_cashflow_transaction(
            db=db, transaction_id=transaction_id, user_id=user_id, transaction_updates=transaction
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cashflow_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_cashflow.delete_db_cashflow_transaction(db=db, transaction_id=transaction_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
