from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from decimal import Decimal

from wealth_manager.crud import crud_account
from wealth_manager.models import account as account_models
from wealth_manager.models.enums import AccountTypeEnum
from wealth_manager.db.core import get_db, NotFoundError
from wealth_manager.routers.dependencies import get_current_user_id

router = APIRouter(
    prefix="/accounts",
    tags=["accounts"],
)


@router.post("/", response_model=account_models.AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    account: account_models.AccountCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_account.create_db_account(db=db, user_id=user_id, account_data=account)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[account_models.AccountResponse])
def read_accounts(
    account_type: Optional[AccountTypeEnum] = None,
    active_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_account.read_db_accounts(
        db=db, user_id=user_id, account_type=account_type, active_only=active_only, skip=skip, limit=limit
    )


@router.get("/balances", response_model=Dict[str, Decimal])
def read_balances_by_type(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Active account balances per account type, plus a "total" entry.
    """
    balances = crud_account.get_balance_by_type(db=db, user_id=user_id)
    balances["total"] = sum(balances.values(), Decimal("0"))
    return balances


@router.get("/{account_id}", response_model=account_models.AccountResponse)
def read_account(
    account_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    db_account = crud_account.read_db_account(db=db, account_id=account_id, user_id=user_id)
    if db_account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    return db_account


@router.put("/{account_id}", response_model=account_models.AccountResponse)
def update_account(
    account_id: int,
    account: account_models.AccountUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Update account details. Balances are only ever changed here.
    """
    try:
        return crud_account.update_db_account(db=db, account_id=account_id, user_id=user_id, account_updates=account)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_account.delete_db_account(db=db, account_id=account_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
