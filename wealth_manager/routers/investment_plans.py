from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from wealth_manager.crud import crud_investment_plan
from wealth_manager.models import investment_plan as plan_models
from wealth_manager.db.core import get_db, NotFoundError
from wealth_manager.routers.dependencies import get_current_user_id

router = APIRouter(
    prefix="/investment-plans",
    tags=["investment-plans"],
)


@router.post("/", response_model=plan_models.InvestmentPlanResponse, status_code=status.HTTP_201_CREATED)
def create_investment_plan(
    plan: plan_models.InvestmentPlanCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Create a recurring investment plan. day_of_week uses 0 for Sunday.
    """
    try:
        return crud_investment_plan.create_db_investment_plan(db=db, user_id=user_id, plan_data=plan)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[plan_models.InvestmentPlanResponse])
def read_investment_plans(
    active_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_investment_plan.read_db_investment_plans(
        db=db, user_id=user_id, active_only=active_only, skip=skip, limit=limit
    )


@router.get("/due", response_model=List[plan_models.InvestmentPlanResponse])
def read_due_investment_plans(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Active plans scheduled for today or earlier.
    """
    return crud_investment_plan.get_due_investment_plans(db=db, user_id=user_id)


@router.get("/{plan_id}", response_model=plan_models.InvestmentPlanResponse)
def read_investment_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    db_plan = crud_investment_plan.read_db_investment_plan(db=db, plan_id=plan_id, user_id=user_id)
    if db_plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Investment plan not found")
    return db_plan


@router.put("/{plan_id}", response_model=plan_models.InvestmentPlanResponse)
def update_investment_plan(
    plan_id: int,
    plan: plan_models.InvestmentPlanUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_investment_plan.update_db_investment_plan(db=db, plan_id=plan_id, user_id=user_id, plan_updates=plan)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{plan_id}/active", response_model=plan_models.InvestmentPlanResponse)
def set_investment_plan_active(
    plan_id: int,
    update: plan_models.InvestmentPlanActiveUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Pause or resume a plan. Resuming does not backfill runs missed while paused.
    """
    try:
        return crud_investment_plan.set_db_investment_plan_active(
            db=db, plan_id=plan_id, user_id=user_id, is_active=update.is_active
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{plan_id}/advance", response_model=plan_models.InvestmentPlanResponse)
def advance_investment_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Mark the current run as done and move next_date to the following occurrence.
    """
    try:
        return crud_investment_plan.advance_db_investment_plan(db=db, plan_id=plan_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_investment_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_investment_plan.delete_db_investment_plan(db=db, plan_id=plan_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
