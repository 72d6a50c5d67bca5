from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from wealth_manager.crud import crud_goal
from wealth_manager.models import goal as goal_models
from wealth_manager.models.enums import GoalStatusEnum
from wealth_manager.db.core import get_db, NotFoundError
from wealth_manager.routers.dependencies import get_current_user_id

router = APIRouter(
    prefix="/goals",
    tags=["goals"],
)


@router.post("/", response_model=goal_models.GoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    goal: goal_models.GoalCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_goal.create_db_goal(db=db, user_id=user_id, goal_data=goal)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[goal_models.GoalResponse])
def read_goals(
    goal_status: Optional[GoalStatusEnum] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_goal.read_db_goals(db=db, user_id=user_id, status=goal_status, skip=skip, limit=limit)


@router.get("/progress", response_model=List[goal_models.GoalProgress])
def read_active_goals_progress(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Progress, days remaining and required monthly saving for every active goal.
    """
    return crud_goal.get_active_goals_progress(db=db, user_id=user_id)


@router.get("/stats", response_model=goal_models.GoalStats)
def read_goal_stats(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_goal.get_goal_stats(db=db, user_id=user_id)


@router.get("/{goal_id}", response_model=goal_models.GoalResponse)
def read_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    db_goal = crud_goal.read_db_goal(db=db, goal_id=goal_id, user_id=user_id)
    if db_goal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return db_goal


@router.get("/{goal_id}/progress", response_model=goal_models.GoalProgress)
def read_goal_progress(
    goal_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_goal.get_goal_progress(db=db, goal_id=goal_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{goal_id}", response_model=goal_models.GoalResponse)
def update_goal(
    goal_id: int,
    goal: goal_models.GoalUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_goal.update_db_goal(db=db, goal_id=goal_id, user_id=user_id, goal_updates=goal)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{goal_id}/progress", response_model=goal_models.GoalResponse)
def update_goal_progress(
    goal_id: int,
    progress: goal_models.GoalProgressUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Replace the saved amount. Use the contributions endpoint to add to it instead.
    """
    try:
        return crud_goal.update_db_goal_progress(
            db=db, goal_id=goal_id, user_id=user_id, current_amount=progress.current_amount
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{goal_id}/contributions", response_model=goal_models.GoalResponse)
def contribute_to_goal(
    goal_id: int,
    contribution: goal_models.GoalContribution,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_goal.contribute_to_db_goal(db=db, goal_id=goal_id, user_id=user_id, amount=contribution.amount)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{goal_id}/complete", response_model=goal_models.GoalResponse)
def complete_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_goal.complete_db_goal(db=db, goal_id=goal_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_goal.delete_db_goal(db=db, goal_id=goal_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
