from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from wealth_manager.crud import crud_reminder
from wealth_manager.models import reminder as reminder_models
from wealth_manager.db.core import get_db, NotFoundError
from wealth_manager.routers.dependencies import get_current_user_id

router = APIRouter(
    prefix="/reminders",
    tags=["reminders"],
)


@router.post("/", response_model=reminder_models.ReminderResponse, status_code=status.HTTP_201_CREATED)
def create_reminder(
    reminder: reminder_models.ReminderCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_reminder.create_db_reminder(db=db, user_id=user_id, reminder_data=reminder)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=List[reminder_models.ReminderResponse])
def read_reminders(
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_reminder.read_db_reminders(db=db, user_id=user_id, unread_only=unread_only, skip=skip, limit=limit)


@router.get("/upcoming", response_model=List[reminder_models.UpcomingReminder])
def read_upcoming_reminders(
    days: Optional[int] = Query(None, ge=0, le=365),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Unread reminders due within the next `days` days (REMINDER_WINDOW_DAYS by default).
    """
    return crud_reminder.get_upcoming_reminders(db=db, user_id=user_id, days=days)


@router.post("/read-all")
def mark_all_reminders_read(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    updated = crud_reminder.mark_all_db_reminders_read(db=db, user_id=user_id)
    return {"updated": updated}


@router.post("/{reminder_id}/read", response_model=reminder_models.ReminderResponse)
def mark_reminder_read(
    reminder_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_reminder.mark_db_reminder_read(db=db, reminder_id=reminder_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{reminder_id}", response_model=reminder_models.ReminderResponse)
def update_reminder(
    reminder_id: int,
    reminder: reminder_models.ReminderUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_reminder.update_db_reminder(db=db, reminder_id=reminder_id, user_id=user_id, reminder_updates=reminder)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{reminder_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reminder(
    reminder_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_reminder.delete_db_reminder(db=db, reminder_id=reminder_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
