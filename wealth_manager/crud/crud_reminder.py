import os
from sqlalchemy.orm import Session
from typing import Optional, List
from datetime import datetime, timedelta

from wealth_manager.crud.crud_user import require_user
from wealth_manager.db.core import ReminderDB, NotFoundError, commit_or_rollback
from wealth_manager.models.enums import ReminderTypeEnum
from wealth_manager.models.reminder import ReminderCreate, ReminderUpdate, ReminderResponse, UpcomingReminder


REMINDER_WINDOW_DAYS = int(os.getenv("REMINDER_WINDOW_DAYS", "7"))


# ===== DATABASE OPERATIONS =====

def create_db_reminder(db: Session, user_id: int, reminder_data: ReminderCreate) -> ReminderDB:
    require_user(db, user_id)

    db_reminder = ReminderDB(
        user_id=user_id,
        title=reminder_data.title,
        description=reminder_data.description,
        remind_at=reminder_data.remind_at,
        type=ReminderTypeEnum(reminder_data.type),
        reference_id=reminder_data.reference_id,
        is_read=False,
        created_at=datetime.utcnow()
    )

    db.add(db_reminder)
    commit_or_rollback(db, "Reminder creation")
    db.refresh(db_reminder)
    return db_reminder


def read_db_reminder(db: Session, reminder_id: int, user_id: int) -> Optional[ReminderDB]:
    return db.query(ReminderDB).filter(ReminderDB.id == reminder_id, ReminderDB.user_id == user_id).first()


def read_db_reminders(db: Session, user_id: int, unread_only: bool = False,
                      skip: int = 0, limit: int = 100) -> List[ReminderDB]:
    query = db.query(ReminderDB).filter(ReminderDB.user_id == user_id)
    if unread_only:
        query = query.filter(ReminderDB.is_read.is_(False))
    return query.order_by(ReminderDB.remind_at, ReminderDB.id).offset(skip).limit(limit).all()


def count_unread_reminders(db: Session, user_id: int) -> int:
    return db.query(ReminderDB).filter(ReminderDB.user_id == user_id, ReminderDB.is_read.is_(False)).count()


def update_db_reminder(db: Session, reminder_id: int, user_id: int, reminder_updates: ReminderUpdate) -> ReminderDB:
    db_reminder = read_db_reminder(db, reminder_id, user_id)
    if not db_reminder:
        raise NotFoundError(f"Reminder with id {reminder_id} not found")

    update_data = reminder_updates.model_dump(exclude_unset=True)
    if update_data.get('type') is not None:
        update_data['type'] = ReminderTypeEnum(update_data['type'])

    for field, value in update_data.items():
        setattr(db_reminder, field, value)

    commit_or_rollback(db, "Reminder update")
    db.refresh(db_reminder)
    return db_reminder


def mark_db_reminder_read(db: Session, reminder_id: int, user_id: int) -> ReminderDB:
    return update_db_reminder(db, reminder_id, user_id, ReminderUpdate(is_read=True))


def mark_all_db_reminders_read(db: Session, user_id: int) -> int:
    """Returns the number of reminders that changed"""
    updated = db.query(ReminderDB).filter(
        ReminderDB.user_id == user_id,
        ReminderDB.is_read.is_(False)
    ).update({ReminderDB.is_read: True}, synchronize_session=False)
    commit_or_rollback(db, "Mark reminders read")
    return updated


def delete_db_reminder(db: Session, reminder_id: int, user_id: int) -> bool:
    db_reminder = read_db_reminder(db, reminder_id, user_id)
    if not db_reminder:
        raise NotFoundError(f"Reminder with id {reminder_id} not found")

    db.delete(db_reminder)
    commit_or_rollback(db, "Reminder deletion")
    return True


def get_upcoming_reminders(db: Session, user_id: int, days: Optional[int] = None,
                           now: Optional[datetime] = None) -> List[UpcomingReminder]:
    """Unread reminders due between now and `days` days ahead, soonest first"""

    now = now or datetime.utcnow()
    window_end = now + timedelta(days=days if days is not None else REMINDER_WINDOW_DAYS)

    reminders = db.query(ReminderDB).filter(
        ReminderDB.user_id == user_id,
        ReminderDB.is_read.is_(False),
        ReminderDB.remind_at >= now,
        ReminderDB.remind_at <= window_end
    ).order_by(ReminderDB.remind_at, ReminderDB.id).all()

    return [
        UpcomingReminder(
            **ReminderResponse.model_validate(reminder).model_dump(),
            days_until=(reminder.remind_at.date() - now.date()).days,
        )
        for reminder in reminders
    ]
