from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from wealth_manager.models.enums import ReminderTypeEnum


# ===== REMINDER PYDANTIC MODELS =====

class ReminderCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    remind_at: datetime
    type: ReminderTypeEnum = ReminderTypeEnum.OTHER
    reference_id: Optional[int] = Field(None, description="Goal, budget or plan the reminder is about")


class ReminderUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    remind_at: Optional[datetime] = None
    type: Optional[ReminderTypeEnum] = None
    is_read: Optional[bool] = None


class ReminderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    remind_at: datetime
    type: Optional[ReminderTypeEnum] = None
    reference_id: Optional[int] = None
    is_read: bool
    created_at: datetime


class UpcomingReminder(ReminderResponse):
    days_until: int
