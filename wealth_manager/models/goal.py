from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer, field_validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

from wealth_manager.models.common import round_money
from wealth_manager.models.enums import GoalStatusEnum


# ===== FINANCIAL GOAL PYDANTIC MODELS =====

class GoalCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    deadline: Optional[date] = None
    category: Optional[str] = Field(None, max_length=100)
    priority: int = Field(default=3, ge=1, le=5, description="1 is the highest priority")
    status: GoalStatusEnum = GoalStatusEnum.ACTIVE
    notes: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()


class GoalUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    target_amount: Optional[Decimal] = Field(None, gt=0)
    deadline: Optional[date] = None
    category: Optional[str] = Field(None, max_length=100)
    priority: Optional[int] = Field(None, ge=1, le=5)
    status: Optional[GoalStatusEnum] = None
    notes: Optional[str] = None


class GoalProgressUpdate(BaseModel):
    """Replaces current_amount; callers accumulate before sending."""
    current_amount: Decimal = Field(..., ge=0)


class GoalContribution(BaseModel):
    amount: Decimal = Field(..., gt=0)


class GoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    target_amount: Decimal
    current_amount: Decimal
    deadline: Optional[date] = None
    category: Optional[str] = None
    priority: int
    status: GoalStatusEnum
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class GoalProgress(BaseModel):
    """Goal Projector output."""
    goal_id: int
    goal_name: str
    target_amount: Decimal
    current_amount: Decimal
    progress_percentage: Decimal  # raw, exceeds 100 for over-funded goals
    deadline: Optional[date] = None
    days_remaining: Optional[int] = None  # negative when overdue
    monthly_required: Optional[Decimal] = None

    @computed_field
    @property
    def display_percentage(self) -> Decimal:
        return round_money(min(self.progress_percentage, Decimal("100")))

    @field_serializer('target_amount', 'current_amount', 'progress_percentage', 'monthly_required')
    def serialize_money(self, v: Optional[Decimal]) -> Optional[Decimal]:
        return round_money(v)


class GoalStats(BaseModel):
    active_count: int
    completed_count: int
    nearest_deadline: Optional[date] = None
