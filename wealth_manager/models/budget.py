from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

from wealth_manager.models.common import round_money
from wealth_manager.models.enums import BudgetPeriodEnum


# ===== BUDGET PYDANTIC MODELS =====

class BudgetCreate(BaseModel):
    category_id: Optional[int] = Field(None, description="Expense category; omit to budget all expenses")
    amount: Decimal = Field(..., gt=0, description="Monthly budget amount")
    period: BudgetPeriodEnum = BudgetPeriodEnum.MONTHLY
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    alert_threshold: Decimal = Field(default=Decimal("0.80"), ge=Decimal("0.5"), le=Decimal("0.95"))

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return round(v, 2)

    @field_validator('end_date')
    @classmethod
    def validate_end_date(cls, v: Optional[date], info) -> Optional[date]:
        start = info.data.get('start_date')
        if v is not None and start is not None and v < start:
            raise ValueError('end_date must not be before start_date')
        return v


class BudgetUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    alert_threshold: Optional[Decimal] = Field(None, ge=Decimal("0.5"), le=Decimal("0.95"))

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v


class BudgetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category_id: Optional[int] = None
    amount: Decimal
    period: BudgetPeriodEnum
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    alert_threshold: Decimal
    created_at: datetime
    updated_at: datetime


class BudgetStatus(BaseModel):
    """Budget Monitor output for one budget in one month."""
    budget_id: int
    category_id: Optional[int] = None
    category_name: str
    budget_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal  # negative once overspent
    usage_percentage: Decimal
    alert_threshold: Decimal
    is_over_budget: bool
    is_warning: bool

    @field_serializer('budget_amount', 'spent_amount', 'remaining_amount', 'usage_percentage')
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)
