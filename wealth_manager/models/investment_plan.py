from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

from wealth_manager.models.enums import InvestmentFrequencyEnum


# ===== INVESTMENT PLAN PYDANTIC MODELS =====

class InvestmentPlanCreate(BaseModel):
    fund_id: int
    account_id: Optional[int] = None
    amount: Decimal = Field(..., gt=0)
    frequency: InvestmentFrequencyEnum
    day_of_month: Optional[int] = Field(None, ge=1, le=31, description="Monthly plans only")
    day_of_week: Optional[int] = Field(None, ge=0, le=6, description="Weekly/biweekly plans only, 0=Sunday")
    next_date: Optional[date] = Field(None, description="First run; also anchors the biweekly cadence")
    is_active: bool = True

    @model_validator(mode='after')
    def validate_anchor(self):
        if self.frequency == InvestmentFrequencyEnum.MONTHLY:
            self.day_of_week = None
            if self.day_of_month is None and self.next_date is None:
                raise ValueError('monthly plans need day_of_month or next_date')
        elif self.frequency in (InvestmentFrequencyEnum.WEEKLY, InvestmentFrequencyEnum.BIWEEKLY):
            self.day_of_month = None
            if self.day_of_week is None and self.next_date is None:
                raise ValueError(f'{self.frequency.value} plans need day_of_week or next_date')
        else:
            self.day_of_month = None
            self.day_of_week = None
        return self


class InvestmentPlanUpdate(BaseModel):
    account_id: Optional[int] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    frequency: Optional[InvestmentFrequencyEnum] = None
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    next_date: Optional[date] = None


class InvestmentPlanActiveUpdate(BaseModel):
    is_active: bool


class InvestmentPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fund_id: int
    account_id: Optional[int] = None
    amount: Decimal
    frequency: InvestmentFrequencyEnum
    day_of_month: Optional[int] = None
    day_of_week: Optional[int] = None
    next_date: Optional[date] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
