from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from wealth_manager.models.enums import AccountTypeEnum


# ===== ASSET ACCOUNT PYDANTIC MODELS =====

class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Account name")
    type: AccountTypeEnum = Field(..., description="Type of account")
    balance: Decimal = Field(default=Decimal('0.00'), description="Current account balance")
    institution: Optional[str] = Field(None, max_length=255, description="Financial institution name")
    account_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)
    is_active: bool = True

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()

    @field_validator('balance')
    @classmethod
    def validate_balance(cls, v: Decimal) -> Decimal:
        # Round to 2 decimal places
        return round(v, 2)


class AccountUpdate(BaseModel):
    """Update account - all fields optional"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[AccountTypeEnum] = None
    balance: Optional[Decimal] = Field(None, description="Updated account balance")
    institution: Optional[str] = Field(None, max_length=255)
    account_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v

    @field_validator('balance')
    @classmethod
    def validate_balance(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: AccountTypeEnum
    balance: Decimal
    institution: Optional[str] = None
    account_number: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
