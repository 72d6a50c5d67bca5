from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from typing import Dict, List, Optional
from datetime import datetime, date
from decimal import Decimal

from wealth_manager.models.common import round_money
from wealth_manager.models.enums import CashflowTypeEnum, CategoryTypeEnum


# ===== CATEGORY PYDANTIC MODELS =====

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Category name")
    type: CategoryTypeEnum
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    parent_id: Optional[int] = Field(None, description="Parent category, for one level of sub-categories")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: CategoryTypeEnum
    icon: Optional[str] = None
    color: Optional[str] = None
    is_system: bool
    parent_id: Optional[int] = None


class CategoryTreeNode(CategoryResponse):
    children: List[CategoryResponse] = []


# ===== CASHFLOW TRANSACTION PYDANTIC MODELS =====

class CashflowTransactionCreate(BaseModel):
    account_id: Optional[int] = None
    category_id: Optional[int] = None
    type: CashflowTypeEnum
    amount: Decimal = Field(..., gt=0, description="Always positive; type gives the direction")
    description: Optional[str] = Field(None, max_length=500)
    transaction_date: date
    tags: Optional[List[str]] = None
    is_recurring: bool = False

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return round(v, 2)


class CashflowTransactionUpdate(BaseModel):
    account_id: Optional[int] = None
    category_id: Optional[int] = None
    type: Optional[CashflowTypeEnum] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=500)
    transaction_date: Optional[date] = None
    tags: Optional[List[str]] = None
    is_recurring: Optional[bool] = None


class CashflowTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: Optional[int] = None
    category_id: Optional[int] = None
    type: CashflowTypeEnum
    amount: Decimal
    description: Optional[str] = None
    transaction_date: date
    tags: Optional[List[str]] = None
    is_recurring: bool
    created_at: datetime


# ===== STATISTICS =====

class MonthlyCashflowSummary(BaseModel):
    year: int
    month: int
    total_income: Decimal
    total_expense: Decimal
    net_cashflow: Decimal
    income_by_category: Dict[str, Decimal]
    expense_by_category: Dict[str, Decimal]

    @field_serializer('total_income', 'total_expense', 'net_cashflow')
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)

    @field_serializer('income_by_category', 'expense_by_category')
    def serialize_breakdown(self, v: Dict[str, Decimal]) -> Dict[str, Decimal]:
        return {key: round_money(value) for key, value in v.items()}


class CashflowTrend(BaseModel):
    year_month: str  # "2024-03"
    total_income: Decimal
    total_expense: Decimal
    net_cashflow: Decimal

    @field_serializer('total_income', 'total_expense', 'net_cashflow')
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)
