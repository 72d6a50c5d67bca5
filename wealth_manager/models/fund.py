from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from typing import Annotated, List, Literal, Optional, Union
from datetime import datetime, date
from decimal import Decimal

from wealth_manager.models.common import round_money, round_rate, round_shares
from wealth_manager.models.enums import FundTypeEnum, FundTransactionTypeEnum


# ===== FUND CATALOG PYDANTIC MODELS =====

class FundCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20, description="Unique fund code")
    name: str = Field(..., min_length=1, max_length=255)
    fund_type: Optional[FundTypeEnum] = None
    nav: Optional[Decimal] = Field(None, gt=0, description="Latest known net asset value per share")
    nav_date: Optional[date] = None

    @field_validator('code', 'name')
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class FundUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    fund_type: Optional[FundTypeEnum] = None
    nav: Optional[Decimal] = Field(None, gt=0)
    nav_date: Optional[date] = None


class FundResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    fund_type: Optional[FundTypeEnum] = None
    nav: Optional[Decimal] = None
    nav_date: Optional[date] = None


# ===== FUND HOLDING PYDANTIC MODELS =====

class FundHoldingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fund_id: int
    account_id: Optional[int] = None
    shares: Decimal
    cost_basis: Decimal
    updated_at: datetime

    @field_serializer('shares')
    def serialize_shares(self, v: Decimal) -> Decimal:
        return round_shares(v)

    @field_serializer('cost_basis')
    def serialize_cost_basis(self, v: Decimal) -> Decimal:
        return round_money(v)


# ===== FUND TRANSACTION PYDANTIC MODELS =====
# One create model per transaction type; the "type" field discriminates which
# of shares/nav apply.

class FundTransactionBase(BaseModel):
    fund_id: int
    account_id: Optional[int] = None
    transaction_date: date
    notes: Optional[str] = Field(None, max_length=500)


class _TradeTransactionCreate(FundTransactionBase):
    shares: Optional[Decimal] = Field(None, gt=0, description="Shares traded; derived from amount/nav when omitted")
    nav: Optional[Decimal] = Field(None, gt=0)
    amount: Decimal = Field(..., gt=0, description="Gross amount excluding fee")
    fee: Decimal = Field(default=Decimal("0"), ge=0)

    @model_validator(mode='after')
    def require_shares_or_nav(self):
        if self.shares is None and self.nav is None:
            raise ValueError('either shares or nav must be provided')
        return self


class BuyTransactionCreate(_TradeTransactionCreate):
    type: Literal["buy"]


class SellTransactionCreate(_TradeTransactionCreate):
    type: Literal["sell"]


class DividendTransactionCreate(FundTransactionBase):
    type: Literal["dividend"]
    shares: Optional[Decimal] = Field(None, gt=0, description="Reinvested shares, if any")
    nav: Optional[Decimal] = Field(None, gt=0)
    amount: Decimal = Field(..., ge=0)
    fee: Decimal = Field(default=Decimal("0"), ge=0)


class SplitTransactionCreate(FundTransactionBase):
    type: Literal["split"]
    shares: Decimal = Field(..., description="Share delta produced by the split ratio")
    nav: Optional[Decimal] = Field(None, gt=0)
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    fee: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator('shares')
    @classmethod
    def validate_delta(cls, v: Decimal) -> Decimal:
        if v == 0:
            raise ValueError('split share delta must be non-zero')
        return v


FundTransactionCreate = Annotated[
    Union[BuyTransactionCreate, SellTransactionCreate, DividendTransactionCreate, SplitTransactionCreate],
    Field(discriminator="type"),
]


class FundTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fund_id: int
    account_id: Optional[int] = None
    holding_id: Optional[int] = None
    type: FundTransactionTypeEnum
    shares: Optional[Decimal] = None
    nav: Optional[Decimal] = None
    amount: Decimal
    fee: Decimal
    transaction_date: date
    notes: Optional[str] = None
    created_at: datetime


class HoldingHistoryEntry(BaseModel):
    transaction_id: Optional[int] = None
    transaction_date: date
    type: FundTransactionTypeEnum
    shares_after: Decimal
    cost_basis_after: Decimal
    realized_gain_to_date: Decimal

    @field_serializer('cost_basis_after', 'realized_gain_to_date')
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)

    @field_serializer('shares_after')
    def serialize_shares(self, v: Decimal) -> Decimal:
        return round_shares(v)


# ===== RETURN CALCULATOR OUTPUT =====

class FundReturn(BaseModel):
    holding_id: Optional[int] = None
    fund_id: int
    account_id: Optional[int] = None
    fund_code: str
    fund_name: str
    shares: Decimal
    cost_basis: Decimal
    nav: Optional[Decimal] = None
    nav_date: Optional[date] = None
    current_value: Decimal
    profit_loss: Decimal
    return_rate: Decimal  # fraction, 0.125 == 12.5%

    @field_serializer('cost_basis', 'current_value', 'profit_loss')
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)

    @field_serializer('return_rate')
    def serialize_rate(self, v: Decimal) -> Decimal:
        return round_rate(v)

    @field_serializer('shares')
    def serialize_shares(self, v: Decimal) -> Decimal:
        return round_shares(v)


class FundReturnsSummary(BaseModel):
    holdings_count: int
    total_value: Decimal
    total_cost: Decimal
    total_return: Decimal
    return_rate: Decimal

    @field_serializer('total_value', 'total_cost', 'total_return')
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)

    @field_serializer('return_rate')
    def serialize_rate(self, v: Decimal) -> Decimal:
        return round_rate(v)


class FundReturnsReport(BaseModel):
    summary: FundReturnsSummary
    holdings: List[FundReturn]
