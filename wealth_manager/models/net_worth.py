from pydantic import BaseModel, ConfigDict, field_serializer
from typing import Optional, Dict
from datetime import datetime, date
from decimal import Decimal

from wealth_manager.models.common import round_money


class NetWorthBreakdown(BaseModel):
    """Asset totals per account type. Every type is always present."""
    bank: Decimal = Decimal("0")
    fund: Decimal = Decimal("0")
    pension: Decimal = Decimal("0")
    insurance: Decimal = Decimal("0")
    other: Decimal = Decimal("0")

    @field_serializer('bank', 'fund', 'pension', 'insurance', 'other')
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)


class NetWorthResult(BaseModel):
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    breakdown: NetWorthBreakdown

    @field_serializer('total_assets', 'total_liabilities', 'net_worth')
    def serialize_money(self, v: Decimal) -> Decimal:
        return round_money(v)


class AssetAllocation(BaseModel):
    breakdown: NetWorthBreakdown
    percentages: Dict[str, Decimal]

    @field_serializer('percentages')
    def serialize_percentages(self, v: Dict[str, Decimal]) -> Dict[str, Decimal]:
        return {key: round_money(value) for key, value in v.items()}


class NetWorthSnapshotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    snapshot_date: date
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    breakdown: Optional[Dict[str, Decimal]] = None
    created_at: datetime
