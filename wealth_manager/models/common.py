from decimal import Decimal, ROUND_HALF_UP
from typing import Optional


# Ledger inputs are quantized to their column scale on the way in; derived
# values are rounded only when they leave the service (serialization).

CENTS = Decimal("0.01")
RATE_PLACES = Decimal("0.0001")
NAV_PLACES = Decimal("0.0001")
SHARE_PLACES = Decimal("0.000001")


def round_money(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def round_rate(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(value).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def round_nav(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(value).quantize(NAV_PLACES, rounding=ROUND_HALF_UP)


def round_shares(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(value).quantize(SHARE_PLACES, rounding=ROUND_HALF_UP)
