"""Plain transaction records for the pure calculation services."""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace


def fund_tx(type, shares=None, amount="0", fee="0", on=date(2024, 1, 1), id=None, nav=None):
    """Plain transaction record for the pure cost-basis functions."""
    return SimpleNamespace(
        id=id,
        type=type,
        shares=Decimal(shares) if shares is not None else None,
        amount=Decimal(amount),
        fee=Decimal(fee),
        nav=Decimal(nav) if nav is not None else None,
        transaction_date=on,
    )


def cashflow_tx(type, amount, on, category_id=None):
    return SimpleNamespace(type=type, amount=Decimal(amount), transaction_date=on, category_id=category_id)
