"""
Cost-Basis Tracker

Replays a fund's transaction log from the first transaction to derive the
current shares and cost basis of a holding under weighted-average costing.
Holding state is never patched incrementally; every caller replays the whole
log so a deleted or edited transaction cannot leave stale state behind.
"""
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from wealth_manager.models.common import round_shares
from wealth_manager.models.enums import FundTransactionTypeEnum
from wealth_manager.services.errors import InsufficientSharesError, ValidationError


ZERO = Decimal("0")


@dataclass(frozen=True)
class HoldingState:
    shares: Decimal = ZERO
    cost_basis: Decimal = ZERO
    realized_gain: Decimal = ZERO  # reported, never persisted on the holding


def _dec(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _kind(tx) -> FundTransactionTypeEnum:
    try:
        return FundTransactionTypeEnum(tx.type)
    except ValueError:
        raise ValidationError(f"Unknown fund transaction type: {tx.type}") from None


def validate_transaction(tx) -> None:
    """
    Reject malformed fund transactions at the input boundary.

    buy/sell need a positive amount and share count; fees are never negative.
    Dividends may carry reinvested shares, splits carry a non-zero share delta.
    """
    kind = _kind(tx)
    amount = _dec(tx.amount)
    fee = _dec(getattr(tx, "fee", None)) or ZERO
    shares = _dec(tx.shares)

    if fee < 0:
        raise ValidationError("fee must not be negative")

    if kind in (FundTransactionTypeEnum.BUY, FundTransactionTypeEnum.SELL):
        if amount is None or amount <= 0:
            raise ValidationError(f"{kind.value} amount must be positive")
        if shares is None or shares <= 0:
            raise ValidationError(f"{kind.value} shares must be positive")
    elif kind == FundTransactionTypeEnum.DIVIDEND:
        if amount is None or amount < 0:
            raise ValidationError("dividend amount must not be negative")
        if shares is not None and shares <= 0:
            raise ValidationError("reinvested dividend shares must be positive")
    elif shares is None or shares == 0:
        raise ValidationError("split requires a non-zero share delta")


def apply_transaction(state: HoldingState, tx) -> HoldingState:
    """Apply one transaction and return the new state; `state` is left untouched."""
    validate_transaction(tx)

    kind = _kind(tx)
    amount = _dec(tx.amount)
    fee = _dec(getattr(tx, "fee", None)) or ZERO
    shares = _dec(tx.shares)

    if kind == FundTransactionTypeEnum.BUY:
        # Fees are capitalized into cost
        return replace(
            state,
            shares=state.shares + shares,
            cost_basis=state.cost_basis + amount + fee,
        )

    if kind == FundTransactionTypeEnum.SELL:
        if shares > state.shares:
            raise InsufficientSharesError(shares, state.shares)
        removed_cost = state.cost_basis * shares / state.shares
        remaining_shares = state.shares - shares
        remaining_cost = state.cost_basis - removed_cost
        if remaining_shares == 0:
            remaining_cost = ZERO
        return HoldingState(
            shares=remaining_shares,
            cost_basis=remaining_cost,
            realized_gain=state.realized_gain + (amount - removed_cost - fee),
        )

    if kind == FundTransactionTypeEnum.DIVIDEND:
        if shares is None:
            return state
        # Reinvested shares arrive at zero cost
        return replace(state, shares=state.shares + shares)

    # split: shares carries the delta produced by the ratio
    new_shares = state.shares + shares
    if new_shares < 0:
        raise InsufficientSharesError(-shares, state.shares)
    cost_basis = state.cost_basis if new_shares > 0 else ZERO
    return replace(state, shares=new_shares, cost_basis=cost_basis)


def _sort_key(tx) -> Tuple[date, int]:
    return (tx.transaction_date, getattr(tx, "id", None) or 0)


def replay_prefixes(transactions: Iterable[Any]) -> Iterator[Tuple[Any, HoldingState]]:
    """Yield (transaction, state after it) for each transaction in date order."""
    state = HoldingState()
    for tx in sorted(transactions, key=_sort_key):
        state = apply_transaction(state, tx)
        yield tx, state


def replay(transactions: Iterable[Any]) -> HoldingState:
    """Rebuild holding state from an empty holding by applying every transaction."""
    state = HoldingState()
    for _, state in replay_prefixes(transactions):
        pass
    return state


def derive_shares(amount: Decimal, nav: Optional[Decimal]) -> Decimal:
    """Share count for a buy/sell entered by amount and NAV only."""
    if nav is None or nav <= 0:
        raise ValidationError("shares or a positive nav is required")
    return round_shares(amount / nav)


def history(transactions: Iterable[Any]) -> List[dict]:
    """Per-transaction running state, used for the transaction history view."""
    return [
        {
            "transaction_id": getattr(tx, "id", None),
            "transaction_date": tx.transaction_date,
            "type": _kind(tx),
            "shares_after": state.shares,
            "cost_basis_after": state.cost_basis,
            "realized_gain_to_date": state.realized_gain,
        }
        for tx, state in replay_prefixes(transactions)
    ]
