from datetime import date
from decimal import Decimal

import pytest

from wealth_manager.services.cost_basis import (
    HoldingState,
    apply_transaction,
    derive_shares,
    history,
    replay,
    replay_prefixes,
    validate_transaction,
)
from wealth_manager.services.errors import InsufficientSharesError, ValidationError
from tests.factories import fund_tx


def test_buy_capitalizes_fee_into_cost_basis():
    state = apply_transaction(HoldingState(), fund_tx("buy", shares="100", amount="1000", fee="10"))

    assert state.shares == Decimal("100")
    assert state.cost_basis == Decimal("1010")


def test_sell_removes_proportional_cost_and_records_realized_gain():
    state = apply_transaction(HoldingState(), fund_tx("buy", shares="100", amount="1000", fee="10"))
    state = apply_transaction(state, fund_tx("sell", shares="40", amount="500"))

    assert state.shares == Decimal("60")
    assert state.cost_basis == Decimal("606")
    # 500 proceeds - 404 removed cost
    assert state.realized_gain == Decimal("96")


def test_sell_fee_reduces_realized_gain():
    state = HoldingState(shares=Decimal("10"), cost_basis=Decimal("100"))
    state = apply_transaction(state, fund_tx("sell", shares="5", amount="80", fee="2"))

    assert state.cost_basis == Decimal("50")
    assert state.realized_gain == Decimal("28")


def test_selling_more_than_held_raises_and_leaves_state_unchanged():
    before = HoldingState(shares=Decimal("60"), cost_basis=Decimal("606"))

    with pytest.raises(InsufficientSharesError) as excinfo:
        apply_transaction(before, fund_tx("sell", shares="60.5", amount="700"))

    assert excinfo.value.available == Decimal("60")
    assert before == HoldingState(shares=Decimal("60"), cost_basis=Decimal("606"))


def test_selling_whole_position_zeroes_cost_basis():
    state = HoldingState(shares=Decimal("3"), cost_basis=Decimal("10"))
    state = apply_transaction(state, fund_tx("sell", shares="3", amount="12"))

    assert state.shares == 0
    assert state.cost_basis == 0


def test_dividend_reinvestment_adds_shares_at_zero_cost():
    state = HoldingState(shares=Decimal("100"), cost_basis=Decimal("1000"))

    reinvested = apply_transaction(state, fund_tx("dividend", shares="2.5", amount="30"))
    cash = apply_transaction(state, fund_tx("dividend", amount="30"))

    assert reinvested.shares == Decimal("102.5")
    assert reinvested.cost_basis == Decimal("1000")
    assert cash == state


def test_split_changes_shares_but_not_cost():
    state = HoldingState(shares=Decimal("100"), cost_basis=Decimal("1000"))

    forward = apply_transaction(state, fund_tx("split", shares="100"))
    reverse = apply_transaction(state, fund_tx("split", shares="-50"))

    assert forward.shares == Decimal("200")
    assert forward.cost_basis == Decimal("1000")
    assert reverse.shares == Decimal("50")

    with pytest.raises(InsufficientSharesError):
        apply_transaction(state, fund_tx("split", shares="-150"))


@pytest.mark.parametrize("tx", [
    fund_tx("buy", shares="0", amount="100"),
    fund_tx("buy", shares="10", amount="0"),
    fund_tx("sell", shares="-1", amount="100"),
    fund_tx("buy", shares="10", amount="100", fee="-1"),
    fund_tx("dividend", amount="-5"),
    fund_tx("split", shares="0"),
    fund_tx("transfer", shares="1", amount="1"),
])
def test_malformed_transactions_are_rejected(tx):
    with pytest.raises(ValidationError):
        validate_transaction(tx)


def test_replay_orders_by_date_then_id():
    transactions = [
        fund_tx("sell", shares="50", amount="600", on=date(2024, 3, 1), id=3),
        fund_tx("buy", shares="100", amount="1000", on=date(2024, 1, 1), id=2),
        fund_tx("buy", shares="100", amount="1200", on=date(2024, 1, 1), id=1),
    ]

    state = replay(transactions)

    assert state.shares == Decimal("150")
    assert state.cost_basis == Decimal("1650")
    assert state.realized_gain == Decimal("50")


def test_replay_rejects_log_that_sells_before_buying():
    transactions = [
        fund_tx("buy", shares="10", amount="100", on=date(2024, 2, 1), id=1),
        fund_tx("sell", shares="5", amount="60", on=date(2024, 1, 15), id=2),
    ]

    with pytest.raises(InsufficientSharesError):
        replay(transactions)


def test_replay_of_empty_log_is_empty_holding():
    assert replay([]) == HoldingState()


def test_derive_shares_from_amount_and_nav():
    assert derive_shares(Decimal("1000"), Decimal("2.5")) == Decimal("400")
    assert derive_shares(Decimal("1000"), Decimal("3")) == Decimal("333.333333")

    with pytest.raises(ValidationError):
        derive_shares(Decimal("1000"), None)


def test_history_reports_running_state():
    entries = history([
        fund_tx("buy", shares="100", amount="1000", fee="10", on=date(2024, 1, 1), id=1),
        fund_tx("sell", shares="40", amount="500", on=date(2024, 2, 1), id=2),
    ])

    assert [entry["transaction_id"] for entry in entries] == [1, 2]
    assert entries[0]["cost_basis_after"] == Decimal("1010")
    assert entries[1]["shares_after"] == Decimal("60")
    assert entries[1]["realized_gain_to_date"] == Decimal("96")


def test_every_prefix_of_a_mixed_log_stays_non_negative():
    transactions = [
        fund_tx("buy", shares="100", amount="1000", fee="5", on=date(2024, 1, 1), id=1),
        fund_tx("sell", shares="33.333333", amount="400", fee="1", on=date(2024, 2, 1), id=2),
        fund_tx("dividend", shares="1.5", amount="20", on=date(2024, 3, 1), id=3),
        fund_tx("split", shares="-34", on=date(2024, 4, 1), id=4),
        fund_tx("buy", shares="10", amount="130", on=date(2024, 5, 1), id=5),
        fund_tx("sell", shares="44.166667", amount="700", on=date(2024, 6, 1), id=6),
    ]

    states = [state for _, state in replay_prefixes(transactions)]

    assert len(states) == len(transactions)
    for state in states:
        assert state.shares >= 0
        assert state.cost_basis >= 0
    assert states[-1] == HoldingState(shares=Decimal("0"), cost_basis=Decimal("0"),
                                      realized_gain=states[-1].realized_gain)
