from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from wealth_manager.services.fund_returns import compute_fund_return, sort_by_value, summarize_returns


def make_fund(nav="1.2", id=1, code="110011"):
    return SimpleNamespace(id=id, code=code, name=f"Fund {code}",
                           nav=Decimal(nav) if nav is not None else None, nav_date=date(2024, 6, 28))


def make_holding(shares, cost_basis, id=1, account_id=None):
    return SimpleNamespace(id=id, account_id=account_id, shares=Decimal(shares), cost_basis=Decimal(cost_basis))


def test_profit_and_return_rate_from_latest_nav():
    result = compute_fund_return(make_holding("1000", "1000"), make_fund("1.25"))

    assert result.current_value == Decimal("1250")
    assert result.profit_loss == Decimal("250")
    assert result.return_rate == Decimal("0.25")


def test_return_rate_is_zero_without_cost_basis():
    result = compute_fund_return(make_holding("5", "0"), make_fund("2"))

    assert result.current_value == Decimal("10")
    assert result.profit_loss == Decimal("10")
    assert result.return_rate == 0


def test_fund_without_nav_is_valued_at_cost():
    result = compute_fund_return(make_holding("100", "1010"), make_fund(None))

    assert result.current_value == Decimal("1010")
    assert result.profit_loss == 0
    assert result.return_rate == 0


def test_serialization_rounds_but_calculation_keeps_precision():
    result = compute_fund_return(make_holding("3", "1"), make_fund("1"))
    dumped = result.model_dump()

    assert result.return_rate == Decimal("2")
    assert dumped["return_rate"] == Decimal("2.0000")

    loss = compute_fund_return(make_holding("1", "3"), make_fund("1"))
    assert loss.model_dump()["return_rate"] == Decimal("-0.6667")


def test_summary_aggregates_holdings():
    returns = [
        compute_fund_return(make_holding("1000", "1000", id=1), make_fund("1.1", id=1)),
        compute_fund_return(make_holding("200", "1000", id=2), make_fund("4.5", id=2, code="000961")),
    ]

    summary = summarize_returns(returns)

    assert summary.holdings_count == 2
    assert summary.total_value == Decimal("2000")
    assert summary.total_cost == Decimal("2000")
    assert summary.total_return == Decimal("0")
    assert summary.return_rate == 0
    assert [r.fund_code for r in sort_by_value(returns)] == ["000961", "110011"]


def test_summary_of_no_holdings():
    summary = summarize_returns([])

    assert summary.holdings_count == 0
    assert summary.total_value == 0
    assert summary.return_rate == 0
