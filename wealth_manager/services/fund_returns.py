"""
Return Calculator

Pure functions combining a holding's replayed state with the fund's latest NAV.
"""
from decimal import Decimal
from typing import Iterable, List

from wealth_manager.models.fund import FundReturn, FundReturnsSummary


ZERO = Decimal("0")


def compute_fund_return(holding, fund) -> FundReturn:
    """
    Unrealized profit/loss for one holding.

    NAV staleness is the caller's concern. A fund without any NAV yet is valued
    at cost, the same fallback used for holdings with no market price.
    """
    shares = holding.shares or ZERO
    cost_basis = holding.cost_basis or ZERO

    if fund.nav is not None:
        current_value = shares * fund.nav
    else:
        current_value = cost_basis

    profit_loss = current_value - cost_basis
    return_rate = profit_loss / cost_basis if cost_basis > 0 else ZERO

    return FundReturn(
        holding_id=holding.id,
        fund_id=fund.id,
        account_id=holding.account_id,
        fund_code=fund.code,
        fund_name=fund.name,
        shares=shares,
        cost_basis=cost_basis,
        nav=fund.nav,
        nav_date=fund.nav_date,
        current_value=current_value,
        profit_loss=profit_loss,
        return_rate=return_rate,
    )


def summarize_returns(returns: Iterable[FundReturn]) -> FundReturnsSummary:
    returns = list(returns)
    total_value = sum((r.current_value for r in returns), ZERO)
    total_cost = sum((r.cost_basis for r in returns), ZERO)
    total_return = sum((r.profit_loss for r in returns), ZERO)
    return FundReturnsSummary(
        holdings_count=len(returns),
        total_value=total_value,
        total_cost=total_cost,
        total_return=total_return,
        return_rate=total_return / total_cost if total_cost > 0 else ZERO,
    )


def sort_by_value(returns: Iterable[FundReturn]) -> List[FundReturn]:
    return sorted(returns, key=lambda r: r.current_value, reverse=True)
