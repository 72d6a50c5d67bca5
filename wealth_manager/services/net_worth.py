"""
Net-Worth Aggregator

Sums active account balances and current fund holding values into a typed
breakdown. Persisting a snapshot is a separate command in the crud layer.
"""
from decimal import Decimal
from typing import Dict, Iterable

from wealth_manager.models.enums import AccountTypeEnum
from wealth_manager.models.fund import FundReturn
from wealth_manager.models.net_worth import AssetAllocation, NetWorthBreakdown, NetWorthResult


ZERO = Decimal("0")


def compute_net_worth(accounts: Iterable, fund_returns: Iterable[FundReturn]) -> NetWorthResult:
    """
    Holdings linked to an account are attributed to that account's type
    whether or not the account itself is active; unlinked holdings, or holdings
    whose account is not among `accounts`, go to the fund bucket.
    """
    totals: Dict[AccountTypeEnum, Decimal] = {account_type: ZERO for account_type in AccountTypeEnum}
    account_types = {}

    for account in accounts:
        account_type = AccountTypeEnum(account.type)
        account_types[account.id] = account_type
        if account.is_active:
            totals[account_type] += account.balance or ZERO

    for fund_return in fund_returns:
        bucket = account_types.get(fund_return.account_id, AccountTypeEnum.FUND)
        totals[bucket] += fund_return.current_value

    breakdown = NetWorthBreakdown(**{account_type.value: total for account_type, total in totals.items()})
    total_assets = sum(totals.values(), ZERO)
    # No producer populates liabilities yet
    total_liabilities = ZERO

    return NetWorthResult(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
        breakdown=breakdown,
    )


def asset_allocation(result: NetWorthResult) -> AssetAllocation:
    total = result.total_assets
    breakdown = {account_type.value: getattr(result.breakdown, account_type.value) for account_type in AccountTypeEnum}
    if total == 0:
        percentages = {key: ZERO for key in breakdown}
    else:
        percentages = {key: value / total * 100 for key, value in breakdown.items()}
    return AssetAllocation(breakdown=result.breakdown, percentages=percentages)


def breakdown_for_storage(breakdown: NetWorthBreakdown) -> Dict[str, str]:
    """JSON-safe breakdown for the snapshot row, rounded to cents."""
    return breakdown.model_dump(mode="json")
