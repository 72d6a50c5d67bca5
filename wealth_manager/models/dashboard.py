from pydantic import BaseModel
from datetime import date

from wealth_manager.models.cashflow import MonthlyCashflowSummary
from wealth_manager.models.fund import FundReturnsSummary
from wealth_manager.models.goal import GoalStats
from wealth_manager.models.net_worth import NetWorthResult


class DashboardSummary(BaseModel):
    """Everything the overview page needs in one read."""
    as_of: date
    net_worth: NetWorthResult
    cashflow: MonthlyCashflowSummary
    goals: GoalStats
    investments: FundReturnsSummary
    unread_reminders: int
