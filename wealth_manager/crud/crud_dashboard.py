from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from wealth_manager.crud.crud_cashflow import get_monthly_summary
from wealth_manager.crud.crud_fund import get_fund_returns
from wealth_manager.crud.crud_goal import get_goal_stats
from wealth_manager.crud.crud_net_worth import calculate_net_worth
from wealth_manager.crud.crud_reminder import count_unread_reminders
from wealth_manager.crud.crud_user import require_user
from wealth_manager.models.dashboard import DashboardSummary


def get_dashboard_summary(db: Session, user_id: int, today: Optional[date] = None) -> DashboardSummary:
    """Net worth, this month's cashflow, goal counts and investment totals in one read"""

    require_user(db, user_id)
    today = today or date.today()

    return DashboardSummary(
        as_of=today,
        net_worth=calculate_net_worth(db, user_id),
        cashflow=get_monthly_summary(db, user_id, today.year, today.month),
        goals=get_goal_stats(db, user_id),
        investments=get_fund_returns(db, user_id).summary,
        unread_reminders=count_unread_reminders(db, user_id),
    )
