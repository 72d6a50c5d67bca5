"""
Goal Projector

Completion percentage, days remaining and the monthly contribution needed to
reach a goal by its deadline.
"""
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from wealth_manager.models.enums import GoalStatusEnum
from wealth_manager.models.goal import GoalProgress, GoalStats


ZERO = Decimal("0")
HUNDRED = Decimal("100")


def months_between(start: date, end: date) -> int:
    """Whole months from start to end, rounded up when a partial month remains."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day > start.day:
        months += 1
    return months


def progress_percentage(current_amount: Decimal, target_amount: Decimal) -> Decimal:
    if target_amount > 0:
        return current_amount / target_amount * HUNDRED
    return ZERO


def monthly_required(goal, today: date) -> Optional[Decimal]:
    if goal.deadline is None:
        return None
    current_amount = goal.current_amount or ZERO
    if current_amount >= goal.target_amount:
        return None
    months = max(1, months_between(today, goal.deadline))
    return (goal.target_amount - current_amount) / months


def goal_progress(goal, today: date) -> GoalProgress:
    current_amount = goal.current_amount or ZERO
    days_remaining = (goal.deadline - today).days if goal.deadline is not None else None

    return GoalProgress(
        goal_id=goal.id,
        goal_name=goal.name,
        target_amount=goal.target_amount,
        current_amount=current_amount,
        progress_percentage=progress_percentage(current_amount, goal.target_amount),
        deadline=goal.deadline,
        days_remaining=days_remaining,
        monthly_required=monthly_required(goal, today),
    )


def goal_stats(goals: Iterable) -> GoalStats:
    goals = list(goals)
    active = [g for g in goals if GoalStatusEnum(g.status) == GoalStatusEnum.ACTIVE]
    completed = [g for g in goals if GoalStatusEnum(g.status) == GoalStatusEnum.COMPLETED]
    deadlines = [g.deadline for g in active if g.deadline is not None]
    return GoalStats(
        active_count=len(active),
        completed_count=len(completed),
        nearest_deadline=min(deadlines) if deadlines else None,
    )
