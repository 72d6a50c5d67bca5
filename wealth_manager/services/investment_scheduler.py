"""
Investment Scheduler

Next-occurrence dates for recurring investment plans. Weekday anchors use
0 = Sunday through 6 = Saturday, the convention the plans are stored with.
"""
from calendar import monthrange
from datetime import date, timedelta
from typing import Optional, Tuple

from wealth_manager.models.enums import InvestmentFrequencyEnum
from wealth_manager.services.errors import ValidationError


BIWEEKLY_DAYS = 14


def to_plan_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def _python_weekday(day_of_week: int) -> int:
    return (day_of_week + 6) % 7


def _frequency(plan) -> InvestmentFrequencyEnum:
    if plan.frequency is None:
        raise ValidationError("investment plan has no frequency")
    return InvestmentFrequencyEnum(plan.frequency)


def _day_of_week(plan) -> int:
    if plan.day_of_week is None or not 0 <= plan.day_of_week <= 6:
        raise ValidationError(f"{plan.frequency} plan needs day_of_week between 0 and 6")
    return plan.day_of_week


def _day_of_month(plan) -> int:
    if plan.day_of_month is None or not 1 <= plan.day_of_month <= 31:
        raise ValidationError("monthly plan needs day_of_month between 1 and 31")
    return plan.day_of_month


def _clamped_day(year: int, month: int, day: int) -> date:
    return date(year, month, min(day, monthrange(year, month)[1]))


def _following_month(day: date) -> Tuple[int, int]:
    if day.month == 12:
        return day.year + 1, 1
    return day.year, day.month + 1


def _weekday_on_or_after(start: date, day_of_week: int) -> date:
    delta = (_python_weekday(day_of_week) - start.weekday()) % 7
    return start + timedelta(days=delta)


def _biweekly_on_or_after(plan, start: date) -> date:
    """
    First date >= start on the plan's 14-day cadence. The cadence is pinned to
    the recorded next_date (moved onto the anchor weekday), so matching the
    weekday alone is never enough.
    """
    day_of_week = _day_of_week(plan)
    if plan.next_date is None:
        return _weekday_on_or_after(start, day_of_week)

    baseline = _weekday_on_or_after(plan.next_date, day_of_week)
    offset = (start - baseline).days
    periods = -(-offset // BIWEEKLY_DAYS)
    return baseline + timedelta(days=periods * BIWEEKLY_DAYS)


def next_occurrence(plan, from_date: date) -> date:
    """The occurrence strictly after `from_date`."""
    frequency = _frequency(plan)
    start = from_date + timedelta(days=1)

    if frequency == InvestmentFrequencyEnum.DAILY:
        return start
    if frequency == InvestmentFrequencyEnum.WEEKLY:
        return _weekday_on_or_after(start, _day_of_week(plan))
    if frequency == InvestmentFrequencyEnum.BIWEEKLY:
        return _biweekly_on_or_after(plan, start)

    year, month = _following_month(from_date)
    return _clamped_day(year, month, _day_of_month(plan))


def first_occurrence(plan, on_or_after: date) -> date:
    """Earliest date on or after `on_or_after` matching the plan's anchor."""
    frequency = _frequency(plan)

    if frequency == InvestmentFrequencyEnum.DAILY:
        return on_or_after
    if frequency == InvestmentFrequencyEnum.WEEKLY:
        return _weekday_on_or_after(on_or_after, _day_of_week(plan))
    if frequency == InvestmentFrequencyEnum.BIWEEKLY:
        return _biweekly_on_or_after(plan, on_or_after)

    day_of_month = _day_of_month(plan)
    candidate = _clamped_day(on_or_after.year, on_or_after.month, day_of_month)
    if candidate >= on_or_after:
        return candidate
    year, month = _following_month(on_or_after)
    return _clamped_day(year, month, day_of_month)


def should_run_today(plan, today: date) -> bool:
    return bool(plan.is_active) and plan.next_date is not None and today >= plan.next_date


def resume_date(plan, today: date) -> date:
    """
    next_date for a plan being reactivated. A frozen date still in the future
    is kept; otherwise the schedule restarts from today without backfilling the
    occurrences missed while inactive.
    """
    if plan.next_date is not None and plan.next_date >= today:
        return plan.next_date
    return first_occurrence(plan, today)


def derive_anchor(frequency, start_date: date) -> Tuple[Optional[int], Optional[int]]:
    """(day_of_month, day_of_week) implied by a plan's chosen start date."""
    frequency = InvestmentFrequencyEnum(frequency)
    if frequency == InvestmentFrequencyEnum.MONTHLY:
        return start_date.day, None
    if frequency in (InvestmentFrequencyEnum.WEEKLY, InvestmentFrequencyEnum.BIWEEKLY):
        return None, to_plan_weekday(start_date)
    return None, None
