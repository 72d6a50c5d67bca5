from datetime import date
from types import SimpleNamespace

import pytest

from wealth_manager.services.errors import ValidationError
from wealth_manager.services.investment_scheduler import (
    derive_anchor,
    first_occurrence,
    next_occurrence,
    resume_date,
    should_run_today,
    to_plan_weekday,
)

SUNDAY, MONDAY, FRIDAY = 0, 1, 5


def make_plan(frequency, day_of_month=None, day_of_week=None, next_date=None, is_active=True):
    return SimpleNamespace(frequency=frequency, day_of_month=day_of_month, day_of_week=day_of_week,
                           next_date=next_date, is_active=is_active)


def test_plan_weekdays_start_on_sunday():
    assert to_plan_weekday(date(2024, 1, 7)) == SUNDAY
    assert to_plan_weekday(date(2024, 1, 8)) == MONDAY
    assert to_plan_weekday(date(2024, 1, 13)) == 6


def test_daily_is_the_next_day():
    assert next_occurrence(make_plan("daily"), date(2024, 2, 28)) == date(2024, 2, 29)


def test_weekly_monday_from_a_wednesday():
    plan = make_plan("weekly", day_of_week=MONDAY)

    assert next_occurrence(plan, date(2024, 1, 3)) == date(2024, 1, 8)


def test_weekly_on_the_anchor_day_moves_a_full_week():
    plan = make_plan("weekly", day_of_week=MONDAY)

    assert next_occurrence(plan, date(2024, 1, 8)) == date(2024, 1, 15)


def test_weekly_sunday_anchor():
    plan = make_plan("weekly", day_of_week=SUNDAY)

    assert next_occurrence(plan, date(2024, 1, 3)) == date(2024, 1, 7)


def test_monthly_day_31_clamps_to_end_of_february():
    plan = make_plan("monthly", day_of_month=31)

    assert next_occurrence(plan, date(2024, 1, 31)) == date(2024, 2, 29)
    assert next_occurrence(plan, date(2023, 1, 31)) == date(2023, 2, 28)
    # the anchor, not the clamped date, drives the month after
    assert next_occurrence(plan, date(2024, 2, 29)) == date(2024, 3, 31)


def test_monthly_rolls_over_the_year():
    plan = make_plan("monthly", day_of_month=15)

    assert next_occurrence(plan, date(2024, 12, 15)) == date(2025, 1, 15)


def test_biweekly_keeps_its_cadence():
    plan = make_plan("biweekly", day_of_week=MONDAY, next_date=date(2024, 1, 1))

    assert next_occurrence(plan, date(2024, 1, 1)) == date(2024, 1, 15)
    # off-cadence Monday is skipped
    assert next_occurrence(plan, date(2024, 1, 8)) == date(2024, 1, 15)
    assert next_occurrence(plan, date(2024, 1, 15)) == date(2024, 1, 29)


def test_first_occurrence_includes_the_start_day():
    assert first_occurrence(make_plan("weekly", day_of_week=FRIDAY), date(2024, 1, 5)) == date(2024, 1, 5)
    assert first_occurrence(make_plan("monthly", day_of_month=10), date(2024, 1, 10)) == date(2024, 1, 10)
    assert first_occurrence(make_plan("monthly", day_of_month=10), date(2024, 1, 11)) == date(2024, 2, 10)
    assert first_occurrence(make_plan("monthly", day_of_month=31), date(2024, 4, 2)) == date(2024, 4, 30)


def test_missing_anchor_is_rejected():
    with pytest.raises(ValidationError):
        next_occurrence(make_plan("weekly"), date(2024, 1, 1))
    with pytest.raises(ValidationError):
        next_occurrence(make_plan("monthly", day_of_month=32), date(2024, 1, 1))
    with pytest.raises(ValidationError):
        next_occurrence(make_plan(None), date(2024, 1, 1))


def test_should_run_today():
    plan = make_plan("daily", next_date=date(2024, 1, 10))

    assert not should_run_today(plan, date(2024, 1, 9))
    assert should_run_today(plan, date(2024, 1, 10))
    assert should_run_today(plan, date(2024, 1, 12))
    assert not should_run_today(make_plan("daily", next_date=date(2024, 1, 10), is_active=False), date(2024, 1, 12))


def test_resume_does_not_backfill_missed_runs():
    stale = make_plan("monthly", day_of_month=5, next_date=date(2024, 1, 5))
    future = make_plan("monthly", day_of_month=5, next_date=date(2024, 9, 5))

    assert resume_date(stale, date(2024, 6, 20)) == date(2024, 7, 5)
    assert resume_date(future, date(2024, 6, 20)) == date(2024, 9, 5)


def test_derive_anchor_from_start_date():
    assert derive_anchor("monthly", date(2024, 3, 31)) == (31, None)
    assert derive_anchor("weekly", date(2024, 1, 8)) == (None, MONDAY)
    assert derive_anchor("daily", date(2024, 1, 8)) == (None, None)
