from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from wealth_manager.services.goal_projector import goal_progress, goal_stats, monthly_required, months_between


def make_goal(target, current="0", deadline=None, status="active", id=1):
    return SimpleNamespace(id=id, name="House deposit", target_amount=Decimal(target),
                           current_amount=Decimal(current), deadline=deadline, status=status)


def test_monthly_required_spreads_remaining_amount():
    goal = make_goal("120000", "30000", deadline=date(2025, 1, 15))

    progress = goal_progress(goal, date(2024, 1, 15))

    assert progress.progress_percentage == Decimal("25")
    assert progress.monthly_required == Decimal("7500")
    assert progress.days_remaining == 366


def test_months_between_rounds_partial_months_up():
    assert months_between(date(2024, 1, 15), date(2025, 1, 15)) == 12
    assert months_between(date(2024, 1, 15), date(2024, 2, 16)) == 2
    assert months_between(date(2024, 1, 31), date(2024, 2, 1)) == 1


def test_deadline_inside_a_month_still_divides_by_one():
    goal = make_goal("1000", "400", deadline=date(2024, 1, 20))

    assert monthly_required(goal, date(2024, 1, 15)) == Decimal("600")


def test_overdue_goal_has_negative_days_and_full_shortfall():
    goal = make_goal("1000", "400", deadline=date(2024, 1, 1))

    progress = goal_progress(goal, date(2024, 1, 11))

    assert progress.days_remaining == -10
    assert progress.monthly_required == Decimal("600")


def test_met_or_undated_goal_needs_no_contribution():
    assert monthly_required(make_goal("1000", "1000", deadline=date(2025, 1, 1)), date(2024, 1, 1)) is None
    assert monthly_required(make_goal("1000", "10"), date(2024, 1, 1)) is None


def test_display_percentage_is_capped_but_raw_is_not():
    progress = goal_progress(make_goal("1000", "1500"), date(2024, 1, 1))

    assert progress.progress_percentage == Decimal("150")
    assert progress.display_percentage == Decimal("100.00")
    assert progress.days_remaining is None


def test_goal_stats():
    goals = [
        make_goal("100", deadline=date(2024, 9, 1), id=1),
        make_goal("100", deadline=date(2024, 3, 1), id=2),
        make_goal("100", id=3),
        make_goal("100", deadline=date(2023, 1, 1), status="completed", id=4),
        make_goal("100", status="cancelled", id=5),
    ]

    stats = goal_stats(goals)

    assert stats.active_count == 3
    assert stats.completed_count == 1
    assert stats.nearest_deadline == date(2024, 3, 1)
