from datetime import date, datetime
from decimal import Decimal

import pytest

from wealth_manager.crud import (
    crud_account,
    crud_budget,
    crud_cashflow,
    crud_dashboard,
    crud_fund,
    crud_goal,
    crud_investment_plan,
    crud_net_worth,
    crud_reminder,
)
from wealth_manager.db.core import NotFoundError, ReminderDB
from wealth_manager.models.account import AccountCreate, AccountUpdate
from wealth_manager.models.budget import BudgetCreate
from wealth_manager.models.cashflow import CashflowTransactionCreate, CategoryCreate, CategoryUpdate
from wealth_manager.models.enums import AccountTypeEnum, CashflowTypeEnum, CategoryTypeEnum, InvestmentFrequencyEnum
from wealth_manager.models.fund import BuyTransactionCreate
from wealth_manager.models.goal import GoalCreate
from wealth_manager.models.investment_plan import InvestmentPlanCreate, InvestmentPlanUpdate
from wealth_manager.models.reminder import ReminderCreate
from wealth_manager.services.errors import ValidationError


@pytest.fixture
def bank(db, user):
    return crud_account.create_db_account(
        db, user.db_id, AccountCreate(name="Checking", type=AccountTypeEnum.BANK, balance=Decimal("5000"))
    )


@pytest.fixture
def groceries(db, user):
    food = crud_cashflow.create_db_category(
        db, user.db_id, CategoryCreate(name="Food", type=CategoryTypeEnum.EXPENSE), is_system=True
    )
    return crud_cashflow.create_db_category(
        db, user.db_id, CategoryCreate(name="Groceries", type=CategoryTypeEnum.EXPENSE, parent_id=food.id),
        is_system=True,
    )


def spend(db, user, amount, on, category=None, type=CashflowTypeEnum.EXPENSE):
    return crud_cashflow.create_db_cashflow_transaction(db, user.db_id, CashflowTransactionCreate(
        type=type, amount=Decimal(amount), transaction_date=on,
        category_id=category.id if category else None,
    ))


# ===== ACCOUNTS =====

def test_balances_by_type_skip_inactive_accounts(db, user, bank):
    pension = crud_account.create_db_account(
        db, user.db_id, AccountCreate(name="Pension", type=AccountTypeEnum.PENSION, balance=Decimal("800"))
    )
    crud_account.update_db_account(db, pension.id, user.db_id, AccountUpdate(is_active=False))

    balances = crud_account.get_balance_by_type(db, user.db_id)

    assert balances["bank"] == Decimal("5000")
    assert balances["pension"] == 0
    assert crud_account.get_total_balance(db, user.db_id) == Decimal("5000")


def test_duplicate_account_name_is_rejected(db, user, bank):
    with pytest.raises(ValueError):
        crud_account.create_db_account(db, user.db_id, AccountCreate(name="Checking", type=AccountTypeEnum.BANK))


# ===== CATEGORIES & CASHFLOW =====

def test_categories_nest_only_one_level(db, user, groceries):
    with pytest.raises(ValueError, match="one level"):
        crud_cashflow.create_db_category(
            db, user.db_id, CategoryCreate(name="Organic", type=CategoryTypeEnum.EXPENSE, parent_id=groceries.id)
        )
    with pytest.raises(ValueError, match="same type"):
        crud_cashflow.create_db_category(
            db, user.db_id, CategoryCreate(name="Refunds", type=CategoryTypeEnum.INCOME, parent_id=groceries.parent_id)
        )

    tree = crud_cashflow.read_db_category_tree(db, user.db_id)
    assert [node.name for node in tree] == ["Food"]
    assert [child.name for child in tree[0].children] == ["Groceries"]


def test_system_categories_are_read_only(db, user, groceries):
    with pytest.raises(ValueError):
        crud_cashflow.update_db_category(db, groceries.id, user.db_id, CategoryUpdate(name="Supermarket"))
    with pytest.raises(ValueError):
        crud_cashflow.delete_db_category(db, groceries.id, user.db_id)


def test_category_in_use_cannot_be_deleted(db, user):
    hobby = crud_cashflow.create_db_category(db, user.db_id, CategoryCreate(name="Hobby", type=CategoryTypeEnum.EXPENSE))
    spend(db, user, "20", date(2024, 5, 1), hobby)

    with pytest.raises(ValueError, match="in use"):
        crud_cashflow.delete_db_category(db, hobby.id, user.db_id)


def test_monthly_summary_and_trend(db, user, groceries):
    salary = crud_cashflow.create_db_category(db, user.db_id, CategoryCreate(name="Salary", type=CategoryTypeEnum.INCOME))
    spend(db, user, "15000", date(2024, 5, 10), salary, type=CashflowTypeEnum.INCOME)
    spend(db, user, "420", date(2024, 5, 12), groceries)
    spend(db, user, "3000", date(2024, 5, 12), type=CashflowTypeEnum.TRANSFER)
    spend(db, user, "100", date(2024, 4, 30), groceries)

    summary = crud_cashflow.get_monthly_summary(db, user.db_id, 2024, 5)
    assert summary.total_income == Decimal("15000")
    assert summary.total_expense == Decimal("420")
    assert summary.expense_by_category == {"Groceries": Decimal("420")}

    trend = crud_cashflow.get_cashflow_trend(db, user.db_id, months=2, today=date(2024, 5, 20))
    assert [row.net_cashflow for row in trend] == [Decimal("-100"), Decimal("14580")]

    with pytest.raises(ValueError):
        crud_cashflow.get_cashflow_trend(db, user.db_id, months=0)


def test_cashflow_transaction_with_unknown_category(db, user):
    with pytest.raises(NotFoundError):
        crud_cashflow.create_db_cashflow_transaction(db, user.db_id, CashflowTransactionCreate(
            type=CashflowTypeEnum.EXPENSE, amount=Decimal("1"), transaction_date=date(2024, 1, 1), category_id=42
        ))


# ===== BUDGETS =====

def test_budget_status_for_month(db, user, groceries):
    budget = crud_budget.create_db_budget(
        db, user.db_id, BudgetCreate(category_id=groceries.id, amount=Decimal("2000"), alert_threshold=Decimal("0.8"))
    )
    spend(db, user, "1200", date(2024, 5, 3), groceries)
    spend(db, user, "500", date(2024, 5, 20), groceries)
    spend(db, user, "900", date(2024, 6, 1), groceries)

    status = crud_budget.get_budget_status(db, user.db_id, 2024, 5)[0]

    assert status.budget_id == budget.id
    assert status.category_name == "Groceries"
    assert status.usage_percentage == Decimal("85")
    assert status.is_warning
    assert not status.is_over_budget


def test_budget_rules(db, user, groceries):
    crud_budget.create_db_budget(db, user.db_id, BudgetCreate(category_id=groceries.id, amount=Decimal("100")))
    with pytest.raises(ValueError, match="already exists"):
        crud_budget.create_db_budget(db, user.db_id, BudgetCreate(category_id=groceries.id, amount=Decimal("200")))

    salary = crud_cashflow.create_db_category(db, user.db_id, CategoryCreate(name="Salary", type=CategoryTypeEnum.INCOME))
    with pytest.raises(ValueError, match="expense"):
        crud_budget.create_db_budget(db, user.db_id, BudgetCreate(category_id=salary.id, amount=Decimal("200")))


def test_budgets_outside_their_window_are_skipped(db, user):
    crud_budget.create_db_budget(db, user.db_id, BudgetCreate(
        amount=Decimal("500"), start_date=date(2024, 7, 1)
    ))

    assert crud_budget.get_budget_status(db, user.db_id, 2024, 6) == []
    assert len(crud_budget.get_budget_status(db, user.db_id, 2024, 7)) == 1


# ===== GOALS =====

def test_goal_progress_and_contributions(db, user):
    goal = crud_goal.create_db_goal(db, user.db_id, GoalCreate(
        name="House", target_amount=Decimal("120000"), current_amount=Decimal("30000"), deadline=date(2025, 1, 15)
    ))

    progress = crud_goal.get_goal_progress(db, goal.id, user.db_id, today=date(2024, 1, 15))
    assert progress.monthly_required == Decimal("7500")

    goal = crud_goal.contribute_to_db_goal(db, goal.id, user.db_id, Decimal("90000"))
    assert goal.current_amount == Decimal("120000")
    assert crud_goal.get_goal_progress(db, goal.id, user.db_id, today=date(2024, 1, 15)).monthly_required is None

    with pytest.raises(ValueError):
        crud_goal.update_db_goal_progress(db, goal.id, user.db_id, Decimal("-1"))
    with pytest.raises(ValueError):
        crud_goal.contribute_to_db_goal(db, goal.id, user.db_id, Decimal("0"))


def test_goal_stats_after_completion(db, user):
    first = crud_goal.create_db_goal(db, user.db_id, GoalCreate(name="Car", target_amount=Decimal("1000")))
    crud_goal.create_db_goal(db, user.db_id, GoalCreate(
        name="Trip", target_amount=Decimal("1000"), deadline=date(2030, 1, 1)
    ))

    crud_goal.complete_db_goal(db, first.id, user.db_id)
    stats = crud_goal.get_goal_stats(db, user.db_id)

    assert stats.active_count == 1
    assert stats.completed_count == 1
    assert stats.nearest_deadline == date(2030, 1, 1)


# ===== INVESTMENT PLANS =====

def test_plan_without_next_date_starts_at_first_anchor(db, user, fund):
    plan = crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
        fund_id=fund.id, amount=Decimal("500"), frequency=InvestmentFrequencyEnum.MONTHLY, day_of_month=31
    ), today=date(2024, 2, 10))

    assert plan.next_date == date(2024, 2, 29)
    assert plan.day_of_week is None


def test_plan_anchor_is_taken_from_next_date(db, user, fund):
    plan = crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
        fund_id=fund.id, amount=Decimal("500"), frequency=InvestmentFrequencyEnum.WEEKLY, next_date=date(2024, 1, 8)
    ))

    assert plan.day_of_week == 1

    plan = crud_investment_plan.advance_db_investment_plan(db, plan.id, user.db_id)
    assert plan.next_date == date(2024, 1, 15)


def test_processing_due_plans_creates_one_reminder_and_catches_up(db, user, fund):
    due = crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
        fund_id=fund.id, amount=Decimal("1000"), frequency=InvestmentFrequencyEnum.MONTHLY, day_of_month=31
    ), today=date(2024, 1, 10))
    paused = crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
        fund_id=fund.id, amount=Decimal("200"), frequency=InvestmentFrequencyEnum.DAILY,
        next_date=date(2024, 1, 1), is_active=False
    ))

    processed = crud_investment_plan.process_due_investment_plans(db, today=date(2024, 3, 5))

    assert [plan.id for plan in processed] == [due.id]
    assert crud_investment_plan.read_db_investment_plan(db, due.id, user.db_id).next_date == date(2024, 3, 31)
    assert crud_investment_plan.read_db_investment_plan(db, paused.id, user.db_id).next_date == date(2024, 1, 1)

    reminders = db.query(ReminderDB).all()
    assert len(reminders) == 1
    assert reminders[0].reference_id == due.id
    assert reminders[0].remind_at == datetime(2024, 1, 31)
    assert "Mid Cap Mixed" in reminders[0].title

    assert crud_investment_plan.get_due_investment_plans(db, today=date(2024, 3, 5)) == []


def test_resuming_a_paused_plan_skips_missed_runs(db, user, fund):
    plan = crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
        fund_id=fund.id, amount=Decimal("100"), frequency=InvestmentFrequencyEnum.MONTHLY,
        day_of_month=5, next_date=date(2024, 1, 5), is_active=False
    ))

    plan = crud_investment_plan.set_db_investment_plan_active(db, plan.id, user.db_id, True, today=date(2024, 6, 20))

    assert plan.is_active
    assert plan.next_date == date(2024, 7, 5)


def test_plan_for_unknown_fund(db, user):
    with pytest.raises(NotFoundError):
        crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
            fund_id=404, amount=Decimal("100"), frequency=InvestmentFrequencyEnum.DAILY
        ))


def test_rejected_plan_update_leaves_plan_unchanged(db, user, fund):
    plan = crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
        fund_id=fund.id, amount=Decimal("1000"), frequency=InvestmentFrequencyEnum.MONTHLY,
        day_of_month=15, next_date=date(2024, 1, 15)
    ))

    with pytest.raises(ValidationError):
        crud_investment_plan.update_db_investment_plan(db, plan.id, user.db_id, InvestmentPlanUpdate(
            amount=Decimal("5"), day_of_month=None, next_date=None
        ), today=date(2024, 1, 10))

    assert not db.dirty
    plan = crud_investment_plan.read_db_investment_plan(db, plan.id, user.db_id)
    assert plan.amount == Decimal("1000")
    assert plan.day_of_month == 15
    assert plan.next_date == date(2024, 1, 15)


def test_plan_with_broken_schedule_does_not_stop_the_batch(db, user, fund):
    broken = crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
        fund_id=fund.id, amount=Decimal("50"), frequency=InvestmentFrequencyEnum.WEEKLY, next_date=date(2024, 1, 1)
    ))
    healthy = crud_investment_plan.create_db_investment_plan(db, user.db_id, InvestmentPlanCreate(
        fund_id=fund.id, amount=Decimal("100"), frequency=InvestmentFrequencyEnum.MONTHLY,
        day_of_month=20, next_date=date(2024, 2, 20)
    ))
    broken.day_of_week = None
    db.commit()

    processed = crud_investment_plan.process_due_investment_plans(db, today=date(2024, 3, 5))

    assert [plan.id for plan in processed] == [healthy.id]
    assert crud_investment_plan.read_db_investment_plan(db, broken.id, user.db_id).next_date == date(2024, 1, 1)
    assert crud_investment_plan.read_db_investment_plan(db, healthy.id, user.db_id).next_date == date(2024, 3, 20)
    assert [reminder.reference_id for reminder in db.query(ReminderDB).all()] == [healthy.id]


# ===== REMINDERS =====

def test_upcoming_reminders_window(db, user):
    now = datetime(2024, 5, 1, 9, 0)
    for title, remind_at in [
        ("Pay insurance", datetime(2024, 5, 3, 8, 0)),
        ("Rebalance", datetime(2024, 5, 20, 8, 0)),
        ("Yesterday", datetime(2024, 4, 30, 8, 0)),
    ]:
        crud_reminder.create_db_reminder(db, user.db_id, ReminderCreate(title=title, remind_at=remind_at))
    read = crud_reminder.create_db_reminder(
        db, user.db_id, ReminderCreate(title="Already seen", remind_at=datetime(2024, 5, 2, 8, 0))
    )
    crud_reminder.mark_db_reminder_read(db, read.id, user.db_id)

    upcoming = crud_reminder.get_upcoming_reminders(db, user.db_id, days=7, now=now)

    assert [(r.title, r.days_until) for r in upcoming] == [("Pay insurance", 2)]
    assert crud_reminder.count_unread_reminders(db, user.db_id) == 3
    assert crud_reminder.mark_all_db_reminders_read(db, user.db_id) == 3
    assert crud_reminder.count_unread_reminders(db, user.db_id) == 0


# ===== NET WORTH & DASHBOARD =====

def test_snapshot_records_accounts_and_holdings(db, user, bank, fund, fund_account):
    crud_fund.create_db_fund_transaction(db, user.db_id, BuyTransactionCreate(
        type="buy", fund_id=fund.id, account_id=fund_account.id, transaction_date=date(2024, 1, 5),
        amount=Decimal("1000"), shares=Decimal("100"), fee=Decimal("10")
    ))

    snapshot = crud_net_worth.create_net_worth_snapshot(db, user.db_id, snapshot_date=date(2024, 6, 30))

    assert snapshot.net_worth == Decimal("6250")
    assert snapshot.breakdown["bank"] == "5000.00"
    assert snapshot.breakdown["fund"] == "1250.00"

    crud_net_worth.create_net_worth_snapshot(db, user.db_id, snapshot_date=date(2023, 1, 31))
    history = crud_net_worth.read_db_net_worth_history(db, user.db_id, months=12, today=date(2024, 6, 30))
    assert [s.snapshot_date for s in history] == [date(2024, 6, 30)]
    assert crud_net_worth.read_db_latest_snapshot(db, user.db_id).id == snapshot.id


def test_snapshot_for_unknown_user(db):
    with pytest.raises(NotFoundError):
        crud_net_worth.create_net_worth_snapshot(db, 77)


def test_dashboard_summary(db, user, bank, groceries):
    spend(db, user, "250", date(2024, 5, 4), groceries)
    crud_reminder.create_db_reminder(db, user.db_id, ReminderCreate(title="Check", remind_at=datetime(2024, 5, 9)))

    summary = crud_dashboard.get_dashboard_summary(db, user.db_id, today=date(2024, 5, 15))

    assert summary.net_worth.net_worth == Decimal("5000")
    assert summary.cashflow.total_expense == Decimal("250")
    assert summary.investments.holdings_count == 0
    assert summary.unread_reminders == 1
