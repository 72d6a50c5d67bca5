"""
Budget Monitor

Sums a month's expense transactions per budgeted category and classifies each
budget as normal, warning or over budget.
"""
from calendar import monthrange
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from wealth_manager.models.budget import BudgetStatus
from wealth_manager.models.enums import CashflowTypeEnum
from wealth_manager.services.errors import ValidationError


ZERO = Decimal("0")
HUNDRED = Decimal("100")
ALL_EXPENSES_LABEL = "All expenses"


def month_bounds(year: int, month: int):
    if not 1 <= month <= 12:
        raise ValidationError(f"month must be between 1 and 12, got {month}")
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def active_for_month(budget, year: int, month: int) -> bool:
    """A budget with an optional start/end window applies only to overlapping months."""
    first_day, last_day = month_bounds(year, month)
    if budget.start_date is not None and budget.start_date > last_day:
        return False
    if budget.end_date is not None and budget.end_date < first_day:
        return False
    return True


def usage_percentage(spent_amount: Decimal, budget_amount: Decimal) -> Decimal:
    if budget_amount > 0:
        return spent_amount / budget_amount * HUNDRED
    return ZERO


def classify(usage: Decimal, alert_threshold: Decimal):
    """Return (is_over_budget, is_warning); warning never overlaps over-budget."""
    threshold = Decimal(str(alert_threshold))
    is_over_budget = usage > HUNDRED
    is_warning = not is_over_budget and usage >= threshold * HUNDRED
    return is_over_budget, is_warning


def budget_status(
    budgets: Iterable,
    expenses: Iterable,
    year: int,
    month: int,
    category_names: Optional[Dict[int, str]] = None,
) -> List[BudgetStatus]:
    """
    Status of every budget for the given month, in input order.

    `expenses` may contain any cashflow transactions; only expense-type rows
    dated inside the month are counted. A budget without a category counts
    every expense.
    """
    first_day, last_day = month_bounds(year, month)
    category_names = category_names or {}

    month_expenses = [
        tx for tx in expenses
        if CashflowTypeEnum(tx.type) == CashflowTypeEnum.EXPENSE
        and first_day <= tx.transaction_date <= last_day
    ]

    spent_by_category: Dict[Optional[int], Decimal] = {}
    total_spent = ZERO
    for tx in month_expenses:
        spent_by_category[tx.category_id] = spent_by_category.get(tx.category_id, ZERO) + tx.amount
        total_spent += tx.amount

    statuses = []
    for budget in budgets:
        if budget.category_id is None:
            spent = total_spent
            name = ALL_EXPENSES_LABEL
        else:
            spent = spent_by_category.get(budget.category_id, ZERO)
            name = category_names.get(budget.category_id, f"Category {budget.category_id}")

        usage = usage_percentage(spent, budget.amount)
        is_over_budget, is_warning = classify(usage, budget.alert_threshold)

        statuses.append(BudgetStatus(
            budget_id=budget.id,
            category_id=budget.category_id,
            category_name=name,
            budget_amount=budget.amount,
            spent_amount=spent,
            remaining_amount=budget.amount - spent,
            usage_percentage=usage,
            alert_threshold=budget.alert_threshold,
            is_over_budget=is_over_budget,
            is_warning=is_warning,
        ))

    return statuses


def sort_by_usage(statuses: Iterable[BudgetStatus]) -> List[BudgetStatus]:
    """Most at-risk first; ties keep their original order."""
    return sorted(statuses, key=lambda s: s.usage_percentage, reverse=True)
