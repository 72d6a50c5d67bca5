"""
Cashflow statistics

Monthly income/expense totals, per-category breakdowns, a multi-month trend and
the category tree. Transfers move money between the user's own accounts and are
excluded from every total.
"""
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from wealth_manager.models.cashflow import CashflowTrend, CategoryResponse, CategoryTreeNode, MonthlyCashflowSummary
from wealth_manager.models.enums import CashflowTypeEnum
from wealth_manager.services.budget_monitor import month_bounds


ZERO = Decimal("0")
UNCATEGORIZED_LABEL = "Uncategorized"


def monthly_summary(
    transactions: Iterable,
    year: int,
    month: int,
    category_names: Optional[Dict[int, str]] = None,
) -> MonthlyCashflowSummary:
    first_day, last_day = month_bounds(year, month)
    category_names = category_names or {}

    total_income = ZERO
    total_expense = ZERO
    income_by_category: Dict[str, Decimal] = {}
    expense_by_category: Dict[str, Decimal] = {}

    for tx in transactions:
        if not first_day <= tx.transaction_date <= last_day:
            continue
        kind = CashflowTypeEnum(tx.type)
        if kind == CashflowTypeEnum.TRANSFER:
            continue

        label = category_names.get(tx.category_id, UNCATEGORIZED_LABEL) if tx.category_id else UNCATEGORIZED_LABEL
        if kind == CashflowTypeEnum.INCOME:
            total_income += tx.amount
            income_by_category[label] = income_by_category.get(label, ZERO) + tx.amount
        else:
            total_expense += tx.amount
            expense_by_category[label] = expense_by_category.get(label, ZERO) + tx.amount

    return MonthlyCashflowSummary(
        year=year,
        month=month,
        total_income=total_income,
        total_expense=total_expense,
        net_cashflow=total_income - total_expense,
        income_by_category=income_by_category,
        expense_by_category=expense_by_category,
    )


def trailing_months(today: date, months: int) -> List[tuple]:
    """(year, month) pairs for the last `months` months including today's, oldest first."""
    pairs = []
    year, month = today.year, today.month
    for _ in range(months):
        pairs.append((year, month))
        year, month = (year - 1, 12) if month == 1 else (year, month - 1)
    return list(reversed(pairs))


def cashflow_trend(transactions: Iterable, months: int, today: date) -> List[CashflowTrend]:
    transactions = list(transactions)
    trend = []
    for year, month in trailing_months(today, months):
        summary = monthly_summary(transactions, year, month)
        trend.append(CashflowTrend(
            year_month=f"{year:04d}-{month:02d}",
            total_income=summary.total_income,
            total_expense=summary.total_expense,
            net_cashflow=summary.net_cashflow,
        ))
    return trend


def category_tree(categories: Iterable) -> List[CategoryTreeNode]:
    """Top-level categories with their direct children, each level sorted by name."""
    categories = list(categories)
    children: Dict[int, List[CategoryResponse]] = {}
    for category in categories:
        if category.parent_id is not None:
            children.setdefault(category.parent_id, []).append(CategoryResponse.model_validate(category))

    tree = []
    for category in sorted(categories, key=lambda c: c.name):
        if category.parent_id is not None:
            continue
        node = CategoryTreeNode.model_validate(category)
        node.children = sorted(children.get(category.id, []), key=lambda c: c.name)
        tree.append(node)
    return tree
