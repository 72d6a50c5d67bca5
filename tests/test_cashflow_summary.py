from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from wealth_manager.services.cashflow_summary import cashflow_trend, category_tree, monthly_summary, trailing_months
from tests.factories import cashflow_tx

SALARY, GROCERIES = 1, 2
NAMES = {SALARY: "Salary", GROCERIES: "Groceries"}


def test_monthly_summary_excludes_transfers_and_other_months():
    transactions = [
        cashflow_tx("income", "15000", date(2024, 3, 10), SALARY),
        cashflow_tx("expense", "320.50", date(2024, 3, 2), GROCERIES),
        cashflow_tx("expense", "79.50", date(2024, 3, 30), GROCERIES),
        cashflow_tx("expense", "60", date(2024, 3, 30)),
        cashflow_tx("transfer", "5000", date(2024, 3, 15)),
        cashflow_tx("expense", "999", date(2024, 4, 1), GROCERIES),
    ]

    summary = monthly_summary(transactions, 2024, 3, NAMES)

    assert summary.total_income == Decimal("15000")
    assert summary.total_expense == Decimal("460")
    assert summary.net_cashflow == Decimal("14540")
    assert summary.income_by_category == {"Salary": Decimal("15000")}
    assert summary.expense_by_category == {"Groceries": Decimal("400"), "Uncategorized": Decimal("60")}


def test_trailing_months_crosses_year_boundary():
    assert trailing_months(date(2024, 2, 14), 4) == [(2023, 11), (2023, 12), (2024, 1), (2024, 2)]


def test_cashflow_trend_has_one_row_per_month():
    transactions = [
        cashflow_tx("income", "100", date(2024, 1, 5)),
        cashflow_tx("expense", "30", date(2024, 3, 5)),
    ]

    trend = cashflow_trend(transactions, 3, date(2024, 3, 31))

    assert [row.year_month for row in trend] == ["2024-01", "2024-02", "2024-03"]
    assert trend[0].net_cashflow == Decimal("100")
    assert trend[1].net_cashflow == 0
    assert trend[2].net_cashflow == Decimal("-30")


def test_category_tree_nests_children_by_name():
    def category(id, name, parent_id=None):
        return SimpleNamespace(id=id, name=name, type="expense", icon=None, color=None,
                               is_system=True, parent_id=parent_id)

    tree = category_tree([
        category(1, "Housing"),
        category(2, "Food"),
        category(3, "Rent", parent_id=1),
        category(4, "Groceries", parent_id=2),
        category(5, "Dining Out", parent_id=2),
    ])

    assert [node.name for node in tree] == ["Food", "Housing"]
    assert [child.name for child in tree[0].children] == ["Dining Out", "Groceries"]
    assert [child.name for child in tree[1].children] == ["Rent"]
