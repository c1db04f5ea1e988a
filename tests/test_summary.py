from datetime import date
from decimal import Decimal

import pytest

from core.domain import BudgetStatus
from core.store import BudgetStore
from core.summary import (
    budget_status,
    category_breakdown,
    overview,
    percentage_used,
    remaining,
    summarize_budget,
)


def seeded_store():
    store = BudgetStore()
    groceries = store.add_budget("Groceries", date(2024, 11, 1), date(2024, 11, 30), 500)
    fun = store.add_budget("Entertainment", date(2024, 11, 1), date(2024, 11, 30), 200)
    store.add_expense(groceries.id, "85.50", "Weekly grocery shopping", date(2024, 11, 5), "Food")
    store.add_expense(groceries.id, "42.30", "Fruits and vegetables", date(2024, 11, 8), "Food")
    store.add_expense(fun.id, "15.99", "Netflix subscription", date(2024, 11, 1), "Subscription")
    return store, groceries, fun


def test_groceries_scenario():
    store, groceries, _ = seeded_store()
    s = summarize_budget(store, groceries)

    assert s.spent == Decimal("127.80")
    assert s.remaining == Decimal("372.20")
    assert s.percentage == pytest.approx(25.56)
    assert s.status is BudgetStatus.NOMINAL
    assert not s.over_budget


def test_remaining_negative_when_over_budget():
    assert remaining(Decimal("250"), Decimal("200")) == Decimal("-50")


def test_percentage_zero_limit_nothing_spent():
    assert percentage_used(Decimal("0"), Decimal("0")) == 0.0


def test_percentage_zero_limit_with_spending_is_unbounded():
    assert percentage_used(Decimal("10"), Decimal("0")) == float("inf")


def test_zero_limit_budget_with_spending_is_critical():
    store = BudgetStore()
    b = store.add_budget("Impulse buys", date(2024, 11, 1), date(2024, 11, 30), 0)
    store.add_expense(b.id, 10, "Gum", date(2024, 11, 2))
    s = summarize_budget(store, b)

    assert s.over_budget
    assert s.status is BudgetStatus.CRITICAL
    assert s.progress == 100.0


@pytest.mark.parametrize("pct, expected", [
    (0, BudgetStatus.NOMINAL),
    (74.99, BudgetStatus.NOMINAL),
    (75, BudgetStatus.WARNING),
    (89.9, BudgetStatus.WARNING),
    (90, BudgetStatus.CRITICAL),
    (150, BudgetStatus.CRITICAL),
])
def test_budget_status_tiers(pct, expected):
    assert budget_status(pct) is expected


def test_budget_status_custom_thresholds():
    assert budget_status(55, warning=50, critical=60) is BudgetStatus.WARNING


def test_over_budget_summary():
    store, _, fun = seeded_store()
    store.add_expense(fun.id, 250, "Concert", date(2024, 11, 20))
    s = summarize_budget(store, fun)

    assert s.over_budget
    assert s.status is BudgetStatus.CRITICAL
    assert s.progress == 100.0
    assert s.percentage > 100


def test_overview_totals():
    store, _, _ = seeded_store()
    ov = overview(store)

    assert ov.total_budget == Decimal("700")
    assert ov.total_spent == Decimal("143.79")
    assert ov.total_remaining == Decimal("556.21")
    assert ov.budget_count == 2


def test_overview_empty_store():
    ov = overview(BudgetStore())
    assert ov.total_budget == 0
    assert ov.total_spent == 0
    assert ov.budget_count == 0


def test_category_breakdown_sorted():
    store, _, _ = seeded_store()
    store.add_expense(store.budgets[1].id, 3, "Snack", date(2024, 11, 2))

    assert category_breakdown(store.expenses) == (
        ("Food", Decimal("127.80")),
        ("Subscription", Decimal("15.99")),
        ("Uncategorized", Decimal("3")),
    )
