from datetime import date
from decimal import Decimal

from core.events import BUDGET_ALERT, EventBus
from core.services import BudgetService, Notification, error_notification
from core.store import BudgetStore


def make_service():
    store = BudgetStore(bus=EventBus())
    return BudgetService(store), store


def budget_form(**overrides):
    form = {"name": "Groceries", "limit": "500", "start_date": date(2024, 11, 1), "end_date": date(2024, 11, 30)}
    form.update(overrides)
    return form


def expense_form(budget_id, **overrides):
    form = {"budget_id": budget_id, "amount": "85.50", "description": "Weekly shop",
            "spent_at": date(2024, 11, 5), "category": "Food"}
    form.update(overrides)
    return form


def test_submit_budget_creates():
    svc, store = make_service()
    result = svc.submit_budget(budget_form())

    assert result.get_or_else(None).title == "Budget created"
    assert store.budgets[0].name == "Groceries"
    assert store.budgets[0].limit == Decimal("500")


def test_submit_budget_invalid_leaves_store_untouched():
    svc, store = make_service()
    result = svc.submit_budget(budget_form(limit="-10"))

    assert result.is_left()
    assert error_notification(result.get_error()) == Notification("Error", "Please enter a valid amount", "destructive")
    assert store.budgets == ()


def test_submit_budget_updates():
    svc, store = make_service()
    svc.submit_budget(budget_form())
    b = store.budgets[0]

    result = svc.submit_budget(budget_form(name="Food", limit="600"), budget_id=b.id)

    assert result.get_or_else(None).title == "Budget updated"
    assert store.budgets[0].name == "Food"
    assert store.budgets[0].created_at == b.created_at


def test_submit_budget_update_missing():
    svc, _ = make_service()
    assert svc.submit_budget(budget_form(), budget_id="nope").get_error()["error"] == "not_found"


def test_submit_expense_add_and_update():
    svc, store = make_service()
    svc.submit_budget(budget_form())
    bid = store.budgets[0].id

    added = svc.submit_expense(expense_form(bid))
    assert added.get_or_else(None).title == "Expense added"

    eid = store.expenses[0].id
    updated = svc.submit_expense(expense_form(bid, amount="90"), expense_id=eid)
    assert updated.get_or_else(None).title == "Expense updated"
    assert store.get_budget_total(bid) == Decimal("90")


def test_submit_expense_missing_fields():
    svc, store = make_service()
    result = svc.submit_expense(expense_form("", description=""))

    assert result.get_error()["message"] == "Please fill in all required fields"
    assert store.expenses == ()


def test_submit_expense_unknown_budget():
    svc, store = make_service()
    result = svc.submit_expense(expense_form("ghost"))

    assert result.get_error()["error"] == "unknown_budget"
    assert store.expenses == ()


def test_expense_pushing_budget_over_threshold_raises_alert():
    svc, store = make_service()
    svc.submit_budget(budget_form(limit="100"))
    bid = store.budgets[0].id
    published = []
    store.bus.subscribe(BUDGET_ALERT, lambda event, payload: published.append(payload) or {})

    svc.submit_expense(expense_form(bid, amount="50"))
    assert svc.drain_alerts() == []

    svc.submit_expense(expense_form(bid, amount="45"))
    alerts = svc.drain_alerts()

    assert len(alerts) == 1
    assert alerts[0]["status"] == "critical"
    assert len(published) == 1
    assert svc.drain_alerts() == []


def test_remove_budget_cascades():
    svc, store = make_service()
    svc.submit_budget(budget_form())
    bid = store.budgets[0].id
    svc.submit_expense(expense_form(bid))
    svc.submit_expense(expense_form(bid, amount="42.30"))

    result = svc.remove_budget(bid)

    assert result.get_or_else(None).title == "Budget deleted"
    assert store.budgets == ()
    assert [e for e in store.expenses if e.budget_id == bid] == []
    assert svc.remove_budget(bid).is_left()


def test_remove_expense():
    svc, store = make_service()
    svc.submit_budget(budget_form())
    svc.submit_expense(expense_form(store.budgets[0].id))
    eid = store.expenses[0].id

    assert svc.remove_expense(eid).get_or_else(None).title == "Expense deleted"
    assert svc.remove_expense(eid).get_error()["error"] == "not_found"


def test_lowering_limit_below_spending_raises_alert():
    svc, store = make_service()
    svc.submit_budget(budget_form(limit="100"))
    bid = store.budgets[0].id
    svc.submit_expense(expense_form(bid, amount="60"))
    assert svc.drain_alerts() == []

    svc.submit_budget(budget_form(limit="50"), budget_id=bid)
    alerts = svc.drain_alerts()

    assert len(alerts) == 1
    assert alerts[0]["alert"].startswith("Over budget for Groceries")

    svc.submit_budget(budget_form(name="Food", limit="50"), budget_id=bid)
    assert svc.drain_alerts() == []
