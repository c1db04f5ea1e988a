import logging
from typing import Any, Dict, List, NamedTuple, Optional

from core.events import (
    BUDGET_ALERT,
    BUDGET_UPDATED,
    EXPENSE_ADDED,
    EXPENSE_UPDATED,
    Event,
    budget_alert_handler,
)
from core.functional import Either, Left, Right
from core.store import BudgetStore, StoreError
from core.validation import validate_budget_form, validate_expense_form

logger = logging.getLogger(__name__)


class Notification(NamedTuple):
    title: str
    description: str
    variant: str = "default"  # "default" or "destructive"


def error_notification(error: dict) -> Notification:
    return Notification("Error", error.get("message", "Something went wrong"), "destructive")


class BudgetService:
    """Facade for the budget and expense forms.

    Validates form input, applies it to the store and describes the outcome
    as a ``Notification``. Expense or limit changes that push a budget into the
    warning or critical tier are collected in ``alerts``.
    """

    def __init__(self, store: BudgetStore):
        self.store = store
        self.alerts: List[Dict[str, Any]] = []
        if store.bus is not None:
            store.bus.subscribe(EXPENSE_ADDED, self._collect_alert)
            store.bus.subscribe(EXPENSE_UPDATED, self._collect_alert)
            store.bus.subscribe(BUDGET_UPDATED, self._collect_alert)

    def submit_budget(self, form: Dict[str, Any], budget_id: Optional[str] = None) -> Either[dict, Notification]:
        checked = validate_budget_form(
            form.get("name"), form.get("limit"), form.get("start_date"), form.get("end_date")
        )
        if checked.is_left():
            logger.info("Rejected budget form: %s", checked.get_error()["error"])
            return checked

        fields = checked.get_or_else({})
        if budget_id:
            if self.store.update_budget(budget_id, **fields) is None:
                return Left({"error": "not_found", "message": "Budget not found", "field": "id"})
            return Right(Notification("Budget updated", "Your budget has been successfully updated."))

        self.store.add_budget(**fields)
        return Right(Notification("Budget created", "Your new budget has been successfully created."))

    def submit_expense(self, form: Dict[str, Any], expense_id: Optional[str] = None) -> Either[dict, Notification]:
        checked = validate_expense_form(
            form.get("budget_id"),
            form.get("amount"),
            form.get("description"),
            form.get("spent_at"),
            form.get("category"),
            form.get("receipt"),
        )
        if checked.is_left():
            logger.info("Rejected expense form: %s", checked.get_error()["error"])
            return checked

        fields = checked.get_or_else({})
        try:
            if expense_id:
                if self.store.update_expense(expense_id, **fields) is None:
                    return Left({"error": "not_found", "message": "Expense not found", "field": "id"})
                return Right(Notification("Expense updated", "Your expense has been successfully updated."))

            self.store.add_expense(**fields)
        except StoreError as e:
            logger.warning("Expense form rejected by store: %s", e)
            return Left({"error": "unknown_budget", "message": str(e), "field": "budget_id"})

        return Right(Notification("Expense added", "Your expense has been successfully added."))

    def remove_budget(self, budget_id: str) -> Either[dict, Notification]:
        if not self.store.delete_budget(budget_id):
            return Left({"error": "not_found", "message": "Budget not found", "field": "id"})
        return Right(Notification("Budget deleted", "The budget has been successfully deleted."))

    def remove_expense(self, expense_id: str) -> Either[dict, Notification]:
        if not self.store.delete_expense(expense_id):
            return Left({"error": "not_found", "message": "Expense not found", "field": "id"})
        return Right(Notification("Expense deleted", "The expense has been successfully deleted."))

    def drain_alerts(self) -> List[Dict[str, Any]]:
        alerts, self.alerts = self.alerts, []
        return alerts

    def _collect_alert(self, event: Event, payload: dict) -> dict:
        result = budget_alert_handler(event, payload)
        if "alert" in result:
            self.alerts.append({**result, "ts": event.ts})
            self.store.bus.publish(BUDGET_ALERT, result)
        return result
