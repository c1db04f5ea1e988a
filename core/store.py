import logging
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, NamedTuple, Optional, Tuple
from uuid import uuid4

from core import transforms
from core.domain import Budget, Expense
from core.events import (
    BUDGET_ADDED,
    BUDGET_DELETED,
    BUDGET_UPDATED,
    EXPENSE_ADDED,
    EXPENSE_DELETED,
    EXPENSE_UPDATED,
    EventBus,
)
from core.functional import Maybe, maybe
from core.summary import summarize_budget

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = ("id", "created_at")


class StoreError(Exception):
    """Base class for store errors."""


class UnknownBudgetError(StoreError, LookupError):
    def __init__(self, budget_id: str):
        super().__init__(f"Budget with ID {budget_id} does not exist")
        self.budget_id = budget_id


class StoreState(NamedTuple):
    budgets: Tuple[Budget, ...] = ()
    expenses: Tuple[Expense, ...] = ()


class BudgetStore:
    """In-memory budgets and expenses for a single session.

    The state is one immutable ``StoreState`` snapshot. Each mutation builds a
    new snapshot and swaps it in with a single assignment, so a reader never
    sees a half-applied change (a deleted budget with its expenses still
    present, for instance).

    By default expenses must reference a live budget; pass
    ``allow_orphans=True`` to accept any ``budget_id``.
    """

    def __init__(
        self,
        budgets: Tuple[Budget, ...] = (),
        expenses: Tuple[Expense, ...] = (),
        bus: Optional[EventBus] = None,
        allow_orphans: bool = False,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
    ):
        budgets, expenses = tuple(budgets), tuple(expenses)
        for items in (budgets, expenses):
            dupes = transforms.duplicate_ids(items)
            if dupes:
                raise ValueError(f"Duplicate ids: {', '.join(dupes)}")

        self._state = StoreState(budgets, expenses)
        self.bus = bus
        self.allow_orphans = allow_orphans
        self._clock = clock
        self._id_factory = id_factory

        for e in expenses:
            self._check_budget_ref(e.budget_id)

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def budgets(self) -> Tuple[Budget, ...]:
        return self._state.budgets

    @property
    def expenses(self) -> Tuple[Expense, ...]:
        return self._state.expenses

    # -- budgets

    def add_budget(self, name: str, start_date: date, end_date: date, limit) -> Budget:
        budget = Budget(
            id=self._new_id(self.budgets),
            name=name,
            start_date=start_date,
            end_date=end_date,
            limit=Decimal(str(limit)),
            created_at=self._clock(),
        )
        self._state = self._state._replace(budgets=transforms.append(self.budgets, budget))
        logger.info("Added budget %s (%s)", budget.id, budget.name)
        self._publish(BUDGET_ADDED, {"budget_id": budget.id, "budget_name": budget.name})
        return budget

    def update_budget(self, budget_id: str, **changes) -> Optional[Budget]:
        current = transforms.find_by_id(self.budgets, budget_id)
        if current is None:
            logger.debug("update_budget: no budget with id %s", budget_id)
            return None

        changes = self._strip_protected(changes)
        if "limit" in changes:
            changes["limit"] = Decimal(str(changes["limit"]))
        updated = replace(current, **changes)

        self._state = self._state._replace(budgets=transforms.replace_by_id(self.budgets, updated))
        logger.info("Updated budget %s: %s", budget_id, ", ".join(sorted(changes)) or "no fields")
        if updated.limit != current.limit:
            payload = self._status_payload(updated)
        else:
            payload = {"budget_id": budget_id, "budget_name": updated.name}
        self._publish(BUDGET_UPDATED, payload)
        return updated

    def delete_budget(self, budget_id: str) -> bool:
        """Remove a budget together with all of its expenses."""
        budgets = transforms.remove_by_id(self.budgets, budget_id)
        if len(budgets) == len(self.budgets):
            logger.debug("delete_budget: no budget with id %s", budget_id)
            return False

        expenses = transforms.without_budget(self.expenses, budget_id)
        removed = len(self.expenses) - len(expenses)
        self._state = StoreState(budgets=budgets, expenses=expenses)

        logger.info("Deleted budget %s and %d expense(s)", budget_id, removed)
        self._publish(BUDGET_DELETED, {"budget_id": budget_id, "expenses_removed": removed})
        return True

    def get_budget(self, budget_id: str) -> Maybe[Budget]:
        return maybe(transforms.find_by_id(self.budgets, budget_id))

    def get_budget_expenses(self, budget_id: str) -> Tuple[Expense, ...]:
        return transforms.expenses_for_budget(self.expenses, budget_id)

    def get_budget_total(self, budget_id: str) -> Decimal:
        return transforms.sum_amounts(self.get_budget_expenses(budget_id))

    # -- expenses

    def add_expense(
        self,
        budget_id: str,
        amount,
        description: str,
        spent_at: date,
        category=None,
        receipt: Optional[str] = None,
    ) -> Expense:
        self._check_budget_ref(budget_id)
        expense = Expense(
            id=self._new_id(self.expenses),
            budget_id=budget_id,
            amount=Decimal(str(amount)),
            description=description,
            spent_at=spent_at,
            created_at=self._clock(),
            category=category,
            receipt=receipt,
        )
        self._state = self._state._replace(expenses=transforms.append(self.expenses, expense))
        logger.info("Added expense %s to budget %s", expense.id, budget_id)
        self._publish(EXPENSE_ADDED, self._expense_payload(expense))
        return expense

    def update_expense(self, expense_id: str, **changes) -> Optional[Expense]:
        current = transforms.find_by_id(self.expenses, expense_id)
        if current is None:
            logger.debug("update_expense: no expense with id %s", expense_id)
            return None

        changes = self._strip_protected(changes)
        if "budget_id" in changes:
            self._check_budget_ref(changes["budget_id"])
        if "amount" in changes:
            changes["amount"] = Decimal(str(changes["amount"]))
        updated = replace(current, **changes)

        self._state = self._state._replace(expenses=transforms.replace_by_id(self.expenses, updated))
        logger.info("Updated expense %s: %s", expense_id, ", ".join(sorted(changes)) or "no fields")
        self._publish(EXPENSE_UPDATED, self._expense_payload(updated))
        return updated

    def delete_expense(self, expense_id: str) -> bool:
        expenses = transforms.remove_by_id(self.expenses, expense_id)
        if len(expenses) == len(self.expenses):
            logger.debug("delete_expense: no expense with id %s", expense_id)
            return False

        self._state = self._state._replace(expenses=expenses)
        logger.info("Deleted expense %s", expense_id)
        self._publish(EXPENSE_DELETED, {"expense_id": expense_id})
        return True

    def get_expense(self, expense_id: str) -> Maybe[Expense]:
        return maybe(transforms.find_by_id(self.expenses, expense_id))

    # -- helpers

    def _new_id(self, existing) -> str:
        taken = {i.id for i in existing}
        new_id = self._id_factory()
        while new_id in taken:
            new_id = self._id_factory()
        return new_id

    def _check_budget_ref(self, budget_id: str) -> None:
        if self.allow_orphans:
            return
        if transforms.find_by_id(self.budgets, budget_id) is None:
            raise UnknownBudgetError(budget_id)

    @staticmethod
    def _strip_protected(changes: dict) -> dict:
        for field in PROTECTED_FIELDS:
            if field in changes:
                logger.warning("Ignoring attempt to change %s", field)
        return {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}

    def _status_payload(self, budget: Budget) -> dict:
        summary = summarize_budget(self, budget)
        return {
            "budget_id": budget.id,
            "budget_name": budget.name,
            "spent": summary.spent,
            "limit": budget.limit,
            "status": summary.status.value,
        }

    def _expense_payload(self, expense: Expense) -> dict:
        payload = {"expense_id": expense.id, "budget_id": expense.budget_id, "amount": expense.amount}
        budget = transforms.find_by_id(self.budgets, expense.budget_id)
        if budget is not None:
            payload.update(self._status_payload(budget))
        return payload

    def _publish(self, name: str, payload: dict):
        if self.bus is None:
            return []
        return self.bus.publish(name, payload)
