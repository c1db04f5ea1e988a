"""Derived display values: totals, remaining balance, percentage used and status.

Nothing here is stored; every value is recomputed from the current store
snapshot when a page renders.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, NamedTuple, Tuple

from core import config
from core.domain import Budget, BudgetStatus, Expense


class BudgetSummary(NamedTuple):
    budget: Budget
    spent: Decimal
    percentage: float
    remaining: Decimal
    status: BudgetStatus

    @property
    def over_budget(self) -> bool:
        return self.remaining < 0

    @property
    def progress(self) -> float:
        """Percentage clamped to 0..100 for progress bars."""
        return min(max(self.percentage, 0.0), 100.0)


class Overview(NamedTuple):
    total_budget: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    budget_count: int


def percentage_used(total: Decimal, limit: Decimal) -> float:
    if not limit:
        # any spending against a zero limit is over budget
        return float("inf") if total > 0 else 0.0
    return float(Decimal(total) / Decimal(limit) * 100)


def remaining(total: Decimal, limit: Decimal) -> Decimal:
    # negative means over budget
    return Decimal(limit) - Decimal(total)


def budget_status(
    percentage: float,
    warning: Decimal = None,
    critical: Decimal = None,
) -> BudgetStatus:
    warning = config.WARNING_THRESHOLD if warning is None else warning
    critical = config.CRITICAL_THRESHOLD if critical is None else critical

    if percentage >= float(critical):
        return BudgetStatus.CRITICAL
    if percentage >= float(warning):
        return BudgetStatus.WARNING
    return BudgetStatus.NOMINAL


def summarize_budget(store, budget: Budget) -> BudgetSummary:
    spent = store.get_budget_total(budget.id)
    pct = percentage_used(spent, budget.limit)
    return BudgetSummary(
        budget=budget,
        spent=spent,
        percentage=pct,
        remaining=remaining(spent, budget.limit),
        status=budget_status(pct),
    )


def overview(store) -> Overview:
    total_budget = sum((b.limit for b in store.budgets), Decimal("0"))
    total_spent = sum((store.get_budget_total(b.id) for b in store.budgets), Decimal("0"))
    return Overview(
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=total_budget - total_spent,
        budget_count=len(store.budgets),
    )


def category_breakdown(expenses: Iterable[Expense]) -> Tuple[Tuple[str, Decimal], ...]:
    totals = defaultdict(lambda: Decimal("0"))
    for e in expenses:
        totals[e.category.value] += e.amount

    return tuple(sorted(totals.items(), key=lambda item: item[1], reverse=True))
