import json
from collections import Counter
from datetime import date, datetime
from decimal import Decimal
from functools import reduce
from typing import Any, Dict, Iterable, Tuple, TypeVar

from core.domain import Budget, Expense

T = TypeVar("T", Budget, Expense)


def append(items: Tuple[T, ...], item: T) -> Tuple[T, ...]:
    return items + (item,)


def replace_by_id(items: Tuple[T, ...], new: T) -> Tuple[T, ...]:
    return tuple(new if i.id == new.id else i for i in items)


def remove_by_id(items: Tuple[T, ...], item_id: str) -> Tuple[T, ...]:
    return tuple(filter(lambda i: i.id != item_id, items))


def find_by_id(items: Iterable[T], item_id: str):
    return next((i for i in items if i.id == item_id), None)


def duplicate_ids(items: Iterable[T]) -> Tuple[str, ...]:
    counts = Counter(i.id for i in items)
    return tuple(item_id for item_id, n in counts.items() if n > 1)


def expenses_for_budget(
    expenses: Tuple[Expense, ...], budget_id: str
) -> Tuple[Expense, ...]:
    return tuple(filter(lambda e: e.budget_id == budget_id, expenses))


def without_budget(
    expenses: Tuple[Expense, ...], budget_id: str
) -> Tuple[Expense, ...]:
    return tuple(filter(lambda e: e.budget_id != budget_id, expenses))


def sum_amounts(expenses: Iterable[Expense]) -> Decimal:
    return reduce(lambda acc, e: acc + e.amount, expenses, Decimal("0"))


def _budget_from_dict(raw: Dict[str, Any]) -> Budget:
    return Budget(
        id=raw["id"],
        name=raw["name"],
        start_date=date.fromisoformat(raw["start_date"]),
        end_date=date.fromisoformat(raw["end_date"]),
        limit=Decimal(str(raw["limit"])),
        created_at=datetime.fromisoformat(raw["created_at"]),
    )


def _expense_from_dict(raw: Dict[str, Any]) -> Expense:
    return Expense(
        id=raw["id"],
        budget_id=raw["budget_id"],
        amount=Decimal(str(raw["amount"])),
        description=raw["description"],
        spent_at=date.fromisoformat(raw["spent_at"]),
        created_at=datetime.fromisoformat(raw["created_at"]),
        category=raw.get("category"),
        receipt=raw.get("receipt"),
    )


def load_seed(path) -> Tuple[Tuple[Budget, ...], Tuple[Expense, ...]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    budgets = tuple(_budget_from_dict(b) for b in data.get("budgets", []))
    expenses = tuple(_expense_from_dict(e) for e in data.get("expenses", []))

    for kind, items in (("budget", budgets), ("expense", expenses)):
        dupes = duplicate_ids(items)
        if dupes:
            raise ValueError(f"Duplicate {kind} ids in {path}: {', '.join(dupes)}")

    return budgets, expenses
