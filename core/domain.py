from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class ExpenseCategory(Enum):
    FOOD = "Food"
    TRANSPORT = "Transport"
    BILLS = "Bills"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    HEALTH = "Health"
    EDUCATION = "Education"
    SUBSCRIPTION = "Subscription"
    OTHER = "Other"
    UNCATEGORIZED = "Uncategorized"

    @classmethod
    def parse(cls, value) -> "ExpenseCategory":
        """Coerce a form value (label, enum or empty) into a category.

        Empty values map to UNCATEGORIZED; unknown labels raise ValueError.
        """
        if isinstance(value, cls):
            return value
        if value is None or value == "":
            return cls.UNCATEGORIZED
        for cat in cls:
            if cat.value.lower() == str(value).strip().lower():
                return cat
        raise ValueError(f"Unknown expense category: {value!r}")

    @classmethod
    def choices(cls) -> tuple[str, ...]:
        """Labels offered by the expense form (UNCATEGORIZED is implicit)."""
        return tuple(c.value for c in cls if c is not cls.UNCATEGORIZED)


class BudgetStatus(Enum):
    NOMINAL = "nominal"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Budget:
    id: str
    name: str
    start_date: date
    end_date: date     # expected >= start_date, not enforced
    limit: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Expense:
    id: str
    budget_id: str     # which budget
    amount: Decimal
    description: str
    spent_at: date
    created_at: datetime
    category: ExpenseCategory = ExpenseCategory.UNCATEGORIZED
    receipt: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "category", ExpenseCategory.parse(self.category))


@dataclass(frozen=True)
class User:
    email: str
    created_at: datetime
