"""Form checks run before the store is touched.

The store performs no validation of its own. Forms call these functions and
only mutate on a ``Right``; a ``Left`` carries an error dict that the page
shows as a toast.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from core.domain import ExpenseCategory
from core.functional import Either, Left, Right

MISSING_FIELD = "missing_field"
INVALID_AMOUNT = "invalid_amount"
INVALID_CATEGORY = "invalid_category"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require(fields: dict, message: str) -> Either[dict, dict]:
    missing = [name for name, value in fields.items() if _is_blank(value)]
    if missing:
        return Left({
            "error": MISSING_FIELD,
            "message": message,
            "field": missing[0],
            "fields": missing,
        })
    return Right(fields)


def parse_amount(value: Any, field: str) -> Either[dict, Decimal]:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        amount = None

    if amount is None or not amount.is_finite() or amount <= 0:
        return Left({
            "error": INVALID_AMOUNT,
            "message": "Please enter a valid amount",
            "field": field,
            "value": value,
        })
    return Right(amount)


def parse_category(value: Any) -> Either[dict, ExpenseCategory]:
    try:
        return Right(ExpenseCategory.parse(value))
    except ValueError:
        return Left({
            "error": INVALID_CATEGORY,
            "message": f"Unknown category: {value}",
            "field": "category",
            "value": value,
        })


def validate_budget_form(name, limit, start_date, end_date) -> Either[dict, dict]:
    """Check a budget form; Right holds keyword arguments for ``add_budget``."""
    required = {"name": name, "limit": limit, "start_date": start_date, "end_date": end_date}
    return (
        _require(required, "Please fill in all fields")
        .bind(lambda f: parse_amount(f["limit"], "limit"))
        .map(lambda amount: {
            "name": name.strip(),
            "limit": amount,
            "start_date": start_date,
            "end_date": end_date,
        })
    )


def validate_expense_form(
    budget_id,
    amount,
    description,
    spent_at,
    category: Optional[str] = None,
    receipt: Optional[str] = None,
) -> Either[dict, dict]:
    """Check an expense form; Right holds keyword arguments for ``add_expense``."""
    required = {
        "budget_id": budget_id,
        "amount": amount,
        "description": description,
        "spent_at": spent_at,
    }

    def build(parsed_amount: Decimal) -> Either[dict, dict]:
        return parse_category(category).map(lambda cat: {
            "budget_id": budget_id,
            "amount": parsed_amount,
            "description": description.strip(),
            "spent_at": spent_at,
            "category": cat,
            "receipt": receipt or None,
        })

    return (
        _require(required, "Please fill in all required fields")
        .bind(lambda f: parse_amount(f["amount"], "amount"))
        .bind(build)
    )
