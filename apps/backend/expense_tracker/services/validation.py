from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from expense_tracker.errors import ValidationFailure
from expense_tracker.utils.normalization import normalize_description


def to_decimal(value: Any) -> Decimal | None:
    """Coerce numbers and numeric strings; ``None`` for anything non-finite or unparsable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def require_positive_amount(value: Any, *, label: str = "amount") -> Decimal:
    amount = to_decimal(value)
    if amount is None:
        raise ValidationFailure(f"{label} must be a finite number")
    if amount <= 0:
        raise ValidationFailure(f"{label} must be positive")
    return amount


def require_description(value: Any) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationFailure("description must be a string")
    normalized = normalize_description(value)
    if not normalized:
        raise ValidationFailure("description must not be empty")
    return normalized


def require_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationFailure("date must be a valid calendar date (YYYY-MM-DD)")


def require_due_day(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 31:
        raise ValidationFailure("due_day must be an integer between 1 and 31")
    return value


def require_enum(enum_cls, value: Any, *, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationFailure(f"{label} must be one of: {allowed}") from None
