"""Validation helpers shared across household ledger services."""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from .exceptions import ValidationError

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
YEAR_PATTERN = re.compile(r"^\d{4}$")


def parse_amount(raw: object, field: str) -> int:
    """Convert raw input to an integer amount, flooring any fractional part."""
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    if isinstance(raw, int):
        return raw
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return math.floor(amount)


def validate_required_str(value: object, field: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    return trimmed


def validate_optional_str(value: object, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value


def validate_enum(value: object, field: str, allowed: Iterable[str]) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = value.strip().lower()
    if canonical not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(sorted(allowed))}")
    return canonical


def validate_month(value: object, field: str = "month") -> str:
    text = validate_required_str(value, field)
    if not MONTH_PATTERN.fullmatch(text):
        raise ValidationError(f"{field} must use the YYYY-MM format")
    return text


def validate_year(value: object, field: str = "year") -> str:
    text = validate_required_str(value, field)
    if not YEAR_PATTERN.fullmatch(text):
        raise ValidationError(f"{field} must use the YYYY format")
    return text
