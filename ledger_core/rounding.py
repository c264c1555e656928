"""Amount quantization and income/expense sign conventions.

Every stored amount is a signed integer of minor units: positive for income,
negative for expense, always a multiple of ``AMOUNT_UNIT``.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "AMOUNT_UNIT",
    "EXPENSE",
    "INCOME",
    "TRANSACTION_TYPES",
    "UNSPECIFIED_STORE",
    "normalize_amount",
    "normalize_store",
    "signed_amount",
    "transaction_type",
]

AMOUNT_UNIT = 100

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = {INCOME, EXPENSE}

UNSPECIFIED_STORE = "未指定"


def normalize_amount(amount: int) -> int:
    """Floor a signed amount to the nearest lower multiple of ``AMOUNT_UNIT``.

    The floor is applied to the signed value, so expenses grow in magnitude:
    ``-250`` becomes ``-300`` while ``250`` becomes ``200``.
    """
    return (amount // AMOUNT_UNIT) * AMOUNT_UNIT


def signed_amount(magnitude: int, kind: str) -> int:
    """Apply the sign implied by ``kind`` to an entered magnitude."""
    magnitude = abs(magnitude)
    return magnitude if kind == INCOME else -magnitude


def transaction_type(amount: int) -> str:
    return INCOME if amount > 0 else EXPENSE


def normalize_store(label: Optional[str]) -> str:
    """Trim a store label, falling back to the unspecified sentinel."""
    if label is None:
        return UNSPECIFIED_STORE
    return label.strip() or UNSPECIFIED_STORE
