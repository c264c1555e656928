"""Data models for the household ledger domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from .rounding import UNSPECIFIED_STORE, transaction_type

__all__ = [
    "AxisBounds",
    "BackupDocument",
    "PeriodTotals",
    "SeriesPoint",
    "Summary",
    "Transaction",
    "isoformat_utc",
]


def isoformat_utc(dt: datetime, timespec: str = "seconds") -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec=timespec)
    # datetime.isoformat renders +00:00 for UTC; replace with the shorter Z form.
    return iso.replace("+00:00", "Z")


@dataclass(frozen=True)
class Transaction:
    id: str
    date: str
    store: str
    amount: int

    @property
    def type(self) -> str:
        """Income/expense label derived from the sign of ``amount``."""
        return transaction_type(self.amount)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the transaction to JSON-friendly natives."""
        return {
            "id": self.id,
            "date": self.date,
            "store": self.store,
            "amount": self.amount,
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Hydrate a Transaction from JSON-native data.

        The persisted ``type`` tag is ignored; the signed amount is authoritative.
        A missing store label falls back to the unspecified sentinel.
        """
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            store=str(data.get("store") or UNSPECIFIED_STORE),
            amount=int(data["amount"]),
        )


@dataclass(frozen=True)
class PeriodTotals:
    income: int = 0
    expense: int = 0

    @property
    def balance(self) -> int:
        return self.income - self.expense

    def __add__(self, other: "PeriodTotals") -> "PeriodTotals":
        return PeriodTotals(
            income=self.income + other.income,
            expense=self.expense + other.expense,
        )

    def to_dict(self) -> Dict[str, int]:
        return {"income": self.income, "expense": self.expense, "balance": self.balance}


@dataclass(frozen=True)
class Summary:
    """Monthly and yearly overview for one selected month."""

    month: str
    year: str
    monthly: PeriodTotals
    yearly: PeriodTotals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "monthly": self.monthly.to_dict(),
            "yearly": self.yearly.to_dict(),
        }


@dataclass(frozen=True)
class SeriesPoint:
    date: str
    income: int
    expense: int
    running_balance: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "income": self.income,
            "expense": self.expense,
            "running_balance": self.running_balance,
        }


@dataclass(frozen=True)
class AxisBounds:
    minimum: int
    maximum: int

    def to_dict(self) -> Dict[str, int]:
        return {"min": self.minimum, "max": self.maximum}


@dataclass(frozen=True)
class BackupDocument:
    version: str
    timestamp: str
    transactions: List[Transaction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the backup to JSON-friendly natives."""
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "transactions": [transaction.to_dict() for transaction in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackupDocument":
        return cls(
            version=str(data.get("version", "")),
            timestamp=str(data.get("timestamp", "")),
            transactions=[Transaction.from_dict(item) for item in data["transactions"]],
        )

