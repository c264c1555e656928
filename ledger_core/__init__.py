"""Core business logic package for the household ledger."""

import logging

from .backup import ImportResult
from .exceptions import (
    BackupFormatError,
    BackupReadError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from .models import AxisBounds, BackupDocument, PeriodTotals, SeriesPoint, Summary, Transaction
from .services import LedgerService, LedgerStore
from .storage import JSONStorage

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AxisBounds",
    "BackupDocument",
    "PeriodTotals",
    "SeriesPoint",
    "Summary",
    "Transaction",
    "ImportResult",
    "LedgerService",
    "LedgerStore",
    "JSONStorage",
    "BackupFormatError",
    "BackupReadError",
    "PersistenceError",
    "RecordNotFoundError",
    "ValidationError",
]
