"""Framework-agnostic business services for the household ledger."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from . import aggregation, backup, reports
from .backup import ImportResult
from .exceptions import (
    BackupFormatError,
    BackupReadError,
    PersistenceError,
    RecordNotFoundError,
)
from .models import AxisBounds, PeriodTotals, SeriesPoint, Summary, Transaction
from .rounding import TRANSACTION_TYPES, normalize_amount, normalize_store, signed_amount
from .storage import JSONStorage
from .validators import (
    parse_amount,
    validate_enum,
    validate_month,
    validate_optional_str,
    validate_required_str,
    validate_year,
)

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "transactions"


class LedgerStore:
    """Owns the ledger's transactions and mediates persistence.

    Every successful mutation rewrites the whole ledger under a single storage
    key before returning.
    """

    def __init__(self, storage: JSONStorage, key: str = TRANSACTIONS_KEY) -> None:
        self._storage = storage
        self._key = key
        self._transactions: Dict[str, Transaction] = {}
        self.load()  # Hydrate in-memory cache from persistence on construction.

    # Public API -----------------------------------------------------------
    def add(self, payload: Dict[str, object]) -> Transaction:
        transaction = Transaction(**self._build(payload))
        self._transactions[transaction.id] = transaction
        logger.info("Added transaction %s (%s %d)", transaction.id, transaction.date, transaction.amount)
        self._persist()
        return transaction

    def add_many(self, payloads: Iterable[Dict[str, object]]) -> List[Transaction]:
        """Add a batch of candidates; nothing is applied if any candidate is rejected."""
        created = [Transaction(**self._build(payload)) for payload in payloads]
        if not created:
            return []
        for transaction in created:
            self._transactions[transaction.id] = transaction
        logger.info("Added %d transactions in one batch", len(created))
        self._persist()
        return created

    def edit(self, transaction_id: str, changes: Dict[str, object]) -> Optional[Transaction]:
        """Merge ``changes`` onto a transaction; unknown ids leave the ledger untouched."""
        existing = self._transactions.get(transaction_id)
        if existing is None:
            logger.debug("Ignoring edit for unknown transaction %s", transaction_id)
            return None

        fields: Dict[str, object] = {}
        if changes.get("date") is not None:
            fields["date"] = validate_required_str(changes["date"], "date")
        if changes.get("store") is not None:
            fields["store"] = normalize_store(validate_optional_str(changes["store"], "store"))

        amount = existing.amount
        amount_supplied = changes.get("amount") is not None
        if amount_supplied:
            amount = parse_amount(changes["amount"], "amount")
        if changes.get("type") is not None:
            # Re-sign so the derived label always matches the requested type.
            amount = signed_amount(amount, validate_enum(changes["type"], "type", TRANSACTION_TYPES))
        fields["amount"] = normalize_amount(amount) if amount_supplied else amount

        updated = replace(existing, **fields)
        self._transactions[transaction_id] = updated
        logger.info("Edited transaction %s", transaction_id)
        self._persist()
        return updated

    def delete(self, transaction_id: str) -> bool:
        if self._transactions.pop(transaction_id, None) is None:
            logger.debug("Ignoring delete for unknown transaction %s", transaction_id)
            return False
        logger.info("Deleted transaction %s", transaction_id)
        self._persist()
        return True

    def get(self, transaction_id: str) -> Transaction:
        """Return a transaction or raise if it does not exist."""
        try:
            return self._transactions[transaction_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Transaction {transaction_id} not found") from exc

    def load_all(self) -> List[Transaction]:
        return list(self._transactions.values())

    def replace_all(self, transactions: Iterable[Transaction]) -> None:
        """Overwrite the whole ledger; stored amounts are taken as given."""
        self._transactions = {transaction.id: transaction for transaction in transactions}
        logger.info("Replaced ledger with %d transactions", len(self._transactions))
        self._persist()

    def load(self) -> None:
        """Load existing transactions from persistence."""
        raw = self._storage.load(self._key)
        if raw is None:
            self._transactions = {}
            return
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON data under '{self._key}'") from exc
        if not isinstance(records, list):
            raise PersistenceError(f"Expected list payload under '{self._key}'")
        try:
            loaded = [Transaction.from_dict(record) for record in records]
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Malformed transaction under '{self._key}'") from exc
        self._transactions = {transaction.id: transaction for transaction in loaded}
        logger.debug("Loaded %d transactions", len(self._transactions))

    # Internal helpers -----------------------------------------------------
    def _persist(self) -> None:
        payload = json.dumps(
            [transaction.to_dict() for transaction in self._transactions.values()],
            ensure_ascii=False,
        )
        try:
            self._storage.save(self._key, payload)
        except PersistenceError:
            logger.error("Saving the ledger failed; in-memory state is kept", exc_info=True)
            raise
        except Exception as exc:  # pragma: no cover - defensive guard
            raise PersistenceError("Unexpected error while saving transactions") from exc

    def _build(self, payload: Dict[str, object]) -> Dict[str, object]:
        amount = parse_amount(payload.get("amount"), "amount")
        if payload.get("type") is not None:
            amount = signed_amount(amount, validate_enum(payload["type"], "type", TRANSACTION_TYPES))
        return {
            "id": str(uuid4()),
            "date": validate_required_str(payload.get("date"), "date"),
            "store": normalize_store(validate_optional_str(payload.get("store"), "store")),
            "amount": normalize_amount(amount),
        }


class LedgerService:
    """Period views, reports and backups computed from a LedgerStore."""

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    @property
    def store(self) -> LedgerStore:
        return self._store

    def transactions(self, month: Optional[str] = None, year: Optional[str] = None) -> List[Transaction]:
        """Transactions of a month or year (or all), ordered by date."""
        return sorted(self._select(month, year), key=lambda transaction: transaction.date)

    def totals(self, month: Optional[str] = None, year: Optional[str] = None) -> PeriodTotals:
        return aggregation.totals(self._select(month, year))

    def summary(self, month: str, year: Optional[str] = None) -> Summary:
        month = validate_month(month)
        if year is not None:
            year = validate_year(year)
        return aggregation.summary(self._store.load_all(), month, year)

    def series(self, month: str) -> Tuple[List[SeriesPoint], Optional[AxisBounds]]:
        """Daily chart series for a month plus its padded axis bounds."""
        points = aggregation.daily_series(self._select(month, None))
        return points, aggregation.chart_axis(points)

    def monthly_report(self, month: str, grouping: bool = True) -> str:
        return reports.render_monthly_report(self._store.load_all(), validate_month(month), grouping)

    def yearly_report(self, year: str, grouping: bool = True) -> str:
        return reports.render_yearly_report(self._store.load_all(), validate_year(year), grouping)

    def write_monthly_report(self, month: str, directory: Path, grouping: bool = True) -> Path:
        content = self.monthly_report(month, grouping)
        return _write_text(Path(directory) / reports.monthly_report_filename(month), content)

    def write_yearly_report(self, year: str, directory: Path, grouping: bool = True) -> Path:
        content = self.yearly_report(year, grouping)
        return _write_text(Path(directory) / reports.yearly_report_filename(year), content)

    def export_backup(self, now: Optional[datetime] = None) -> str:
        return backup.encode(backup.export_backup(self._store.load_all(), now))

    def write_backup(self, directory: Path, now: Optional[datetime] = None) -> Path:
        moment = now or datetime.now(timezone.utc)
        content = self.export_backup(moment)
        # File names use local wall-clock time; the document timestamp stays UTC.
        return _write_text(Path(directory) / backup.backup_filename(moment.astimezone()), content)

    def restore_backup(
        self, text: str, confirm: Optional[Callable[[], bool]] = None
    ) -> ImportResult:
        """Replace the whole ledger with a backup's transactions.

        ``confirm`` is asked only once the backup has been validated; declining
        leaves the ledger unchanged.
        """
        try:
            transactions = backup.decode(text)
        except BackupFormatError as exc:
            logger.warning("Rejected backup: %s", exc)
            return ImportResult(ImportResult.INVALID, str(exc))
        except BackupReadError as exc:
            logger.warning("Unreadable backup: %s", exc.__cause__ or exc)
            return ImportResult(ImportResult.UNREADABLE, str(exc))

        if confirm is not None and not confirm():
            return ImportResult(ImportResult.CANCELLED, "復元を中止しました")

        self._store.replace_all(transactions)
        return ImportResult(
            ImportResult.RESTORED,
            f"{len(transactions)}件の取引を復元しました",
            restored=len(transactions),
        )

    def refresh(self) -> None:
        """Reload data from persistence."""
        self._store.load()

    def _select(self, month: Optional[str], year: Optional[str]) -> List[Transaction]:
        records = self._store.load_all()
        if month is not None:
            return aggregation.by_month(records, validate_month(month))
        if year is not None:
            return aggregation.by_year(records, validate_year(year))
        return records


def _write_text(path: Path, content: str) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Unable to write to {path}") from exc
    logger.info("Wrote %s", path)
    return path
