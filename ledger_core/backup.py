"""Versioned JSON backups of the whole ledger."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from .exceptions import BackupFormatError, BackupReadError
from .models import BackupDocument, Transaction, isoformat_utc

__all__ = [
    "BACKUP_VERSION",
    "INVALID_BACKUP_MESSAGE",
    "OVERWRITE_PROMPT",
    "UNREADABLE_BACKUP_MESSAGE",
    "ImportResult",
    "backup_filename",
    "decode",
    "encode",
    "export_backup",
    "read_backup_file",
]

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"

INVALID_BACKUP_MESSAGE = "無効なバックアップファイルです"
UNREADABLE_BACKUP_MESSAGE = "バックアップファイルの読み込みに失敗しました"
OVERWRITE_PROMPT = "既存のデータを上書きしますか？"


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a restore attempt, suitable for showing to the user."""

    status: str
    message: str
    restored: int = 0

    RESTORED = "restored"
    CANCELLED = "cancelled"
    INVALID = "invalid"
    UNREADABLE = "unreadable"

    @property
    def ok(self) -> bool:
        return self.status == self.RESTORED


def export_backup(
    transactions: Iterable[Transaction], now: Optional[datetime] = None
) -> BackupDocument:
    moment = now or datetime.now(timezone.utc)
    return BackupDocument(
        version=BACKUP_VERSION,
        timestamp=isoformat_utc(moment, timespec="milliseconds"),
        transactions=list(transactions),
    )


def encode(document: BackupDocument) -> str:
    return json.dumps(document.to_dict(), indent=2, ensure_ascii=False)


def decode(text: str) -> List[Transaction]:
    """Parse backup text into transactions.

    Only the presence of a ``transactions`` array is checked; ``version`` is
    carried but not inspected.
    """
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise BackupReadError(UNREADABLE_BACKUP_MESSAGE) from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("transactions"), list):
        raise BackupFormatError(INVALID_BACKUP_MESSAGE)

    try:
        document = BackupDocument.from_dict(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise BackupReadError(UNREADABLE_BACKUP_MESSAGE) from exc
    logger.debug(
        "Decoded backup version=%s timestamp=%s with %d transactions",
        document.version,
        document.timestamp,
        len(document.transactions),
    )
    return document.transactions


def read_backup_file(path: Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BackupReadError(UNREADABLE_BACKUP_MESSAGE) from exc


def backup_filename(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now()
    return f"finance-backup-{moment:%Y%m%d-%H%M%S}.json"
