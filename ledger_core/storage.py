"""Persistence utilities for the household ledger core services."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)


class JSONStorage:
    """File-based key/value storage with crash-safe writes.

    Each key maps to ``<base_path>/<key>.json`` holding an opaque UTF-8 string.
    """

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)

    def load(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def save(self, key: str, value: str) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
            # Use replace for atomic move on POSIX; ensures crash-safe persistence.
            temp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {path}") from exc
        logger.debug("Saved %d characters to %s", len(value), path)

    def _path_for(self, key: str) -> Path:
        return self._base_path / f"{key}.json"

    @property
    def base_path(self) -> Path:
        return self._base_path
