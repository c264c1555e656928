"""Shared fixtures: every test gets its own data directory."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from api.app import create_app
from ledger_core import logging_setup
from ledger_core.services import LedgerService, LedgerStore
from ledger_core.storage import JSONStorage


@pytest.fixture(autouse=True)
def _reset_package_logging(monkeypatch: pytest.MonkeyPatch):
    """Undo ``configure_logging`` so handlers never outlive a captured stream."""
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    yield
    logger = logging.getLogger("ledger_core")
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def storage(data_dir: Path) -> JSONStorage:
    return JSONStorage(data_dir)


@pytest.fixture
def store(storage: JSONStorage) -> LedgerStore:
    return LedgerStore(storage)


@pytest.fixture
def ledger(store: LedgerStore) -> LedgerService:
    return LedgerService(store)


@pytest.fixture
def january(store: LedgerStore):
    """The Cafe expense and the unlabeled income from January 2024."""
    cafe = store.add({"date": "2024-01-05", "store": "Cafe", "amount": -250, "type": "expense"})
    salary = store.add({"date": "2024-01-20", "store": "", "amount": 1050, "type": "income"})
    return cafe, salary


@pytest.fixture
def client(data_dir: Path):
    app = create_app(data_dir)
    app.config.update(TESTING=True)
    return app.test_client()
