"""Console interface for the household ledger."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ledger_core.backup import OVERWRITE_PROMPT, read_backup_file
from ledger_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from ledger_core.logging_setup import configure_logging
from ledger_core.models import Transaction
from ledger_core.reports import format_signed_yen, format_yen
from ledger_core.rounding import EXPENSE, INCOME
from ledger_core.services import LedgerService, LedgerStore
from ledger_core.storage import JSONStorage

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"


def _parse_date(value: str) -> str:
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc
    return value


def _parse_month(value: str) -> str:
    try:
        datetime.strptime(value, MONTH_FORMAT)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid month '{value}'. Expected format YYYY-MM."
        ) from exc
    if len(value) != 7:
        raise argparse.ArgumentTypeError(f"Invalid month '{value}'. Expected format YYYY-MM.")
    return value


def _parse_year(value: str) -> str:
    if len(value) != 4 or not value.isdigit():
        raise argparse.ArgumentTypeError(f"Invalid year '{value}'. Expected format YYYY.")
    return value


def _parse_amount(value: str) -> str:
    try:
        amount = Decimal(value)
    except Exception as exc:  # pragma: no cover - delegated to service
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    if amount <= 0:
        raise argparse.ArgumentTypeError("Amount must be greater than zero")
    return value


def _load_services(data_dir: Path) -> Tuple[LedgerService, LedgerStore]:
    store = LedgerStore(JSONStorage(data_dir))
    return LedgerService(store), store


def _format_transaction(transaction: Transaction) -> str:
    return (
        f"[{transaction.id}] {transaction.date} "
        f"{format_signed_yen(transaction.amount)} {transaction.store} ({transaction.type})"
    )


def _confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _read_candidates(path: Path) -> List[Dict[str, Any]]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError(f"Unable to read candidates from {path}") from exc
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise ValidationError("Candidates file must contain a JSON array of objects")
    return payload


def handle_transaction(args: argparse.Namespace, ledger: LedgerService, store: LedgerStore) -> int:
    if args.command == "add":
        payload = {
            "date": args.date,
            "amount": args.amount,
            "type": args.type,
            "store": args.store,
        }
        transaction = store.add(payload)
        print("Transaction added:\n" + _format_transaction(transaction))
    elif args.command == "list":
        transactions = ledger.transactions(month=args.month, year=args.year)
        if not transactions:
            print("No transactions found.")
            return 0
        totals = ledger.totals(month=args.month, year=args.year)
        print(
            f"Found {len(transactions)} transactions "
            f"(income {format_yen(totals.income)}, expense {format_yen(totals.expense)}, "
            f"balance {format_signed_yen(totals.balance)}):"
        )
        for transaction in transactions:
            print(_format_transaction(transaction))
    elif args.command == "show":
        print(_format_transaction(store.get(args.id)))
    elif args.command == "edit":
        changes = {
            "date": args.date,
            "amount": args.amount,
            "type": args.type,
            "store": args.store,
        }
        cleaned = {k: v for k, v in changes.items() if v is not None}
        if args.amount is not None and args.type is None:
            # The CLI amount is a magnitude; keep the stored sign.
            current = {t.id: t for t in store.load_all()}.get(args.id)
            if current is not None:
                cleaned["type"] = current.type
        transaction = store.edit(args.id, cleaned)
        if transaction is None:
            print(f"Transaction {args.id} not found; nothing changed.")
        else:
            print("Transaction updated:\n" + _format_transaction(transaction))
    elif args.command == "delete":
        if store.delete(args.id):
            print(f"Transaction {args.id} deleted.")
        else:
            print(f"Transaction {args.id} not found; nothing changed.")
    elif args.command == "ingest":
        created = store.add_many(_read_candidates(args.file))
        print(f"Imported {len(created)} transactions.")
    return 0


def handle_summary(args: argparse.Namespace, ledger: LedgerService) -> int:
    summary = ledger.summary(args.month, year=args.year)
    for title, period in ((f"Year {summary.year}", summary.yearly), (f"Month {summary.month}", summary.monthly)):
        print(title)
        print(f"  Income:  {format_yen(period.income)}")
        print(f"  Expense: {format_yen(period.expense)}")
        print(f"  Balance: {format_signed_yen(period.balance)}")
    return 0


def handle_series(args: argparse.Namespace, ledger: LedgerService) -> int:
    points, axis = ledger.series(args.month)
    if not points:
        print("No data.")
        return 0
    for point in points:
        print(
            f"{point.date}\t+{format_yen(point.income)}\t-{format_yen(point.expense)}\t"
            f"{format_signed_yen(point.running_balance)}"
        )
    print(f"Axis: {axis.minimum} .. {axis.maximum}")
    return 0


def handle_report(args: argparse.Namespace, ledger: LedgerService) -> int:
    grouping = not args.no_grouping
    if args.command == "monthly":
        if args.output_dir is None:
            print(ledger.monthly_report(args.month, grouping))
        else:
            print(f"Wrote {ledger.write_monthly_report(args.month, args.output_dir, grouping)}")
    elif args.command == "yearly":
        if args.output_dir is None:
            print(ledger.yearly_report(args.year, grouping))
        else:
            print(f"Wrote {ledger.write_yearly_report(args.year, args.output_dir, grouping)}")
    return 0


def handle_backup(args: argparse.Namespace, ledger: LedgerService) -> int:
    if args.command == "export":
        if args.output_dir is None:
            print(ledger.export_backup())
        else:
            print(f"Wrote {ledger.write_backup(args.output_dir)}")
        return 0

    text = read_backup_file(args.file)
    confirm = None if args.yes else (lambda: _confirm(OVERWRITE_PROMPT))
    result = ledger.restore_backup(text, confirm=confirm)
    print(result.message, file=sys.stdout if result.ok else sys.stderr)
    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Household Ledger CLI")
    parser.add_argument(
        "--data-dir",
        default="data",
        type=Path,
        help="Directory to store JSON data (default: ./data)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    transaction_parser = subparsers.add_parser("transaction", help="Manage transactions")
    transaction_sub = transaction_parser.add_subparsers(dest="command", required=True)

    transaction_add = transaction_sub.add_parser("add", help="Add a new transaction")
    transaction_add.add_argument("date", type=_parse_date)
    transaction_add.add_argument("amount", type=_parse_amount)
    transaction_add.add_argument("--type", choices=[INCOME, EXPENSE], default=EXPENSE)
    transaction_add.add_argument("--store")

    transaction_list = transaction_sub.add_parser("list", help="List transactions")
    period = transaction_list.add_mutually_exclusive_group()
    period.add_argument("--month", type=_parse_month)
    period.add_argument("--year", type=_parse_year)

    transaction_show = transaction_sub.add_parser("show", help="Show one transaction")
    transaction_show.add_argument("id")

    transaction_edit = transaction_sub.add_parser("edit", help="Edit an existing transaction")
    transaction_edit.add_argument("id")
    transaction_edit.add_argument("--date", type=_parse_date)
    transaction_edit.add_argument("--amount", type=_parse_amount)
    transaction_edit.add_argument("--type", choices=[INCOME, EXPENSE])
    transaction_edit.add_argument("--store")

    transaction_delete = transaction_sub.add_parser("delete", help="Delete a transaction")
    transaction_delete.add_argument("id")

    transaction_ingest = transaction_sub.add_parser(
        "ingest", help="Add every candidate from a JSON array file"
    )
    transaction_ingest.add_argument("file", type=Path)

    summary_parser = subparsers.add_parser("summary", help="Show monthly and yearly totals")
    summary_parser.add_argument("month", type=_parse_month)
    summary_parser.add_argument("--year", type=_parse_year)

    series_parser = subparsers.add_parser("series", help="Show the daily chart series of a month")
    series_parser.add_argument("month", type=_parse_month)

    report_parser = subparsers.add_parser("report", help="Render text reports")
    report_sub = report_parser.add_subparsers(dest="command", required=True)

    report_monthly = report_sub.add_parser("monthly", help="Monthly report")
    report_monthly.add_argument("month", type=_parse_month)
    report_yearly = report_sub.add_parser("yearly", help="Yearly report")
    report_yearly.add_argument("year", type=_parse_year)
    for sub in (report_monthly, report_yearly):
        sub.add_argument("--output-dir", type=Path, help="Write the report file here instead of printing")
        sub.add_argument("--no-grouping", action="store_true", help="Print amounts without thousands separators")

    backup_parser = subparsers.add_parser("backup", help="Export or restore backups")
    backup_sub = backup_parser.add_subparsers(dest="command", required=True)

    backup_export = backup_sub.add_parser("export", help="Export the whole ledger")
    backup_export.add_argument("--output-dir", type=Path, help="Write the backup file here instead of printing")

    backup_restore = backup_sub.add_parser("restore", help="Replace the ledger with a backup")
    backup_restore.add_argument("file", type=Path)
    backup_restore.add_argument("--yes", action="store_true", help="Overwrite without asking")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)

    try:
        ledger, store = _load_services(args.data_dir)
        if args.entity == "transaction":
            return handle_transaction(args, ledger, store)
        elif args.entity == "summary":
            return handle_summary(args, ledger)
        elif args.entity == "series":
            return handle_series(args, ledger)
        elif args.entity == "report":
            return handle_report(args, ledger)
        elif args.entity == "backup":
            return handle_backup(args, ledger)
        else:  # pragma: no cover - argparse should prevent this
            parser.error(f"Unknown entity: {args.entity}")
            return 2
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
