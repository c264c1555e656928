"""Plain-text monthly and yearly ledger reports."""

from __future__ import annotations

from typing import Iterable, List

from .aggregation import by_month, by_year, month_labels, totals
from .models import PeriodTotals, Transaction
from .rounding import normalize_amount

__all__ = [
    "CURRENCY_GLYPH",
    "format_signed_yen",
    "format_yen",
    "monthly_report_filename",
    "render_monthly_report",
    "render_yearly_report",
    "yearly_report_filename",
]

CURRENCY_GLYPH = "¥"


def format_yen(value: int, grouping: bool = True) -> str:
    """Render a non-negative magnitude with the currency glyph."""
    digits = f"{value:,}" if grouping else str(value)
    return f"{CURRENCY_GLYPH}{digits}"


def format_signed_yen(value: int, grouping: bool = True) -> str:
    """Render ``value`` as ``+¥n`` / ``-¥n``; zero counts as positive."""
    sign = "+" if value >= 0 else "-"
    return f"{sign}{format_yen(abs(value), grouping)}"


def monthly_report_filename(year_month: str) -> str:
    return f"finance-report-{year_month}.txt"


def yearly_report_filename(year: str) -> str:
    return f"yearly-finance-report-{year}.txt"


def render_monthly_report(
    transactions: Iterable[Transaction], year_month: str, grouping: bool = True
) -> str:
    """Monthly report text.

    Amounts use thousands separators by default (``+¥1,000``); pass
    ``grouping=False`` for the plain form (``+¥1000``).
    """
    records = by_month(transactions, year_month)
    period = totals(records)
    lines = [
        f"=== {year_month} 収支レポート ===",
        *_totals_lines(period, grouping),
        "\n=== 取引詳細 ===",
        *_detail_lines(records, grouping),
    ]
    return "\n".join(lines)


def render_yearly_report(
    transactions: Iterable[Transaction], year: str, grouping: bool = True
) -> str:
    """Year totals followed by one block per month that has transactions.

    Year figures are the sum of the per-month rounded totals.
    """
    yearly = by_year(transactions, year)
    year_totals = PeriodTotals()
    body: List[str] = [f"=== {year}年 年間収支レポート ===\n"]

    for label in month_labels(year):
        records = by_month(yearly, label)
        if not records:
            continue
        period = totals(records)
        year_totals += period
        income_line, expense_line, balance_line = _totals_lines(period, grouping)
        body.extend([f"=== {label} ===", income_line, expense_line, balance_line + "\n"])
        body.append("取引詳細:")
        body.extend(_detail_lines(records, grouping))
        body.append("")

    header = [
        f"年間総収入: +{format_yen(year_totals.income, grouping)}",
        f"年間総支出: -{format_yen(year_totals.expense, grouping)}",
        f"年間残高: {format_signed_yen(year_totals.balance, grouping)}",
        "",
    ]
    return "\n".join(header + body)


def _totals_lines(period: PeriodTotals, grouping: bool) -> List[str]:
    return [
        f"総収入: +{format_yen(period.income, grouping)}",
        f"総支出: -{format_yen(period.expense, grouping)}",
        f"残高: {format_signed_yen(period.balance, grouping)}",
    ]


def _detail_lines(records: Iterable[Transaction], grouping: bool) -> List[str]:
    lines = []
    # sorted() is stable, so same-day entries keep their ledger order.
    for transaction in sorted(records, key=lambda item: item.date):
        sign = "+" if transaction.amount >= 0 else "-"
        magnitude = normalize_amount(abs(transaction.amount))
        lines.append(
            f"{transaction.date}\t{sign}{format_yen(magnitude, grouping)}\t{transaction.store}"
        )
    return lines
