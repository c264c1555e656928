"""Period filtering and aggregation over ledger transactions.

All functions here are pure: they take a sequence of transactions and return
freshly computed values without touching the store.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Tuple

from .models import AxisBounds, PeriodTotals, SeriesPoint, Summary, Transaction
from .rounding import normalize_amount

__all__ = [
    "AXIS_PADDING_RATIO",
    "by_month",
    "by_year",
    "chart_axis",
    "daily_series",
    "month_labels",
    "summary",
    "totals",
]

AXIS_PADDING_RATIO = 0.1


def by_month(transactions: Iterable[Transaction], year_month: str) -> List[Transaction]:
    """Return transactions whose date starts with ``YYYY-MM``."""
    return [transaction for transaction in transactions if transaction.date.startswith(year_month)]


def by_year(transactions: Iterable[Transaction], year: str) -> List[Transaction]:
    """Return transactions whose date starts with ``YYYY``."""
    return [transaction for transaction in transactions if transaction.date.startswith(year)]


def month_labels(year: str) -> List[str]:
    return [f"{year}-{month:02d}" for month in range(1, 13)]


def totals(transactions: Iterable[Transaction]) -> PeriodTotals:
    """Income and expense totals, each floored to the amount unit."""
    income, expense = _sum_by_sign(transactions)
    return PeriodTotals(income=normalize_amount(income), expense=normalize_amount(expense))


def summary(
    transactions: Iterable[Transaction], year_month: str, year: Optional[str] = None
) -> Summary:
    """Overview of the selected month next to its year (or ``year`` when given).

    Overview figures are plain sums of the stored amounts.
    """
    records = list(transactions)
    year = year or year_month[:4]
    monthly_income, monthly_expense = _sum_by_sign(by_month(records, year_month))
    yearly_income, yearly_expense = _sum_by_sign(by_year(records, year))
    return Summary(
        month=year_month,
        year=year,
        monthly=PeriodTotals(income=monthly_income, expense=monthly_expense),
        yearly=PeriodTotals(income=yearly_income, expense=yearly_expense),
    )


def daily_series(transactions: Iterable[Transaction]) -> List[SeriesPoint]:
    """Per-date income/expense with a running balance in ascending date order.

    The running balance starts from zero at the first date of the supplied set.
    """
    daily: Dict[str, List[int]] = {}
    for transaction in transactions:
        bucket = daily.setdefault(transaction.date, [0, 0])
        if transaction.amount > 0:
            bucket[0] += transaction.amount
        elif transaction.amount < 0:
            bucket[1] += -transaction.amount

    points: List[SeriesPoint] = []
    running = 0
    # Zero-padded ISO dates sort chronologically as plain strings.
    for date in sorted(daily):
        income, expense = daily[date]
        running += income - expense
        points.append(
            SeriesPoint(date=date, income=income, expense=expense, running_balance=running)
        )
    return points


def chart_axis(series: Iterable[SeriesPoint]) -> Optional[AxisBounds]:
    """Value-axis bounds padded by ``AXIS_PADDING_RATIO`` of the largest magnitude."""
    points = list(series)
    if not points:
        return None
    balances = [point.running_balance for point in points]
    max_value = max(balances + [point.income for point in points])
    min_value = min(balances + [-point.expense for point in points])
    padding = max(abs(max_value), abs(min_value)) * AXIS_PADDING_RATIO
    return AxisBounds(
        minimum=math.floor(min_value - padding),
        maximum=math.ceil(max_value + padding),
    )


def _sum_by_sign(transactions: Iterable[Transaction]) -> Tuple[int, int]:
    income = 0
    expense = 0
    for transaction in transactions:
        if transaction.amount > 0:
            income += transaction.amount
        elif transaction.amount < 0:
            expense += abs(transaction.amount)
    return income, expense
