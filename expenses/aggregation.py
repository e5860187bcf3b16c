"""Aggregations that feed the dashboard table, filters and charts.

Every function here is pure: it reads only its arguments, never touches the
store, and never raises because of the data it is given. Records whose date
cannot be parsed are left out of anything keyed by period or day; records
whose amount is malformed count as zero. One corrupt row must not blank the
whole dashboard.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .models import ExpenseRecord, parse_calendar_date, period_key

__all__ = [
    "DailyTotal",
    "MonthlyTotals",
    "daily_totals",
    "default_category_selection",
    "default_period_selection",
    "distinct_categories",
    "distinct_periods",
    "monthly_category_totals",
    "year_periods",
]

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]


@dataclass(frozen=True)
class MonthlyTotals:
    """One column of the stacked monthly chart."""

    period: str
    totals_by_category: Dict[str, Decimal]

    @property
    def total(self) -> Decimal:
        return sum(self.totals_by_category.values(), start=Decimal("0.00"))

    def to_dict(self) -> Dict[str, object]:
        return {
            "period": self.period,
            "totals_by_category": {
                category: f"{amount:.2f}"
                for category, amount in self.totals_by_category.items()
            },
            "total": f"{self.total:.2f}",
        }


@dataclass(frozen=True)
class DailyTotal:
    """One point of the daily trend, with the entries that make it up."""

    day: int
    total: Decimal
    records: List[ExpenseRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "day": self.day,
            "total": f"{self.total:.2f}",
            "records": [record.to_dict() for record in self.records],
        }


def distinct_categories(records: Iterable[ExpenseRecord]) -> List[str]:
    """Distinct non-empty categories, sorted; ``Food`` and ``food`` stay apart."""
    return sorted({record.category for record in records if record.category})


def distinct_periods(records: Iterable[ExpenseRecord]) -> List[str]:
    """Distinct ``YYYY-MM`` keys of records with a parseable date, oldest first."""
    periods = set()
    for record in records:
        period = record.period
        if period is None:
            logger.debug("Skipping record %s with unparseable date %r", record.id, record.date)
            continue
        periods.add(period)
    # Zero-padded keys sort chronologically.
    return sorted(periods)


def default_category_selection(categories: Sequence[str]) -> Optional[str]:
    """The category pre-selected in the trend filter: the first one offered."""
    return categories[0] if categories else None


def default_period_selection(periods: Sequence[str], today: DateLike) -> Optional[str]:
    """Pick the period the trend filter starts on.

    The current month wins when it has data, otherwise the latest period
    with data, otherwise ``None``.
    """
    if not periods:
        return None
    current = _period_of_today(today)
    if current is not None and current in periods:
        return current
    return max(periods)


def year_periods(year: int) -> List[str]:
    """The twelve period keys of a calendar year, January first."""
    return [f"{year:04d}-{month:02d}" for month in range(1, 13)]


def monthly_category_totals(
    records: Iterable[ExpenseRecord],
    period_range: Sequence[str],
    categories: Sequence[str],
) -> List[MonthlyTotals]:
    """Dense period x category matrix of summed amounts.

    The result has one entry per element of ``period_range`` in the same
    order, and every entry has a value for every category, zero included,
    so that a stacked chart can lay the cells on top of each other.
    """
    wanted_periods = set(period_range)
    wanted_categories = set(categories)
    sums: Dict[str, Dict[str, Decimal]] = {}
    for record in records:
        if record.category not in wanted_categories:
            continue
        period = record.period
        if period is None or period not in wanted_periods:
            continue
        by_category = sums.setdefault(period, {})
        by_category[record.category] = by_category.get(record.category, Decimal("0.00")) + record.value

    result = []
    for period in period_range:
        by_category = sums.get(period, {})
        result.append(
            MonthlyTotals(
                period=period,
                totals_by_category={
                    category: by_category.get(category, Decimal("0.00"))
                    for category in categories
                },
            )
        )
    return result


def daily_totals(
    records: Iterable[ExpenseRecord], category: str, period: str
) -> List[DailyTotal]:
    """Per-day totals for one category in one month, ordered by day.

    Matching is exact and case-sensitive. An empty list means the slice has
    no data; it is not an error.
    """
    by_day: Dict[int, List[ExpenseRecord]] = {}
    for record in records:
        if record.category != category:
            continue
        day = record.calendar_date
        if day is None or period_key(day) != period:
            continue
        by_day.setdefault(day.day, []).append(record)

    return [
        DailyTotal(
            day=day,
            total=sum((record.value for record in day_records), start=Decimal("0.00")),
            records=day_records,
        )
        for day, day_records in sorted(by_day.items())
    ]


def _period_of_today(today: DateLike) -> Optional[str]:
    if isinstance(today, datetime):
        return period_key(today.date())
    if isinstance(today, date):
        return period_key(today)
    try:
        return period_key(parse_calendar_date(str(today)))
    except ValueError:
        logger.debug("Ignoring unparseable reference date %r", today)
        return None
