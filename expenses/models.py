"""Data models for the expense dashboard domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

__all__ = ["MAX_AMOUNT_EXPONENT", "ExpenseRecord", "parse_calendar_date", "period_key"]

ZERO = Decimal("0")
# Amounts of 10**16 or more are out of range.
MAX_AMOUNT_EXPONENT = 15


def parse_calendar_date(value: str) -> date:
    """Parse an ISO 8601 date, or the date part of an ISO 8601 datetime."""
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    # Timezone is dropped; the entry belongs to the calendar day it was written on.
    return datetime.fromisoformat(value).date()


def period_key(day: date) -> str:
    """Return the zero-padded ``YYYY-MM`` key for a date."""
    return f"{day.year:04d}-{day.month:02d}"


@dataclass(frozen=True)
class ExpenseRecord:
    """A stored expense entry.

    ``date`` and ``amount`` hold the text exactly as persisted so that rows
    written by other tools survive a read-modify-write cycle untouched. The
    parsed forms are exposed through :attr:`calendar_date`, :attr:`period`
    and :attr:`value`, none of which raise on malformed data.
    """

    id: str
    date: str
    category: str
    amount: str
    comment: str = ""

    @property
    def calendar_date(self) -> Optional[date]:
        if not self.date:
            return None
        try:
            return parse_calendar_date(self.date)
        except ValueError:
            return None

    @property
    def period(self) -> Optional[str]:
        day = self.calendar_date
        return period_key(day) if day is not None else None

    @property
    def value(self) -> Decimal:
        """Amount as a finite, non-negative Decimal; 0 when malformed."""
        try:
            amount = Decimal(self.amount.strip())
        except (InvalidOperation, AttributeError):
            return ZERO
        if not amount.is_finite() or amount < 0:
            return ZERO
        if amount and amount.adjusted() > MAX_AMOUNT_EXPONENT:
            return ZERO
        return amount

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the record to JSON-friendly natives."""
        return {
            "id": self.id,
            "date": self.date,
            "category": self.category,
            "amount": self.amount,
            "comment": self.comment,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExpenseRecord":
        """Hydrate a record from stored data, tolerating missing or null fields."""

        def text(key: str) -> str:
            raw = data.get(key)
            return "" if raw is None else str(raw)

        return cls(
            id=text("id"),
            date=text("date"),
            category=text("category"),
            amount=text("amount"),
            comment=text("comment"),
        )
