"""Delimited-text export of expense records."""

from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable

from .models import ExpenseRecord

EXPORT_HEADERS = ["Date", "Category", "Amount", "Comment"]


def export_csv(records: Iterable[ExpenseRecord]) -> str:
    """Render records as CSV text.

    Fields holding a comma, a quote or a line break are quoted and inner
    quotes are doubled, so the text reads back through ``csv.reader``
    unchanged.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for record in records:
        writer.writerow([record.date, record.category, record.amount, record.comment])
    return buffer.getvalue()


def export_filename(today: date) -> str:
    return f"expenses_{today.isoformat()}.csv"
