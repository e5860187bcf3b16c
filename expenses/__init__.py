"""Core business logic package for the expense dashboard."""

from .aggregation import (
    DailyTotal,
    MonthlyTotals,
    daily_totals,
    default_category_selection,
    default_period_selection,
    distinct_categories,
    distinct_periods,
    monthly_category_totals,
    year_periods,
)
from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .export import export_csv
from .models import ExpenseRecord
from .services import ExpenseService
from .storage import CSVStorage

__all__ = [
    "ExpenseRecord",
    "ExpenseService",
    "CSVStorage",
    "DailyTotal",
    "MonthlyTotals",
    "daily_totals",
    "default_category_selection",
    "default_period_selection",
    "distinct_categories",
    "distinct_periods",
    "export_csv",
    "monthly_category_totals",
    "year_periods",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]
