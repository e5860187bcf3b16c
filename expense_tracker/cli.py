"""Console interface for the expense dashboard."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional

from expenses.aggregation import (
    daily_totals,
    default_category_selection,
    default_period_selection,
    distinct_categories,
    distinct_periods,
    monthly_category_totals,
    year_periods,
)
from expenses.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from expenses.export import export_csv, export_filename
from expenses.services import ExpenseService
from expenses.storage import CSVStorage

DATE_FORMAT = "%Y-%m-%d"
PERIOD_FORMAT = "%Y-%m"


def _parse_date(value: str) -> str:
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc
    return value


def _parse_period(value: str) -> str:
    try:
        datetime.strptime(value, PERIOD_FORMAT)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid period '{value}'. Expected format YYYY-MM."
        ) from exc
    return value


def _parse_amount(value: str) -> str:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    if not amount.is_finite() or amount < 0:
        raise argparse.ArgumentTypeError("Amount must be a non-negative number")
    return value


def _load_service(data_dir: Path) -> ExpenseService:
    return ExpenseService(CSVStorage(data_dir))


def _format_expense(expense: Dict[str, Any]) -> str:
    return (
        f"[{expense['id']}] {expense['date']} {expense['category']} {expense['amount']}\n"
        f"  Comment: {expense.get('comment') or '-'}\n"
    )


def handle_expense(args: argparse.Namespace, service: ExpenseService) -> None:
    if args.command == "add":
        payload = {
            "date": args.date,
            "category": args.category,
            "amount": args.amount,
            "comment": args.comment,
        }
        expense = service.add(payload)
        print("Expense added:\n" + _format_expense(expense.to_dict()))
    elif args.command == "list":
        filters = {"category": args.category, "period": args.period}
        applied = {k: v for k, v in filters.items() if v is not None}
        expenses = service.list(**applied)
        if not expenses:
            print("No expenses found.")
            return
        total = service.total(**applied)
        print(f"Found {len(expenses)} expenses (total {total:.2f}):")
        for expense in expenses:
            print(_format_expense(expense.to_dict()))
    elif args.command == "edit":
        changes = {
            "date": args.date,
            "category": args.category,
            "amount": args.amount,
            "comment": args.comment,
        }
        cleaned = {k: v for k, v in changes.items() if v is not None}
        expense = service.update(args.id, cleaned)
        print("Expense updated:\n" + _format_expense(expense.to_dict()))
    elif args.command == "delete":
        expense = service.delete(args.id)
        print(f"Expense {expense.id} deleted.")


def handle_summary(args: argparse.Namespace, service: ExpenseService) -> None:
    records = service.list()
    today = date.today()
    if args.command == "filters":
        categories = distinct_categories(records)
        periods = distinct_periods(records)
        print(f"Categories: {', '.join(categories) or '-'}")
        print(f"Periods: {', '.join(periods) or '-'}")
        print(f"Default category: {default_category_selection(categories) or '-'}")
        print(f"Default period: {default_period_selection(periods, today) or '-'}")
    elif args.command == "monthly":
        categories = distinct_categories(records)
        rows = monthly_category_totals(records, year_periods(args.year or today.year), categories)
        for row in rows:
            breakdown = ", ".join(
                f"{category} {amount:.2f}"
                for category, amount in row.totals_by_category.items()
                if amount
            )
            print(f"{row.period}  {row.total:>10.2f}  {breakdown}")
    elif args.command == "daily":
        days = daily_totals(records, args.category, args.period)
        if not days:
            print(f"No data for {args.category} in {args.period}.")
            return
        for day in days:
            print(f"Day {day.day:>2}: {day.total:.2f}")
            for record in day.records:
                comment = f" ({record.comment})" if record.comment else ""
                print(f"    {record.amount}{comment}")


def handle_export(args: argparse.Namespace, service: ExpenseService) -> None:
    records = service.list()
    if not records:
        raise ValidationError("No expense data to export")
    output = args.output or Path(export_filename(date.today()))
    output.write_text(export_csv(records), encoding="utf-8")
    print(f"Exported {len(records)} expenses to {output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense Dashboard CLI")
    parser.add_argument(
        "--data-dir",
        default="data",
        type=Path,
        help="Directory holding expenses.csv (default: ./data)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    expense_parser = subparsers.add_parser("expense", help="Manage expenses")
    expense_sub = expense_parser.add_subparsers(dest="command", required=True)

    expense_add = expense_sub.add_parser("add", help="Add a new expense")
    expense_add.add_argument("date", type=_parse_date)
    expense_add.add_argument("category")
    expense_add.add_argument("amount", type=_parse_amount)
    expense_add.add_argument("--comment")

    expense_list = expense_sub.add_parser("list", help="List expenses")
    expense_list.add_argument("--category")
    expense_list.add_argument("--period", type=_parse_period)

    expense_edit = expense_sub.add_parser("edit", help="Edit an existing expense")
    expense_edit.add_argument("id")
    expense_edit.add_argument("--date", type=_parse_date)
    expense_edit.add_argument("--category")
    expense_edit.add_argument("--amount", type=_parse_amount)
    expense_edit.add_argument("--comment")

    expense_delete = expense_sub.add_parser("delete", help="Delete an expense")
    expense_delete.add_argument("id")

    summary_parser = subparsers.add_parser("summary", help="Show aggregated totals")
    summary_sub = summary_parser.add_subparsers(dest="command", required=True)

    summary_sub.add_parser("filters", help="Show categories, periods and default selections")

    summary_monthly = summary_sub.add_parser("monthly", help="Totals per month and category")
    summary_monthly.add_argument("--year", type=int)

    summary_daily = summary_sub.add_parser("daily", help="Daily totals for one category and month")
    summary_daily.add_argument("category")
    summary_daily.add_argument("period", type=_parse_period)

    export_parser = subparsers.add_parser("export", help="Export expenses as CSV")
    export_parser.add_argument("--output", type=Path)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    service = _load_service(args.data_dir)

    try:
        if args.entity == "expense":
            handle_expense(args, service)
        elif args.entity == "summary":
            handle_summary(args, service)
        elif args.entity == "export":
            handle_export(args, service)
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
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
