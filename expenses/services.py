"""Framework-agnostic business services for the expense dashboard."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import uuid4

from .exceptions import PersistenceError, RecordNotFoundError
from .models import ExpenseRecord
from .storage import CSVStorage
from .validators import (
    CATEGORY_MAX_LENGTH,
    normalize_comment,
    parse_amount,
    validate_date,
    validate_required_str,
)

logger = logging.getLogger(__name__)


class ExpenseService:
    """Manages expense records and mediates persistence.

    Nothing is cached between calls: every operation reads the file, so the
    caller always works on the latest snapshot on disk.
    """

    def __init__(self, storage: CSVStorage, resource: str = "expenses.csv") -> None:
        self._storage = storage
        self._resource = resource

    # Public API -----------------------------------------------------------
    def add(self, payload: Dict[str, object]) -> ExpenseRecord:
        expenses = self._load()
        data = self._validate_payload(payload)
        expense = ExpenseRecord(**data)
        expenses[expense.id] = expense
        self._persist(expenses)
        logger.info("Added expense %s", expense.id)
        return expense

    def update(self, expense_id: str, changes: Dict[str, object]) -> ExpenseRecord:
        expenses = self._load()
        existing = self._get_or_raise(expenses, expense_id)
        # Fields left out, or sent as null, keep their stored value.
        provided = {key: value for key, value in changes.items() if value is not None}
        provided.pop("id", None)
        merged_payload = {**existing.to_dict(), **provided}
        data = self._validate_payload(merged_payload, current=existing)
        updated = ExpenseRecord(**data)
        expenses[expense_id] = updated
        self._persist(expenses)
        logger.info("Updated expense %s", expense_id)
        return updated

    def delete(self, expense_id: str) -> ExpenseRecord:
        expenses = self._load()
        removed = self._get_or_raise(expenses, expense_id)
        del expenses[expense_id]
        self._persist(expenses)
        logger.info("Deleted expense %s", expense_id)
        return removed

    def get(self, expense_id: str) -> ExpenseRecord:
        """Return an expense or raise if it does not exist."""
        return self._get_or_raise(self._load(), expense_id)

    def list(self, **filters: object) -> List[ExpenseRecord]:
        """Return stored records in file order, optionally filtered."""
        records: Iterable[ExpenseRecord] = self._load().values()
        return list(self._apply_filters(records, filters))

    def total(self, **filters: object) -> Decimal:
        expenses = self.list(**filters)
        return sum((expense.value for expense in expenses), start=Decimal("0.00"))

    # Internal helpers -----------------------------------------------------
    def _load(self) -> Dict[str, ExpenseRecord]:
        expenses: Dict[str, ExpenseRecord] = {}
        rekeyed = False
        for payload in self._storage.load(self._resource):
            record = ExpenseRecord.from_dict(payload)
            if not record.id or record.id in expenses:
                fresh_id = str(uuid4())
                logger.warning(
                    "Row with missing or duplicate id %r re-keyed as %s", record.id, fresh_id
                )
                record = ExpenseRecord(**{**record.to_dict(), "id": fresh_id})
                rekeyed = True
            expenses[record.id] = record
        if rekeyed:
            # Write the new ids back so they stay stable across reads.
            self._persist(expenses)
        return expenses

    def _persist(self, expenses: Dict[str, ExpenseRecord]) -> None:
        try:
            # Persist current snapshot; storage layer handles atomic writes.
            self._storage.save(
                self._resource, [expense.to_dict() for expense in expenses.values()]
            )
        except PersistenceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive guard
            raise PersistenceError("Unexpected error while saving expenses") from exc

    @staticmethod
    def _get_or_raise(expenses: Dict[str, ExpenseRecord], expense_id: str) -> ExpenseRecord:
        try:
            return expenses[expense_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Expense {expense_id} not found") from exc

    def _validate_payload(
        self, payload: Dict[str, object], *, current: Optional[ExpenseRecord] = None
    ) -> Dict[str, str]:
        amount = parse_amount(payload.get("amount"), "amount")
        return {
            "id": current.id if current else str(uuid4()),
            "date": validate_date(payload.get("date"), "date").isoformat(),
            "category": validate_required_str(
                payload.get("category"), "category", CATEGORY_MAX_LENGTH
            ),
            "amount": f"{amount:.2f}",
            "comment": normalize_comment(payload.get("comment")),
        }

    def _apply_filters(
        self, records: Iterable[ExpenseRecord], filters: Dict[str, object]
    ) -> Iterable[ExpenseRecord]:
        # Categories are an open vocabulary; matching is exact, case included.
        category = str(filters["category"]) if filters.get("category") is not None else None
        period = str(filters["period"]).strip() if filters.get("period") is not None else None

        def matches(expense: ExpenseRecord) -> bool:
            if category is not None and expense.category != category:
                return False
            if period is not None and expense.period != period:
                return False
            return True

        return filter(matches, records)
