from pathlib import Path

import pytest

from api.app import create_app
from expenses.models import ExpenseRecord
from expenses.services import ExpenseService
from expenses.storage import CSVStorage


def make_record(date, category, amount, comment="", record_id=None):
    return ExpenseRecord(
        id=record_id or f"{category}-{date}-{amount}",
        date=date,
        category=category,
        amount=str(amount),
        comment=comment,
    )


@pytest.fixture
def storage(tmp_path: Path) -> CSVStorage:
    return CSVStorage(tmp_path / "data")


@pytest.fixture
def service(storage: CSVStorage) -> ExpenseService:
    return ExpenseService(storage)


@pytest.fixture
def client(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("EXPENSE_TRACKER_ENV", "dev")
    app = create_app(tmp_path / "data")
    app.config.update(TESTING=True)
    return app.test_client()
