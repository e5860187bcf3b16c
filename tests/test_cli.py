"""Tests for the console interface."""

from expense_tracker.cli import main
from expenses.services import ExpenseService
from expenses.storage import CSVStorage


def _run(data_dir, *argv):
    return main(["--data-dir", str(data_dir), *argv])


def test_add_list_edit_delete(tmp_path, capsys):
    assert _run(tmp_path, "expense", "add", "2024-03-05", "Food", "12.5", "--comment", "lunch") == 0
    assert "Expense added" in capsys.readouterr().out

    expense = ExpenseService(CSVStorage(tmp_path)).list()[0]
    assert expense.amount == "12.50"

    assert _run(tmp_path, "expense", "list", "--period", "2024-03") == 0
    out = capsys.readouterr().out
    assert "Found 1 expenses (total 12.50)" in out
    assert "lunch" in out

    assert _run(tmp_path, "expense", "edit", expense.id, "--amount", "20") == 0
    assert "20.00" in capsys.readouterr().out

    assert _run(tmp_path, "expense", "delete", expense.id) == 0
    assert f"Expense {expense.id} deleted." in capsys.readouterr().out

    assert _run(tmp_path, "expense", "list") == 0
    assert "No expenses found." in capsys.readouterr().out


def test_missing_record_exits_with_error(tmp_path, capsys):
    assert _run(tmp_path, "expense", "delete", "missing") == 1
    assert "not found" in capsys.readouterr().err


def test_summary_commands(tmp_path, capsys):
    _run(tmp_path, "expense", "add", "2024-03-05", "Food", "100")
    _run(tmp_path, "expense", "add", "2024-03-07", "Food", "50")
    _run(tmp_path, "expense", "add", "2024-03-05", "Travel", "200")
    capsys.readouterr()

    assert _run(tmp_path, "summary", "filters") == 0
    out = capsys.readouterr().out
    assert "Categories: Food, Travel" in out
    assert "Default period: 2024-03" in out

    assert _run(tmp_path, "summary", "monthly", "--year", "2024") == 0
    out = capsys.readouterr().out
    assert "2024-03" in out
    assert "Food 150.00, Travel 200.00" in out

    assert _run(tmp_path, "summary", "daily", "Food", "2024-03") == 0
    out = capsys.readouterr().out
    assert "Day  5: 100.00" in out
    assert "Day  7: 50.00" in out

    assert _run(tmp_path, "summary", "daily", "Rent", "2024-03") == 0
    assert "No data for Rent in 2024-03." in capsys.readouterr().out


def test_export(tmp_path, capsys):
    output = tmp_path / "out.csv"
    assert _run(tmp_path, "export", "--output", str(output)) == 1
    assert "No expense data" in capsys.readouterr().err

    _run(tmp_path, "expense", "add", "2024-03-05", "Food", "100", "--comment", "a, b")
    assert _run(tmp_path, "export", "--output", str(output)) == 0
    assert output.read_text(encoding="utf-8").splitlines()[1] == '2024-03-05,Food,100.00,"a, b"'


def test_oversized_amount_exits_with_error(tmp_path, capsys):
    assert _run(tmp_path, "expense", "add", "2024-03-05", "Food", "1e30") == 1
    assert "amount is too large" in capsys.readouterr().err
    assert ExpenseService(CSVStorage(tmp_path)).list() == []
