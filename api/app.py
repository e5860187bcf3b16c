"""Flask REST API exposing the expense dashboard services."""

from __future__ import annotations

import os
from datetime import MAXYEAR, MINYEAR, date
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

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
from expenses.validators import validate_date


def create_app(data_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("EXPENSE_TRACKER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("EXPENSE_TRACKER_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    data_path = Path(data_dir or os.getenv("EXPENSE_TRACKER_DATA_DIR", "data"))
    storage = CSVStorage(data_path)
    expense_service = ExpenseService(storage)
    app.logger.info("Serving expenses from %s", data_path)

    def _success(payload: Any, status: int = 200):
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _clean_filters(raw: Dict[str, Optional[str]]) -> Dict[str, str]:
        return {k: v for k, v in raw.items() if v not in (None, "")}

    def _today() -> date:
        raw = request.args.get("today")
        if raw:
            return validate_date(raw, "today")
        return date.today()

    def _year() -> int:
        raw = request.args.get("year")
        if raw is None or not raw.strip():
            return _today().year
        try:
            year = int(raw)
        except ValueError as exc:
            raise ValidationError("year must be an integer") from exc
        if not MINYEAR <= year <= MAXYEAR:
            raise ValidationError(f"year must be between {MINYEAR} and {MAXYEAR}")
        return year

    @app.get("/api/expenses")
    def list_expenses():
        filters = {
            "category": request.args.get("category"),
            "period": request.args.get("period"),
        }
        applied = _clean_filters(filters)
        expenses = expense_service.list(**applied)
        total = expense_service.total(**applied)
        return _success({
            "items": [expense.to_dict() for expense in expenses],
            "total": f"{total:.2f}",
        })

    @app.post("/api/expenses")
    def create_expense():
        payload = _json_body()
        expense = expense_service.add(payload)
        return _success(expense.to_dict(), 201)

    @app.get("/api/expenses/<expense_id>")
    def get_expense(expense_id: str):
        expense = expense_service.get(expense_id)
        return _success(expense.to_dict())

    @app.put("/api/expenses/<expense_id>")
    def update_expense(expense_id: str):
        payload = _json_body()
        expense = expense_service.update(expense_id, payload)
        return _success(expense.to_dict())

    @app.delete("/api/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        expense = expense_service.delete(expense_id)
        return _success(expense.to_dict())

    @app.get("/api/filters")
    def filters():
        records = expense_service.list()
        categories = distinct_categories(records)
        periods = distinct_periods(records)
        return _success({
            "categories": categories,
            "periods": periods,
            "default_category": default_category_selection(categories),
            "default_period": default_period_selection(periods, _today()),
        })

    @app.get("/api/charts/monthly")
    def monthly_chart():
        records = expense_service.list()
        period_range = request.args.getlist("period")
        if not period_range:
            period_range = year_periods(_year())
        categories = request.args.getlist("category") or distinct_categories(records)
        rows = monthly_category_totals(records, period_range, categories)
        return _success({
            "categories": categories,
            "items": [row.to_dict() for row in rows],
        })

    @app.get("/api/charts/daily")
    def daily_chart():
        category = request.args.get("category")
        period = request.args.get("period")
        if not category or not period:
            raise ValidationError("category and period query parameters are required")
        days = daily_totals(expense_service.list(), category, period)
        return _success({
            "category": category,
            "period": period,
            "items": [day.to_dict() for day in days],
        })

    @app.get("/api/export.csv")
    def export_expenses():
        content = export_csv(expense_service.list())
        filename = export_filename(_today())
        return Response(
            content,
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return app
