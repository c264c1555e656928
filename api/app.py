"""Flask REST API exposing the household ledger services."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from ledger_core.backup import OVERWRITE_PROMPT, backup_filename
from ledger_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from ledger_core.reports import monthly_report_filename, yearly_report_filename
from ledger_core.services import LedgerService, LedgerStore
from ledger_core.storage import JSONStorage


def create_app(data_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("KAKEIBO_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("KAKEIBO_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    storage = JSONStorage(Path(data_dir or os.getenv("KAKEIBO_DATA_DIR", "data")))
    store = LedgerStore(storage)
    ledger = LedgerService(store)

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _attachment(content: str, filename: str, mimetype: str) -> Response:
        response = Response(content, content_type=f"{mimetype}; charset=utf-8")
        response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response

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

    def _json_body() -> Any:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError("Malformed JSON body")
        return data

    def _period_args() -> Dict[str, Optional[str]]:
        return {
            "month": request.args.get("month") or None,
            "year": request.args.get("year") or None,
        }

    @app.get("/transactions")
    def list_transactions():
        period = _period_args()
        transactions = ledger.transactions(**period)
        totals = ledger.totals(**period)
        return _success({
            "items": [transaction.to_dict() for transaction in transactions],
            "totals": totals.to_dict(),
        })

    @app.post("/transactions")
    def create_transactions():
        payload = _json_body()
        if isinstance(payload, list):
            if not all(isinstance(item, dict) for item in payload):
                raise ValidationError("Every candidate must be a JSON object")
            created = store.add_many(payload)
            return _success({"items": [transaction.to_dict() for transaction in created]}, 201)
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be an object or an array of objects")
        transaction = store.add(payload)
        return _success(transaction.to_dict(), 201)

    @app.get("/transactions/<transaction_id>")
    def get_transaction(transaction_id: str):
        transaction = store.get(transaction_id)
        return _success(transaction.to_dict())

    @app.put("/transactions/<transaction_id>")
    def update_transaction(transaction_id: str):
        payload = _json_body()
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        transaction = store.edit(transaction_id, payload)
        if transaction is None:
            return _success({}, 204)
        return _success(transaction.to_dict())

    @app.delete("/transactions/<transaction_id>")
    def delete_transaction(transaction_id: str):
        store.delete(transaction_id)
        return _success({}, 204)

    @app.get("/summary")
    def summary():
        month = request.args.get("month")
        if not month:
            raise ValidationError("month is required")
        return _success(ledger.summary(month, year=request.args.get("year") or None).to_dict())

    @app.get("/series")
    def series():
        month = request.args.get("month")
        if not month:
            raise ValidationError("month is required")
        points, axis = ledger.series(month)
        return _success({
            "points": [point.to_dict() for point in points],
            "axis": axis.to_dict() if axis else None,
        })

    @app.get("/reports/monthly/<month>")
    def monthly_report(month: str):
        content = ledger.monthly_report(month)
        return _attachment(content, monthly_report_filename(month), "text/plain")

    @app.get("/reports/yearly/<year>")
    def yearly_report(year: str):
        content = ledger.yearly_report(year)
        return _attachment(content, yearly_report_filename(year), "text/plain")

    @app.get("/backup")
    def export_backup():
        return _attachment(ledger.export_backup(), backup_filename(), "application/json")

    @app.post("/backup")
    def restore_backup():
        text = request.get_data(as_text=True)
        confirmed = request.args.get("confirm", "").lower() in {"1", "true", "yes"}
        result = ledger.restore_backup(text, confirm=lambda: confirmed)
        if result.ok:
            return _success({"status": result.status, "message": result.message, "restored": result.restored})
        if result.status == result.CANCELLED:
            return _success({"status": result.status, "message": OVERWRITE_PROMPT}, 409)
        app.logger.warning("Backup restore failed: %s", result.message)
        return _success({"status": result.status, "message": result.message}, 400)

    return app
