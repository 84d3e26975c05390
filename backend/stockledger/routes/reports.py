# Overview: Flask API routes for reports; parses query parameters and returns JSON responses.

# backend/stockledger/routes/reports.py
from flask import Blueprint, current_app, jsonify, request

from ..context import current_context
from ..errors import LedgerError
from ..services import reporting_service
from ..validation import optional_date


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _range():
    return (
        optional_date(request.args.get("start"), "start"),
        optional_date(request.args.get("end"), "end"),
    )


@reports_bp.get("/history")
def history_report():
    """Sales and purchases merged, newest first, plus per-day totals."""
    try:
        start, end = _range()
        ctx = current_context()
        rows = reporting_service.transaction_history(ctx, start, end)
        return jsonify({
            "rows": rows,
            "count": len(rows),
            "daily": reporting_service.daily_totals(ctx, start, end),
        }), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to build history report")
        return jsonify({"error": "Internal server error"}), 500


@reports_bp.get("/profit")
def profit_report():
    try:
        start, end = _range()
        return jsonify(reporting_service.profit_summary(current_context(), start, end)), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to build profit report")
        return jsonify({"error": "Internal server error"}), 500
