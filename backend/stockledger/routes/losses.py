# Overview: Flask API routes for stock loss records (read-only; losses are recorded via stock counts).

# backend/stockledger/routes/losses.py
from flask import Blueprint, current_app, jsonify, request

from ..context import current_context
from ..errors import LedgerError
from ..services import stock_loss_service


losses_bp = Blueprint("losses", __name__, url_prefix="/api/stock-losses")


@losses_bp.get("")
def list_losses_route():
    try:
        losses = stock_loss_service.list_losses(current_context(), sku=request.args.get("sku"))
        return jsonify({"items": [l.to_dict() for l in losses], "count": len(losses)}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list stock losses")
        return jsonify({"error": "Internal server error"}), 500
