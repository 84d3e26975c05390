# Overview: Flask API routes for goods receiving and purchase documents.

# backend/stockledger/routes/purchases.py
from flask import Blueprint, current_app, jsonify, request

from ..context import current_context
from ..errors import LedgerError
from ..services import purchase_service, receiving_service
from ..validation import optional_date


purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/purchases")


@purchases_bp.post("/receive")
def receive_goods_route():
    """
    Receive goods: stock intake, cost write-back, purchase record.

    Body:
    {
        "items": [{"sku": "SUGAR-01", "quantity": 2, "unit": "Sack", "unit_cost": 600000}],
        "supplier_name": "...", "receipt_file": "..."
    }
    unit_cost is per unit of purchase.
    """
    payload = request.get_json(silent=True) or {}
    try:
        result = receiving_service.receive_goods(
            current_context(),
            payload.get("items"),
            supplier_name=payload.get("supplier_name"),
            receipt_file=payload.get("receipt_file"),
        )
        return jsonify(result.to_dict()), 201
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to receive goods")
        return jsonify({"error": "Internal server error"}), 500


@purchases_bp.get("")
def list_purchases_route():
    try:
        purchases = purchase_service.list_purchases(
            current_context(),
            start=optional_date(request.args.get("start"), "start"),
            end=optional_date(request.args.get("end"), "end"),
        )
        return jsonify({"items": [p.to_dict() for p in purchases], "count": len(purchases)}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list purchases")
        return jsonify({"error": "Internal server error"}), 500


@purchases_bp.get("/<purchase_number>")
def get_purchase_route(purchase_number: str):
    try:
        purchase = purchase_service.get_purchase(current_context(), purchase_number)
        return jsonify({"purchase": purchase.to_dict()}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to get purchase")
        return jsonify({"error": "Internal server error"}), 500
