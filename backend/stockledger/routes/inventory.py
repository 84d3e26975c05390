# Overview: Flask API routes for stock levels, manual counts, and repacking.

# backend/stockledger/routes/inventory.py
"""
Inventory routes.

All quantities are BASE units. Untrusted numbers are validated by the
services before any transaction starts.
"""
from flask import Blueprint, current_app, jsonify, request

from ..context import current_context
from ..errors import LedgerError
from ..services import adjustment_service, stock_service
from ..services.order_service import CustomerInfo
from ..validation import optional_date


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
def list_stock_route():
    try:
        records = stock_service.list_stock(current_context())
        return jsonify({"items": [r.to_dict() for r in records], "count": len(records)}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list stock")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.get("/<sku>")
def get_stock_route(sku: str):
    try:
        return jsonify({"sku": sku, "current_stock_base": stock_service.get_stock(current_context(), sku)}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to get stock")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.post("/<sku>/count")
def stock_count_route(sku: str):
    """
    Apply a manual stock count.

    Body:
    {
        "new_stock": 12,
        "decrease_kind": "sold" | "lost",     (required when stock goes down)
        "loss_reason": "expired",             (for "lost")
        "customer_name": "", "customer_type": "regular",   (for "sold")
        "order_date": "2026-10-17",           (optional, for "sold")
        "unit_cost": 14000,                   (optional, for increases)
        "supplier_name": "..."                (optional, for increases)
    }
    """
    payload = request.get_json(silent=True) or {}
    try:
        result = adjustment_service.apply_stock_count(
            current_context(),
            sku,
            payload.get("new_stock"),
            decrease_kind=payload.get("decrease_kind"),
            loss_reason=payload.get("loss_reason"),
            customer=CustomerInfo.from_dict(payload),
            order_date=optional_date(payload.get("order_date"), "order_date"),
            unit_cost=payload.get("unit_cost"),
            supplier_name=payload.get("supplier_name"),
        )
        return jsonify(result.to_dict()), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to apply stock count")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.post("/repack")
def repack_route():
    """Body: {"from_sku", "to_sku", "units_to_open", "conversion_rate"}"""
    payload = request.get_json(silent=True) or {}
    try:
        result = stock_service.repack(
            current_context(),
            payload.get("from_sku"),
            payload.get("to_sku"),
            payload.get("units_to_open"),
            payload.get("conversion_rate"),
        )
        return jsonify(result), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to repack stock")
        return jsonify({"error": "Internal server error"}), 500
