# Overview: Flask API routes for sale orders; parses input and returns JSON responses.

# backend/stockledger/routes/orders.py
from flask import Blueprint, current_app, jsonify, request

from ..context import current_context
from ..errors import LedgerError
from ..services import order_service
from ..services.order_service import CustomerInfo
from ..validation import optional_date


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.post("")
def create_order_route():
    """
    Place an order (deducts stock).

    Body:
    {
        "items": [{"sku": "SUGAR-01", "quantity": 5, "unit": "base"},
                  {"sku": "SUGAR-01", "quantity": 1, "unit": "Sack"}],
        "customer_name": "", "customer_type": "regular", "payment_method": "Cash"
    }

    InsufficientStock responds 409 with details {sku, requested, available}.
    """
    payload = request.get_json(silent=True) or {}
    try:
        order = order_service.create_order(
            current_context(),
            payload.get("items"),
            customer=CustomerInfo.from_dict(payload),
        )
        return jsonify({"order": order.to_dict()}), 201
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("")
def list_orders_route():
    """Optional ?start=YYYY-MM-DD&end=YYYY-MM-DD (inclusive, by order date)."""
    try:
        orders = order_service.list_orders(
            current_context(),
            start=optional_date(request.args.get("start"), "start"),
            end=optional_date(request.args.get("end"), "end"),
        )
        return jsonify({"items": [o.to_dict() for o in orders], "count": len(orders)}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<order_number>")
def get_order_route(order_number: str):
    try:
        order = order_service.get_order(current_context(), order_number)
        return jsonify({"order": order.to_dict()}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to get order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.patch("/<order_number>/customer")
def update_customer_route(order_number: str):
    """Body: {"customer_name": "..."}; the only edit allowed on an order."""
    payload = request.get_json(silent=True) or {}
    try:
        order = order_service.update_customer_name(
            current_context(), order_number, payload.get("customer_name")
        )
        return jsonify({"order": order.to_dict()}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update order customer")
        return jsonify({"error": "Internal server error"}), 500
