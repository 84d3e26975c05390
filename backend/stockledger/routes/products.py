# Overview: Flask API routes for the product catalog; parses input and returns JSON responses.

# backend/stockledger/routes/products.py
from flask import Blueprint, current_app, jsonify, request

from ..context import current_context
from ..errors import LedgerError
from ..services import catalog_service


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products_route():
    """Products with current stock; optional ?category= filter."""
    try:
        items = catalog_service.list_products(current_context(), category=request.args.get("category"))
        return jsonify({"items": items, "count": len(items)}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.post("")
def create_product_route():
    """
    Create a product.

    Body: product fields (sku, name, base_unit required) plus an optional
    initial_stock in base units.
    """
    payload = dict(request.get_json(silent=True) or {})
    initial_stock = payload.pop("initial_stock", None)
    try:
        product = catalog_service.create_product(current_context(), payload, initial_stock=initial_stock)
        return jsonify({"product": product.to_dict()}), 201
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<sku>")
def get_product_route(sku: str):
    from ..services.stock_service import get_stock

    try:
        ctx = current_context()
        product = catalog_service.get_product(ctx, sku)
        return jsonify({"product": catalog_service.product_with_stock(product, get_stock(ctx, sku))}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to get product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.patch("/<sku>")
def update_product_route(sku: str):
    """Partial update; the SKU itself is changed through /rename."""
    payload = request.get_json(silent=True) or {}
    try:
        product = catalog_service.update_product(current_context(), sku, payload)
        return jsonify({"product": product.to_dict()}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.post("/<sku>/rename")
def rename_product_route(sku: str):
    payload = request.get_json(silent=True) or {}
    try:
        product = catalog_service.rename_sku(current_context(), sku, payload.get("new_sku"))
        return jsonify({"product": product.to_dict()}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to rename product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<sku>")
def delete_product_route(sku: str):
    try:
        catalog_service.delete_product(current_context(), sku)
        return jsonify({"deleted": sku}), 200
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500
