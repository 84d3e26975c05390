# Overview: Product catalog maintenance; products are the reference data the ledger prices and converts against.

from __future__ import annotations

import logging

from ..context import LedgerContext
from ..errors import ConflictError, NotFoundError
from ..extensions import db
from ..models import Product, StockRecord
from ..validation import (
    ProductPayloadPolicy,
    clean_product_payload,
    require_money,
    require_number,
    require_sku,
)
from .concurrency import read_for_update, run_for
from .stock_service import read_stock_record, write_stock

"""
Catalog notes

- SKU is the user-facing key and is unique per namespace. It is not editable
  through update_product; rename_sku moves a product and its stock record to
  a new SKU in one transaction.
- Deleting a product deletes its stock record in the same transaction.
- Past orders, purchases and losses keep their SKU and name snapshots and
  are never rewritten by catalog changes.
"""

log = logging.getLogger(__name__)

PRODUCT_FIELDS = frozenset({
    "sku",
    "name",
    "category",
    "base_unit",
    "bulk_unit_name",
    "bulk_unit_conversion",
    "cost_price",
    "price_regular",
    "price_premium",
    "price_star",
})

PRODUCT_CREATE_POLICY = ProductPayloadPolicy(
    writable_fields=PRODUCT_FIELDS,
    required_on_create=frozenset({"sku", "name", "base_unit"}),
)

PRODUCT_UPDATE_POLICY = ProductPayloadPolicy(
    writable_fields=PRODUCT_FIELDS - {"sku"},
)


def _find_product(ctx: LedgerContext, sku: str, *, for_update: bool = False) -> Product | None:
    q = db.session.query(Product).filter_by(namespace=ctx.namespace, sku=sku)
    if for_update:
        q = read_for_update(q)
    with db.session.no_autoflush:
        return q.first()


def product_with_stock(product: Product, stock: float) -> dict:
    data = product.to_dict()
    data["current_stock_base"] = stock
    return data


def get_product(ctx: LedgerContext, sku: str) -> Product:
    product = _find_product(ctx, sku)
    if product is None:
        raise NotFoundError(f"Product not found: {sku}", details={"sku": sku})
    return product


def list_products(ctx: LedgerContext, category: str | None = None) -> list[dict]:
    """Products by name, each with its current base-unit stock (0 when no record)."""
    q = (
        db.session.query(Product, StockRecord.current_stock_base)
        .outerjoin(
            StockRecord,
            (StockRecord.namespace == Product.namespace) & (StockRecord.sku == Product.sku),
        )
        .filter(Product.namespace == ctx.namespace)
    )
    if category:
        q = q.filter(Product.category == category)
    rows = q.order_by(Product.name.asc(), Product.id.asc()).all()
    return [product_with_stock(product, stock or 0) for product, stock in rows]


def create_product(ctx: LedgerContext, payload: dict, initial_stock=None) -> Product:
    """
    Create a product from an untrusted payload.

    initial_stock (base units), when given, creates the stock record in the
    same transaction.
    """
    patch = clean_product_payload(payload, PRODUCT_CREATE_POLICY, partial=False)
    patch["sku"] = require_sku(patch["sku"])
    if initial_stock is not None:
        initial_stock = require_number(initial_stock, "initial_stock")

    def _op():
        if _find_product(ctx, patch["sku"]) is not None:
            raise ConflictError(f"SKU already exists: {patch['sku']}", details={"sku": patch["sku"]})

        product = Product(namespace=ctx.namespace, **patch)
        db.session.add(product)
        if initial_stock is not None:
            write_stock(ctx, read_stock_record(ctx, product.sku), product.sku, initial_stock)
        return product

    product = run_for(ctx, _op)
    log.info("Product %s created", product.sku)
    return product


def update_product(ctx: LedgerContext, sku: str, payload: dict) -> Product:
    patch = clean_product_payload(payload, PRODUCT_UPDATE_POLICY, partial=True)

    def _op():
        product = _find_product(ctx, sku, for_update=True)
        if product is None:
            raise NotFoundError(f"Product not found: {sku}", details={"sku": sku})
        for key, value in patch.items():
            setattr(product, key, value)
        return product

    return run_for(ctx, _op)


def update_cost_price(ctx: LedgerContext, sku: str, cost_price) -> Product:
    """Write back the per-base-unit cost recorded by a purchase."""
    cost_price = require_money(cost_price, "cost_price")

    def _op():
        product = _find_product(ctx, sku, for_update=True)
        if product is None:
            raise NotFoundError(f"Product not found: {sku}", details={"sku": sku})
        product.cost_price = cost_price
        return product

    return run_for(ctx, _op)


def rename_sku(ctx: LedgerContext, old_sku: str, new_sku) -> Product:
    """Move a product and its stock record to new_sku atomically."""
    new_sku = require_sku(new_sku, "new_sku")

    def _op():
        product = _find_product(ctx, old_sku, for_update=True)
        if product is None:
            raise NotFoundError(f"Product not found: {old_sku}", details={"sku": old_sku})
        if new_sku == old_sku:
            return product
        if _find_product(ctx, new_sku) is not None:
            raise ConflictError(f"SKU already exists: {new_sku}", details={"sku": new_sku})

        record = read_stock_record(ctx, old_sku)
        if read_stock_record(ctx, new_sku) is not None:
            raise ConflictError(f"Stock record already exists for {new_sku}", details={"sku": new_sku})

        product.sku = new_sku
        if record is not None:
            record.sku = new_sku
        return product

    product = run_for(ctx, _op)
    log.info("Renamed SKU %s -> %s", old_sku, new_sku)
    return product


def delete_product(ctx: LedgerContext, sku: str) -> None:
    def _op():
        product = _find_product(ctx, sku, for_update=True)
        if product is None:
            raise NotFoundError(f"Product not found: {sku}", details={"sku": sku})
        record = read_stock_record(ctx, sku)
        if record is not None:
            db.session.delete(record)
        db.session.delete(product)

    run_for(ctx, _op)
    log.info("Product %s deleted", sku)
