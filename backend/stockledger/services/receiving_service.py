# Overview: Goods intake; increments stock, writes back unit cost, then records the purchase.

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..constants import UNIT_BULK
from ..context import LedgerContext
from ..errors import NotFoundError
from ..extensions import db
from ..models import Product, Purchase
from ..validation import LineItem, parse_line_items
from .catalog_service import update_cost_price
from .purchase_service import create_purchase
from .stock_service import increment_stock
from .unit_service import cost_per_base_unit, resolve_unit, to_base, unit_label

"""
Receiving flow (per line, in order)

1. base quantity = to_base(quantity, unit)
2. stock_service.increment_stock(sku, base quantity)
3. cost per base unit = unit_cost / conversion for bulk lines, else unit_cost,
   written back to Product.cost_price
4. after all lines: purchase_service.create_purchase(...)

Each step is its own transaction. Purchase recording is kept apart from
stock intake so that the stock-count workflow shares the same intake path.
Every product and line unit is resolved before the first step runs, so an
unknown SKU or unit fails the whole request with nothing written.
"""

log = logging.getLogger(__name__)


@dataclass
class ReceiveResult:
    purchase: Purchase
    stock: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"purchase": self.purchase.to_dict(), "stock": dict(self.stock)}


def _load_products(ctx: LedgerContext, lines: list[LineItem]) -> dict[str, Product]:
    products = {}
    for line in lines:
        if line.sku in products:
            continue
        product = (
            db.session.query(Product)
            .filter_by(namespace=ctx.namespace, sku=line.sku)
            .first()
        )
        if product is None:
            raise NotFoundError(f"Product not found: {line.sku}", details={"sku": line.sku})
        products[line.sku] = product
    return products


def receive_goods(
    ctx: LedgerContext,
    items,
    supplier_name: str | None = None,
    receipt_file: str | None = None,
) -> ReceiveResult:
    """
    Receive a delivery. unit_cost on each line is per unit of purchase
    (per sack for a bulk line).
    """
    lines = parse_line_items(items, require_cost=True)
    products = _load_products(ctx, lines)
    units = [resolve_unit(products[line.sku], line.unit) for line in lines]

    stock: dict[str, float] = {}
    purchase_lines = []
    for line, unit in zip(lines, units):
        product = products[line.sku]
        base_qty = to_base(line.quantity, product, unit)
        stock[line.sku] = increment_stock(ctx, line.sku, base_qty)

        if unit == UNIT_BULK:
            base_cost = cost_per_base_unit(line.unit_cost, product)
        else:
            base_cost = line.unit_cost
        update_cost_price(ctx, line.sku, base_cost)

        purchase_lines.append({
            "sku": line.sku,
            "product_name": line.product_name or product.name,
            "quantity": line.quantity,
            "unit": unit_label(product, unit),
            "unit_cost": line.unit_cost,
        })

    purchase = create_purchase(
        ctx,
        purchase_lines,
        supplier_name=supplier_name,
        receipt_file=receipt_file,
    )
    log.info("Received %d lines under %s", len(lines), purchase.purchase_number)
    return ReceiveResult(purchase=purchase, stock=stock)
