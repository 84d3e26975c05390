# Overview: Sale documents; validates and deducts stock, numbers and persists the order atomically.

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from ..constants import (
    DEFAULT_PAYMENT_METHOD,
    DocumentType,
    ORDER_STATUS_COMPLETED,
    SOURCE_POS,
    SOURCE_STOCK_ADJUSTMENT,
    UNIT_BULK,
)
from ..context import LedgerContext
from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Order, OrderLine, Product
from ..validation import normalize_tier, parse_line_items
from .concurrency import run_for
from .pricing_service import resolve_price
from .sequence_service import apply_allocation, plan_allocation
from .stock_service import read_stock_record, write_stock
from .unit_service import (
    price_per_bulk_unit,
    resolve_unit,
    round_half_up,
    round_quantity,
    to_base,
    unit_label,
)

"""
Order Invariants (authoritative)

- create_order is ONE transaction: number allocation, stock deductions and
  the order record land together or not at all.
- Read-then-write: every Product, StockRecord and the day's Counter are read
  and every check is made before the first write is staged.
- Sufficiency is checked per SKU on the AGGREGATE base quantity of all lines
  for that SKU (5 kg + 1 sack of the same sugar = 55 kg).
- buy_price on each line is the product's cost at sale time, per unit of
  sale. It is a snapshot; reports never recompute it from the live product.
- Orders are immutable; update_customer_name is the only mutation.
"""

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerInfo:
    customer_name: str = ""
    customer_type: str = "regular"
    payment_method: str = DEFAULT_PAYMENT_METHOD

    @classmethod
    def from_dict(cls, data: dict | None) -> "CustomerInfo":
        data = data or {}
        return cls(
            customer_name=str(data.get("customer_name") or "").strip(),
            customer_type=normalize_tier(data.get("customer_type")),
            payment_method=str(data.get("payment_method") or DEFAULT_PAYMENT_METHOD).strip(),
        )


def _read_products(ctx: LedgerContext, skus: set[str]) -> dict[str, Product]:
    with db.session.no_autoflush:
        rows = (
            db.session.query(Product)
            .filter(Product.namespace == ctx.namespace, Product.sku.in_(sorted(skus)))
            .all()
        )
    return {p.sku: p for p in rows}


def _price_lines(items, products: dict[str, Product], tier: str) -> list[dict]:
    """Compute base quantity, prices and totals for each validated line."""
    priced = []
    for line_no, item in enumerate(items, start=1):
        product = products.get(item.sku)
        if product is None:
            raise NotFoundError(f"Product not found: {item.sku}", details={"sku": item.sku})

        unit = resolve_unit(product, item.unit)
        bulk = unit == UNIT_BULK
        base_price = resolve_price(product, tier)
        cost = product.cost_price or 0
        if bulk:
            unit_price = price_per_bulk_unit(base_price, product)
            buy_price = price_per_bulk_unit(cost, product)
        else:
            unit_price = base_price
            buy_price = cost

        priced.append({
            "line_no": line_no,
            "sku": item.sku,
            "product_name": item.product_name or product.name,
            "quantity": item.quantity,
            "unit": unit,
            "unit_name": unit_label(product, unit),
            "base_quantity": to_base(item.quantity, product, unit),
            "unit_price": unit_price,
            "line_total": round_half_up(item.quantity * unit_price),
            "buy_price": buy_price,
        })
    return priced


def _new_order(ctx, allocation, priced: list[dict], customer: CustomerInfo, source: str) -> Order:
    order = Order(
        namespace=ctx.namespace,
        order_number=allocation.document_id,
        order_date=allocation.day,
        status=ORDER_STATUS_COMPLETED,
        source=source,
        customer_name=customer.customer_name,
        customer_type=customer.customer_type,
        payment_method=customer.payment_method,
        grand_total=sum(line["line_total"] for line in priced),
        lines=[OrderLine(**line) for line in priced],
    )
    db.session.add(order)
    return order


def create_order(ctx: LedgerContext, items, customer: CustomerInfo | None = None) -> Order:
    """
    Place a sale: validate stock, deduct it, and persist a numbered order.

    items are dicts or LineItem values with sku, quantity and unit ("base",
    the product's base unit, "bulk" or its bulk unit name; any other unit is
    a ValidationError). Raises ValidationError, NotFoundError or
    InsufficientStockError with nothing written.
    """
    lines = parse_line_items(items)
    customer = customer or CustomerInfo()
    skus = {line.sku for line in lines}

    def _op():
        # Reads
        allocation = plan_allocation(ctx, DocumentType.ORDERS)
        products = _read_products(ctx, skus)
        records = {sku: read_stock_record(ctx, sku) for sku in sorted(skus)}

        # Checks
        priced = _price_lines(lines, products, customer.customer_type)

        required: dict[str, float] = {}
        for line in priced:
            required[line["sku"]] = round_quantity(required.get(line["sku"], 0) + line["base_quantity"])

        for sku, qty in required.items():
            record = records[sku]
            if record is None:
                raise NotFoundError(f"No stock record for {sku}", details={"sku": sku})
            if round_quantity(record.current_stock_base - qty) < 0:
                raise InsufficientStockError(sku, qty, record.current_stock_base)

        # Writes
        for sku, qty in required.items():
            record = records[sku]
            write_stock(ctx, record, sku, record.current_stock_base - qty)

        order = _new_order(ctx, allocation, priced, customer, SOURCE_POS)
        apply_allocation(ctx, allocation)
        return order

    order = run_for(ctx, _op)
    log.info("Order %s created (%d lines, total %d)", order.order_number, len(lines), order.grand_total)
    return order


def create_order_record(
    ctx: LedgerContext,
    items,
    customer: CustomerInfo | None = None,
    order_date: date | None = None,
) -> Order:
    """
    Persist a numbered sale document WITHOUT touching stock.

    Used when a sale is recorded after the fact by a manual stock count; the
    caller sets stock itself. order_date picks the business day whose
    counter numbers the document (defaults to today).
    """
    lines = parse_line_items(items)
    customer = customer or CustomerInfo()
    skus = {line.sku for line in lines}

    def _op():
        allocation = plan_allocation(ctx, DocumentType.ORDERS, order_date)
        products = _read_products(ctx, skus)
        priced = _price_lines(lines, products, customer.customer_type)

        order = _new_order(ctx, allocation, priced, customer, SOURCE_STOCK_ADJUSTMENT)
        apply_allocation(ctx, allocation)
        return order

    order = run_for(ctx, _op)
    log.info("Order record %s created without stock movement", order.order_number)
    return order


def get_order(ctx: LedgerContext, order_number: str) -> Order:
    order = (
        db.session.query(Order)
        .filter_by(namespace=ctx.namespace, order_number=order_number)
        .first()
    )
    if order is None:
        raise NotFoundError(f"Order not found: {order_number}", details={"order_number": order_number})
    return order


def list_orders(ctx: LedgerContext, start: date | None = None, end: date | None = None) -> list[Order]:
    """Orders newest first; start/end bound order_date inclusively."""
    q = db.session.query(Order).filter(Order.namespace == ctx.namespace)
    if start is not None:
        q = q.filter(Order.order_date >= start)
    if end is not None:
        q = q.filter(Order.order_date <= end)
    return q.order_by(Order.created_at.desc(), Order.id.desc()).all()


def update_customer_name(ctx: LedgerContext, order_number: str, name) -> Order:
    """The one permitted change to a completed order (receipt personalization)."""
    if name is None:
        raise ValidationError("customer_name is required")
    name = str(name).strip()
    if len(name) > 255:
        raise ValidationError("customer_name exceeds max length 255")

    def _op():
        order = get_order(ctx, order_number)
        order.customer_name = name
        return order

    return run_for(ctx, _op)
