# Overview: Goods-received documents; numbers and persists purchases without moving stock.

from __future__ import annotations

import logging
from datetime import date

from ..constants import DocumentType, SOURCE_RECEIVING
from ..context import LedgerContext
from ..errors import NotFoundError
from ..extensions import db
from ..models import Purchase, PurchaseLine
from ..validation import parse_line_items
from .concurrency import run_for
from .sequence_service import apply_allocation, plan_allocation
from .unit_service import round_half_up

log = logging.getLogger(__name__)


def create_purchase(
    ctx: LedgerContext,
    items,
    supplier_name: str | None = None,
    receipt_file: str | None = None,
    source: str = SOURCE_RECEIVING,
    purchase_date: date | None = None,
) -> Purchase:
    """
    Record a purchase under the next PUR- number.

    Stock intake and cost write-back are NOT done here; receiving_service
    and adjustment_service call stock_service themselves.
    """
    lines = parse_line_items(items, require_cost=True)
    supplier_name = (supplier_name or "").strip() or None
    receipt_file = (receipt_file or "").strip() or None

    def _op():
        allocation = plan_allocation(ctx, DocumentType.PURCHASES, purchase_date)

        purchase_lines = [
            PurchaseLine(
                line_no=line_no,
                sku=item.sku,
                product_name=item.product_name,
                quantity=item.quantity,
                unit=item.unit,
                unit_cost=item.unit_cost,
                line_total=round_half_up(item.quantity * item.unit_cost),
            )
            for line_no, item in enumerate(lines, start=1)
        ]
        purchase = Purchase(
            namespace=ctx.namespace,
            purchase_number=allocation.document_id,
            purchase_date=allocation.day,
            source=source,
            supplier_name=supplier_name,
            receipt_file=receipt_file,
            grand_total=sum(line.line_total for line in purchase_lines),
            lines=purchase_lines,
        )
        db.session.add(purchase)
        apply_allocation(ctx, allocation)
        return purchase

    purchase = run_for(ctx, _op)
    log.info("Purchase %s recorded (%d lines)", purchase.purchase_number, len(lines))
    return purchase


def get_purchase(ctx: LedgerContext, purchase_number: str) -> Purchase:
    purchase = (
        db.session.query(Purchase)
        .filter_by(namespace=ctx.namespace, purchase_number=purchase_number)
        .first()
    )
    if purchase is None:
        raise NotFoundError(
            f"Purchase not found: {purchase_number}",
            details={"purchase_number": purchase_number},
        )
    return purchase


def list_purchases(ctx: LedgerContext, start: date | None = None, end: date | None = None) -> list[Purchase]:
    q = db.session.query(Purchase).filter(Purchase.namespace == ctx.namespace)
    if start is not None:
        q = q.filter(Purchase.purchase_date >= start)
    if end is not None:
        q = q.filter(Purchase.purchase_date <= end)
    return q.order_by(Purchase.created_at.desc(), Purchase.id.desc()).all()
