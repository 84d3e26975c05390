# Overview: Immutable records of non-sale stock decreases.

from __future__ import annotations

import logging
from datetime import datetime

from ..context import LedgerContext
from ..errors import NotFoundError
from ..extensions import db
from ..models import Product, StockLoss
from ..validation import require_loss_reason, require_number, require_sku
from .concurrency import run_for
from .unit_service import round_half_up

log = logging.getLogger(__name__)


def loss_number(sku: str, at: datetime) -> str:
    return f"LOSS-{at.strftime('%Y-%m-%d-%H%M%S')}-{sku}"


def record_loss(ctx: LedgerContext, sku, quantity, reason, now: datetime | None = None) -> StockLoss:
    """
    Record quantity base units of sku as lost for reason.

    The product's current cost_price is captured and estimated_loss is
    quantity * cost_price. Stock itself is not changed here. Two losses for
    the same SKU within one second share a number; the second surfaces as a
    ConflictError.
    """
    sku = require_sku(sku)
    quantity = require_number(quantity, "quantity", allow_zero=False)
    reason = require_loss_reason(reason)

    def _op():
        product = (
            db.session.query(Product)
            .filter_by(namespace=ctx.namespace, sku=sku)
            .first()
        )
        if product is None:
            raise NotFoundError(f"Product not found: {sku}", details={"sku": sku})

        cost = product.cost_price or 0
        loss = StockLoss(
            namespace=ctx.namespace,
            loss_number=loss_number(sku, now or ctx.now()),
            sku=sku,
            product_name=product.name,
            quantity=quantity,
            reason=reason,
            cost_price=cost,
            estimated_loss=round_half_up(quantity * cost),
        )
        db.session.add(loss)
        return loss

    loss = run_for(ctx, _op)
    log.info("Stock loss %s: %g of %s (%s)", loss.loss_number, quantity, sku, reason)
    return loss


def list_losses(ctx: LedgerContext, sku: str | None = None) -> list[StockLoss]:
    q = db.session.query(StockLoss).filter(StockLoss.namespace == ctx.namespace)
    if sku:
        q = q.filter(StockLoss.sku == sku)
    return q.order_by(StockLoss.created_at.desc(), StockLoss.id.desc()).all()
