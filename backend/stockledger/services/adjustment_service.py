# Overview: Manual stock count; sets the counted value, then explains the difference with a document.

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from ..constants import DecreaseKind, SOURCE_STOCK_ADJUSTMENT, UNIT_BASE
from ..context import LedgerContext
from ..errors import LedgerError, ValidationError
from ..validation import require_loss_reason, require_money, require_number, require_sku
from .catalog_service import get_product
from .order_service import CustomerInfo, create_order_record
from .purchase_service import create_purchase
from .stock_loss_service import record_loss
from .stock_service import get_stock, set_stock
from .unit_service import round_quantity

log = logging.getLogger(__name__)


@dataclass
class StockCountResult:
    sku: str
    previous_stock: float
    current_stock: float
    document_type: str | None = None
    document: object | None = None

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "previous_stock": self.previous_stock,
            "current_stock": self.current_stock,
            "document_type": self.document_type,
            "document": self.document.to_dict() if self.document is not None else None,
        }


def apply_stock_count(
    ctx: LedgerContext,
    sku,
    new_stock,
    *,
    decrease_kind: str | None = None,
    loss_reason: str | None = None,
    customer: CustomerInfo | None = None,
    order_date: date | None = None,
    unit_cost=None,
    supplier_name: str | None = None,
) -> StockCountResult:
    """
    Set sku to a counted base-unit value, then record why it changed.

    - decrease, decrease_kind="sold": an order record at the customer's tier
      price (dated order_date when given)
    - decrease, decrease_kind="lost": a stock loss with loss_reason
    - increase: a purchase at unit_cost per base unit (catalog cost when
      omitted)
    - no change: no document

    Every input is checked before stock is touched. If the document cannot be
    written after the count is set, the failure is logged with both values
    and re-raised.
    """
    sku = require_sku(sku)
    new_stock = require_number(new_stock, "new_stock")
    if unit_cost is not None:
        unit_cost = require_money(unit_cost, "unit_cost")

    product = get_product(ctx, sku)
    previous = get_stock(ctx, sku)
    diff = round_quantity(new_stock - previous)

    kind = None
    if diff < 0:
        kind = str(decrease_kind or "").strip().lower()
        if kind not in (DecreaseKind.SOLD.value, DecreaseKind.LOST.value):
            raise ValidationError(
                "decrease_kind must be one of: sold, lost",
                details={"sku": sku, "previous_stock": previous, "new_stock": new_stock},
            )
        if kind == DecreaseKind.LOST.value:
            loss_reason = require_loss_reason(loss_reason)

    current = set_stock(ctx, sku, new_stock)

    document_type = None
    document = None
    try:
        if kind == DecreaseKind.SOLD.value:
            # The count above already applied the stock; the record must not
            # deduct again.
            document_type = "order"
            document = create_order_record(
                ctx,
                [{"sku": sku, "quantity": -diff, "unit": UNIT_BASE}],
                customer=customer,
                order_date=order_date,
            )
        elif kind == DecreaseKind.LOST.value:
            document_type = "stock_loss"
            document = record_loss(ctx, sku, -diff, loss_reason)
        elif diff > 0:
            document_type = "purchase"
            cost = unit_cost if unit_cost is not None else (product.cost_price or 0)
            document = create_purchase(
                ctx,
                [{
                    "sku": sku,
                    "product_name": product.name,
                    "quantity": diff,
                    "unit": UNIT_BASE,
                    "unit_cost": cost,
                }],
                supplier_name=supplier_name,
                source=SOURCE_STOCK_ADJUSTMENT,
            )
    except LedgerError:
        log.error(
            "Stock count %s set %g -> %g but the %s document was not recorded",
            sku, previous, current, document_type,
        )
        raise

    log.info("Stock count %s: %g -> %g (%s)", sku, previous, current, document_type or "no change")
    return StockCountResult(
        sku=sku,
        previous_stock=previous,
        current_stock=current,
        document_type=document_type,
        document=document,
    )
