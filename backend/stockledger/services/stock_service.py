# Overview: Authoritative base-unit stock per SKU, including repacking between SKUs.

from __future__ import annotations

import logging
import math

from ..context import LedgerContext
from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..extensions import db
from ..models import StockRecord
from ..validation import require_number, require_sku
from .concurrency import read_for_update, run_for
from .unit_service import round_quantity

"""
Stock Invariants (authoritative)

- current_stock_base is always in the product's BASE unit.
- Every read-modify-write runs inside run_for(); the record's version_id
  makes a concurrent writer lose at commit and re-run, so no increment or
  deduction is ever lost.
- Stored values are rounded with round_quantity, and sufficiency is
  decided on the rounded result, so fractional sales never drift.
- Engine operations never persist a negative value: increments that would
  go below zero and repacks that open more units than exist are refused.
- set_stock is an unconditional overwrite (manual count). Callers that need
  the difference explained (sale / loss / purchase) go through
  adjustment_service first.
"""

log = logging.getLogger(__name__)


def read_stock_record(ctx: LedgerContext, sku: str) -> StockRecord | None:
    """Point read of a stock record for a transaction that may rewrite it."""
    with db.session.no_autoflush:
        return read_for_update(
            db.session.query(StockRecord).filter_by(namespace=ctx.namespace, sku=sku)
        ).first()


def write_stock(ctx: LedgerContext, record: StockRecord | None, sku: str, value: float) -> StockRecord:
    """Stage an absolute value; inserts the record when it does not exist yet."""
    value = round_quantity(value)
    if record is None:
        record = StockRecord(namespace=ctx.namespace, sku=sku, current_stock_base=value)
        db.session.add(record)
    else:
        record.current_stock_base = value
    return record


def _require_delta(value) -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError("delta must be a number")
    try:
        delta = float(value)
    except (TypeError, ValueError):
        raise ValidationError("delta must be a number")
    if not math.isfinite(delta):
        raise ValidationError("delta must be a finite number")
    return delta


def get_stock(ctx: LedgerContext, sku: str) -> float:
    """Current base-unit stock; an absent record reads as 0."""
    record = (
        db.session.query(StockRecord)
        .filter_by(namespace=ctx.namespace, sku=sku)
        .first()
    )
    return record.current_stock_base if record else 0


def list_stock(ctx: LedgerContext) -> list[StockRecord]:
    return (
        db.session.query(StockRecord)
        .filter_by(namespace=ctx.namespace)
        .order_by(StockRecord.sku.asc())
        .all()
    )


def increment_stock(ctx: LedgerContext, sku: str, delta) -> float:
    """
    Add delta (may be negative) to a SKU's stock atomically.

    Creates the record when absent. Raises InsufficientStockError when the
    result would be negative.
    """
    sku = require_sku(sku)
    delta = _require_delta(delta)

    def _op():
        record = read_stock_record(ctx, sku)
        current = record.current_stock_base if record else 0
        new_value = round_quantity(current + delta)
        if new_value < 0:
            raise InsufficientStockError(sku, -delta, current)
        return write_stock(ctx, record, sku, new_value).current_stock_base

    return run_for(ctx, _op)


def set_stock(ctx: LedgerContext, sku: str, value) -> float:
    """Overwrite a SKU's stock with an absolute base-unit value."""
    sku = require_sku(sku)
    value = require_number(value, "stock")

    def _op():
        record = read_stock_record(ctx, sku)
        return write_stock(ctx, record, sku, value).current_stock_base

    return run_for(ctx, _op)


def delete_stock(ctx: LedgerContext, sku: str) -> bool:
    """Remove a SKU's stock record. Returns False when there was none."""
    sku = require_sku(sku)

    def _op():
        record = read_stock_record(ctx, sku)
        if record is None:
            return False
        db.session.delete(record)
        return True

    return run_for(ctx, _op)


def repack(ctx: LedgerContext, from_sku: str, to_sku: str, units_to_open, conversion_rate) -> dict:
    """
    Open units_to_open units of from_sku into units_to_open * conversion_rate
    units of to_sku, as one transaction.

    from_sku must already have a stock record holding at least units_to_open;
    to_sku is created when absent. Returns both resulting values.
    """
    from_sku = require_sku(from_sku, "from_sku")
    to_sku = require_sku(to_sku, "to_sku")
    units = require_number(units_to_open, "units_to_open", allow_zero=False)
    rate = require_number(conversion_rate, "conversion_rate", allow_zero=False)
    if from_sku == to_sku:
        raise ValidationError("from_sku and to_sku must differ")

    def _op():
        source = read_stock_record(ctx, from_sku)
        target = read_stock_record(ctx, to_sku)

        if source is None:
            raise NotFoundError(f"No stock record for {from_sku}", details={"sku": from_sku})
        from_value = round_quantity(source.current_stock_base - units)
        if from_value < 0:
            raise InsufficientStockError(from_sku, units, source.current_stock_base)
        to_value = round_quantity((target.current_stock_base if target else 0) + units * rate)

        write_stock(ctx, source, from_sku, from_value)
        write_stock(ctx, target, to_sku, to_value)
        return {
            "from_sku": from_sku,
            "to_sku": to_sku,
            "from_stock": from_value,
            "to_stock": to_value,
        }

    result = run_for(ctx, _op)
    log.info("Repacked %g x %s into %g x %s", units, from_sku, units * rate, to_sku)
    return result
