# Overview: Read-only reports over orders and purchases; transaction history and profit.

from __future__ import annotations

from datetime import date

from sqlalchemy import func

from ..context import LedgerContext
from ..errors import ValidationError
from ..extensions import db
from ..models import Order, OrderLine, Purchase
from ..time_utils import to_utc_z
from .order_service import list_orders
from .purchase_service import list_purchases
from .unit_service import round_half_up


def _check_range(start: date | None, end: date | None) -> None:
    if start and end and start > end:
        raise ValidationError("start must be on or before end")


def transaction_history(ctx: LedgerContext, start: date | None = None, end: date | None = None) -> list[dict]:
    """Orders (type "sale") and purchases (type "purchase") merged, newest first."""
    _check_range(start, end)

    rows = []
    for order in list_orders(ctx, start, end):
        rows.append({
            "type": "sale",
            "id": order.order_number,
            "date": order.order_date.isoformat(),
            "created_at": order.created_at,
            "party": order.customer_name,
            "source": order.source,
            "item_count": len(order.lines),
            "total": order.grand_total,
        })
    for purchase in list_purchases(ctx, start, end):
        rows.append({
            "type": "purchase",
            "id": purchase.purchase_number,
            "date": purchase.purchase_date.isoformat(),
            "created_at": purchase.created_at,
            "party": purchase.supplier_name or "",
            "source": purchase.source,
            "item_count": len(purchase.lines),
            "total": purchase.grand_total,
        })

    rows.sort(key=lambda r: (r["date"], r["created_at"], r["id"]), reverse=True)
    for row in rows:
        row["created_at"] = to_utc_z(row["created_at"])
    return rows


def daily_totals(ctx: LedgerContext, start: date | None = None, end: date | None = None) -> list[dict]:
    _check_range(start, end)

    def _grouped(model, date_col, total_col):
        q = db.session.query(
            date_col.label("day"),
            func.count(model.id).label("count"),
            func.coalesce(func.sum(total_col), 0).label("total"),
        ).filter(model.namespace == ctx.namespace)
        if start:
            q = q.filter(date_col >= start)
        if end:
            q = q.filter(date_col <= end)
        return {row.day: row for row in q.group_by(date_col).all()}

    sales = _grouped(Order, Order.order_date, Order.grand_total)
    purchases = _grouped(Purchase, Purchase.purchase_date, Purchase.grand_total)

    result = []
    for day in sorted(set(sales) | set(purchases)):
        s = sales.get(day)
        p = purchases.get(day)
        result.append({
            "date": day.isoformat(),
            "order_count": int(s.count) if s else 0,
            "sales_total": int(s.total) if s else 0,
            "purchase_count": int(p.count) if p else 0,
            "purchases_total": int(p.total) if p else 0,
        })
    return result


def profit_summary(ctx: LedgerContext, start: date | None = None, end: date | None = None) -> dict:
    """
    Revenue minus cost of goods sold.

    Cost uses the buy_price captured on each order line at sale time, never
    the product's current cost.
    """
    _check_range(start, end)

    q = (
        db.session.query(OrderLine.quantity, OrderLine.buy_price, OrderLine.line_total)
        .join(Order, Order.id == OrderLine.order_id)
        .filter(Order.namespace == ctx.namespace)
    )
    if start:
        q = q.filter(Order.order_date >= start)
    if end:
        q = q.filter(Order.order_date <= end)

    revenue = 0
    cost = 0
    for quantity, buy_price, line_total in q.all():
        revenue += line_total
        cost += round_half_up(quantity * (buy_price or 0))

    order_q = db.session.query(func.count(Order.id)).filter(Order.namespace == ctx.namespace)
    if start:
        order_q = order_q.filter(Order.order_date >= start)
    if end:
        order_q = order_q.filter(Order.order_date <= end)

    return {
        "start": start.isoformat() if start else None,
        "end": end.isoformat() if end else None,
        "order_count": int(order_q.scalar() or 0),
        "revenue": revenue,
        "cost": cost,
        "profit": revenue - cost,
    }
