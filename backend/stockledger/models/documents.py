from __future__ import annotations

from sqlalchemy import event, inspect

from ..extensions import db
from ..errors import ImmutableRecordError
from stockledger.time_utils import to_utc_z


class Counter(db.Model):
    """
    Per-day, per-document-type sequence counter.

    Key is "{document_type}_{YYYY-MM-DD}". count only ever grows by 1 per
    allocation; numbers are never reused. Rows are kept after their day.
    """
    __tablename__ = "counters"
    __table_args__ = (
        db.UniqueConstraint("namespace", "key", name="uq_counters_namespace_key"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    namespace = db.Column(db.String(32), nullable=False, index=True)
    key = db.Column(db.String(64), nullable=False)
    count = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "count": self.count,
            "updated_at": to_utc_z(self.updated_at),
        }


class Order(db.Model):
    """
    Completed sale document.

    IMMUTABLE once created, except customer_name (receipt personalization).
    Line buy_price values are snapshots taken at sale time; profit reports
    read them instead of the live product cost.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.UniqueConstraint("namespace", "order_number", name="uq_orders_namespace_number"),
        db.Index("ix_orders_namespace_created", "namespace", "created_at"),
        {"sqlite_autoincrement": True},
    )
    __mutable_fields__ = frozenset({"customer_name"})

    id = db.Column(db.Integer, primary_key=True)
    namespace = db.Column(db.String(32), nullable=False, index=True)

    # Human-readable document number (e.g., "2026-10-17-0001")
    order_number = db.Column(db.String(64), nullable=False)
    order_date = db.Column(db.Date, nullable=False)

    status = db.Column(db.String(16), nullable=False, default="completed")
    source = db.Column(db.String(32), nullable=False, default="pos")

    customer_name = db.Column(db.String(255), nullable=False, default="")
    customer_type = db.Column(db.String(16), nullable=False, default="regular")
    payment_method = db.Column(db.String(32), nullable=False, default="Cash")

    grand_total = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    lines = db.relationship(
        "OrderLine",
        backref="order",
        lazy="selectin",
        order_by="OrderLine.line_no",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.order_number,
            "order_number": self.order_number,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "status": self.status,
            "source": self.source,
            "customer_name": self.customer_name,
            "customer_type": self.customer_type,
            "payment_method": self.payment_method,
            "grand_total": self.grand_total,
            "created_at": to_utc_z(self.created_at),
            "items": [line.to_dict() for line in self.lines],
        }


class OrderLine(db.Model):
    __tablename__ = "order_lines"
    __table_args__ = (
        db.UniqueConstraint("order_id", "line_no", name="uq_order_lines_order_line"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    line_no = db.Column(db.Integer, nullable=False)

    sku = db.Column(db.String(64), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=False)

    # Quantity in the unit of sale; base_quantity is what left the stock record
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(8), nullable=False, default="base")
    unit_name = db.Column(db.String(32), nullable=True)
    base_quantity = db.Column(db.Float, nullable=False)

    unit_price = db.Column(db.Integer, nullable=False)
    line_total = db.Column(db.Integer, nullable=False)

    # Cost per unit of sale at the time of sale
    buy_price = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "line_no": self.line_no,
            "sku": self.sku,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit": self.unit,
            "unit_name": self.unit_name,
            "base_quantity": self.base_quantity,
            "unit_price": self.unit_price,
            "total": self.line_total,
            "buy_price": self.buy_price,
        }


class Purchase(db.Model):
    """
    Goods-received document. IMMUTABLE once created.

    Recording a purchase never changes stock; intake flows call
    stock_service separately.
    """
    __tablename__ = "purchases"
    __table_args__ = (
        db.UniqueConstraint("namespace", "purchase_number", name="uq_purchases_namespace_number"),
        db.Index("ix_purchases_namespace_created", "namespace", "created_at"),
        {"sqlite_autoincrement": True},
    )
    __mutable_fields__ = frozenset()

    id = db.Column(db.Integer, primary_key=True)
    namespace = db.Column(db.String(32), nullable=False, index=True)

    # e.g. "PUR-2026-10-17-0001"
    purchase_number = db.Column(db.String(64), nullable=False)
    purchase_date = db.Column(db.Date, nullable=False)

    source = db.Column(db.String(32), nullable=False, default="receiving")
    supplier_name = db.Column(db.String(255), nullable=True)
    receipt_file = db.Column(db.String(255), nullable=True)

    grand_total = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    lines = db.relationship(
        "PurchaseLine",
        backref="purchase",
        lazy="selectin",
        order_by="PurchaseLine.line_no",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.purchase_number,
            "purchase_number": self.purchase_number,
            "purchase_date": self.purchase_date.isoformat() if self.purchase_date else None,
            "source": self.source,
            "supplier_name": self.supplier_name,
            "receipt_file": self.receipt_file,
            "grand_total": self.grand_total,
            "created_at": to_utc_z(self.created_at),
            "items": [line.to_dict() for line in self.lines],
        }


class PurchaseLine(db.Model):
    __tablename__ = "purchase_lines"
    __table_args__ = (
        db.UniqueConstraint("purchase_id", "line_no", name="uq_purchase_lines_purchase_line"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    purchase_id = db.Column(db.Integer, db.ForeignKey("purchases.id"), nullable=False, index=True)
    line_no = db.Column(db.Integer, nullable=False)

    sku = db.Column(db.String(64), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=True)

    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(32), nullable=True)
    unit_cost = db.Column(db.Integer, nullable=False)
    line_total = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "line_no": self.line_no,
            "sku": self.sku,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit": self.unit,
            "unit_cost": self.unit_cost,
            "total": self.line_total,
        }


class StockLoss(db.Model):
    """Non-sale stock decrease (expired, damaged, missing, wrong input). IMMUTABLE."""
    __tablename__ = "stock_losses"
    __table_args__ = (
        db.UniqueConstraint("namespace", "loss_number", name="uq_stock_losses_namespace_number"),
        {"sqlite_autoincrement": True},
    )
    __mutable_fields__ = frozenset()

    id = db.Column(db.Integer, primary_key=True)
    namespace = db.Column(db.String(32), nullable=False, index=True)

    # "LOSS-YYYY-MM-DD-HHMMSS-{sku}"
    loss_number = db.Column(db.String(128), nullable=False)

    sku = db.Column(db.String(64), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=True)
    quantity = db.Column(db.Float, nullable=False)
    reason = db.Column(db.String(32), nullable=False)

    cost_price = db.Column(db.Integer, nullable=False, default=0)
    estimated_loss = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.loss_number,
            "loss_number": self.loss_number,
            "sku": self.sku,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "reason": self.reason,
            "cost_price": self.cost_price,
            "estimated_loss": self.estimated_loss,
            "created_at": to_utc_z(self.created_at),
        }


def _reject_mutation(mapper, connection, target):
    allowed = getattr(target, "__mutable_fields__", frozenset())
    state = inspect(target)
    changed = [
        attr.key
        for attr in mapper.column_attrs
        if attr.key not in allowed and state.attrs[attr.key].history.has_changes()
    ]
    if changed:
        raise ImmutableRecordError(
            f"{type(target).__name__} is immutable",
            details={"fields": sorted(changed)},
        )


def _reject_delete(mapper, connection, target):
    raise ImmutableRecordError(f"{type(target).__name__} cannot be deleted")


for _model in (Order, OrderLine, Purchase, PurchaseLine, StockLoss):
    event.listen(_model, "before_update", _reject_mutation)
    event.listen(_model, "before_delete", _reject_delete)
