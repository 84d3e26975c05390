from __future__ import annotations

from ..extensions import db
from stockledger.time_utils import to_utc_z


class Product(db.Model):
    """
    Product master data.

    NAMESPACE: Products are scoped to a deployment namespace (production or
    staging). SKUs are unique within a namespace.

    SKU DESIGN DECISION:
    Product.id is the stable internal identifier; Product.sku is the
    user-facing key that stock records are filed under. Renaming a SKU is a
    single transaction that moves the product and its stock record together
    (see catalog_service.rename_sku).

    PRICES:
    cost_price and the three tier prices are integer currency units per BASE
    unit. Bulk-unit prices are derived through unit_service, never stored.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("namespace", "sku", name="uq_products_namespace_sku"),
        db.Index("ix_products_namespace_name", "namespace", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    namespace = db.Column(db.String(32), nullable=False, index=True)

    sku = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=True)

    base_unit = db.Column(db.String(16), nullable=False, default="pcs")
    bulk_unit_name = db.Column(db.String(32), nullable=True)
    # How many base units one bulk unit holds (e.g. 50 kg per sack)
    bulk_unit_conversion = db.Column(db.Float, nullable=True)

    cost_price = db.Column(db.Integer, nullable=True)
    price_regular = db.Column(db.Integer, nullable=True)
    price_premium = db.Column(db.Integer, nullable=True)
    price_star = db.Column(db.Integer, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r} namespace={self.namespace}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "category": self.category,
            "base_unit": self.base_unit,
            "bulk_unit_name": self.bulk_unit_name,
            "bulk_unit_conversion": self.bulk_unit_conversion,
            "cost_price": self.cost_price,
            "price_regular": self.price_regular,
            "price_premium": self.price_premium,
            "price_star": self.price_star,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class StockRecord(db.Model):
    """
    Authoritative current stock for one SKU, in BASE units only.

    version_id_col turns concurrent read-modify-write into a StaleDataError
    for the loser, which concurrency.run_in_transaction retries.
    """
    __tablename__ = "stock_records"
    __table_args__ = (
        db.UniqueConstraint("namespace", "sku", name="uq_stock_records_namespace_sku"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    namespace = db.Column(db.String(32), nullable=False, index=True)
    sku = db.Column(db.String(64), nullable=False)

    current_stock_base = db.Column(db.Float, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<StockRecord sku={self.sku!r} current_stock_base={self.current_stock_base}>"

    def to_dict(self) -> dict:
        return {
            "sku": self.sku,
            "current_stock_base": self.current_stock_base,
            "version_id": self.version_id,
            "updated_at": to_utc_z(self.updated_at),
        }
