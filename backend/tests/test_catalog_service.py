# Overview: Pytest coverage for catalog maintenance and atomic SKU rename.

import pytest

from stockledger.errors import ConflictError, NotFoundError, ValidationError
from stockledger.extensions import db
from stockledger.models import Product, StockRecord
from stockledger.services import catalog_service, order_service, stock_service


class TestCatalog:
    def test_create_normalizes_payload(self, ctx):
        product = catalog_service.create_product(ctx, {
            "sku": "  OIL-1 ",
            "name": "Cooking oil",
            "base_unit": "LTR",
            "bulk_unit_name": "",
            "price_regular": "21000.5",
        })
        assert product.sku == "OIL-1"
        assert product.base_unit == "ltr"
        assert product.bulk_unit_name is None
        assert product.price_regular == 21001
        assert product.id is not None
        assert stock_service.list_stock(ctx) == []

    def test_create_requires_core_fields(self, ctx):
        with pytest.raises(ValidationError):
            catalog_service.create_product(ctx, {"sku": "A", "name": "A"})
        with pytest.raises(ValidationError):
            catalog_service.create_product(ctx, {"sku": "A", "name": "A", "base_unit": "bottle"})
        with pytest.raises(ValidationError):
            catalog_service.create_product(ctx, {"sku": "A", "name": "A", "base_unit": "kg", "namespace": "staging"})
        with pytest.raises(ValidationError):
            catalog_service.create_product(
                ctx, {"sku": "A", "name": "A", "base_unit": "kg", "bulk_unit_conversion": 0.5}
            )

    def test_text_fields_are_checked_against_columns(self, ctx):
        base = {"sku": "A", "base_unit": "kg"}
        for name in (None, "   ", "x" * 256):
            with pytest.raises(ValidationError):
                catalog_service.create_product(ctx, {**base, "name": name})
        with pytest.raises(ValidationError):
            catalog_service.create_product(ctx, {**base, "name": "A", "price_star": -1})
        assert db.session.query(Product).count() == 0

        product = catalog_service.create_product(ctx, {**base, "name": " Flour ", "category": None})
        assert (product.name, product.category) == ("Flour", None)

    def test_duplicate_sku_conflicts(self, ctx, sugar):
        with pytest.raises(ConflictError):
            catalog_service.create_product(ctx, {"sku": "SUGAR-01", "name": "Again", "base_unit": "kg"})

    def test_same_sku_in_other_namespace(self, ctx, staging_ctx, sugar):
        staged = catalog_service.create_product(staging_ctx, {"sku": "SUGAR-01", "name": "Test", "base_unit": "kg"})
        assert staged.namespace == "staging"
        assert [p["name"] for p in catalog_service.list_products(staging_ctx)] == ["Test"]

    def test_update_cannot_change_sku(self, ctx, sugar):
        updated = catalog_service.update_product(ctx, "SUGAR-01", {"price_star": 13900, "category": "Staples"})
        assert (updated.price_star, updated.category) == (13900, "Staples")
        with pytest.raises(ValidationError):
            catalog_service.update_product(ctx, "SUGAR-01", {"sku": "SUGAR-02"})
        with pytest.raises(NotFoundError):
            catalog_service.update_product(ctx, "NOPE", {"name": "x"})

    def test_update_cost_price(self, ctx, sugar):
        assert catalog_service.update_cost_price(ctx, "SUGAR-01", 12345.5).cost_price == 12346
        with pytest.raises(ValidationError):
            catalog_service.update_cost_price(ctx, "SUGAR-01", -1)

    def test_list_products_includes_stock(self, ctx, sugar, rice):
        catalog_service.create_product(ctx, {"sku": "NEW-1", "name": "Aaa new", "base_unit": "pcs"})
        rows = catalog_service.list_products(ctx)
        assert [(r["sku"], r["current_stock_base"]) for r in rows] == [
            ("NEW-1", 0), ("RICE-5", 10), ("SUGAR-01", 120),
        ]
        assert [r["sku"] for r in catalog_service.list_products(ctx, category="Groceries")] == ["SUGAR-01"]


class TestRenameAndDelete:
    def test_rename_moves_product_and_stock(self, ctx, sugar):
        product_id = sugar.id
        renamed = catalog_service.rename_sku(ctx, "SUGAR-01", "SUGAR-1KG")
        assert renamed.id == product_id
        assert renamed.sku == "SUGAR-1KG"
        assert stock_service.get_stock(ctx, "SUGAR-1KG") == 120
        assert stock_service.get_stock(ctx, "SUGAR-01") == 0
        with pytest.raises(NotFoundError):
            catalog_service.get_product(ctx, "SUGAR-01")

    def test_rename_keeps_order_history(self, ctx, sugar):
        order = order_service.create_order(ctx, [{"sku": "SUGAR-01", "quantity": 1}])
        catalog_service.rename_sku(ctx, "SUGAR-01", "SUGAR-1KG")
        assert order_service.get_order(ctx, order.order_number).lines[0].sku == "SUGAR-01"

    def test_rename_to_taken_sku_changes_nothing(self, ctx, sugar, rice):
        with pytest.raises(ConflictError):
            catalog_service.rename_sku(ctx, "SUGAR-01", "RICE-5")
        assert stock_service.get_stock(ctx, "SUGAR-01") == 120
        assert catalog_service.get_product(ctx, "SUGAR-01").name == "Sugar"

    def test_rename_onto_orphan_stock_record_conflicts(self, ctx, sugar):
        stock_service.set_stock(ctx, "ORPHAN", 1)
        with pytest.raises(ConflictError):
            catalog_service.rename_sku(ctx, "SUGAR-01", "ORPHAN")

    def test_rename_missing_product(self, ctx):
        with pytest.raises(NotFoundError):
            catalog_service.rename_sku(ctx, "NOPE", "NEW")

    def test_delete_removes_stock_record(self, ctx, sugar):
        catalog_service.delete_product(ctx, "SUGAR-01")
        assert db.session.query(Product).count() == 0
        assert db.session.query(StockRecord).count() == 0
        with pytest.raises(NotFoundError):
            catalog_service.delete_product(ctx, "SUGAR-01")
