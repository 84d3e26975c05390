# Overview: Pytest coverage for stock records and repacking.

import pytest

from stockledger.errors import InsufficientStockError, NotFoundError, ValidationError
from stockledger.services import stock_service


class TestStockRecords:
    def test_absent_record_reads_as_zero(self, ctx):
        assert stock_service.get_stock(ctx, "NOPE") == 0

    def test_increment_creates_record(self, ctx):
        assert stock_service.increment_stock(ctx, "FLOUR-01", 25) == 25
        assert stock_service.increment_stock(ctx, "FLOUR-01", 2.5) == 27.5
        assert stock_service.get_stock(ctx, "FLOUR-01") == 27.5

    def test_negative_increment_cannot_go_below_zero(self, ctx):
        stock_service.increment_stock(ctx, "FLOUR-01", 5)
        with pytest.raises(InsufficientStockError) as exc:
            stock_service.increment_stock(ctx, "FLOUR-01", -6)
        assert exc.value.sku == "FLOUR-01"
        assert exc.value.requested == 6
        assert exc.value.available == 5
        assert stock_service.get_stock(ctx, "FLOUR-01") == 5

        assert stock_service.increment_stock(ctx, "FLOUR-01", -5) == 0

    def test_non_finite_delta_is_rejected(self, ctx):
        with pytest.raises(ValidationError):
            stock_service.increment_stock(ctx, "FLOUR-01", float("inf"))
        with pytest.raises(ValidationError):
            stock_service.increment_stock(ctx, "FLOUR-01", "lots")

    def test_fractional_increments_do_not_drift(self, ctx):
        for _ in range(3):
            stock_service.increment_stock(ctx, "FLOUR-01", 0.1)
        assert stock_service.get_stock(ctx, "FLOUR-01") == 0.3
        assert stock_service.increment_stock(ctx, "FLOUR-01", -0.3) == 0

    def test_set_stock_overwrites(self, ctx):
        assert stock_service.set_stock(ctx, "FLOUR-01", 40) == 40
        assert stock_service.set_stock(ctx, "FLOUR-01", 0) == 0
        assert stock_service.set_stock(ctx, "FLOUR-01", "12.5") == 12.5
        assert stock_service.get_stock(ctx, "FLOUR-01") == 12.5

    def test_set_stock_validates_input(self, ctx):
        for bad in (-1, float("nan"), None, True, ""):
            with pytest.raises(ValidationError):
                stock_service.set_stock(ctx, "FLOUR-01", bad)
        assert stock_service.get_stock(ctx, "FLOUR-01") == 0

    def test_delete_stock(self, ctx):
        stock_service.set_stock(ctx, "FLOUR-01", 3)
        assert stock_service.delete_stock(ctx, "FLOUR-01") is True
        assert stock_service.delete_stock(ctx, "FLOUR-01") is False
        assert stock_service.list_stock(ctx) == []

    def test_namespaces_do_not_share_stock(self, ctx, staging_ctx):
        stock_service.set_stock(ctx, "FLOUR-01", 10)
        assert stock_service.get_stock(staging_ctx, "FLOUR-01") == 0
        stock_service.set_stock(staging_ctx, "FLOUR-01", 1)
        assert stock_service.get_stock(ctx, "FLOUR-01") == 10


class TestRepack:
    def test_open_one_sack_into_loose_kg(self, ctx, sugar, sugar_sack):
        result = stock_service.repack(ctx, "SUGAR-SACK", "SUGAR-01", 1, 50)
        assert result["from_stock"] == 2
        assert result["to_stock"] == 170
        assert stock_service.get_stock(ctx, "SUGAR-SACK") == 2
        assert stock_service.get_stock(ctx, "SUGAR-01") == 170

    def test_repack_creates_target_record(self, ctx, sugar_sack):
        stock_service.repack(ctx, "SUGAR-SACK", "SUGAR-LOOSE", 2, 50)
        assert stock_service.get_stock(ctx, "SUGAR-LOOSE") == 100
        assert stock_service.get_stock(ctx, "SUGAR-SACK") == 1

    def test_fractional_repacks_empty_the_source_exactly(self, ctx, sugar, sugar_sack):
        stock_service.set_stock(ctx, "SUGAR-SACK", 0.7)
        stock_service.repack(ctx, "SUGAR-SACK", "SUGAR-01", 0.4, 50)
        result = stock_service.repack(ctx, "SUGAR-SACK", "SUGAR-01", 0.3, 50)
        assert result["from_stock"] == 0
        assert result["to_stock"] == 155

    def test_repack_more_than_available_changes_nothing(self, ctx, sugar, sugar_sack):
        with pytest.raises(InsufficientStockError) as exc:
            stock_service.repack(ctx, "SUGAR-SACK", "SUGAR-01", 4, 50)
        assert exc.value.sku == "SUGAR-SACK"
        assert exc.value.available == 3
        assert stock_service.get_stock(ctx, "SUGAR-SACK") == 3
        assert stock_service.get_stock(ctx, "SUGAR-01") == 120

    def test_repack_missing_source(self, ctx, sugar):
        with pytest.raises(NotFoundError):
            stock_service.repack(ctx, "SUGAR-SACK", "SUGAR-01", 1, 50)
        assert stock_service.get_stock(ctx, "SUGAR-01") == 120

    def test_repack_validates_before_transaction(self, ctx, sugar, sugar_sack):
        with pytest.raises(ValidationError):
            stock_service.repack(ctx, "SUGAR-SACK", "SUGAR-01", 0, 50)
        with pytest.raises(ValidationError):
            stock_service.repack(ctx, "SUGAR-SACK", "SUGAR-01", 1, -50)
        with pytest.raises(ValidationError):
            stock_service.repack(ctx, "SUGAR-SACK", "SUGAR-SACK", 1, 1)
