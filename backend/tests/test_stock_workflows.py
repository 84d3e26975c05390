# Overview: Pytest coverage for stock losses and manual stock counts.

from datetime import date, datetime

import pytest

from stockledger.errors import ConflictError, NotFoundError, StorageError, ValidationError
from stockledger.models import Order, Purchase, StockLoss
from stockledger.extensions import db
from stockledger.services import adjustment_service, stock_loss_service, stock_service
from stockledger.services.order_service import CustomerInfo


class TestStockLoss:
    def test_loss_record(self, ctx, sugar):
        loss = stock_loss_service.record_loss(ctx, "SUGAR-01", 2.5, "Damaged", now=datetime(2026, 5, 4, 9, 8, 7))
        assert loss.loss_number == "LOSS-2026-05-04-090807-SUGAR-01"
        assert loss.reason == "damaged"
        assert loss.cost_price == 12000
        assert loss.estimated_loss == 30000
        assert stock_service.get_stock(ctx, "SUGAR-01") == 120

    def test_reason_must_be_known(self, ctx, sugar):
        with pytest.raises(ValidationError):
            stock_loss_service.record_loss(ctx, "SUGAR-01", 1, "stolen")

    def test_unknown_product(self, ctx):
        with pytest.raises(NotFoundError):
            stock_loss_service.record_loss(ctx, "NOPE", 1, "expired")

    def test_same_second_same_sku_conflicts(self, ctx, sugar):
        at = datetime(2026, 5, 4, 9, 8, 7)
        stock_loss_service.record_loss(ctx, "SUGAR-01", 1, "expired", now=at)
        with pytest.raises(ConflictError):
            stock_loss_service.record_loss(ctx, "SUGAR-01", 1, "expired", now=at)
        assert len(stock_loss_service.list_losses(ctx)) == 1


class TestStockCount:
    def test_decrease_recorded_as_sale(self, ctx, sugar):
        result = adjustment_service.apply_stock_count(
            ctx, "SUGAR-01", 100,
            decrease_kind="sold",
            customer=CustomerInfo(customer_name="Walk-in", customer_type="premium"),
            order_date=date(2026, 4, 1),
        )
        assert (result.previous_stock, result.current_stock) == (120, 100)
        assert result.document_type == "order"
        order = result.document
        assert order.order_number == "2026-04-01-0001"
        assert order.source == "stock_adjustment"
        assert order.grand_total == 20 * 14500
        # The count sets stock once; the order record does not deduct again
        assert stock_service.get_stock(ctx, "SUGAR-01") == 100

    def test_decrease_recorded_as_loss(self, ctx, sugar):
        result = adjustment_service.apply_stock_count(
            ctx, "SUGAR-01", 117, decrease_kind="lost", loss_reason="expired"
        )
        assert result.document_type == "stock_loss"
        assert result.document.quantity == 3
        assert result.document.estimated_loss == 36000
        assert stock_service.get_stock(ctx, "SUGAR-01") == 117

    def test_increase_recorded_as_purchase(self, ctx, sugar):
        result = adjustment_service.apply_stock_count(ctx, "SUGAR-01", 130, supplier_name="Found in back room")
        purchase = result.document
        assert result.document_type == "purchase"
        assert purchase.source == "stock_adjustment"
        assert purchase.lines[0].quantity == 10
        assert purchase.lines[0].unit_cost == 12000
        assert purchase.grand_total == 120000
        assert stock_service.get_stock(ctx, "SUGAR-01") == 130

    def test_increase_with_explicit_cost(self, ctx, sugar):
        result = adjustment_service.apply_stock_count(ctx, "SUGAR-01", 121, unit_cost=13000)
        assert result.document.grand_total == 13000

    def test_unchanged_count_records_nothing(self, ctx, sugar):
        result = adjustment_service.apply_stock_count(ctx, "SUGAR-01", 120)
        assert result.document is None
        assert result.to_dict()["document"] is None
        assert db.session.query(Order).count() == 0
        assert db.session.query(Purchase).count() == 0

    def test_unexplained_decrease_is_rejected(self, ctx, sugar):
        with pytest.raises(ValidationError):
            adjustment_service.apply_stock_count(ctx, "SUGAR-01", 50)
        with pytest.raises(ValidationError):
            adjustment_service.apply_stock_count(ctx, "SUGAR-01", 50, decrease_kind="lost", loss_reason="eaten")
        assert stock_service.get_stock(ctx, "SUGAR-01") == 120
        assert db.session.query(StockLoss).count() == 0

    def test_failed_document_is_logged_with_the_count(self, ctx, sugar, monkeypatch, caplog):
        def failing_record_loss(*args, **kwargs):
            raise StorageError("store unavailable")

        monkeypatch.setattr(adjustment_service, "record_loss", failing_record_loss)
        with caplog.at_level("ERROR", logger=adjustment_service.log.name):
            with pytest.raises(StorageError):
                adjustment_service.apply_stock_count(
                    ctx, "SUGAR-01", 110, decrease_kind="lost", loss_reason="damaged"
                )
        assert "SUGAR-01" in caplog.text
        assert "stock_loss" in caplog.text
        assert stock_service.get_stock(ctx, "SUGAR-01") == 110

    def test_invalid_loss_reason_leaves_stock_untouched(self, ctx, sugar, monkeypatch):
        calls = []
        monkeypatch.setattr(adjustment_service, "set_stock", lambda *a, **kw: calls.append(a))
        with pytest.raises(ValidationError):
            adjustment_service.apply_stock_count(ctx, "SUGAR-01", 100, decrease_kind="lost")
        assert calls == []

    def test_negative_count_is_rejected(self, ctx, sugar):
        with pytest.raises(ValidationError):
            adjustment_service.apply_stock_count(ctx, "SUGAR-01", -1)

    def test_unknown_product(self, ctx):
        with pytest.raises(NotFoundError):
            adjustment_service.apply_stock_count(ctx, "NOPE", 1)
