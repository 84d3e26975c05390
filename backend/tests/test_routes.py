# Overview: Pytest coverage for the JSON API surface and its error mapping.

from stockledger.services import stock_service


class TestProductRoutes:
    def test_create_and_fetch(self, client, ctx):
        resp = client.post("/api/products", json={
            "sku": "TEA-1", "name": "Tea", "base_unit": "pcs", "price_regular": 5000, "initial_stock": 7,
        })
        assert resp.status_code == 201
        assert resp.get_json()["product"]["sku"] == "TEA-1"

        resp = client.get("/api/products/TEA-1")
        assert resp.status_code == 200
        assert resp.get_json()["product"]["current_stock_base"] == 7

        resp = client.get("/api/products")
        assert resp.get_json()["count"] == 1

    def test_validation_and_not_found(self, client, ctx):
        assert client.post("/api/products", json={"sku": "X"}).status_code == 400
        assert client.get("/api/products/NOPE").status_code == 404
        assert client.patch("/api/products/NOPE", json={"name": "y"}).status_code == 404

    def test_duplicate_is_conflict(self, client, sugar):
        resp = client.post("/api/products", json={"sku": "SUGAR-01", "name": "x", "base_unit": "kg"})
        assert resp.status_code == 409

    def test_rename_and_delete(self, client, ctx, sugar):
        resp = client.post("/api/products/SUGAR-01/rename", json={"new_sku": "SUGAR-2"})
        assert resp.status_code == 200
        assert stock_service.get_stock(ctx, "SUGAR-2") == 120

        assert client.delete("/api/products/SUGAR-2").status_code == 200
        assert client.get("/api/products/SUGAR-2").status_code == 404


class TestInventoryRoutes:
    def test_repack(self, client, ctx, sugar, sugar_sack):
        resp = client.post("/api/inventory/repack", json={
            "from_sku": "SUGAR-SACK", "to_sku": "SUGAR-01", "units_to_open": 1, "conversion_rate": 50,
        })
        assert resp.status_code == 200
        assert resp.get_json()["to_stock"] == 170
        assert client.get("/api/inventory/SUGAR-SACK").get_json()["current_stock_base"] == 2

    def test_repack_insufficient(self, client, sugar, sugar_sack):
        resp = client.post("/api/inventory/repack", json={
            "from_sku": "SUGAR-SACK", "to_sku": "SUGAR-01", "units_to_open": 9, "conversion_rate": 50,
        })
        assert resp.status_code == 409
        assert resp.get_json()["details"] == {"sku": "SUGAR-SACK", "requested": 9, "available": 3}

    def test_stock_count(self, client, sugar):
        resp = client.post("/api/inventory/SUGAR-01/count", json={
            "new_stock": 118, "decrease_kind": "lost", "loss_reason": "missing",
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["document_type"] == "stock_loss"
        assert body["current_stock"] == 118

        losses = client.get("/api/stock-losses").get_json()
        assert losses["count"] == 1
        assert losses["items"][0]["reason"] == "missing"

    def test_list_stock(self, client, sugar, rice):
        body = client.get("/api/inventory").get_json()
        assert [row["sku"] for row in body["items"]] == ["RICE-5", "SUGAR-01"]


class TestOrderRoutes:
    def test_place_order(self, client, ctx, sugar):
        resp = client.post("/api/orders", json={
            "items": [{"sku": "SUGAR-01", "quantity": 5}, {"sku": "SUGAR-01", "quantity": 1, "unit": "sack"}],
            "customer_type": "regular",
        })
        assert resp.status_code == 201
        order = resp.get_json()["order"]
        assert order["grand_total"] == 825000
        assert [item["total"] for item in order["items"]] == [75000, 750000]
        assert stock_service.get_stock(ctx, "SUGAR-01") == 65

        resp = client.patch(f"/api/orders/{order['id']}/customer", json={"customer_name": "Sari"})
        assert resp.status_code == 200
        assert client.get(f"/api/orders/{order['id']}").get_json()["order"]["customer_name"] == "Sari"
        assert client.get("/api/orders").get_json()["count"] == 1

    def test_insufficient_stock(self, client, ctx, sugar):
        resp = client.post("/api/orders", json={"items": [{"sku": "SUGAR-01", "quantity": 3, "unit": "Sack"}]})
        assert resp.status_code == 409
        body = resp.get_json()
        assert body["details"]["requested"] == 150
        assert body["details"]["available"] == 120
        assert "Insufficient stock for SUGAR-01" in body["error"]

    def test_bad_input(self, client, sugar):
        assert client.post("/api/orders", json={"items": []}).status_code == 400
        assert client.post("/api/orders", json={"items": [{"sku": "SUGAR-01", "quantity": "x"}]}).status_code == 400
        assert client.get("/api/orders?start=yesterday").status_code == 400
        resp = client.post("/api/orders", json={"items": [{"sku": "SUGAR-01", "quantity": 1, "unit": "Karung"}]})
        assert resp.status_code == 400
        assert resp.get_json()["details"] == {"sku": "SUGAR-01", "unit": "Karung"}
        assert client.get("/api/orders/2026-01-01-0001").status_code == 404


class TestPurchaseAndReportRoutes:
    def test_receive_then_report(self, client, sugar):
        resp = client.post("/api/purchases/receive", json={
            "items": [{"sku": "SUGAR-01", "quantity": 1, "unit": "Sack", "unit_cost": 610000}],
            "supplier_name": "PT Gula",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["stock"] == {"SUGAR-01": 170}
        number = body["purchase"]["id"]

        assert client.get(f"/api/purchases/{number}").status_code == 200
        assert client.get("/api/purchases").get_json()["count"] == 1

        client.post("/api/orders", json={"items": [{"sku": "SUGAR-01", "quantity": 10}]})

        history = client.get("/api/reports/history").get_json()
        assert {row["type"] for row in history["rows"]} == {"sale", "purchase"}
        assert len(history["daily"]) == 1

        profit = client.get("/api/reports/profit").get_json()
        assert profit["revenue"] == 150000
        assert profit["cost"] == 122000

    def test_health(self, client, ctx):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json()["namespace"] == "production"
