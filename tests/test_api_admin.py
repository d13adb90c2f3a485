"""
Tests for the admin fee, tax rate and order endpoints.
"""


def test_admin_fees_requires_auth(client):
    """Test that the fee list returns 401 without auth."""
    resp = client.get("/admin/fees")
    assert resp.status_code == 401


def test_admin_fees_rejects_invalid_auth(client):
    resp = client.get("/admin/fees", auth=("wrong", "credentials"))
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Basic"


def test_admin_returns_503_without_password(client, admin_auth, monkeypatch):
    import cart_fees.config as config_mod
    monkeypatch.setattr(config_mod, "ADMIN_PASSWORD", "")
    resp = client.get("/admin/fees", auth=admin_auth)
    assert resp.status_code == 503


def test_admin_fees_empty(client, admin_auth):
    resp = client.get("/admin/fees", auth=admin_auth)
    assert resp.status_code == 200
    assert resp.json() == []


def test_save_and_list_fees(client, admin_auth, handling_and_insurance):
    handling, insurance = handling_and_insurance
    assert handling["public_name"] == "Handling"
    assert handling["id"].startswith("fee_")
    assert handling["order"] == 0
    assert insurance["order"] == 1
    assert insurance["type"] == "optional"
    assert insurance["price"] == 11.0
    assert insurance["condition_minimum"] == 50.0

    resp = client.get("/admin/fees", auth=admin_auth)
    assert [f["id"] for f in resp.json()] == [handling["id"], insurance["id"]]


def test_save_preserves_ids_and_reorders(client, admin_auth, handling_and_insurance):
    handling, insurance = handling_and_insurance
    resp = client.put(
        "/admin/fees",
        json={"fees": [insurance, dict(handling, price=3)]},
        auth=admin_auth,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert [f["id"] for f in data] == [insurance["id"], handling["id"]]
    assert [f["order"] for f in data] == [0, 1]
    assert data[1]["price"] == 3.0


def test_save_invalid_row_returns_field_errors(client, admin_auth, handling_and_insurance):
    resp = client.put(
        "/admin/fees",
        json={"fees": [
            {"internal_name": "Ok", "public_name": "Ok", "price": 1},
            {"internal_name": "", "public_name": "Bad", "price": 0},
        ]},
        auth=admin_auth,
    )
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    fields = {(e["index"], e["field"]) for e in detail["errors"]}
    assert fields == {(1, "internal_name"), (1, "price")}

    # Previous configuration is untouched
    resp = client.get("/admin/fees", auth=admin_auth)
    assert len(resp.json()) == 2



def test_price_that_rounds_to_zero_is_rejected(client, admin_auth):
    resp = client.put(
        "/admin/fees",
        json={"fees": [{"internal_name": "Tiny", "public_name": "Tiny", "price": "0.00004"}]},
        auth=admin_auth,
    )
    assert resp.status_code == 422
    assert [(e["index"], e["field"]) for e in resp.json()["detail"]["errors"]] == [(0, "price")]

    resp = client.get("/admin/fees", auth=admin_auth)
    assert resp.json() == []


def test_tax_classes(client, admin_auth):
    resp = client.get("/admin/tax-classes", auth=admin_auth)
    assert resp.status_code == 200
    assert resp.json() == [
        {"slug": "", "name": "Standard"},
        {"slug": "reduced", "name": "Reduced"},
    ]


class TestTaxRates:
    def test_crud(self, client, admin_auth):
        resp = client.post(
            "/admin/tax-rates",
            json={"tax_class": "zero", "name": "Zero rate", "rate": 0},
            auth=admin_auth,
        )
        assert resp.status_code == 201
        rate = resp.json()
        assert rate["tax_class"] == "zero"

        resp = client.put(f"/admin/tax-rates/{rate['id']}", json={"rate": 4.5}, auth=admin_auth)
        assert resp.status_code == 200
        assert resp.json()["rate"] == 4.5
        assert resp.json()["name"] == "Zero rate"

        resp = client.get("/admin/tax-rates", params={"tax_class": "zero"}, auth=admin_auth)
        assert [r["id"] for r in resp.json()] == [rate["id"]]

        resp = client.delete(f"/admin/tax-rates/{rate['id']}", auth=admin_auth)
        assert resp.status_code == 204

        resp = client.get("/admin/tax-rates", params={"tax_class": "zero"}, auth=admin_auth)
        assert resp.json() == []

    def test_negative_rate_rejected(self, client, admin_auth):
        resp = client.post("/admin/tax-rates", json={"tax_class": "x", "rate": -5}, auth=admin_auth)
        assert resp.status_code == 422

        resp = client.put("/admin/tax-rates/1", json={"rate": -1}, auth=admin_auth)
        assert resp.status_code == 422

    def test_unknown_rate_is_404(self, client, admin_auth):
        assert client.put("/admin/tax-rates/999", json={"rate": 1}, auth=admin_auth).status_code == 404
        assert client.delete("/admin/tax-rates/999", auth=admin_auth).status_code == 404


class TestAdminOrders:
    def _place(self, client, session, subtotal):
        resp = client.post(
            "/checkout/orders",
            json={"subtotal": subtotal, "customer_name": "Ana"},
            headers={"X-Cart-Session": session},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    def test_list_shows_applied_fee_names(self, client, admin_auth, handling_and_insurance):
        insurance = handling_and_insurance[1]
        client.post(
            "/checkout/fees/toggle",
            json={"fee_id": insurance["id"], "checked": "true"},
            headers={"X-Cart-Session": "admin-orders-1"},
        )
        with_fees = self._place(client, "admin-orders-1", 60)

        resp = client.get("/admin/orders", auth=admin_auth)
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 1
        row = data["items"][0]
        assert row["id"] == with_fees["id"]
        assert row["applied_fees"] == "Handling (all orders), Insurance over 50"

    def test_list_placeholder_without_fees(self, client, admin_auth):
        self._place(client, "admin-orders-2", 10)
        resp = client.get("/admin/orders", auth=admin_auth)
        assert resp.json()["items"][0]["applied_fees"] == "—"

    def test_order_fees(self, client, admin_auth, handling_and_insurance):
        order = self._place(client, "admin-orders-3", 10)
        resp = client.get(f"/admin/orders/{order['id']}/fees", auth=admin_auth)
        assert resp.status_code == 200
        fees = resp.json()
        assert [f["public_name"] for f in fees] == ["Handling"]
        assert fees[0]["net_amount"] == 2.0

    def test_order_detail(self, client, admin_auth, handling_and_insurance):
        order = self._place(client, "admin-orders-4", 10)
        resp = client.get(f"/admin/orders/{order['id']}", auth=admin_auth)
        assert resp.status_code == 200
        assert resp.json()["fee_summary"] == "Applied fees:\n- Handling"

    def test_unknown_order_is_404(self, client, admin_auth):
        assert client.get("/admin/orders/999/fees", auth=admin_auth).status_code == 404
