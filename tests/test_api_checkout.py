"""
Tests for the classic checkout and Store API (block checkout) endpoints.
"""
import pytest

import cart_fees.config as config_mod
from cart_fees.routes.dependencies import limiter


def session_headers(session_id):
    return {"X-Cart-Session": session_id}


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert "X-Request-ID" in resp.headers


def test_request_id_is_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


class TestClassicCheckout:
    """Test the form-submit style checkout surface."""

    def test_required_fee_listed_below_minimum(self, client, handling_and_insurance):
        resp = client.get("/checkout/fees", params={"subtotal": 20}, headers=session_headers("c1"))
        assert resp.status_code == 200
        data = resp.json()
        assert data["optional_fees"] == []
        assert [f["name"] for f in data["fees"]] == ["Handling"]
        assert data["fee_total"] == 2.0

    def test_optional_fee_offered_above_minimum(self, client, handling_and_insurance):
        insurance = handling_and_insurance[1]
        resp = client.get("/checkout/fees", params={"subtotal": 60}, headers=session_headers("c2"))
        [offered] = resp.json()["optional_fees"]
        assert offered["id"] == insurance["id"]
        assert offered["checkbox_text"] == "Insure my parcel"
        assert offered["help_text"] == "Covers loss and damage in transit."
        assert offered["price"] == 11.0
        assert offered["selected"] is False

    def test_toggle_adds_net_fee_line(self, client, handling_and_insurance):
        insurance = handling_and_insurance[1]
        resp = client.post(
            "/checkout/fees/toggle",
            json={"fee_id": insurance["id"], "checked": "true"},
            headers=session_headers("c3"),
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "applied": True, "selected_fees": [insurance["id"]]}

        resp = client.get("/checkout/fees", params={"subtotal": 60}, headers=session_headers("c3"))
        lines = resp.json()["fees"]
        assert [(l["name"], l["net_amount"], l["tax_class"], l["taxable"]) for l in lines] == [
            ("Handling", 2.0, "", True),
            ("Insurance", 10.0, "reduced", True),
        ]
        assert resp.json()["fee_total"] == 12.0

    def test_toggle_false_removes(self, client, handling_and_insurance):
        insurance = handling_and_insurance[1]
        for checked in ("true", "false"):
            resp = client.post(
                "/checkout/fees/toggle",
                json={"fee_id": insurance["id"], "checked": checked},
                headers=session_headers("c4"),
            )
        assert resp.json()["selected_fees"] == []

    def test_toggle_required_fee_is_noop(self, client, handling_and_insurance):
        handling = handling_and_insurance[0]
        resp = client.post(
            "/checkout/fees/toggle",
            json={"fee_id": handling["id"], "checked": "true"},
            headers=session_headers("c5"),
        )
        assert resp.status_code == 200
        assert resp.json()["applied"] is False
        assert resp.json()["selected_fees"] == []

    def test_toggle_unknown_or_empty_fee_is_noop(self, client, handling_and_insurance):
        for body in ({"fee_id": "fee_nope", "checked": "true"}, {"checked": "true"}, {}):
            resp = client.post("/checkout/fees/toggle", json=body, headers=session_headers("c6"))
            assert resp.status_code == 200
            assert resp.json()["applied"] is False

    def test_tax_disabled_charges_gross(self, client, handling_and_insurance, monkeypatch):
        monkeypatch.setattr(config_mod, "TAX_ENABLED", False)
        insurance = handling_and_insurance[1]
        client.post(
            "/checkout/fees/toggle",
            json={"fee_id": insurance["id"], "checked": "true"},
            headers=session_headers("c7"),
        )
        resp = client.get("/checkout/fees", params={"subtotal": 60}, headers=session_headers("c7"))
        assert [l["net_amount"] for l in resp.json()["fees"]] == [2.0, 11.0]

    def test_negative_subtotal_rejected(self, client):
        resp = client.get("/checkout/fees", params={"subtotal": -1})
        assert resp.status_code == 422


class TestCartSession:
    def test_new_session_cookie_is_issued(self, client):
        resp = client.get("/checkout/fees")
        assert resp.status_code == 200
        assert config_mod.SESSION_COOKIE_NAME in resp.cookies

    def test_issued_cookie_identifies_session(self, client, handling_and_insurance):
        insurance = handling_and_insurance[1]
        first = client.get("/checkout/fees", params={"subtotal": 60})
        issued = first.cookies[config_mod.SESSION_COOKIE_NAME]

        client.post("/checkout/fees/toggle", json={"fee_id": insurance["id"], "checked": "true"})

        resp = client.get("/checkout/fees", params={"subtotal": 60})
        assert resp.json()["optional_fees"][0]["selected"] is True
        assert config_mod.SESSION_COOKIE_NAME not in resp.cookies

        other = client.get(
            "/checkout/fees", params={"subtotal": 60}, headers={"X-Cart-Session": "not-" + issued},
        )
        assert other.json()["optional_fees"][0]["selected"] is False


class TestStoreApi:
    """Test the block checkout surface."""

    def test_checkout_extension_data(self, client, handling_and_insurance):
        resp = client.get("/store/checkout", params={"subtotal": 60}, headers=session_headers("b1"))
        assert resp.status_code == 200
        data = resp.json()
        [offered] = data["extensions"]["cart-fees"]["optional_fees"]
        assert offered["checkbox_text"] == "Insure my parcel"
        assert [f["name"] for f in data["fees"]] == ["Handling"]

    def test_update_callback_selects(self, client, handling_and_insurance):
        insurance = handling_and_insurance[1]
        resp = client.post(
            "/store/cart/extensions",
            json={"namespace": "cart-fees", "data": {"fee_id": insurance["id"], "checked": True}},
            headers=session_headers("b2"),
        )
        assert resp.status_code == 200
        assert resp.json()["selected_fees"] == [insurance["id"]]

    @pytest.mark.parametrize("checked", [False, 0, "0", "", None])
    def test_update_callback_empty_checked_deselects(self, client, handling_and_insurance, checked):
        insurance = handling_and_insurance[1]
        for value in (True, checked):
            resp = client.post(
                "/store/cart/extensions",
                json={"namespace": "cart-fees", "data": {"fee_id": insurance["id"], "checked": value}},
                headers=session_headers("b3"),
            )
        assert resp.json()["selected_fees"] == []

    def test_unknown_namespace_rejected(self, client):
        resp = client.post(
            "/store/cart/extensions",
            json={"namespace": "other-plugin", "data": {"fee_id": "x", "checked": True}},
        )
        assert resp.status_code == 400

    def test_update_without_fee_id_is_noop(self, client):
        resp = client.post(
            "/store/cart/extensions",
            json={"namespace": "cart-fees", "data": {"checked": True}},
            headers=session_headers("b4"),
        )
        assert resp.status_code == 200
        assert resp.json()["applied"] is False


class TestCrossSurface:
    def test_classic_toggle_visible_in_store_api(self, client, handling_and_insurance):
        insurance = handling_and_insurance[1]
        client.post(
            "/checkout/fees/toggle",
            json={"fee_id": insurance["id"], "checked": "true"},
            headers=session_headers("x1"),
        )
        resp = client.get("/store/checkout", params={"subtotal": 60}, headers=session_headers("x1"))
        data = resp.json()
        assert data["extensions"]["cart-fees"]["optional_fees"][0]["selected"] is True
        assert [f["name"] for f in data["fees"]] == ["Handling", "Insurance"]

    def test_store_api_toggle_visible_in_classic(self, client, handling_and_insurance):
        insurance = handling_and_insurance[1]
        client.post(
            "/store/cart/extensions",
            json={"namespace": "cart-fees", "data": {"fee_id": insurance["id"], "checked": "1"}},
            headers=session_headers("x2"),
        )
        resp = client.get("/checkout/fees", params={"subtotal": 60}, headers=session_headers("x2"))
        assert resp.json()["optional_fees"][0]["selected"] is True


class TestPlaceOrder:
    def test_order_records_fees_and_clears_selection(self, client, handling_and_insurance):
        insurance = handling_and_insurance[1]
        client.post(
            "/checkout/fees/toggle",
            json={"fee_id": insurance["id"], "checked": "true"},
            headers=session_headers("o1"),
        )
        resp = client.post(
            "/checkout/orders",
            json={"subtotal": 60, "customer_name": "Ana", "customer_email": "ana@example.com"},
            headers=session_headers("o1"),
        )
        assert resp.status_code == 201
        order = resp.json()
        assert order["status"] == "placed"
        assert order["fee_total"] == 12.0
        assert [f["public_name"] for f in order["applied_fees"]] == ["Handling", "Insurance"]
        assert order["fee_summary"] == "Applied fees:\n- Handling\n- Insurance"

        resp = client.get("/checkout/fees", params={"subtotal": 60}, headers=session_headers("o1"))
        assert resp.json()["optional_fees"][0]["selected"] is False

    def test_each_post_places_a_new_order(self, client, handling_and_insurance):
        first = client.post("/checkout/orders", json={"subtotal": 20}, headers=session_headers("o2"))
        second = client.post("/checkout/orders", json={"subtotal": 20}, headers=session_headers("o2"))

        assert first.status_code == second.status_code == 201
        assert first.json()["id"] != second.json()["id"]
        assert [f["public_name"] for f in second.json()["applied_fees"]] == ["Handling"]


class TestRateLimit:
    def test_toggle_is_rate_limited(self, client, handling_and_insurance, monkeypatch):
        monkeypatch.setattr(config_mod, "RATE_LIMIT_TOGGLE", "2 per minute")
        monkeypatch.setattr(limiter, "enabled", True)
        limiter.reset()

        insurance = handling_and_insurance[1]
        body = {"fee_id": insurance["id"], "checked": "true"}
        codes = [
            client.post("/checkout/fees/toggle", json=body, headers=session_headers("rl1")).status_code
            for _ in range(3)
        ]
        limiter.reset()
        assert codes == [200, 200, 429]
