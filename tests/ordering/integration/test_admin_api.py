"""Integration tests for the admin routes."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ordering.api.errors import register_storefront_exception_handlers
from ordering.api.routes import admin_router, cart_router, checkout_router

ADMIN_TOKEN = "admin-secret"
ADMIN_HEADERS = {"X-Admin-Token": ADMIN_TOKEN}
SHOPPER_HEADERS = {"X-Shopper-Id": "shopper-admin-test"}


@pytest.fixture()
def client(services, monkeypatch):
    monkeypatch.setenv("ADMIN_API_TOKEN", ADMIN_TOKEN)
    app = FastAPI()
    app.state.services = services
    register_storefront_exception_handlers(app)
    for router in (cart_router, checkout_router, admin_router):
        app.include_router(router)
    return TestClient(app)


@pytest.fixture()
def cod_order(client, make_variant):
    client.post("/cart", json={"variant_id": make_variant(), "quantity": 1}, headers=SHOPPER_HEADERS)
    response = client.post(
        "/checkout/init",
        json={
            "payment_method": "cod",
            "email": "buyer@example.com",
            "new_address": {
                "full_name": "Karim Samir",
                "phone": "01111111111",
                "street": "5 Tahrir Square",
                "city": "Giza",
                "governorate": "Giza",
            },
        },
        headers=SHOPPER_HEADERS,
    )
    return response.json()


class TestAdminAccess:
    def test_missing_token_is_403(self, client):
        assert client.get("/admin/promos").status_code == 403

    def test_wrong_token_is_403(self, client):
        assert client.get("/admin/promos", headers={"X-Admin-Token": "guess"}).status_code == 403

    def test_unset_token_locks_admin_routes(self, client, monkeypatch):
        monkeypatch.delenv("ADMIN_API_TOKEN")
        assert client.get("/admin/promos", headers=ADMIN_HEADERS).status_code == 403


class TestOrderAdministration:
    def test_ship_and_deliver(self, client, cod_order, fake_email):
        order_id = cod_order["order_id"]

        shipped = client.post(
            f"/admin/orders/{order_id}/tracking",
            json={"tracking_number": "BOSTA-123", "tracking_url": "https://courier.test/BOSTA-123"},
            headers=ADMIN_HEADERS,
        )
        assert shipped.status_code == 200
        assert shipped.json()["status"] == "SHIPPED"
        assert shipped.json()["tracking_number"] == "BOSTA-123"

        delivered = client.patch(
            f"/admin/orders/{order_id}/status", json={"status": "DELIVERED"}, headers=ADMIN_HEADERS
        )
        assert delivered.status_code == 200
        body = delivered.json()
        assert body["status"] == "DELIVERED"
        assert body["delivered_at"] is not None
        assert [entry["status"] for entry in body["status_history"]] == [
            "PENDING",
            "PROCESSING",
            "SHIPPED",
            "DELIVERED",
        ]
        subjects = [email["subject"] for email in fake_email.sent_emails]
        assert "Your Order Has Shipped!" in subjects
        assert "Your Order Has Been Delivered" in subjects

    def test_invalid_transition_is_422(self, client, cod_order):
        response = client.patch(
            f"/admin/orders/{cod_order['order_id']}/status", json={"status": "PAID"}, headers=ADMIN_HEADERS
        )
        assert response.status_code == 422
        assert response.json()["code"] == "invalid_transition"

    def test_unknown_status_fails_validation(self, client, cod_order):
        response = client.patch(
            f"/admin/orders/{cod_order['order_id']}/status", json={"status": "LOST"}, headers=ADMIN_HEADERS
        )
        assert response.status_code == 422

    def test_unknown_order_is_404(self, client):
        response = client.patch("/admin/orders/missing/status", json={"status": "SHIPPED"}, headers=ADMIN_HEADERS)
        assert response.status_code == 404


class TestPromoAdministration:
    def test_create_and_list(self, client):
        created = client.post(
            "/admin/promos",
            json={
                "code": "summer10",
                "discount_type": "PERCENT",
                "discount_value": 10,
                "max_discount_amount": 500,
                "excluded_category_ids": ["outdoor"],
            },
            headers=ADMIN_HEADERS,
        )
        assert created.status_code == 201

        promos = client.get("/admin/promos", headers=ADMIN_HEADERS).json()
        assert len(promos) == 1
        assert promos[0]["promo_code_id"] == created.json()["promo_code_id"]
        assert promos[0]["code"] == "SUMMER10"
        assert promos[0]["is_active"] is True

    def test_duplicate_code_is_400(self, client):
        body = {"code": "WELCOME", "discount_type": "FIXED", "discount_value": 200}
        client.post("/admin/promos", json=body, headers=ADMIN_HEADERS)

        response = client.post("/admin/promos", json={**body, "code": " welcome "}, headers=ADMIN_HEADERS)

        assert response.status_code == 400
        assert response.json()["code"] == "duplicate_promo_code"

    def test_deactivate(self, client):
        promo_id = client.post(
            "/admin/promos",
            json={"code": "FLASH", "discount_type": "FIXED", "discount_value": 300},
            headers=ADMIN_HEADERS,
        ).json()["promo_code_id"]

        response = client.post(f"/admin/promos/{promo_id}/deactivate", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert client.get("/admin/promos", headers=ADMIN_HEADERS).json()[0]["is_active"] is False

    def test_deactivate_unknown_promo_is_404(self, client):
        response = client.post("/admin/promos/missing/deactivate", headers=ADMIN_HEADERS)
        assert response.status_code == 404
