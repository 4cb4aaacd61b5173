"""Application tests for order history and public tracking."""

import pytest

from ordering.checkout.orchestrator import CheckoutRequest
from ordering.errors import OrderNotFound

SHOPPER = "shopper-001"


@pytest.fixture()
def place_order(services, make_variant, new_address):
    def _place(shopper_id=SHOPPER, payment_method="cod"):
        services.carts.add_item(shopper_id, make_variant(), 1)
        return services.checkout.init_checkout(
            shopper_id, CheckoutRequest(payment_method=payment_method, new_address=new_address())
        )

    return _place


class TestPublicTracking:
    def test_tracking_view_hides_personal_details(self, services, place_order):
        session = place_order()

        view = services.order_queries.track(session.tracking_token)

        assert view["order_number"] == session.order_number
        assert view["status"] == "PROCESSING"
        assert view["shipping_city"] == "Cairo"
        assert view["items"][0]["product_name"] == "Oslo Sofa"
        assert [entry["status"] for entry in view["status_history"]] == ["PENDING", "PROCESSING"]
        rendered = repr(view)
        assert SHOPPER not in rendered
        assert "01000000000" not in rendered
        assert "12 Nile Corniche" not in rendered

    def test_unknown_token(self, services):
        with pytest.raises(OrderNotFound):
            services.order_queries.track("not-a-token")


class TestShopperOrders:
    def test_get_own_order(self, services, place_order):
        session = place_order()
        order = services.order_queries.get_order(session.order_id, SHOPPER)
        assert order.order_number == session.order_number

    def test_other_shoppers_order_looks_missing(self, services, place_order):
        session = place_order()
        with pytest.raises(OrderNotFound):
            services.order_queries.get_order(session.order_id, "shopper-999")

    def test_list_orders_pages_and_counts(self, services, place_order):
        for _ in range(3):
            place_order()
        place_order(shopper_id="shopper-002")

        orders, total = services.order_queries.list_orders(SHOPPER, page=1, limit=2)
        assert total == 3
        assert len(orders) == 2

        orders, total = services.order_queries.list_orders(SHOPPER, page=2, limit=2)
        assert len(orders) == 1

    def test_list_orders_filters_by_status(self, services, place_order):
        place_order(payment_method="cod")
        place_order(payment_method="card")

        orders, total = services.order_queries.list_orders(SHOPPER, status="PENDING")
        assert total == 1
        assert orders[0].payment_method == "card"
