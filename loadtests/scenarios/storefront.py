"""Storefront load test scenarios.

Two stateful SequentialTaskSet journeys: a browsing shopper who edits a
cart and leaves, and a buyer who checks out with cash on delivery and
then follows the order through the public tracking page. Both need
``LOADTEST_VARIANT_IDS`` pointing at seeded, well-stocked variants.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cart_item_data, checkout_data, guest_id, seeded_variant_ids, shopper_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState, ShopperState


class BrowseCartJourney(SequentialTaskSet):
    """Add items -> read cart -> change quantity -> remove -> count."""

    def on_start(self):
        self.variant_ids = seeded_variant_ids()
        if not self.variant_ids:
            self.interrupt()
        self.shopper = ShopperState(shopper_id=guest_id(), is_guest=random.random() < 0.5)

    @task
    def add_items(self):
        for _ in range(random.randint(1, 3)):
            with self.client.post(
                "/cart",
                json=cart_item_data(self.variant_ids),
                headers=self.shopper.headers,
                catch_response=True,
                name="POST /cart",
            ) as resp:
                if resp.status_code == 200:
                    self.shopper.item_count = resp.json()["item_count"]
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        with self.client.get("/cart", headers=self.shopper.headers, catch_response=True, name="GET /cart") as resp:
            if resp.status_code != 200:
                resp.failure(f"View cart failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()
            items = resp.json()["items"]
            self.line_ids = [item["variant_id"] for item in items]

    @task
    def change_quantity(self):
        if not self.line_ids:
            return
        with self.client.put(
            f"/cart/{self.line_ids[0]}",
            json={"quantity": 2},
            headers=self.shopper.headers,
            catch_response=True,
            name="PUT /cart/{variant_id}",
        ) as resp:
            if resp.status_code not in (200, 422):
                resp.failure(f"Update cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def remove_line(self):
        if not self.line_ids:
            return
        self.client.delete(
            f"/cart/{self.line_ids[-1]}",
            headers=self.shopper.headers,
            name="DELETE /cart/{variant_id}",
        )

    @task
    def count(self):
        self.client.get("/cart/count", headers=self.shopper.headers, name="GET /cart/count")

    @task
    def done(self):
        self.interrupt()


class CashOnDeliveryJourney(SequentialTaskSet):
    """Add items -> checkout (COD) -> order detail -> public tracking."""

    def on_start(self):
        self.variant_ids = seeded_variant_ids()
        if not self.variant_ids:
            self.interrupt()
        self.shopper = ShopperState(shopper_id=shopper_id())
        self.state = CheckoutState()

    @task
    def fill_cart(self):
        with self.client.post(
            "/cart",
            json=cart_item_data(self.variant_ids),
            headers=self.shopper.headers,
            catch_response=True,
            name="POST /cart",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def checkout(self):
        with self.client.post(
            "/checkout/init",
            json=checkout_data("cod"),
            headers=self.shopper.headers,
            catch_response=True,
            name="POST /checkout/init",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.order_id = body["order_id"]
                self.state.tracking_token = body["tracking_token"]
                self.state.status = body["status"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def view_order(self):
        self.client.get(
            f"/orders/{self.state.order_id}",
            headers=self.shopper.headers,
            name="GET /orders/{id}",
        )

    @task
    def track(self):
        self.client.get(f"/track/{self.state.tracking_token}", name="GET /track/{token}")

    @task
    def done(self):
        self.interrupt()


class StorefrontUser(HttpUser):
    """Mostly browsing, some buying."""

    wait_time = between(0.5, 2)
    tasks = {BrowseCartJourney: 3, CashOnDeliveryJourney: 1}
