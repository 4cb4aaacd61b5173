"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state. Nothing is shared between
users.
"""

from dataclasses import dataclass


@dataclass
class ShopperState:
    """The identity a simulated shopper sends, and what their cart holds."""

    shopper_id: str
    is_guest: bool = False
    item_count: int = 0

    @property
    def headers(self) -> dict:
        return {"X-Guest-Id" if self.is_guest else "X-Shopper-Id": self.shopper_id}


@dataclass
class CheckoutState:
    """Tracks an order from checkout to tracking lookup."""

    order_id: str | None = None
    tracking_token: str | None = None
    status: str | None = None
