"""In-memory guest cart store with expiry, for development and tests."""

import time
from collections.abc import Callable

from ordering.cart.storage import CartStorage

GUEST_CART_TTL_SECONDS = 60 * 60 * 24 * 30


class InMemoryGuestCartStore(CartStorage):
    """Guest carts held in process memory.

    Every write refreshes the cart's expiry; reads of an expired cart see
    an empty cart.
    """

    def __init__(
        self,
        ttl_seconds: int = GUEST_CART_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._carts: dict[str, dict[str, int]] = {}
        self._expires_at: dict[str, float] = {}

    def _expire(self, guest_id: str) -> None:
        expires_at = self._expires_at.get(guest_id)
        if expires_at is not None and self._clock() >= expires_at:
            self._carts.pop(guest_id, None)
            self._expires_at.pop(guest_id, None)

    def _lines(self, guest_id: str) -> dict[str, int]:
        self._expire(guest_id)
        return self._carts.get(guest_id, {})

    def _writable(self, guest_id: str) -> dict[str, int]:
        self._expire(guest_id)
        return self._carts.setdefault(guest_id, {})

    def _touch(self, guest_id: str) -> None:
        self._expires_at[guest_id] = self._clock() + self.ttl_seconds

    def quantities(self, shopper_id: str) -> dict[str, int]:
        return dict(self._lines(shopper_id))

    def increment(self, shopper_id: str, variant_id: str, quantity: int) -> int:
        lines = self._writable(shopper_id)
        lines[variant_id] = lines.get(variant_id, 0) + quantity
        self._touch(shopper_id)
        return lines[variant_id]

    def set_quantity(self, shopper_id: str, variant_id: str, quantity: int) -> None:
        self._writable(shopper_id)[variant_id] = quantity
        self._touch(shopper_id)

    def remove(self, shopper_id: str, variant_id: str) -> None:
        self._lines(shopper_id).pop(variant_id, None)

    def clear(self, shopper_id: str) -> None:
        self._carts.pop(shopper_id, None)
        self._expires_at.pop(shopper_id, None)

    def cart_count(self) -> int:
        return len(self._carts)

    def reset(self) -> None:
        """Drop every guest cart (useful between tests)."""
        self._carts.clear()
        self._expires_at.clear()
