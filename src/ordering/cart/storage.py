"""Cart storage strategies.

Carts support the same operations whether they live in persisted rows
(signed-in shoppers) or a keyed store with an expiry (guests). Business
logic only sees ``CartStorage``; the aggregator picks the strategy.
"""

from abc import ABC, abstractmethod

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart

logger = structlog.get_logger(__name__)


class CartStorage(ABC):
    """Quantity-per-variant storage for one shopper's cart."""

    @abstractmethod
    def quantities(self, shopper_id: str) -> dict[str, int]:
        """Return {variant_id: quantity} in the order lines were first added."""
        ...

    @abstractmethod
    def increment(self, shopper_id: str, variant_id: str, quantity: int) -> int:
        """Atomically add quantity to a line, creating it if needed. Returns the new quantity."""
        ...

    @abstractmethod
    def set_quantity(self, shopper_id: str, variant_id: str, quantity: int) -> None: ...

    @abstractmethod
    def remove(self, shopper_id: str, variant_id: str) -> None: ...

    @abstractmethod
    def clear(self, shopper_id: str) -> None: ...


class PersistedCartStorage(CartStorage):
    """Signed-in carts stored as ShoppingCart aggregates.

    Concurrent writers to the same cart are serialized by the aggregate's
    version check; increments retry on a version conflict so no add is lost.
    """

    def __init__(self, max_attempts: int = 3):
        self._max_attempts = max_attempts

    @staticmethod
    def _repository():
        return current_domain.repository_for(ShoppingCart)

    def _load(self, shopper_id: str) -> ShoppingCart | None:
        try:
            return self._repository().get(shopper_id)
        except ObjectNotFoundError:
            return None

    def quantities(self, shopper_id: str) -> dict[str, int]:
        cart = self._load(shopper_id)
        if cart is None:
            return {}
        return {str(line.variant_id): line.quantity for line in cart.ordered_lines()}

    def increment(self, shopper_id: str, variant_id: str, quantity: int) -> int:
        attempt = 1
        while True:
            cart = self._load(shopper_id) or ShoppingCart.open(shopper_id)
            new_quantity = cart.add_line(variant_id, quantity)
            try:
                self._repository().add(cart)
                return new_quantity
            except ExpectedVersionError:
                if attempt >= self._max_attempts:
                    raise
                logger.info(
                    "Cart changed concurrently, retrying increment",
                    shopper_id=shopper_id,
                    variant_id=variant_id,
                    attempt=attempt,
                )
                attempt += 1

    def set_quantity(self, shopper_id: str, variant_id: str, quantity: int) -> None:
        cart = self._load(shopper_id) or ShoppingCart.open(shopper_id)
        if cart.line_for(variant_id) is None:
            cart.add_line(variant_id, quantity)
        else:
            cart.set_line_quantity(variant_id, quantity)
        self._repository().add(cart)

    def remove(self, shopper_id: str, variant_id: str) -> None:
        cart = self._load(shopper_id)
        if cart is None or cart.line_for(variant_id) is None:
            return
        cart.remove_line(variant_id)
        self._repository().add(cart)

    def clear(self, shopper_id: str) -> None:
        cart = self._load(shopper_id)
        if cart is None or not cart.lines:
            return
        cart.clear()
        self._repository().add(cart)
