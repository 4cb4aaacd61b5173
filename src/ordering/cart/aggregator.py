"""Cart Aggregator: one cart API over persisted and guest storage.

Every read joins stored quantities against the live catalogue, so price
changes show up immediately. Stored prices are never trusted.
"""

import structlog
from protean.exceptions import ValidationError

from ordering.cart.storage import CartStorage
from ordering.cart.view import Cart, CartValidation, PricedLine
from ordering.catalogue.reader import CatalogueReader, VariantSnapshot
from ordering.errors import CartLineNotFound, InsufficientStock, VariantNotFound

logger = structlog.get_logger(__name__)


def _priced_line(snapshot: VariantSnapshot, quantity: int) -> PricedLine:
    return PricedLine(
        variant_id=snapshot.variant_id,
        product_id=snapshot.product_id,
        category_id=snapshot.category_id,
        product_name=snapshot.product_name,
        variant_name=snapshot.variant_name,
        quantity=quantity,
        unit_price=snapshot.unit_price,
    )


class CartAggregator:
    def __init__(self, catalogue: CatalogueReader, persisted: CartStorage, guest: CartStorage) -> None:
        self._catalogue = catalogue
        self._persisted = persisted
        self._guest = guest

    def storage_for(self, is_guest: bool) -> CartStorage:
        return self._guest if is_guest else self._persisted

    def _available_variant(self, variant_id: str) -> VariantSnapshot:
        snapshot = self._catalogue.get_variant(variant_id)
        if snapshot is None or not snapshot.is_active:
            raise VariantNotFound(variant_id)
        return snapshot

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_cart(self, shopper_id: str, is_guest: bool = False) -> Cart:
        lines = []
        for variant_id, quantity in self.storage_for(is_guest).quantities(shopper_id).items():
            snapshot = self._catalogue.get_variant(variant_id)
            if snapshot is None:
                # Variant deleted from the catalogue; validate_cart purges it
                continue
            lines.append(_priced_line(snapshot, quantity))
        return Cart(lines=tuple(lines))

    def count_items(self, shopper_id: str, is_guest: bool = False) -> int:
        return sum(self.storage_for(is_guest).quantities(shopper_id).values())

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def add_item(self, shopper_id: str, variant_id: str, quantity: int, is_guest: bool = False) -> Cart:
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        snapshot = self._available_variant(variant_id)
        storage = self.storage_for(is_guest)
        in_cart = storage.quantities(shopper_id).get(variant_id, 0)
        if in_cart + quantity > snapshot.stock:
            raise InsufficientStock(variant_id, in_cart + quantity, snapshot.stock)

        storage.increment(shopper_id, variant_id, quantity)
        logger.info("Cart item added", shopper_id=shopper_id, variant_id=variant_id, quantity=quantity)
        return self.get_cart(shopper_id, is_guest)

    def update_item(self, shopper_id: str, variant_id: str, quantity: int, is_guest: bool = False) -> Cart:
        storage = self.storage_for(is_guest)
        current = storage.quantities(shopper_id)
        if variant_id not in current:
            raise CartLineNotFound(variant_id)

        if quantity <= 0:
            return self.remove_item(shopper_id, variant_id, is_guest)

        if quantity > current[variant_id]:
            snapshot = self._available_variant(variant_id)
            if quantity > snapshot.stock:
                raise InsufficientStock(variant_id, quantity, snapshot.stock)

        storage.set_quantity(shopper_id, variant_id, quantity)
        return self.get_cart(shopper_id, is_guest)

    def remove_item(self, shopper_id: str, variant_id: str, is_guest: bool = False) -> Cart:
        self.storage_for(is_guest).remove(shopper_id, variant_id)
        return self.get_cart(shopper_id, is_guest)

    def clear_cart(self, shopper_id: str, is_guest: bool = False) -> None:
        self.storage_for(is_guest).clear(shopper_id)

    # -------------------------------------------------------------------
    # Checkout gate
    # -------------------------------------------------------------------
    def validate_cart(self, shopper_id: str, is_guest: bool = False) -> CartValidation:
        """Drop lines that can no longer be bought and report their names."""
        storage = self.storage_for(is_guest)
        lines = []
        removed = []

        for variant_id, quantity in storage.quantities(shopper_id).items():
            snapshot = self._catalogue.get_variant(variant_id)
            if snapshot is None or not snapshot.is_active or snapshot.stock < quantity:
                storage.remove(shopper_id, variant_id)
                removed.append(snapshot.product_name if snapshot else variant_id)
                continue
            lines.append(_priced_line(snapshot, quantity))

        if removed:
            logger.info("Unavailable cart items removed", shopper_id=shopper_id, removed=removed)

        return CartValidation(cart=Cart(lines=tuple(lines)), removed_item_names=removed)

    def transfer_guest_cart(self, guest_id: str, shopper_id: str) -> Cart:
        """Merge a guest cart into the shopper's persisted cart, then empty it."""
        guest_lines = self._guest.quantities(guest_id)
        if not guest_lines:
            return self.get_cart(shopper_id)

        for variant_id, quantity in guest_lines.items():
            self._persisted.increment(shopper_id, variant_id, quantity)
        self._guest.clear(guest_id)

        logger.info(
            "Guest cart transferred",
            guest_id=guest_id,
            shopper_id=shopper_id,
            lines=len(guest_lines),
        )
        return self.get_cart(shopper_id)
