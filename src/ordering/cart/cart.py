"""Persisted shopping cart for signed-in shoppers.

One ShoppingCart per shopper, holding at most one line per variant. Lines
carry only the variant and quantity; prices are always recomputed from the
catalogue when the cart is read.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from ordering.domain import ordering


@ordering.entity(part_of="ShoppingCart")
class CartLine:
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@ordering.aggregate
class ShoppingCart:
    shopper_id = Identifier(identifier=True)
    lines = HasMany(CartLine)
    updated_at = DateTime()

    @invariant.post
    def one_line_per_variant(self):
        variant_ids = [str(line.variant_id) for line in self.lines]
        if len(variant_ids) != len(set(variant_ids)):
            raise ValidationError({"lines": ["A variant can only appear once in a cart"]})

    @classmethod
    def open(cls, shopper_id):
        return cls(shopper_id=shopper_id, updated_at=datetime.now(UTC))

    def line_for(self, variant_id) -> CartLine | None:
        return next((line for line in self.lines if str(line.variant_id) == str(variant_id)), None)

    def ordered_lines(self) -> list[CartLine]:
        return sorted(self.lines, key=lambda line: line.added_at or datetime.min.replace(tzinfo=UTC))

    def add_line(self, variant_id, quantity: int) -> int:
        """Add quantity to the variant's line, creating the line if needed.

        Returns the line's new quantity.
        """
        now = datetime.now(UTC)
        existing = self.line_for(variant_id)
        if existing:
            existing.quantity += quantity
            new_quantity = existing.quantity
        else:
            self.add_lines(CartLine(variant_id=variant_id, quantity=quantity, added_at=now))
            new_quantity = quantity

        self.updated_at = now
        return new_quantity

    def set_line_quantity(self, variant_id, quantity: int) -> None:
        line = self.line_for(variant_id)
        if line is None:
            raise ValidationError({"variant_id": ["Item not found in cart"]})

        line.quantity = quantity
        self.updated_at = datetime.now(UTC)

    def remove_line(self, variant_id) -> None:
        line = self.line_for(variant_id)
        if line is None:
            return

        self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

    def clear(self) -> None:
        for line in list(self.lines):
            self.remove_lines(line)
        self.updated_at = datetime.now(UTC)
