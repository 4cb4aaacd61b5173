"""Catalogue records the checkout core reads: products and their purchasable variants.

Product CRUD is owned elsewhere; these aggregates carry only what pricing and
stock decisions need. Variant stock is the one field checkout mutates.
"""

from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    category_id = Identifier()
    base_price = Float(required=True, min_value=0.0)
    is_active = Boolean(default=True)


@ordering.aggregate
class ProductVariant:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    sku = String(max_length=100, unique=True)
    price_adjustment = Float(default=0.0, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)

    def decrement_stock(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if quantity > self.stock:
            raise ValidationError({"stock": [f"Cannot remove {quantity} units, only {self.stock} in stock"]})
        self.stock -= quantity
