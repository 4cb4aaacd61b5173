"""Priced cart values handed to promo evaluation, checkout and the API."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PricedLine:
    variant_id: str
    product_id: str
    category_id: str | None
    product_name: str
    variant_name: str
    quantity: int
    unit_price: float

    @property
    def line_total(self) -> float:
        return round(self.unit_price * self.quantity, 2)


@dataclass(frozen=True)
class Cart:
    lines: tuple[PricedLine, ...] = ()

    @property
    def subtotal(self) -> float:
        return round(sum(line.line_total for line in self.lines), 2)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines


@dataclass(frozen=True)
class CartValidation:
    cart: Cart
    removed_item_names: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.removed_item_names
