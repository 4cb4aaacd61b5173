"""Catalogue reader: the read-only view of variants that carts and checkout price against."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product, ProductVariant


@dataclass(frozen=True)
class VariantSnapshot:
    """Current catalogue state of one purchasable variant."""

    variant_id: str
    product_id: str
    category_id: str | None
    product_name: str
    variant_name: str
    base_price: float
    price_adjustment: float
    stock: int
    is_active: bool

    @property
    def unit_price(self) -> float:
        return round(self.base_price + self.price_adjustment, 2)


class CatalogueReader(ABC):
    @abstractmethod
    def get_variant(self, variant_id: str) -> VariantSnapshot | None:
        """Return the variant joined with its product, or None if either is gone."""
        ...


class RepositoryCatalogueReader(CatalogueReader):
    """Reads variants and products through the ordering domain's repositories."""

    def get_variant(self, variant_id: str) -> VariantSnapshot | None:
        try:
            variant = current_domain.repository_for(ProductVariant).get(variant_id)
            product = current_domain.repository_for(Product).get(variant.product_id)
        except ObjectNotFoundError:
            return None

        return VariantSnapshot(
            variant_id=str(variant.id),
            product_id=str(product.id),
            category_id=str(product.category_id) if product.category_id else None,
            product_name=product.name,
            variant_name=variant.name,
            base_price=product.base_price,
            price_adjustment=variant.price_adjustment or 0.0,
            stock=variant.stock,
            is_active=bool(variant.is_active and product.is_active),
        )
