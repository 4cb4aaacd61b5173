"""Inventory Guard: stock checks and commits per variant.

Stock is only decremented once payment is confirmed. Pending orders do not
reserve units, so the payment callback re-checks before committing.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalogue.product import ProductVariant
from ordering.catalogue.reader import CatalogueReader, RepositoryCatalogueReader
from ordering.errors import InsufficientStock, VariantNotFound

logger = structlog.get_logger(__name__)


class InventoryGuard:
    def __init__(self, catalogue: CatalogueReader | None = None) -> None:
        self._catalogue = catalogue or RepositoryCatalogueReader()

    @staticmethod
    def _load(variant_id: str) -> ProductVariant:
        try:
            return current_domain.repository_for(ProductVariant).get(variant_id)
        except ObjectNotFoundError as exc:
            raise VariantNotFound(variant_id) from exc

    def check_stock(self, variant_id: str, quantity: int) -> bool:
        """True when the variant and its product are both on sale with enough units."""
        snapshot = self._catalogue.get_variant(variant_id)
        return snapshot is not None and snapshot.is_active and snapshot.stock >= quantity

    def decrement_stock(self, variant_id: str, quantity: int) -> None:
        """Commit sold units. Callers check stock first.

        The write is version-checked, so a concurrent decrement of the same
        variant fails at commit instead of overwriting it.
        """
        variant = self._load(variant_id)
        if variant.stock < quantity:
            raise InsufficientStock(variant_id, quantity, variant.stock)

        variant.decrement_stock(quantity)
        current_domain.repository_for(ProductVariant).add(variant)

        logger.info(
            "Stock committed",
            variant_id=variant_id,
            quantity=quantity,
            remaining=variant.stock,
        )
