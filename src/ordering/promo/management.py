"""Promo code administration: create, deactivate."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import DuplicatePromoCode, PromoCodeNotFound
from ordering.promo.promo import DiscountType, PromoCode


@ordering.command(part_of="PromoCode")
class CreatePromoCode:
    code = String(required=True, max_length=50)
    description = String(max_length=255)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True, min_value=0.0)
    min_cart_value = Float(min_value=0.0)
    max_discount_amount = Float(min_value=0.0)
    max_uses = Integer(min_value=1)
    max_uses_per_user = Integer(min_value=1, default=1)
    excluded_category_ids = Text()  # JSON array
    excluded_product_ids = Text()  # JSON array
    starts_at = DateTime()
    expires_at = DateTime()


@ordering.command(part_of="PromoCode")
class DeactivatePromoCode:
    promo_code_id = Identifier(required=True)


@ordering.command_handler(part_of=PromoCode)
class PromoCodeCommandHandler:
    @handle(CreatePromoCode)
    def create_promo_code(self, command: CreatePromoCode) -> str:
        repo = current_domain.repository_for(PromoCode)
        if repo.find_by_code(command.code) is not None:
            raise DuplicatePromoCode(command.code.strip().upper())

        promo = PromoCode.create(
            code=command.code,
            description=command.description,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            min_cart_value=command.min_cart_value,
            max_discount_amount=command.max_discount_amount,
            max_uses=command.max_uses,
            max_uses_per_user=command.max_uses_per_user,
            excluded_category_ids=json.loads(command.excluded_category_ids or "[]"),
            excluded_product_ids=json.loads(command.excluded_product_ids or "[]"),
            starts_at=command.starts_at,
            expires_at=command.expires_at,
        )
        repo.add(promo)
        return str(promo.id)

    @handle(DeactivatePromoCode)
    def deactivate_promo_code(self, command: DeactivatePromoCode) -> None:
        repo = current_domain.repository_for(PromoCode)
        try:
            promo = repo.get(command.promo_code_id)
        except ObjectNotFoundError as exc:
            raise PromoCodeNotFound(str(command.promo_code_id)) from exc

        promo.deactivate()
        repo.add(promo)
