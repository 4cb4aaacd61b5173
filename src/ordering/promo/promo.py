"""PromoCode aggregate: discount rules created by admins and applied at checkout."""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from ordering.domain import ordering


class DiscountType(Enum):
    PERCENT = "PERCENT"
    FIXED = "FIXED"


@ordering.aggregate
class PromoCode:
    code = String(required=True, max_length=50, unique=True)
    description = String(max_length=255)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True, min_value=0.0)
    min_cart_value = Float(min_value=0.0)
    max_discount_amount = Float(min_value=0.0)
    max_uses = Integer(min_value=1)
    max_uses_per_user = Integer(min_value=1)
    current_uses = Integer(default=0, min_value=0)
    excluded_category_ids = Text()  # JSON array
    excluded_product_ids = Text()  # JSON array
    starts_at = DateTime(required=True)
    expires_at = DateTime()
    is_active = Boolean(default=True)
    created_at = DateTime()

    @invariant.post
    def percent_discount_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENT.value and self.discount_value > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100"]})

    @invariant.post
    def window_must_end_after_it_starts(self):
        if self.expires_at and self.starts_at and self.expires_at <= self.starts_at:
            raise ValidationError({"expires_at": ["Expiry must be after the start date"]})

    @classmethod
    def create(
        cls,
        code,
        discount_type,
        discount_value,
        description=None,
        min_cart_value=None,
        max_discount_amount=None,
        max_uses=None,
        max_uses_per_user=1,
        excluded_category_ids=None,
        excluded_product_ids=None,
        starts_at=None,
        expires_at=None,
    ):
        now = datetime.now(UTC)
        return cls(
            code=normalize_code(code),
            description=description,
            discount_type=discount_type,
            discount_value=discount_value,
            min_cart_value=min_cart_value,
            max_discount_amount=max_discount_amount,
            max_uses=max_uses,
            max_uses_per_user=max_uses_per_user,
            excluded_category_ids=json.dumps(list(excluded_category_ids or [])),
            excluded_product_ids=json.dumps(list(excluded_product_ids or [])),
            starts_at=starts_at or now,
            expires_at=expires_at,
            is_active=True,
            created_at=now,
        )

    @property
    def excluded_categories(self) -> set[str]:
        return set(json.loads(self.excluded_category_ids)) if self.excluded_category_ids else set()

    @property
    def excluded_products(self) -> set[str]:
        return set(json.loads(self.excluded_product_ids)) if self.excluded_product_ids else set()

    def deactivate(self) -> None:
        self.is_active = False

    def record_use(self) -> None:
        """Count one paid order against this code. Never reversed."""
        self.current_uses = (self.current_uses or 0) + 1


def normalize_code(code: str) -> str:
    return code.strip().upper()


@ordering.repository(part_of=PromoCode)
class PromoCodeRepository:
    def find_by_code(self, code: str) -> PromoCode | None:
        results = self._dao.query.filter(code=normalize_code(code)).all().items
        return results[0] if results else None

    def list_all(self) -> list[PromoCode]:
        return sorted(
            self._dao.query.all().items,
            key=lambda promo: promo.created_at or datetime.min.replace(tzinfo=UTC),
            reverse=True,
        )
