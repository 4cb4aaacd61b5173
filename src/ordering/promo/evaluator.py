"""Promo Evaluator: decides whether a code applies to a cart and what it saves.

``evaluate_promo`` is the pure decision over a loaded promo, a priced cart and
the shopper's prior usage. ``PromoEvaluator`` loads those inputs. Neither
ever changes usage counters.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from protean.utils.globals import current_domain

from ordering.cart.view import Cart
from ordering.order.order import Order
from ordering.promo.promo import DiscountType, PromoCode
from ordering.utils.money import CURRENCY, format_amount, round_money


class PromoRejection(Enum):
    INVALID_CODE = "InvalidCode"
    INACTIVE = "Inactive"
    EXPIRED = "Expired"
    NOT_YET_ACTIVE = "NotYetActive"
    USAGE_LIMIT_REACHED = "UsageLimitReached"
    ALREADY_USED_BY_SHOPPER = "AlreadyUsedByShopper"
    BELOW_MINIMUM = "BelowMinimum"
    NOT_APPLICABLE_TO_CART_CONTENTS = "NotApplicableToCartContents"


_MESSAGES = {
    PromoRejection.INVALID_CODE: "Invalid promo code",
    PromoRejection.INACTIVE: "This promo code is no longer active",
    PromoRejection.EXPIRED: "This promo code has expired",
    PromoRejection.NOT_YET_ACTIVE: "This promo code is not yet active",
    PromoRejection.USAGE_LIMIT_REACHED: "This promo code has reached its usage limit",
    PromoRejection.ALREADY_USED_BY_SHOPPER: "You have already used this promo code",
    PromoRejection.NOT_APPLICABLE_TO_CART_CONTENTS: "This promo code is not valid for items in your cart",
}


@dataclass(frozen=True)
class PromoResult:
    valid: bool
    discount: float = 0.0
    reason: PromoRejection | None = None
    message: str = ""
    promo_code_id: str | None = None
    code: str | None = None

    @classmethod
    def rejected(cls, reason: PromoRejection, message: str | None = None) -> "PromoResult":
        return cls(valid=False, reason=reason, message=message or _MESSAGES[reason])


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def compute_discount(promo: PromoCode, subtotal: float) -> float:
    if promo.discount_type == DiscountType.PERCENT.value:
        discount = subtotal * promo.discount_value / 100
        if promo.max_discount_amount is not None:
            discount = min(discount, promo.max_discount_amount)
    else:
        discount = promo.discount_value

    return round_money(max(min(discount, subtotal), 0.0))


def evaluate_promo(
    promo: PromoCode | None,
    cart: Cart,
    now: datetime,
    shopper_uses: int | None = None,
) -> PromoResult:
    """Run the eligibility checks in order; the first failure wins.

    ``shopper_uses`` is the shopper's count of non-cancelled orders with this
    code, or None for anonymous evaluation.
    """
    if promo is None:
        return PromoResult.rejected(PromoRejection.INVALID_CODE)

    if not promo.is_active:
        return PromoResult.rejected(PromoRejection.INACTIVE)

    now = _as_utc(now)
    if promo.expires_at and now > _as_utc(promo.expires_at):
        return PromoResult.rejected(PromoRejection.EXPIRED)
    if promo.starts_at and now < _as_utc(promo.starts_at):
        return PromoResult.rejected(PromoRejection.NOT_YET_ACTIVE)

    if promo.max_uses is not None and (promo.current_uses or 0) >= promo.max_uses:
        return PromoResult.rejected(PromoRejection.USAGE_LIMIT_REACHED)

    if shopper_uses is not None and promo.max_uses_per_user is not None and shopper_uses >= promo.max_uses_per_user:
        return PromoResult.rejected(PromoRejection.ALREADY_USED_BY_SHOPPER)

    if promo.min_cart_value is not None and cart.subtotal < promo.min_cart_value:
        return PromoResult.rejected(
            PromoRejection.BELOW_MINIMUM,
            f"Minimum order amount is {format_amount(promo.min_cart_value)} {CURRENCY}",
        )

    excluded_categories = promo.excluded_categories
    excluded_products = promo.excluded_products
    if excluded_categories or excluded_products:
        if all(line.category_id in excluded_categories or line.product_id in excluded_products for line in cart.lines):
            return PromoResult.rejected(PromoRejection.NOT_APPLICABLE_TO_CART_CONTENTS)

    discount = compute_discount(promo, cart.subtotal)
    return PromoResult(
        valid=True,
        discount=discount,
        message=f"Promo code applied! You save {format_amount(discount)} {CURRENCY}",
        promo_code_id=str(promo.id),
        code=promo.code,
    )


class PromoEvaluator:
    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def validate(self, code: str, cart: Cart, shopper_id: str | None = None) -> PromoResult:
        if not code or not code.strip():
            return PromoResult.rejected(PromoRejection.INVALID_CODE)

        promo = current_domain.repository_for(PromoCode).find_by_code(code)
        shopper_uses = None
        if promo is not None and shopper_id and promo.max_uses_per_user is not None:
            shopper_uses = current_domain.repository_for(Order).count_promo_uses(shopper_id, str(promo.id))

        return evaluate_promo(promo, cart, self._clock(), shopper_uses)
