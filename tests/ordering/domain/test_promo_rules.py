"""Tests for promo eligibility rules and discount arithmetic."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError

from ordering.cart.view import Cart, PricedLine
from ordering.promo.evaluator import PromoRejection, compute_discount, evaluate_promo
from ordering.promo.promo import DiscountType, PromoCode

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


def _cart(*lines):
    return Cart(lines=tuple(lines))


def _line(product_id="prod-sofa", category_id="cat-living", unit_price=12000.0, quantity=2):
    return PricedLine(
        variant_id=f"var-{product_id}",
        product_id=product_id,
        category_id=category_id,
        product_name=product_id,
        variant_name="Default",
        quantity=quantity,
        unit_price=unit_price,
    )


def _promo(**overrides):
    values = {
        "code": "save100",
        "discount_type": DiscountType.FIXED.value,
        "discount_value": 100.0,
        "starts_at": NOW - timedelta(days=1),
    }
    values.update(overrides)
    return PromoCode.create(**values)


class TestPromoCodeCreation:
    def test_code_is_uppercased(self):
        assert _promo().code == "SAVE100"

    def test_per_shopper_limit_defaults_to_one(self):
        assert _promo().max_uses_per_user == 1

    def test_percent_above_hundred_is_rejected(self):
        with pytest.raises(ValidationError):
            _promo(discount_type=DiscountType.PERCENT.value, discount_value=120.0)

    def test_expiry_must_follow_start(self):
        with pytest.raises(ValidationError):
            _promo(starts_at=NOW, expires_at=NOW - timedelta(hours=1))

    def test_excluded_ids_round_trip(self):
        promo = _promo(excluded_category_ids=["cat-a"], excluded_product_ids=["prod-b"])
        assert promo.excluded_categories == {"cat-a"}
        assert promo.excluded_products == {"prod-b"}


class TestDiscountArithmetic:
    def test_fixed_discount(self):
        assert compute_discount(_promo(), 24500.0) == 100.0

    def test_fixed_discount_never_exceeds_subtotal(self):
        assert compute_discount(_promo(discount_value=500.0), 300.0) == 300.0

    def test_percent_discount_is_capped(self):
        promo = _promo(discount_type="PERCENT", discount_value=20.0, max_discount_amount=5000.0)
        assert compute_discount(promo, 24500.0) == 4900.0
        assert compute_discount(promo, 40000.0) == 5000.0

    def test_percent_discount_without_cap(self):
        promo = _promo(discount_type="PERCENT", discount_value=10.0)
        assert compute_discount(promo, 1234.5) == 123.45


class TestEvaluatePromo:
    def test_unknown_code(self):
        result = evaluate_promo(None, _cart(_line()), NOW)
        assert not result.valid
        assert result.reason == PromoRejection.INVALID_CODE

    def test_inactive(self):
        promo = _promo()
        promo.deactivate()
        assert evaluate_promo(promo, _cart(_line()), NOW).reason == PromoRejection.INACTIVE

    def test_expired(self):
        promo = _promo(expires_at=NOW - timedelta(minutes=1), starts_at=NOW - timedelta(days=2))
        assert evaluate_promo(promo, _cart(_line()), NOW).reason == PromoRejection.EXPIRED

    def test_not_yet_active(self):
        promo = _promo(starts_at=NOW + timedelta(days=1))
        assert evaluate_promo(promo, _cart(_line()), NOW).reason == PromoRejection.NOT_YET_ACTIVE

    def test_usage_limit_reached(self):
        promo = _promo(max_uses=1)
        promo.record_use()
        assert evaluate_promo(promo, _cart(_line()), NOW).reason == PromoRejection.USAGE_LIMIT_REACHED

    def test_already_used_by_shopper(self):
        result = evaluate_promo(_promo(), _cart(_line()), NOW, shopper_uses=1)
        assert result.reason == PromoRejection.ALREADY_USED_BY_SHOPPER

    def test_anonymous_evaluation_skips_shopper_limit(self):
        assert evaluate_promo(_promo(), _cart(_line()), NOW, shopper_uses=None).valid

    def test_below_minimum_names_the_threshold(self):
        promo = _promo(min_cart_value=10000.0)
        result = evaluate_promo(promo, _cart(_line(unit_price=3000.0, quantity=1)), NOW)
        assert result.reason == PromoRejection.BELOW_MINIMUM
        assert result.message == "Minimum order amount is 10000 EGP"

    def test_all_lines_excluded(self):
        promo = _promo(excluded_category_ids=["cat-living"])
        result = evaluate_promo(promo, _cart(_line()), NOW)
        assert result.reason == PromoRejection.NOT_APPLICABLE_TO_CART_CONTENTS

    def test_partial_exclusion_still_applies_to_whole_subtotal(self):
        promo = _promo(excluded_product_ids=["prod-sofa"])
        cart = _cart(_line(), _line("prod-lamp", "cat-lighting", 500.0, 1))
        result = evaluate_promo(promo, cart, NOW)
        assert result.valid
        assert result.discount == 100.0

    def test_first_failing_check_wins(self):
        promo = _promo(expires_at=NOW - timedelta(minutes=1), starts_at=NOW - timedelta(days=2))
        promo.deactivate()
        assert evaluate_promo(promo, _cart(_line()), NOW).reason == PromoRejection.INACTIVE

    def test_success_message_and_identity(self):
        promo = _promo()
        result = evaluate_promo(promo, _cart(_line(), _line("prod-lamp", "cat-lighting", 500.0, 1)), NOW)
        assert result.valid
        assert result.discount == 100.0
        assert result.message == "Promo code applied! You save 100 EGP"
        assert result.code == "SAVE100"
        assert result.promo_code_id == str(promo.id)

    def test_discount_is_within_bounds(self):
        cart = _cart(_line(unit_price=80.0, quantity=1))
        result = evaluate_promo(_promo(discount_value=100.0), cart, NOW)
        assert 0 <= result.discount <= cart.subtotal
