"""Shared BDD fixtures and step definitions for checkout and payment."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from ordering.catalogue.product import ProductVariant
from ordering.checkout.orchestrator import CheckoutRequest
from ordering.order.order import Order
from ordering.promo.promo import PromoCode

SHOPPER_ID = "shopper-bdd"
SHOPPER_EMAIL = "mona@example.com"


@pytest.fixture()
def shopper_id():
    return SHOPPER_ID


@pytest.fixture()
def checkout_with(services, new_address):
    """Run a checkout for the scenario's shopper."""

    def _checkout(method, governorate, promo_code=None):
        request = CheckoutRequest(
            payment_method=method,
            new_address=new_address(city=governorate, governorate=governorate),
            promo_code=promo_code,
            customer_email=SHOPPER_EMAIL,
        )
        return services.checkout.init_checkout(SHOPPER_ID, request)

    return _checkout


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a sofa priced at {price:d} EGP with {stock:d} in stock"), target_fixture="variant_id")
def sofa_in_stock(make_variant, price, stock):
    return make_variant(product_name="Aswan Sofa", base_price=float(price), stock=stock)


@given(parsers.cfparse("the shopper has {quantity:d} of it in their cart"))
def sofa_in_cart(services, variant_id, quantity):
    services.carts.add_item(SHOPPER_ID, variant_id, quantity)


@given(parsers.cfparse('a FIXED promo "{code}" worth {value:d}'))
def fixed_promo(code, value):
    current_domain.repository_for(PromoCode).add(
        PromoCode.create(code=code, discount_type="FIXED", discount_value=float(value))
    )


@given(parsers.cfparse('a FIXED promo "{code}" worth {value:d} with minimum cart {minimum:d}'))
def fixed_promo_with_minimum(code, value, minimum):
    current_domain.repository_for(PromoCode).add(
        PromoCode.create(
            code=code,
            discount_type="FIXED",
            discount_value=float(value),
            min_cart_value=float(minimum),
        )
    )


@given(parsers.cfparse('a PERCENT promo "{code}" worth {value:d} capped at {cap:d} with minimum cart {minimum:d}'))
def capped_percent_promo(code, value, cap, minimum):
    current_domain.repository_for(PromoCode).add(
        PromoCode.create(
            code=code,
            discount_type="PERCENT",
            discount_value=float(value),
            max_discount_amount=float(cap),
            min_cart_value=float(minimum),
        )
    )


@given(parsers.cfparse('the shopper has checked out with "{method}" to "{governorate}"'), target_fixture="session")
def checked_out(checkout_with, method, governorate):
    return checkout_with(method, governorate)


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
def _order(session):
    return current_domain.repository_for(Order).get(session.order_id)


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(session, status):
    assert _order(session).status == status


@then(parsers.cfparse('the order history is "{statuses}"'))
def order_history_is(session, statuses):
    expected = [status.strip() for status in statuses.split(",")]
    assert [entry.status for entry in _order(session).history()] == expected


@then(parsers.cfparse("the order total is {amount:d}"))
def order_total_is(session, amount):
    assert _order(session).total == float(amount)


@then(parsers.cfparse("the sofa has {stock:d} in stock"))
def sofa_stock_is(variant_id, stock):
    assert current_domain.repository_for(ProductVariant).get(variant_id).stock == stock


@then("the shopper's cart is empty")
def cart_is_empty(services):
    assert services.carts.get_cart(SHOPPER_ID).is_empty
