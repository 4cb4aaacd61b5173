"""Application tests for payment callback processing."""

import pytest
from protean import current_domain

from ordering.catalogue.product import Product, ProductVariant
from ordering.checkout.orchestrator import CheckoutRequest
from ordering.errors import InvalidSignature
from ordering.order.order import Order, OrderStatus
from ordering.promo.promo import PromoCode

SHOPPER = "shopper-001"


def transaction_payload(gateway_order_id, success=True, pending=False, transaction_id=9001, amount_cents=2405000):
    return {
        "type": "TRANSACTION",
        "obj": {
            "id": transaction_id,
            "pending": pending,
            "amount_cents": amount_cents,
            "success": success,
            "is_auth": False,
            "is_capture": False,
            "is_standalone_payment": True,
            "is_voided": False,
            "is_refunded": False,
            "is_3d_secure": True,
            "integration_id": 4567,
            "has_parent_transaction": False,
            "error_occured": False,
            "owner": 302,
            "currency": "EGP",
            "created_at": "2026-10-19T10:15:00.000000",
            "order": {"id": gateway_order_id, "merchant_order_id": "ignored"},
            "source_data": {"pan": "2346", "type": "card", "sub_type": "MasterCard"},
        },
    }


@pytest.fixture()
def pending_order(services, make_variant, new_address):
    """A card order for two sofas awaiting payment."""
    sofa = make_variant(product_name="Oslo Sofa", base_price=12000.0, stock=5)
    services.carts.add_item(SHOPPER, sofa, 2)
    session = services.checkout.init_checkout(
        SHOPPER,
        CheckoutRequest(payment_method="card", new_address=new_address(), customer_email="mona@example.com"),
    )
    return {"session": session, "variant_id": sofa}


def _deliver(services, fake_gateway, payload):
    return services.payment_callbacks.process(payload, fake_gateway.sign(payload))


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _stock(variant_id):
    return current_domain.repository_for(ProductVariant).get(variant_id).stock


class TestSuccessfulPayment:
    def test_confirms_order_and_commits_stock(self, services, fake_gateway, pending_order):
        session = pending_order["session"]

        result = _deliver(services, fake_gateway, transaction_payload(session.gateway_order_id))

        assert result.success is True
        assert result.order_id == session.order_id
        order = _order(session.order_id)
        assert order.status == OrderStatus.PAID.value
        assert order.is_paid is True
        assert order.gateway_transaction_id == "9001"
        assert _stock(pending_order["variant_id"]) == 3

    def test_clears_cart_and_sends_confirmation(self, services, fake_gateway, fake_email, pending_order):
        session = pending_order["session"]
        _deliver(services, fake_gateway, transaction_payload(session.gateway_order_id))

        assert services.carts.count_items(SHOPPER) == 0
        assert len(fake_email.sent_emails) == 1
        email = fake_email.sent_emails[0]
        assert email["to"] == "mona@example.com"
        assert email["subject"] == f"Order {session.order_number} Confirmed"
        assert f"https://furnishop.test/track/{session.tracking_token}" in email["body"]

    def test_records_promo_use(self, services, fake_gateway, make_variant, new_address):
        promo = PromoCode.create(code="SAVE100", discount_type="FIXED", discount_value=100.0)
        current_domain.repository_for(PromoCode).add(promo)
        services.carts.add_item(SHOPPER, make_variant(), 1)
        session = services.checkout.init_checkout(
            SHOPPER, CheckoutRequest(payment_method="card", new_address=new_address(), promo_code="SAVE100")
        )

        _deliver(services, fake_gateway, transaction_payload(session.gateway_order_id))

        assert current_domain.repository_for(PromoCode).get(promo.id).current_uses == 1

    def test_duplicate_callback_is_a_no_op(self, services, fake_gateway, fake_email, pending_order):
        session = pending_order["session"]
        payload = transaction_payload(session.gateway_order_id)
        _deliver(services, fake_gateway, payload)

        result = _deliver(services, fake_gateway, payload)

        assert result.success is True
        assert result.reason == "AlreadyProcessed"
        assert _stock(pending_order["variant_id"]) == 3
        assert len(_order(session.order_id).status_history) == 2
        assert len(fake_email.sent_emails) == 1

    def test_notification_failure_does_not_undo_payment(self, services, fake_gateway, fake_email, pending_order):
        fake_email.configure(raise_on_send=ConnectionError("smtp down"))
        session = pending_order["session"]

        result = _deliver(services, fake_gateway, transaction_payload(session.gateway_order_id))

        assert result.success is True
        assert _order(session.order_id).status == OrderStatus.PAID.value


class TestRejectedCallbacks:
    def test_tampered_payload_is_rejected(self, services, fake_gateway, pending_order):
        session = pending_order["session"]
        payload = transaction_payload(session.gateway_order_id)
        signature = fake_gateway.sign(payload)
        payload["obj"]["amount_cents"] = 100

        with pytest.raises(InvalidSignature):
            services.payment_callbacks.process(payload, signature)

        assert _order(session.order_id).status == OrderStatus.PENDING.value
        assert _stock(pending_order["variant_id"]) == 5

    def test_missing_signature_is_rejected(self, services, pending_order):
        payload = transaction_payload(pending_order["session"].gateway_order_id)
        with pytest.raises(InvalidSignature):
            services.payment_callbacks.process(payload, None)

    @pytest.mark.parametrize("payload", [[1, 2], "obj", None])
    def test_non_object_payload_is_rejected(self, services, payload):
        with pytest.raises(InvalidSignature):
            services.payment_callbacks.process(payload, "any-signature")

    def test_unknown_order(self, services, fake_gateway):
        result = _deliver(services, fake_gateway, transaction_payload("unknown-gateway-order"))
        assert result.success is False
        assert result.reason == "OrderNotFound"


class TestUnsuccessfulPayments:
    def test_failed_payment_cancels_order(self, services, fake_gateway, pending_order):
        session = pending_order["session"]

        result = _deliver(services, fake_gateway, transaction_payload(session.gateway_order_id, success=False))

        assert result.success is False
        order = _order(session.order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.history()[-1].note == "Payment failed"
        assert _stock(pending_order["variant_id"]) == 5
        assert services.carts.count_items(SHOPPER) == 2

    def test_pending_callback_changes_nothing(self, services, fake_gateway, pending_order):
        session = pending_order["session"]

        result = _deliver(
            services, fake_gateway, transaction_payload(session.gateway_order_id, success=False, pending=True)
        )

        assert result.reason == "Pending"
        assert _order(session.order_id).status == OrderStatus.PENDING.value

    def test_callback_for_cancelled_order(self, services, fake_gateway, pending_order):
        session = pending_order["session"]
        services.orders.cancel_by_customer(session.order_id, SHOPPER)

        result = _deliver(services, fake_gateway, transaction_payload(session.gateway_order_id))

        assert result.success is False
        assert result.reason == "NotAwaitingPayment"
        assert _stock(pending_order["variant_id"]) == 5

    def test_stock_sold_out_before_payment_cancels_and_flags_refund(self, services, fake_gateway, pending_order):
        session = pending_order["session"]
        variant = current_domain.repository_for(ProductVariant).get(pending_order["variant_id"])
        variant.stock = 1
        current_domain.repository_for(ProductVariant).add(variant)

        result = _deliver(services, fake_gateway, transaction_payload(session.gateway_order_id))

        assert result.success is False
        assert result.reason == "InsufficientStock"
        order = _order(session.order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.refund_required is True
        assert order.history()[-1].note == "Insufficient stock: Oslo Sofa"
        assert _stock(pending_order["variant_id"]) == 1

    def test_product_withdrawn_before_payment_cancels_and_flags_refund(self, services, fake_gateway, pending_order):
        session = pending_order["session"]
        variant = current_domain.repository_for(ProductVariant).get(pending_order["variant_id"])
        product = current_domain.repository_for(Product).get(variant.product_id)
        product.is_active = False
        current_domain.repository_for(Product).add(product)

        result = _deliver(services, fake_gateway, transaction_payload(session.gateway_order_id))

        assert result.success is False
        assert result.reason == "InsufficientStock"
        assert _order(session.order_id).refund_required is True
        assert _stock(pending_order["variant_id"]) == 5
