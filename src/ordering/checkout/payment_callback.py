"""Payment callback processing.

The gateway calls back once a hosted payment finishes, sometimes more than
once. Nothing in the payload is trusted before the signature checks out.
After that the order's current status decides what happens, so a repeated
callback for a paid order changes nothing.
"""

from dataclasses import dataclass

import structlog
from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.cart.aggregator import CartAggregator
from ordering.errors import InvalidSignature
from ordering.inventory.guard import InventoryGuard
from ordering.order.order import Order, OrderStatus
from ordering.order.state_machine import OrderStateMachine
from ordering.promo.promo import PromoCode
from payments.gateway.port import CallbackTransaction, PaymentGateway

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CallbackResult:
    success: bool
    message: str
    order_id: str | None = None
    reason: str | None = None


class PaymentCallbackProcessor:
    def __init__(
        self,
        gateway: PaymentGateway,
        inventory: InventoryGuard,
        orders: OrderStateMachine,
        carts: CartAggregator,
    ) -> None:
        self._gateway = gateway
        self._inventory = inventory
        self._orders = orders
        self._carts = carts

    def process(self, payload: dict, signature: str | None) -> CallbackResult:
        if not isinstance(payload, dict) or not self._gateway.verify_callback(payload, signature):
            logger.warning("Payment callback rejected: invalid signature")
            raise InvalidSignature()

        transaction = CallbackTransaction.from_payload(payload)
        repo = current_domain.repository_for(Order)
        order = repo.find_by_gateway_order_id(transaction.gateway_order_id) if transaction.gateway_order_id else None
        if order is None:
            logger.warning(
                "Payment callback for unknown order",
                gateway_order_id=transaction.gateway_order_id,
                transaction_id=transaction.transaction_id,
            )
            return CallbackResult(success=False, message="Order not found", reason="OrderNotFound")

        order_id = str(order.id)
        if order.is_paid:
            logger.info("Duplicate payment callback ignored", order_id=order_id, transaction_id=transaction.transaction_id)
            return CallbackResult(success=True, message="Payment already confirmed", order_id=order_id, reason="AlreadyProcessed")

        if order.status != OrderStatus.PENDING.value:
            logger.info("Payment callback for order not awaiting payment", order_id=order_id, status=order.status)
            return CallbackResult(
                success=False,
                message="Order is no longer awaiting payment",
                order_id=order_id,
                reason="NotAwaitingPayment",
            )

        if transaction.pending:
            return CallbackResult(success=False, message="Payment is still pending", order_id=order_id, reason="Pending")

        if not transaction.success:
            self._orders.transition(order, OrderStatus.CANCELLED, note="Payment failed", actor="gateway")
            repo.add(order)
            logger.info("Payment failed, order cancelled", order_id=order_id, transaction_id=transaction.transaction_id)
            return CallbackResult(success=False, message="Payment failed", order_id=order_id, reason="PaymentFailed")

        short = [item for item in order.items if not self._inventory.check_stock(item.variant_id, item.quantity)]
        if short:
            return self._cancel_for_stock(order, short, transaction)

        with UnitOfWork():
            order.confirm_payment(transaction.transaction_id)
            repo.add(order)
            for item in order.items:
                self._inventory.decrement_stock(str(item.variant_id), item.quantity)
            if order.promo_code_id:
                self._record_promo_use(str(order.promo_code_id), order_id)
            self._carts.clear_cart(str(order.shopper_id), order.shopper_is_guest)

        logger.info(
            "Payment confirmed",
            order_id=order_id,
            transaction_id=transaction.transaction_id,
            total=order.total,
        )
        self._orders.announce(order)
        return CallbackResult(success=True, message="Payment successful", order_id=order_id)

    def _cancel_for_stock(self, order: Order, short: list, transaction: CallbackTransaction) -> CallbackResult:
        names = ", ".join(item.product_name for item in short)
        order.flag_for_refund()
        self._orders.transition(
            order,
            OrderStatus.CANCELLED,
            note=f"Insufficient stock: {names}",
            actor="gateway",
        )
        current_domain.repository_for(Order).add(order)

        # TODO: hand refund_required orders to the refund job once the provider refund API is integrated
        logger.warning(
            "Paid order cancelled for insufficient stock, refund required",
            order_id=str(order.id),
            transaction_id=transaction.transaction_id,
            items=names,
            total=order.total,
        )
        return CallbackResult(
            success=False,
            message="Some items are no longer in stock. Your payment will be refunded.",
            order_id=str(order.id),
            reason="InsufficientStock",
        )

    @staticmethod
    def _record_promo_use(promo_code_id: str, order_id: str) -> None:
        repo = current_domain.repository_for(PromoCode)
        try:
            promo = repo.get(promo_code_id)
        except ObjectNotFoundError:
            logger.warning("Promo code on paid order no longer exists", promo_code_id=promo_code_id, order_id=order_id)
            return
        promo.record_use()
        repo.add(promo)
