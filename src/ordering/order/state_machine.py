"""Order State Machine: the only way an order's status changes after checkout.

Transitions are validated by the Order aggregate. This service loads and
saves orders, and tells the Notification Port about the transitions
shoppers care about once the change is saved. A failing notification is
logged and never undoes the transition.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from notifications.notice import NoticeItem, NotificationEvent, OrderNotice
from notifications.notifier import OrderNotifier
from ordering.errors import CannotCancelAtThisStage, InvalidTransition, OrderNotFound
from ordering.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)

_NOTIFY_ON = {
    OrderStatus.PAID: NotificationEvent.ORDER_CONFIRMED,
    OrderStatus.SHIPPED: NotificationEvent.ORDER_SHIPPED,
    OrderStatus.DELIVERED: NotificationEvent.ORDER_DELIVERED,
}


def build_notice(order: Order) -> OrderNotice:
    return OrderNotice(
        order_id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        total=order.total,
        customer_email=order.customer_email,
        customer_name=order.customer_name,
        tracking_token=order.tracking_token,
        tracking_number=order.tracking_number,
        tracking_url=order.tracking_url,
        estimated_delivery=order.estimated_delivery,
        payment_method=order.payment_method,
        items=tuple(NoticeItem(name=item.product_name, quantity=item.quantity) for item in order.items),
    )


class OrderStateMachine:
    def __init__(self, notifier: OrderNotifier) -> None:
        self._notifier = notifier

    @staticmethod
    def _repository():
        return current_domain.repository_for(Order)

    def load(self, order_id: str) -> Order:
        try:
            return self._repository().get(order_id)
        except ObjectNotFoundError as exc:
            raise OrderNotFound(order_id) from exc

    def transition(self, order: Order, new_status, note: str | None = None, actor: str = "system") -> None:
        """Apply a transition to an order the caller will save.

        Callers that persist the order together with other changes in one
        unit of work call ``announce`` after the commit.
        """
        order.transition_to(new_status, note=note, actor=actor)

    def update_status(self, order_id: str, new_status, note: str | None = None, actor: str = "admin") -> Order:
        order = self.load(order_id)
        order.transition_to(new_status, note=note, actor=actor)
        self._repository().add(order)

        logger.info(
            "Order status updated",
            order_id=order_id,
            status=order.status,
            actor=actor,
        )
        self.announce(order)
        return order

    def cancel_by_customer(self, order_id: str, shopper_id: str, reason: str | None = None) -> Order:
        order = self.load(order_id)
        if str(order.shopper_id) != str(shopper_id):
            raise OrderNotFound(order_id)
        if not order.is_cancellable:
            raise CannotCancelAtThisStage(order.status)

        order.transition_to(OrderStatus.CANCELLED, note=reason or "Cancelled by customer", actor=str(shopper_id))
        self._repository().add(order)

        logger.info("Order cancelled by customer", order_id=order_id, was_paid=order.is_paid)
        return order

    def add_tracking_info(
        self,
        order_id: str,
        tracking_number: str,
        tracking_url: str | None = None,
        estimated_delivery: str | None = None,
        actor: str = "admin",
    ) -> Order:
        """Record courier details and mark the order SHIPPED."""
        order = self.load(order_id)
        if not order.can_transition_to(OrderStatus.SHIPPED):
            raise InvalidTransition(order.status, OrderStatus.SHIPPED.value)

        order.set_tracking(tracking_number, tracking_url, estimated_delivery)
        order.transition_to(OrderStatus.SHIPPED, note=f"Tracking number: {tracking_number}", actor=actor)
        self._repository().add(order)

        self.announce(order)
        return order

    def announce(self, order: Order) -> None:
        """Notify about the order's current status, if shoppers hear about it."""
        event = _NOTIFY_ON.get(OrderStatus(order.status))
        if event is None:
            return

        try:
            self._notifier.notify(event, build_notice(order))
        except Exception:
            logger.exception(
                "Order notification failed",
                order_id=str(order.id),
                notification_event=event.value,
            )
