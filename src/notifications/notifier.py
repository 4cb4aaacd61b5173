"""Notification Port: "deliver event E for order O".

The order state machine calls an ``OrderNotifier`` after a transition has
been saved. Implementations may raise; the caller isolates failures.
"""

from abc import ABC, abstractmethod

import structlog

from notifications.channel.email_port import EmailPort
from notifications.notice import NotificationEvent, OrderNotice
from notifications.templates import get_template

logger = structlog.get_logger(__name__)


class OrderNotifier(ABC):
    @abstractmethod
    def notify(self, event: NotificationEvent, notice: OrderNotice) -> None: ...


class EmailOrderNotifier(OrderNotifier):
    """Renders the event's template and mails it to the order's customer."""

    def __init__(self, email: EmailPort, storefront_url: str = "", currency: str = "EGP") -> None:
        self._email = email
        self._storefront_url = storefront_url.rstrip("/")
        self._currency = currency

    def _context(self, notice: OrderNotice) -> dict:
        tracking_link = None
        if notice.tracking_token and self._storefront_url:
            tracking_link = f"{self._storefront_url}/track/{notice.tracking_token}"
        return {
            "order_id": notice.order_id,
            "order_number": notice.order_number,
            "customer_name": notice.customer_name,
            "total": f"{notice.total:.2f}",
            "currency": self._currency,
            "items": [{"name": item.name, "quantity": item.quantity} for item in notice.items],
            "tracking_link": tracking_link,
            "tracking_number": notice.tracking_number,
            "tracking_url": notice.tracking_url,
            "estimated_delivery": notice.estimated_delivery,
        }

    def notify(self, event: NotificationEvent, notice: OrderNotice) -> None:
        if not notice.customer_email:
            logger.info(
                "No email on order, skipping notification",
                order_id=notice.order_id,
                notification_event=event.value,
            )
            return

        content = get_template(event).render(self._context(notice))
        result = self._email.send(
            to=notice.customer_email,
            subject=content["subject"],
            body=content["body"],
        )

        if result.get("status") != "sent":
            logger.warning(
                "Order notification not delivered",
                order_id=notice.order_id,
                notification_event=event.value,
                error=result.get("error"),
            )
            return

        logger.info(
            "Order notification sent",
            order_id=notice.order_id,
            notification_event=event.value,
            message_id=result.get("message_id"),
        )
