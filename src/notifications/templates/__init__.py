"""Template registry: maps NotificationEvent to template classes."""

from notifications.notice import NotificationEvent
from notifications.templates.order_confirmed import OrderConfirmedTemplate
from notifications.templates.order_delivered import OrderDeliveredTemplate
from notifications.templates.order_shipped import OrderShippedTemplate

TEMPLATE_REGISTRY: dict[NotificationEvent, type] = {
    NotificationEvent.ORDER_CONFIRMED: OrderConfirmedTemplate,
    NotificationEvent.ORDER_SHIPPED: OrderShippedTemplate,
    NotificationEvent.ORDER_DELIVERED: OrderDeliveredTemplate,
}


def get_template(event: NotificationEvent):
    """Look up a template class by notification event."""
    template_cls = TEMPLATE_REGISTRY.get(event)
    if template_cls is None:
        raise ValueError(f"No template registered for notification event: {event}")
    return template_cls
