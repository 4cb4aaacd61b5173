"""Order shipped template: sent when the order is handed to the courier."""

from notifications.notice import NotificationEvent


class OrderShippedTemplate:
    event = NotificationEvent.ORDER_SHIPPED

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        tracking_number = context.get("tracking_number") or "N/A"
        estimated_delivery = context.get("estimated_delivery") or "soon"
        tracking_url = context.get("tracking_url")
        return {
            "subject": "Your Order Has Shipped!",
            "body": (
                f"Great news! Your order {order_number} is on its way.\n\n"
                f"Tracking Number: {tracking_number}\n"
                f"Estimated Delivery: {estimated_delivery}\n"
                + (f"Follow the delivery at {tracking_url}\n" if tracking_url else "")
            ),
        }
