"""Order confirmed template: sent once payment is confirmed."""

from notifications.notice import NotificationEvent


class OrderConfirmedTemplate:
    event = NotificationEvent.ORDER_CONFIRMED

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        total = context.get("total", "0")
        currency = context.get("currency", "EGP")
        lines = "\n".join(f"  - {item['name']} x {item['quantity']}" for item in context.get("items", []))
        tracking_link = context.get("tracking_link")
        return {
            "subject": f"Order {order_number} Confirmed",
            "body": (
                f"Hi {context.get('customer_name') or 'there'},\n\n"
                f"Your order {order_number} has been confirmed.\n\n"
                f"{lines}\n\n"
                f"Order Total: {total} {currency}\n\n"
                + (f"Track your order at {tracking_link}\n\n" if tracking_link else "")
                + "We'll let you know as soon as it ships."
            ),
        }
