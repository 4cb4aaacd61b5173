"""Order delivered template."""

from notifications.notice import NotificationEvent


class OrderDeliveredTemplate:
    event = NotificationEvent.ORDER_DELIVERED

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": "Your Order Has Been Delivered",
            "body": (
                f"Your order {order_number} has been delivered.\n\n"
                "We hope you enjoy your new furniture! If anything is not right, "
                "reply to this email and our team will help."
            ),
        }
