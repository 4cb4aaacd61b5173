"""What the storefront tells the notification system: event E happened to order O."""

from dataclasses import dataclass, field
from enum import Enum


class NotificationEvent(Enum):
    ORDER_CONFIRMED = "OrderConfirmed"
    ORDER_SHIPPED = "OrderShipped"
    ORDER_DELIVERED = "OrderDelivered"


@dataclass(frozen=True)
class NoticeItem:
    name: str
    quantity: int


@dataclass(frozen=True)
class OrderNotice:
    """Order facts a notification may mention. Never carries payment details."""

    order_id: str
    order_number: str
    status: str
    total: float
    customer_email: str | None = None
    customer_name: str | None = None
    tracking_token: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None
    estimated_delivery: str | None = None
    payment_method: str | None = None
    items: tuple[NoticeItem, ...] = field(default_factory=tuple)
