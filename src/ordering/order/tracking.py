"""Read side of orders: the public tracking view and the shopper's order history."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.errors import OrderNotFound
from ordering.order.order import Order


def _history(order: Order) -> list[dict]:
    return [
        {
            "status": entry.status,
            "note": entry.note,
            "recorded_at": entry.recorded_at,
        }
        for entry in order.history()
    ]


def public_tracking_view(order: Order) -> dict:
    """What anyone holding the tracking token may see.

    Leaves out the shopper id, phone number and street-level address.
    """
    return {
        "order_number": order.order_number,
        "status": order.status,
        "created_at": order.created_at,
        "subtotal": order.subtotal,
        "discount": order.discount,
        "shipping_cost": order.shipping_cost,
        "total": order.total,
        "payment_method": order.payment_method,
        "shipping_city": order.shipping.city if order.shipping else None,
        "shipping_governorate": order.shipping.governorate if order.shipping else None,
        "tracking_number": order.tracking_number,
        "tracking_url": order.tracking_url,
        "estimated_delivery": order.estimated_delivery,
        "delivered_at": order.delivered_at,
        "status_history": _history(order),
        "items": [
            {
                "product_name": item.product_name,
                "variant_name": item.variant_name,
                "quantity": item.quantity,
            }
            for item in order.items
        ],
    }


class OrderQueries:
    @staticmethod
    def _repository():
        return current_domain.repository_for(Order)

    def track(self, tracking_token: str) -> dict:
        order = self._repository().find_by_tracking_token(tracking_token)
        if order is None:
            raise OrderNotFound(tracking_token)
        return public_tracking_view(order)

    def get_order(self, order_id: str, shopper_id: str) -> Order:
        """The shopper's own order. Other shoppers' orders look absent."""
        try:
            order = self._repository().get(order_id)
        except ObjectNotFoundError as exc:
            raise OrderNotFound(order_id) from exc
        if str(order.shopper_id) != str(shopper_id):
            raise OrderNotFound(order_id)
        return order

    def list_orders(
        self,
        shopper_id: str,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Order], int]:
        return self._repository().for_shopper(shopper_id, status=status, page=page, limit=limit)
