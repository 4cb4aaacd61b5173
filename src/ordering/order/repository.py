"""Order lookups beyond get-by-id."""

from ordering.domain import ordering
from ordering.order.order import Order, OrderStatus


@ordering.repository(part_of=Order)
class OrderRepository:
    def find_by_gateway_order_id(self, gateway_order_id: str) -> Order | None:
        results = self._dao.query.filter(gateway_order_id=str(gateway_order_id)).all().items
        return results[0] if results else None

    def find_by_tracking_token(self, tracking_token: str) -> Order | None:
        results = self._dao.query.filter(tracking_token=tracking_token).all().items
        return results[0] if results else None

    def count_promo_uses(self, shopper_id: str, promo_code_id: str) -> int:
        """Count the shopper's orders with this promo that were not cancelled."""
        results = self._dao.query.filter(shopper_id=str(shopper_id), promo_code_id=str(promo_code_id)).all().items
        return sum(1 for order in results if order.status != OrderStatus.CANCELLED.value)

    def for_shopper(
        self,
        shopper_id: str,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Order], int]:
        query = self._dao.query.filter(shopper_id=str(shopper_id))
        if status:
            query = query.filter(status=status)
        result = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return result.items, result.total
