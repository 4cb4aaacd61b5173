"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A shopper completed checkout and a pending order was created."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    shopper_id = Identifier(required=True)
    payment_method = String(required=True)
    subtotal = Float(required=True)
    discount = Float()
    shipping_cost = Float()
    total = Float(required=True)
    promo_code_id = Identifier()
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new status. Mirrors one status history entry."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = Text()
    actor = String()
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentConfirmed:
    """The payment gateway confirmed the order was paid."""

    __version__ = 1

    order_id = Identifier(required=True)
    gateway_order_id = String()
    gateway_transaction_id = String()
    amount = Float(required=True)
    paid_at = DateTime(required=True)
