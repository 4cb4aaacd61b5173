"""Order aggregate: the placed order, its item snapshots and its status history.

Everything a shopper sees about a placed order is copied onto it at
checkout: item names and prices, and the delivery address. Later catalogue
or address edits never change a placed order.

Status only moves along ``_VALID_TRANSITIONS`` and every move appends a
history entry; the order's status always equals the latest entry.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import InvalidTransition, OrderIntegrityError
from ordering.order.events import OrderPlaced, OrderStatusChanged, PaymentConfirmed
from ordering.utils.money import round_money


class OrderStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentMethod(Enum):
    CARD = "card"
    WALLET = "wallet"
    COD = "cod"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# States a shopper may cancel from
CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.PAID}


@ordering.value_object(part_of="Order")
class ShippingDetails:
    full_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=30)
    street = String(required=True, max_length=255)
    building = String(max_length=50)
    floor = String(max_length=20)
    apartment = String(max_length=20)
    city = String(required=True, max_length=100)
    governorate = String(required=True, max_length=100)
    latitude = Float()
    longitude = Float()


@ordering.entity(part_of="Order")
class OrderItem:
    variant_id = Identifier(required=True)
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    variant_name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)


@ordering.entity(part_of="Order")
class StatusEntry:
    sequence = Integer(required=True, min_value=1)
    status = String(required=True, choices=OrderStatus)
    note = Text()
    actor = String(max_length=255)
    recorded_at = DateTime(required=True)


@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    tracking_token = String(required=True, max_length=64, unique=True)
    shopper_id = Identifier(required=True)
    shopper_is_guest = Boolean(default=False)
    customer_name = String(max_length=255)
    customer_email = String(max_length=254)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    status_history = HasMany(StatusEntry)
    shipping = ValueObject(ShippingDetails)
    subtotal = Float(required=True, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    promo_code_id = Identifier()
    promo_code = String(max_length=50)
    payment_method = String(required=True, choices=PaymentMethod)
    gateway_order_id = String(max_length=255)
    gateway_transaction_id = String(max_length=255)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    refund_required = Boolean(default=False)
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=500)
    estimated_delivery = String(max_length=50)
    delivered_at = DateTime()
    customer_note = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_balance(self):
        expected = round_money(self.subtotal - (self.discount or 0.0) + (self.shipping_cost or 0.0))
        if abs(self.total - expected) > 0.005:
            raise ValidationError({"total": ["Total must equal subtotal - discount + shipping cost"]})

    @invariant.post
    def status_must_match_latest_history_entry(self):
        if not self.status_history:
            return
        latest = max(self.status_history, key=lambda entry: entry.sequence)
        if latest.status != self.status:
            raise ValidationError({"status": ["Status must match the latest history entry"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        tracking_token,
        shopper_id,
        payment_method,
        lines,
        shipping,
        shipping_cost,
        discount=0.0,
        promo_code_id=None,
        promo_code=None,
        shopper_is_guest=False,
        customer_name=None,
        customer_email=None,
        customer_note=None,
    ):
        """Create a PENDING order from priced cart lines.

        The first history entry is recorded together with the order.
        """
        items = [
            OrderItem(
                variant_id=line.variant_id,
                product_id=line.product_id,
                product_name=line.product_name,
                variant_name=line.variant_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_total=line.line_total,
            )
            for line in lines
        ]
        if not items:
            raise OrderIntegrityError("An order needs at least one item")

        subtotal = round_money(sum(item.line_total for item in items))
        discount = round_money(discount or 0.0)
        shipping_cost = round_money(shipping_cost)
        if discount > subtotal:
            raise OrderIntegrityError(f"Discount {discount} exceeds subtotal {subtotal}")
        total = round_money(subtotal - discount + shipping_cost)

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            tracking_token=tracking_token,
            shopper_id=shopper_id,
            shopper_is_guest=shopper_is_guest,
            customer_name=customer_name,
            customer_email=customer_email,
            status=OrderStatus.PENDING.value,
            shipping=shipping,
            subtotal=subtotal,
            discount=discount,
            shipping_cost=shipping_cost,
            total=total,
            promo_code_id=promo_code_id,
            promo_code=promo_code,
            payment_method=payment_method,
            customer_note=customer_note,
            created_at=now,
            updated_at=now,
        )

        with atomic_change(order):
            for item in items:
                order.add_items(item)
            order._record_status(OrderStatus.PENDING, "Order created", str(shopper_id), now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                shopper_id=str(shopper_id),
                payment_method=payment_method,
                subtotal=subtotal,
                discount=discount,
                shipping_cost=shipping_cost,
                total=total,
                promo_code_id=promo_code_id,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status history
    # -------------------------------------------------------------------
    def history(self) -> list[StatusEntry]:
        return sorted(self.status_history, key=lambda entry: entry.sequence)

    def _record_status(self, status: OrderStatus, note, actor, recorded_at) -> None:
        self.add_status_history(
            StatusEntry(
                sequence=len(self.status_history) + 1,
                status=status.value,
                note=note,
                actor=actor,
                recorded_at=recorded_at,
            )
        )

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in _VALID_TRANSITIONS[OrderStatus(self.status)]

    @property
    def is_cancellable(self) -> bool:
        return OrderStatus(self.status) in CANCELLABLE_STATES

    def transition_to(self, new_status, note=None, actor="system") -> None:
        current = OrderStatus(self.status)
        target = OrderStatus(new_status)
        if not self.can_transition_to(target):
            raise InvalidTransition(current.value, target.value)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            if target == OrderStatus.PAID and not self.is_paid:
                self.is_paid = True
                self.paid_at = now
            if target == OrderStatus.DELIVERED:
                self.delivered_at = now
            self.updated_at = now
            self._record_status(target, note, actor, now)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                note=note,
                actor=actor,
                changed_at=now,
            )
        )

    def attach_gateway_session(self, gateway_order_id: str) -> None:
        self.gateway_order_id = str(gateway_order_id)

    def confirm_payment(self, gateway_transaction_id=None) -> None:
        """Record the gateway's confirmation and move to PAID."""
        self.gateway_transaction_id = str(gateway_transaction_id) if gateway_transaction_id else None
        self.transition_to(OrderStatus.PAID, note="Payment confirmed", actor="gateway")

        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                gateway_order_id=self.gateway_order_id,
                gateway_transaction_id=self.gateway_transaction_id,
                amount=self.total,
                paid_at=self.paid_at,
            )
        )

    def flag_for_refund(self) -> None:
        """Funds were captured for an order that cannot be fulfilled."""
        self.refund_required = True

    def set_tracking(self, tracking_number, tracking_url=None, estimated_delivery=None) -> None:
        self.tracking_number = tracking_number
        self.tracking_url = tracking_url
        self.estimated_delivery = estimated_delivery
