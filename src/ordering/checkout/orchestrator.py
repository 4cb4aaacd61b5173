"""Checkout Orchestrator: turns a shopper's cart into a pending order.

The steps run in a fixed order because each depends on the one before:
validate the cart, resolve the address, evaluate the promo, price
shipping, build the order, then hand off to the payment path. Nothing is
saved until every check and the gateway handoff have succeeded. The
address, the order with its first history entry and (for cash on delivery)
the cart clear are then committed in one unit of work.
"""

from dataclasses import dataclass, field

import structlog
from protean import UnitOfWork
from protean.utils.globals import current_domain

from ordering.address.address import Address, AddressBook, NewAddress
from ordering.cart.aggregator import CartAggregator
from ordering.checkout.shipping import ShippingRateTable
from ordering.errors import (
    EmptyCart,
    InsufficientStock,
    PaymentGatewayError,
    UnsupportedPaymentMethod,
    WalletNumberRequired,
)
from ordering.inventory.guard import InventoryGuard
from ordering.order.numbering import generate_order_number, generate_tracking_token
from ordering.order.order import Order, OrderStatus, PaymentMethod, ShippingDetails
from ordering.order.state_machine import OrderStateMachine
from ordering.promo.evaluator import PromoEvaluator
from payments.gateway.paymob_adapter import to_cents
from payments.gateway.port import BillingData, GatewayError, LineItem, PaymentGateway, PaymentSession

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutRequest:
    payment_method: str
    address_id: str | None = None
    new_address: NewAddress | None = None
    promo_code: str | None = None
    customer_note: str | None = None
    wallet_number: str | None = None
    customer_email: str | None = None


@dataclass(frozen=True)
class CheckoutSession:
    order_id: str
    order_number: str
    tracking_token: str
    status: str
    payment_method: str
    subtotal: float
    discount: float
    shipping_cost: float
    total: float
    payment_url: str | None = None
    gateway_order_id: str | None = None
    promo_message: str | None = None
    removed_item_names: list[str] = field(default_factory=list)


def billing_from_address(address: Address, email: str | None) -> BillingData:
    parts = (address.full_name or "").split()
    return BillingData(
        first_name=parts[0] if parts else "N/A",
        last_name=" ".join(parts[1:]) or "N/A",
        email=email or "N/A",
        phone_number=address.phone or "N/A",
        street=address.street or "N/A",
        building=address.building or "N/A",
        floor=address.floor or "N/A",
        apartment=address.apartment or "N/A",
        city=address.city or "N/A",
        state=address.governorate or "N/A",
    )


def shipping_snapshot(address: Address) -> ShippingDetails:
    return ShippingDetails(
        full_name=address.full_name,
        phone=address.phone,
        street=address.street,
        building=address.building,
        floor=address.floor,
        apartment=address.apartment,
        city=address.city,
        governorate=address.governorate,
        latitude=address.latitude,
        longitude=address.longitude,
    )


class CheckoutOrchestrator:
    def __init__(
        self,
        carts: CartAggregator,
        promos: PromoEvaluator,
        inventory: InventoryGuard,
        addresses: AddressBook,
        gateway: PaymentGateway,
        orders: OrderStateMachine,
        shipping_rates: ShippingRateTable | None = None,
    ) -> None:
        self._carts = carts
        self._promos = promos
        self._inventory = inventory
        self._addresses = addresses
        self._gateway = gateway
        self._orders = orders
        self._shipping_rates = shipping_rates or ShippingRateTable()

    def init_checkout(self, shopper_id: str, request: CheckoutRequest, is_guest: bool = False) -> CheckoutSession:
        try:
            method = PaymentMethod(request.payment_method)
        except ValueError as exc:
            raise UnsupportedPaymentMethod(request.payment_method) from exc
        if method == PaymentMethod.WALLET and not (request.wallet_number or "").strip():
            raise WalletNumberRequired()

        # 1. Cart
        validation = self._carts.validate_cart(shopper_id, is_guest)
        cart = validation.cart
        if cart.is_empty:
            raise EmptyCart(validation.removed_item_names)

        # 2. Address
        resolved = self._addresses.resolve(shopper_id, request.address_id, request.new_address)
        address = resolved.address

        for line in cart.lines:
            if not self._inventory.check_stock(line.variant_id, line.quantity):
                raise InsufficientStock(line.variant_id, line.quantity)

        # 3. Promo, never fatal
        discount, promo_code_id, promo_code, promo_message = 0.0, None, None, None
        if request.promo_code:
            result = self._promos.validate(request.promo_code, cart, shopper_id)
            promo_message = result.message
            if result.valid:
                discount, promo_code_id, promo_code = result.discount, result.promo_code_id, result.code
            else:
                logger.info(
                    "Promo code ignored at checkout",
                    shopper_id=shopper_id,
                    code=request.promo_code,
                    reason=result.reason.value if result.reason else None,
                )

        # 4-7. Totals, numbering and the pending order
        order = Order.place(
            order_number=generate_order_number(),
            tracking_token=generate_tracking_token(),
            shopper_id=shopper_id,
            shopper_is_guest=is_guest,
            payment_method=method.value,
            lines=cart.lines,
            shipping=shipping_snapshot(address),
            shipping_cost=self._shipping_rates.cost_for(address.governorate),
            discount=discount,
            promo_code_id=promo_code_id,
            promo_code=promo_code,
            customer_name=address.full_name,
            customer_email=request.customer_email,
            customer_note=request.customer_note,
        )

        # 8. Payment path
        session = None
        if method == PaymentMethod.COD:
            self._orders.transition(order, OrderStatus.PROCESSING, note="Cash on delivery order")
        else:
            session = self._start_payment(order, method, address, request)
            order.attach_gateway_session(session.gateway_order_id)

        with UnitOfWork():
            for pending in resolved.pending:
                current_domain.repository_for(Address).add(pending)
            current_domain.repository_for(Order).add(order)
            if method == PaymentMethod.COD:
                self._carts.clear_cart(shopper_id, is_guest)

        logger.info(
            "Checkout initiated",
            order_id=str(order.id),
            order_number=order.order_number,
            payment_method=method.value,
            total=order.total,
        )
        self._orders.announce(order)

        return CheckoutSession(
            order_id=str(order.id),
            order_number=order.order_number,
            tracking_token=order.tracking_token,
            status=order.status,
            payment_method=order.payment_method,
            subtotal=order.subtotal,
            discount=order.discount,
            shipping_cost=order.shipping_cost,
            total=order.total,
            payment_url=session.redirect_url if session else None,
            gateway_order_id=session.gateway_order_id if session else None,
            promo_message=promo_message,
            removed_item_names=validation.removed_item_names,
        )

    def _start_payment(
        self,
        order: Order,
        method: PaymentMethod,
        address: Address,
        request: CheckoutRequest,
    ) -> PaymentSession:
        billing = billing_from_address(address, request.customer_email)
        try:
            if method == PaymentMethod.CARD:
                items = [
                    LineItem(
                        name=item.product_name,
                        amount_cents=to_cents(item.unit_price),
                        quantity=item.quantity,
                        description=item.variant_name or "",
                    )
                    for item in order.items
                ]
                return self._gateway.initiate_card_payment(order.total, billing, items, str(order.id))
            return self._gateway.initiate_wallet_payment(
                order.total, billing, request.wallet_number.strip(), str(order.id)
            )
        except GatewayError as exc:
            logger.error(
                "Payment initiation failed",
                order_number=order.order_number,
                payment_method=method.value,
                error=str(exc),
            )
            raise PaymentGatewayError() from exc
