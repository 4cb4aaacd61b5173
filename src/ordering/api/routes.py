"""FastAPI routes for the storefront: cart, checkout, payments, orders, admin."""

import json

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from protean.utils.globals import current_domain

from ordering.address.address import NewAddress
from ordering.api.dependencies import (
    Shopper,
    get_registered_shopper,
    get_services,
    get_session_guest_id,
    get_shopper,
    require_admin,
)
from ordering.api.schemas import (
    AddTrackingRequest,
    AddToCartRequest,
    ApplyPromoRequest,
    ApplyPromoResponse,
    CancelOrderRequest,
    CartCountResponse,
    CartLineResponse,
    CartResponse,
    CheckoutRequestBody,
    CheckoutResponse,
    CreatePromoRequest,
    OrderListResponse,
    OrderResponse,
    PaymentCallbackResponse,
    PromoIdResponse,
    PromoResponse,
    StatusResponse,
    TrackingResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from ordering.cart.view import Cart
from ordering.checkout.orchestrator import CheckoutRequest
from ordering.errors import InvalidSignature, PromoNotApplicable
from ordering.order.order import Order, OrderStatus
from ordering.promo.management import CreatePromoCode, DeactivatePromoCode
from ordering.promo.promo import PromoCode
from ordering.services import StorefrontServices
from payments.gateway.port import CallbackTransaction

logger = structlog.get_logger(__name__)


def _cart_response(cart: Cart) -> CartResponse:
    return CartResponse(
        items=[
            CartLineResponse(
                variant_id=line.variant_id,
                product_id=line.product_id,
                product_name=line.product_name,
                variant_name=line.variant_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_total=line.line_total,
            )
            for line in cart.lines
        ],
        subtotal=cart.subtotal,
        item_count=cart.item_count,
    )


def _order_response(order: Order) -> OrderResponse:
    shipping = None
    if order.shipping:
        shipping = {
            "full_name": order.shipping.full_name,
            "phone": order.shipping.phone,
            "street": order.shipping.street,
            "building": order.shipping.building,
            "floor": order.shipping.floor,
            "apartment": order.shipping.apartment,
            "city": order.shipping.city,
            "governorate": order.shipping.governorate,
        }
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        status=order.status,
        payment_method=order.payment_method,
        subtotal=order.subtotal,
        discount=order.discount or 0.0,
        shipping_cost=order.shipping_cost or 0.0,
        total=order.total,
        promo_code=order.promo_code,
        is_paid=bool(order.is_paid),
        paid_at=order.paid_at,
        tracking_token=order.tracking_token,
        tracking_number=order.tracking_number,
        tracking_url=order.tracking_url,
        estimated_delivery=order.estimated_delivery,
        delivered_at=order.delivered_at,
        customer_note=order.customer_note,
        refund_required=bool(order.refund_required),
        created_at=order.created_at,
        shipping=shipping,
        items=[
            {
                "variant_id": str(item.variant_id),
                "product_name": item.product_name,
                "variant_name": item.variant_name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "line_total": item.line_total,
            }
            for item in order.items
        ],
        status_history=[
            {"status": entry.status, "note": entry.note, "recorded_at": entry.recorded_at}
            for entry in order.history()
        ],
    )


def _promo_response(promo: PromoCode) -> PromoResponse:
    return PromoResponse(
        promo_code_id=str(promo.id),
        code=promo.code,
        description=promo.description,
        discount_type=promo.discount_type,
        discount_value=promo.discount_value,
        min_cart_value=promo.min_cart_value,
        max_discount_amount=promo.max_discount_amount,
        max_uses=promo.max_uses,
        max_uses_per_user=promo.max_uses_per_user,
        current_uses=promo.current_uses or 0,
        starts_at=promo.starts_at,
        expires_at=promo.expires_at,
        is_active=promo.is_active,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(
    shopper: Shopper = Depends(get_shopper),
    services: StorefrontServices = Depends(get_services),
) -> CartResponse:
    return _cart_response(services.carts.get_cart(shopper.shopper_id, shopper.is_guest))


@cart_router.get("/count", response_model=CartCountResponse)
async def get_cart_count(
    shopper: Shopper = Depends(get_shopper),
    services: StorefrontServices = Depends(get_services),
) -> CartCountResponse:
    return CartCountResponse(count=services.carts.count_items(shopper.shopper_id, shopper.is_guest))


@cart_router.post("", response_model=CartResponse)
async def add_to_cart(
    body: AddToCartRequest,
    shopper: Shopper = Depends(get_shopper),
    services: StorefrontServices = Depends(get_services),
) -> CartResponse:
    cart = services.carts.add_item(shopper.shopper_id, body.variant_id, body.quantity, shopper.is_guest)
    return _cart_response(cart)


@cart_router.put("/{variant_id}", response_model=CartResponse)
async def update_cart_item(
    variant_id: str,
    body: UpdateCartItemRequest,
    shopper: Shopper = Depends(get_shopper),
    services: StorefrontServices = Depends(get_services),
) -> CartResponse:
    cart = services.carts.update_item(shopper.shopper_id, variant_id, body.quantity, shopper.is_guest)
    return _cart_response(cart)


@cart_router.delete("/{variant_id}", response_model=CartResponse)
async def remove_cart_item(
    variant_id: str,
    shopper: Shopper = Depends(get_shopper),
    services: StorefrontServices = Depends(get_services),
) -> CartResponse:
    return _cart_response(services.carts.remove_item(shopper.shopper_id, variant_id, shopper.is_guest))


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(
    shopper: Shopper = Depends(get_shopper),
    services: StorefrontServices = Depends(get_services),
) -> StatusResponse:
    services.carts.clear_cart(shopper.shopper_id, shopper.is_guest)
    return StatusResponse()


@cart_router.post("/transfer", response_model=CartResponse)
async def transfer_guest_cart(
    shopper: Shopper = Depends(get_registered_shopper),
    guest_id: str = Depends(get_session_guest_id),
    services: StorefrontServices = Depends(get_services),
) -> CartResponse:
    return _cart_response(services.carts.transfer_guest_cart(guest_id, shopper.shopper_id))


@cart_router.post("/apply-promo", response_model=ApplyPromoResponse)
async def apply_promo(
    body: ApplyPromoRequest,
    shopper: Shopper = Depends(get_shopper),
    services: StorefrontServices = Depends(get_services),
) -> ApplyPromoResponse:
    cart = services.carts.get_cart(shopper.shopper_id, shopper.is_guest)
    result = services.promos.validate(body.code, cart, shopper.shopper_id)
    if not result.valid:
        raise PromoNotApplicable(result.reason.value, result.message)
    return ApplyPromoResponse(code=result.code, discount=result.discount, message=result.message)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/init", status_code=201, response_model=CheckoutResponse)
async def init_checkout(
    body: CheckoutRequestBody,
    shopper: Shopper = Depends(get_shopper),
    services: StorefrontServices = Depends(get_services),
) -> CheckoutResponse:
    request = CheckoutRequest(
        payment_method=body.payment_method,
        address_id=body.address_id,
        new_address=NewAddress(**body.new_address.model_dump()) if body.new_address else None,
        promo_code=body.promo_code,
        customer_note=body.customer_note,
        wallet_number=body.wallet_number,
        customer_email=body.email,
    )
    session = services.checkout.init_checkout(shopper.shopper_id, request, is_guest=shopper.is_guest)
    return CheckoutResponse(
        order_id=session.order_id,
        order_number=session.order_number,
        tracking_token=session.tracking_token,
        status=session.status,
        payment_method=session.payment_method,
        subtotal=session.subtotal,
        discount=session.discount,
        shipping_cost=session.shipping_cost,
        total=session.total,
        payment_url=session.payment_url,
        gateway_order_id=session.gateway_order_id,
        promo_message=session.promo_message,
        removed_items=list(session.removed_item_names),
    )


# ---------------------------------------------------------------------------
# Payment Callback Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/callback", response_model=PaymentCallbackResponse)
async def payment_callback(
    request: Request,
    hmac: str | None = Query(default=None),
    services: StorefrontServices = Depends(get_services),
) -> PaymentCallbackResponse:
    """Server-to-server notification; the signature travels as ``?hmac=``."""
    try:
        payload = await request.json()
    except json.JSONDecodeError:
        payload = {}
    result = services.payment_callbacks.process(payload, hmac)
    return PaymentCallbackResponse(success=result.success, order_id=result.order_id, message=result.message)


@payment_router.get("/callback")
async def payment_return(
    request: Request,
    services: StorefrontServices = Depends(get_services),
) -> RedirectResponse:
    """The shopper's browser comes back here; only the POST callback changes orders."""
    params = dict(request.query_params)
    signature = params.pop("hmac", None)
    if not services.gateway.verify_callback(params, signature):
        logger.warning("Payment return rejected: invalid signature")
        raise InvalidSignature()

    transaction = CallbackTransaction.from_payload(params)
    outcome = "success" if transaction.success else "failed"
    target = f"{services.storefront_url.rstrip('/')}/checkout/{outcome}"
    if transaction.gateway_order_id:
        order = current_domain.repository_for(Order).find_by_gateway_order_id(transaction.gateway_order_id)
        if order is not None:
            target = f"{target}?order={order.order_number}"
    return RedirectResponse(url=target, status_code=302)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    status: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=50),
    shopper: Shopper = Depends(get_registered_shopper),
    services: StorefrontServices = Depends(get_services),
) -> OrderListResponse:
    orders, total = services.order_queries.list_orders(shopper.shopper_id, status=status, page=page, limit=limit)
    return OrderListResponse(
        orders=[_order_response(order) for order in orders],
        total=total,
        page=page,
        limit=limit,
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    shopper: Shopper = Depends(get_shopper),
    services: StorefrontServices = Depends(get_services),
) -> OrderResponse:
    return _order_response(services.order_queries.get_order(order_id, shopper.shopper_id))


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest,
    shopper: Shopper = Depends(get_shopper),
    services: StorefrontServices = Depends(get_services),
) -> OrderResponse:
    order = services.orders.cancel_by_customer(order_id, shopper.shopper_id, body.reason)
    return _order_response(order)


tracking_router = APIRouter(prefix="/track", tags=["tracking"])


@tracking_router.get("/{tracking_token}", response_model=TrackingResponse)
async def track_order(
    tracking_token: str,
    services: StorefrontServices = Depends(get_services),
) -> TrackingResponse:
    return TrackingResponse(**services.order_queries.track(tracking_token))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    services: StorefrontServices = Depends(get_services),
) -> OrderResponse:
    order = services.orders.update_status(order_id, OrderStatus(body.status), note=body.note)
    return _order_response(order)


@admin_router.post("/orders/{order_id}/tracking", response_model=OrderResponse)
async def add_tracking(
    order_id: str,
    body: AddTrackingRequest,
    services: StorefrontServices = Depends(get_services),
) -> OrderResponse:
    order = services.orders.add_tracking_info(
        order_id,
        tracking_number=body.tracking_number,
        tracking_url=body.tracking_url,
        estimated_delivery=body.estimated_delivery,
    )
    return _order_response(order)


@admin_router.post("/promos", status_code=201, response_model=PromoIdResponse)
async def create_promo(body: CreatePromoRequest) -> PromoIdResponse:
    command = CreatePromoCode(
        code=body.code,
        description=body.description,
        discount_type=body.discount_type,
        discount_value=body.discount_value,
        min_cart_value=body.min_cart_value,
        max_discount_amount=body.max_discount_amount,
        max_uses=body.max_uses,
        max_uses_per_user=body.max_uses_per_user,
        excluded_category_ids=json.dumps(body.excluded_category_ids),
        excluded_product_ids=json.dumps(body.excluded_product_ids),
        starts_at=body.starts_at,
        expires_at=body.expires_at,
    )
    result = current_domain.process(command, asynchronous=False)
    return PromoIdResponse(promo_code_id=result)


@admin_router.get("/promos", response_model=list[PromoResponse])
async def list_promos() -> list[PromoResponse]:
    return [_promo_response(promo) for promo in current_domain.repository_for(PromoCode).list_all()]


@admin_router.post("/promos/{promo_code_id}/deactivate", response_model=StatusResponse)
async def deactivate_promo(promo_code_id: str) -> StatusResponse:
    current_domain.process(DeactivatePromoCode(promo_code_id=promo_code_id), asynchronous=False)
    return StatusResponse()
