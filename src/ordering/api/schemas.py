"""Pydantic request/response schemas for the storefront API.

These are external contracts, kept separate from the domain objects and
service dataclasses they are translated to and from.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

PaymentMethodName = Literal["card", "wallet", "cod"]
OrderStatusName = Literal["PENDING", "PAID", "PROCESSING", "SHIPPED", "DELIVERED", "CANCELLED"]


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    variant_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int  # 0 or less removes the line


class CartLineResponse(BaseModel):
    variant_id: str
    product_id: str
    product_name: str
    variant_name: str
    quantity: int
    unit_price: float
    line_total: float


class CartResponse(BaseModel):
    items: list[CartLineResponse]
    subtotal: float
    item_count: int


class CartCountResponse(BaseModel):
    count: int


class ApplyPromoRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)


class ApplyPromoResponse(BaseModel):
    code: str
    discount: float
    message: str


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class AddressInput(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=5, max_length=30)
    street: str = Field(min_length=1, max_length=255)
    building: str | None = None
    floor: str | None = None
    apartment: str | None = None
    city: str = Field(min_length=1, max_length=100)
    governorate: str = Field(min_length=1, max_length=100)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    is_default: bool = False


class CheckoutRequestBody(BaseModel):
    payment_method: PaymentMethodName
    address_id: str | None = None
    new_address: AddressInput | None = None
    promo_code: str | None = None
    customer_note: str | None = Field(default=None, max_length=1000)
    wallet_number: str | None = None
    email: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "payment_method": "cod",
                    "new_address": {
                        "full_name": "Mona Adel",
                        "phone": "01000000000",
                        "street": "12 Nile St",
                        "city": "Cairo",
                        "governorate": "Cairo",
                    },
                    "promo_code": "WELCOME10",
                }
            ]
        }
    }


class CheckoutResponse(BaseModel):
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
    removed_items: list[str] = []


class PaymentCallbackResponse(BaseModel):
    success: bool
    order_id: str | None = None
    message: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemResponse(BaseModel):
    variant_id: str
    product_name: str
    variant_name: str | None = None
    quantity: int
    unit_price: float
    line_total: float


class StatusEntryResponse(BaseModel):
    status: str
    note: str | None = None
    recorded_at: datetime | None = None


class ShippingResponse(BaseModel):
    full_name: str
    phone: str
    street: str
    building: str | None = None
    floor: str | None = None
    apartment: str | None = None
    city: str
    governorate: str


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    status: str
    payment_method: str
    subtotal: float
    discount: float
    shipping_cost: float
    total: float
    promo_code: str | None = None
    is_paid: bool
    paid_at: datetime | None = None
    tracking_token: str
    tracking_number: str | None = None
    tracking_url: str | None = None
    estimated_delivery: str | None = None
    delivered_at: datetime | None = None
    customer_note: str | None = None
    refund_required: bool = False
    created_at: datetime | None = None
    shipping: ShippingResponse | None = None
    items: list[OrderItemResponse]
    status_history: list[StatusEntryResponse]


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    page: int
    limit: int


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatusName
    note: str | None = Field(default=None, max_length=1000)


class AddTrackingRequest(BaseModel):
    tracking_number: str = Field(min_length=1, max_length=255)
    tracking_url: str | None = Field(default=None, max_length=500)
    estimated_delivery: str | None = Field(default=None, max_length=50)


class TrackingItemResponse(BaseModel):
    product_name: str
    variant_name: str | None = None
    quantity: int


class TrackingResponse(BaseModel):
    order_number: str
    status: str
    created_at: datetime | None = None
    subtotal: float
    discount: float
    shipping_cost: float
    total: float
    payment_method: str
    shipping_city: str | None = None
    shipping_governorate: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None
    estimated_delivery: str | None = None
    delivered_at: datetime | None = None
    status_history: list[StatusEntryResponse]
    items: list[TrackingItemResponse]


# ---------------------------------------------------------------------------
# Promo administration
# ---------------------------------------------------------------------------
class CreatePromoRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    description: str | None = None
    discount_type: Literal["PERCENT", "FIXED"]
    discount_value: float = Field(gt=0)
    min_cart_value: float | None = Field(default=None, ge=0)
    max_discount_amount: float | None = Field(default=None, ge=0)
    max_uses: int | None = Field(default=None, ge=1)
    max_uses_per_user: int | None = Field(default=1, ge=1)
    excluded_category_ids: list[str] = []
    excluded_product_ids: list[str] = []
    starts_at: datetime | None = None
    expires_at: datetime | None = None


class PromoIdResponse(BaseModel):
    promo_code_id: str


class PromoResponse(BaseModel):
    promo_code_id: str
    code: str
    description: str | None = None
    discount_type: str
    discount_value: float
    min_cart_value: float | None = None
    max_discount_amount: float | None = None
    max_uses: int | None = None
    max_uses_per_user: int | None = None
    current_uses: int
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    is_active: bool


class StatusResponse(BaseModel):
    status: str = "ok"
