"""Storefront error taxonomy.

Every error raised by the checkout core carries a stable ``code`` and a
user-facing message. The API layer maps each family to an HTTP status.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    code = "storefront_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def details(self) -> dict:
        """Extra fields for the error response body."""
        return {}


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------
class NotFoundError(StorefrontError):
    code = "not_found"


class VariantNotFound(NotFoundError):
    code = "variant_not_found"

    def __init__(self, variant_id: str):
        self.variant_id = variant_id
        super().__init__("Product variant not found or no longer available")


class CartLineNotFound(NotFoundError):
    code = "cart_line_not_found"

    def __init__(self, variant_id: str):
        self.variant_id = variant_id
        super().__init__("Item is not in your cart")


class AddressNotFound(NotFoundError):
    code = "address_not_found"

    def __init__(self, address_id: str):
        self.address_id = address_id
        super().__init__("Address not found")


class OrderNotFound(NotFoundError):
    code = "order_not_found"

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__("Order not found")


class PromoCodeNotFound(NotFoundError):
    code = "promo_code_not_found"

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__("Promo code not found")


# ---------------------------------------------------------------------------
# Bad input
# ---------------------------------------------------------------------------
class InputError(StorefrontError):
    code = "invalid_input"


class AddressRequired(InputError):
    code = "address_required"

    def __init__(self):
        super().__init__("Please provide a delivery address")


class UnsupportedPaymentMethod(InputError):
    code = "unsupported_payment_method"

    def __init__(self, payment_method: str):
        self.payment_method = payment_method
        super().__init__(f"Unsupported payment method: {payment_method}")


class DuplicatePromoCode(InputError):
    code = "duplicate_promo_code"

    def __init__(self, code: str):
        self.promo_code = code
        super().__init__(f"Promo code {code} already exists")


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------
class BusinessRuleError(StorefrontError):
    code = "business_rule_violation"


class InsufficientStock(BusinessRuleError):
    code = "insufficient_stock"

    def __init__(self, variant_id: str, requested: int, available: int | None = None):
        self.variant_id = variant_id
        self.requested = requested
        self.available = available
        msg = "Not enough stock to fulfil this order"
        if available is not None:
            msg = f"Only {available} left in stock"
        super().__init__(msg)


class EmptyCart(BusinessRuleError):
    code = "empty_cart"

    def __init__(self, removed_item_names: list[str] | None = None):
        self.removed_item_names = list(removed_item_names or [])
        msg = "Your cart is empty"
        if self.removed_item_names:
            msg = f"Some items are no longer available: {', '.join(self.removed_item_names)}"
        super().__init__(msg)

    def details(self) -> dict:
        return {"removed_items": self.removed_item_names}


class PromoNotApplicable(BusinessRuleError):
    code = "promo_not_applicable"

    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(message)

    def details(self) -> dict:
        return {"reason": self.reason}


class WalletNumberRequired(BusinessRuleError):
    code = "wallet_number_required"

    def __init__(self):
        super().__init__("Wallet number is required for mobile wallet payments")


class CannotCancelAtThisStage(BusinessRuleError):
    code = "cannot_cancel"

    def __init__(self, status: str):
        self.status = status
        super().__init__("Cannot cancel order at this stage")


class InvalidTransition(BusinessRuleError):
    code = "invalid_transition"

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition from {current} to {target}")


# ---------------------------------------------------------------------------
# External services
# ---------------------------------------------------------------------------
class ExternalServiceError(StorefrontError):
    code = "external_service_error"


class PaymentGatewayError(ExternalServiceError):
    code = "payment_gateway_error"

    def __init__(self, message: str = "Payment provider is unavailable, please try again"):
        super().__init__(message)


class InvalidSignature(ExternalServiceError):
    code = "invalid_signature"

    def __init__(self):
        super().__init__("Invalid signature")


# ---------------------------------------------------------------------------
# Programmer errors
# ---------------------------------------------------------------------------
class OrderIntegrityError(Exception):
    """Raised when order arithmetic does not add up. Never user-facing."""
