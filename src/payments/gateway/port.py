"""Payment gateway port (abstract interface).

The checkout core talks to the payment provider only through this contract:
two ways to start a hosted payment and one way to check that a callback
really came from the provider. Adapters raise ``GatewayError`` for any
transport or provider failure.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from payments.gateway.signing import flatten_transaction


class GatewayError(Exception):
    """The payment provider could not be reached or refused the request."""


@dataclass(frozen=True)
class BillingData:
    first_name: str
    last_name: str
    email: str
    phone_number: str
    street: str
    city: str
    state: str
    building: str = "N/A"
    floor: str = "N/A"
    apartment: str = "N/A"
    country: str = "EG"
    postal_code: str = "00000"

    def as_payload(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone_number": self.phone_number,
            "street": self.street,
            "building": self.building,
            "floor": self.floor,
            "apartment": self.apartment,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "postal_code": self.postal_code,
        }


@dataclass(frozen=True)
class LineItem:
    name: str
    amount_cents: int
    quantity: int
    description: str = ""


@dataclass(frozen=True)
class PaymentSession:
    """A hosted payment the shopper is sent to."""

    gateway_order_id: str
    redirect_url: str
    payment_token: str | None = None


@dataclass(frozen=True)
class CallbackTransaction:
    """The fields of a provider callback the core acts on."""

    gateway_order_id: str | None
    transaction_id: str | None
    success: bool
    pending: bool = False
    amount_cents: int | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "CallbackTransaction":
        flat = flatten_transaction(payload)
        amount = flat.get("amount_cents")
        return cls(
            gateway_order_id=str(flat["order"]) if flat.get("order") not in (None, "") else None,
            transaction_id=str(flat["id"]) if flat.get("id") not in (None, "") else None,
            success=flat.get("success") in (True, "true", "True"),
            pending=flat.get("pending") in (True, "true", "True"),
            amount_cents=int(amount) if amount not in (None, "") else None,
        )


class PaymentGateway(ABC):
    @abstractmethod
    def initiate_card_payment(
        self,
        amount: float,
        billing: BillingData,
        items: list[LineItem],
        merchant_order_id: str,
    ) -> PaymentSession:
        """Start a hosted card payment and return the iframe to show."""
        ...

    @abstractmethod
    def initiate_wallet_payment(
        self,
        amount: float,
        billing: BillingData,
        wallet_number: str,
        merchant_order_id: str,
    ) -> PaymentSession:
        """Start a mobile wallet payment and return the wallet's redirect."""
        ...

    @abstractmethod
    def verify_callback(self, payload: dict, signature: str) -> bool:
        """Verify that a callback payload is authentically from the gateway."""
        ...
