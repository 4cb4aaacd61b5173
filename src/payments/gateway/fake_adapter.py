"""Configurable fake payment gateway for development and testing.

Simulates the hosted-payment provider without any external calls. It can
be told to fail at runtime, records every call, and signs callbacks with a
known secret so tests can produce valid and tampered payloads.
"""

from uuid import uuid4

from payments.gateway.port import (
    BillingData,
    GatewayError,
    LineItem,
    PaymentGateway,
    PaymentSession,
)
from payments.gateway.signing import compute_signature, verify_signature


class FakeGateway(PaymentGateway):
    DEFAULT_SECRET = "test-hmac-secret"

    def __init__(self, hmac_secret: str = DEFAULT_SECRET, base_url: str = "https://fake-gateway.local") -> None:
        self.hmac_secret = hmac_secret
        self.base_url = base_url
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _session(self, method: str, call: dict) -> PaymentSession:
        self.calls.append({"method": method, **call})
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

        gateway_order_id = f"fake_order_{uuid4().hex[:12]}"
        token = f"fake_token_{uuid4().hex[:12]}"
        return PaymentSession(
            gateway_order_id=gateway_order_id,
            redirect_url=f"{self.base_url}/{method}/{gateway_order_id}?payment_token={token}",
            payment_token=token,
        )

    def initiate_card_payment(
        self,
        amount: float,
        billing: BillingData,
        items: list[LineItem],
        merchant_order_id: str,
    ) -> PaymentSession:
        return self._session(
            "card",
            {"amount": amount, "billing": billing, "items": items, "merchant_order_id": merchant_order_id},
        )

    def initiate_wallet_payment(
        self,
        amount: float,
        billing: BillingData,
        wallet_number: str,
        merchant_order_id: str,
    ) -> PaymentSession:
        return self._session(
            "wallet",
            {
                "amount": amount,
                "billing": billing,
                "wallet_number": wallet_number,
                "merchant_order_id": merchant_order_id,
            },
        )

    def verify_callback(self, payload: dict, signature: str) -> bool:
        return verify_signature(payload, signature, self.hmac_secret)

    def sign(self, payload: dict) -> str:
        """Produce the signature the real provider would send with payload."""
        return compute_signature(payload, self.hmac_secret)
