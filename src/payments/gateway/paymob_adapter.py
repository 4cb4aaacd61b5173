"""Paymob Accept adapter.

Every hosted payment takes three calls: authenticate, register the order,
and request a payment key bound to an integration. Card payments then show
Paymob's iframe. Wallet payments make one more call that returns the
wallet provider's redirect.
"""

import requests
import structlog

from payments.gateway.port import (
    BillingData,
    GatewayError,
    LineItem,
    PaymentGateway,
    PaymentSession,
)
from payments.gateway.signing import verify_signature

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://accept.paymob.com/api"


def to_cents(amount: float) -> int:
    return int(round(amount * 100))


class PaymobGateway(PaymentGateway):
    def __init__(
        self,
        api_key: str,
        hmac_secret: str,
        card_integration_id: str,
        wallet_integration_id: str,
        iframe_id: str,
        base_url: str = DEFAULT_BASE_URL,
        currency: str = "EGP",
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.hmac_secret = hmac_secret
        self.card_integration_id = card_integration_id
        self.wallet_integration_id = wallet_integration_id
        self.iframe_id = iframe_id
        self.base_url = base_url.rstrip("/")
        self.currency = currency
        self.timeout = timeout
        self._session = session or requests.Session()

    def _post(self, path: str, body: dict) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.post(url, json=body, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            logger.error("Paymob request failed", path=path, error=str(exc))
            raise GatewayError(f"Payment provider request to {path} failed") from exc
        except ValueError as exc:
            raise GatewayError(f"Payment provider returned an unreadable response for {path}") from exc

        if not isinstance(payload, dict):
            raise GatewayError(f"Payment provider returned an unreadable response for {path}")
        return payload

    def _post_for(self, path: str, body: dict, field: str):
        """POST and return one required field of the response."""
        payload = self._post(path, body)
        if payload.get(field) in (None, ""):
            logger.error("Paymob response missing field", path=path, field=field, response=payload)
            raise GatewayError(f"Payment provider response for {path} has no {field}")
        return payload[field]

    def _authenticate(self) -> str:
        return self._post_for("/auth/tokens", {"api_key": self.api_key}, "token")

    def _register_order(self, auth_token: str, amount_cents: int, merchant_order_id: str, items: list[LineItem]) -> str:
        body = {
            "auth_token": auth_token,
            "delivery_needed": False,
            "amount_cents": amount_cents,
            "currency": self.currency,
            "merchant_order_id": merchant_order_id,
            "items": [
                {
                    "name": item.name,
                    "amount_cents": item.amount_cents,
                    "description": item.description,
                    "quantity": item.quantity,
                }
                for item in items
            ],
        }
        return str(self._post_for("/ecommerce/orders", body, "id"))

    def _payment_key(
        self,
        auth_token: str,
        amount_cents: int,
        gateway_order_id: str,
        billing: BillingData,
        integration_id: str,
    ) -> str:
        try:
            integration = int(integration_id)
        except (TypeError, ValueError) as exc:
            raise GatewayError(f"Payment integration id {integration_id!r} is not numeric") from exc

        body = {
            "auth_token": auth_token,
            "amount_cents": amount_cents,
            "expiration": 3600,
            "order_id": gateway_order_id,
            "billing_data": billing.as_payload(),
            "currency": self.currency,
            "integration_id": integration,
        }
        return self._post_for("/acceptance/payment_keys", body, "token")

    def _prepare(self, amount, billing, items, merchant_order_id, integration_id) -> tuple[str, str]:
        amount_cents = to_cents(amount)
        auth_token = self._authenticate()
        gateway_order_id = self._register_order(auth_token, amount_cents, merchant_order_id, items)
        payment_token = self._payment_key(auth_token, amount_cents, gateway_order_id, billing, integration_id)
        return gateway_order_id, payment_token

    def initiate_card_payment(
        self,
        amount: float,
        billing: BillingData,
        items: list[LineItem],
        merchant_order_id: str,
    ) -> PaymentSession:
        gateway_order_id, payment_token = self._prepare(
            amount, billing, items, merchant_order_id, self.card_integration_id
        )
        logger.info("Card payment initiated", merchant_order_id=merchant_order_id, gateway_order_id=gateway_order_id)
        return PaymentSession(
            gateway_order_id=gateway_order_id,
            redirect_url=f"{self.base_url}/acceptance/iframes/{self.iframe_id}?payment_token={payment_token}",
            payment_token=payment_token,
        )

    def initiate_wallet_payment(
        self,
        amount: float,
        billing: BillingData,
        wallet_number: str,
        merchant_order_id: str,
    ) -> PaymentSession:
        gateway_order_id, payment_token = self._prepare(
            amount, billing, [], merchant_order_id, self.wallet_integration_id
        )
        result = self._post(
            "/acceptance/payments/pay",
            {
                "source": {"identifier": wallet_number, "subtype": "WALLET"},
                "payment_token": payment_token,
            },
        )
        redirect_url = result.get("redirect_url") or result.get("iframe_redirection_url")
        if not redirect_url:
            raise GatewayError("Payment provider did not return a wallet redirect")

        logger.info("Wallet payment initiated", merchant_order_id=merchant_order_id, gateway_order_id=gateway_order_id)
        return PaymentSession(
            gateway_order_id=gateway_order_id,
            redirect_url=redirect_url,
            payment_token=payment_token,
        )

    def verify_callback(self, payload: dict, signature: str) -> bool:
        return verify_signature(payload, signature, self.hmac_secret)
