"""Payment gateway factory.

build_gateway() returns the Paymob adapter when PAYMOB_API_KEY is set and
the fake gateway otherwise. The caller owns the instance and injects it.
"""

import os

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.paymob_adapter import DEFAULT_BASE_URL, PaymobGateway
from payments.gateway.port import PaymentGateway


def build_gateway() -> PaymentGateway:
    api_key = os.getenv("PAYMOB_API_KEY")
    if not api_key:
        return FakeGateway(hmac_secret=os.getenv("PAYMOB_HMAC_SECRET", FakeGateway.DEFAULT_SECRET))

    return PaymobGateway(
        api_key=api_key,
        hmac_secret=os.environ["PAYMOB_HMAC_SECRET"],
        card_integration_id=os.environ["PAYMOB_CARD_INTEGRATION_ID"],
        wallet_integration_id=os.environ["PAYMOB_WALLET_INTEGRATION_ID"],
        iframe_id=os.environ["PAYMOB_IFRAME_ID"],
        base_url=os.getenv("PAYMOB_BASE_URL", DEFAULT_BASE_URL),
        timeout=float(os.getenv("PAYMOB_TIMEOUT", "15")),
    )
