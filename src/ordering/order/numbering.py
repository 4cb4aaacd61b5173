"""Order numbers and tracking tokens."""

import secrets
import time
import uuid

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(value: int) -> str:
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def generate_order_number(now_ms: int | None = None) -> str:
    """ORD-<base36 millisecond timestamp>-<8 random hex chars>, uppercased.

    Numbers sort roughly by creation time while staying short enough to read
    out over the phone.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"ORD-{_base36(now_ms)}-{uuid.uuid4().hex[:8].upper()}"


def generate_tracking_token() -> str:
    return secrets.token_urlsafe(24)
