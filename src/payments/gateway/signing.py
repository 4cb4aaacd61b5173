"""Callback signing contract.

The provider signs a callback with SHA-512 HMAC over the values of
``HMAC_FIELDS`` concatenated in that exact order. Booleans are rendered as
``true``/``false`` and missing values as empty strings. Webhook bodies nest
the transaction under ``obj``; redirect query strings use dotted keys.
Both are flattened to the same field names before signing.
"""

import hashlib
import hmac

HMAC_FIELDS = (
    "amount_cents",
    "created_at",
    "currency",
    "error_occured",
    "has_parent_transaction",
    "id",
    "integration_id",
    "is_3d_secure",
    "is_auth",
    "is_capture",
    "is_refunded",
    "is_standalone_payment",
    "is_voided",
    "order",
    "owner",
    "pending",
    "source_data_pan",
    "source_data_sub_type",
    "source_data_type",
    "success",
)


def flatten_transaction(payload: dict) -> dict:
    """Return the transaction as a flat dict keyed like ``HMAC_FIELDS``."""
    transaction = payload.get("obj") if isinstance(payload.get("obj"), dict) else payload

    flat = {}
    for key, value in transaction.items():
        if key == "order" and isinstance(value, dict):
            flat["order"] = value.get("id")
        elif key == "source_data" and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                flat[f"source_data_{sub_key}"] = sub_value
        elif isinstance(value, dict):
            continue
        else:
            flat[key.replace(".", "_")] = value
    return flat


def _render(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def canonical_string(payload: dict) -> str:
    flat = flatten_transaction(payload)
    return "".join(_render(flat.get(field)) for field in HMAC_FIELDS)


def compute_signature(payload: dict, secret: str) -> str:
    return hmac.new(secret.encode(), canonical_string(payload).encode(), hashlib.sha512).hexdigest()


def verify_signature(payload: dict, signature: str | None, secret: str | None) -> bool:
    if not signature or not secret:
        return False
    return hmac.compare_digest(compute_signature(payload, secret), signature.strip().lower())
