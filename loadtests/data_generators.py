"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names and limits of the storefront's Pydantic
request schemas. Addresses are Egyptian so every governorate has a
shipping rate.
"""

import os
import random
import uuid

from faker import Faker

fake = Faker()

GOVERNORATES = ["Cairo", "Giza", "Alexandria", "Dakahlia", "Red Sea"]


def seeded_variant_ids() -> list[str]:
    """Variant ids printed by ``python src/manage.py seed-catalogue``."""
    raw = os.getenv("LOADTEST_VARIANT_IDS", "")
    return [variant_id.strip() for variant_id in raw.split(",") if variant_id.strip()]


def shopper_id() -> str:
    return f"lt-shopper-{uuid.uuid4().hex[:12]}"


def guest_id() -> str:
    return f"lt-guest-{uuid.uuid4().hex[:12]}"


def cart_item_data(variant_ids: list[str]) -> dict:
    return {"variant_id": random.choice(variant_ids), "quantity": 1}


def egyptian_phone() -> str:
    return f"01{random.choice('0125')}{random.randint(10_000_000, 99_999_999)}"


def address_data() -> dict:
    governorate = random.choice(GOVERNORATES)
    return {
        "full_name": fake.name()[:255],
        "phone": egyptian_phone(),
        "street": fake.street_address()[:255],
        "building": str(random.randint(1, 200)),
        "floor": str(random.randint(0, 15)),
        "apartment": str(random.randint(1, 40)),
        "city": governorate,
        "governorate": governorate,
    }


def checkout_data(payment_method: str = "cod", promo_code: str | None = None) -> dict:
    payload = {
        "payment_method": payment_method,
        "new_address": address_data(),
        "email": f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:4]}@example.com",
    }
    if payment_method == "wallet":
        payload["wallet_number"] = egyptian_phone()
    if promo_code:
        payload["promo_code"] = promo_code
    if random.random() < 0.2:
        payload["customer_note"] = fake.sentence()[:200]
    return payload
