"""Guest cart store factory.

build_guest_store() picks the Redis store when REDIS_URL is set and the
in-memory store otherwise.
"""

import os

from ordering.cart.guest_store.memory_adapter import GUEST_CART_TTL_SECONDS, InMemoryGuestCartStore
from ordering.cart.guest_store.redis_adapter import RedisGuestCartStore
from ordering.cart.storage import CartStorage


def build_guest_store() -> CartStorage:
    ttl_seconds = int(os.getenv("GUEST_CART_TTL_SECONDS", GUEST_CART_TTL_SECONDS))
    redis_url = os.getenv("REDIS_URL")
    if redis_url:
        return RedisGuestCartStore.from_url(redis_url, ttl_seconds=ttl_seconds)
    return InMemoryGuestCartStore(ttl_seconds=ttl_seconds)
