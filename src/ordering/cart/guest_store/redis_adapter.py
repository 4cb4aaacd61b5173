"""Redis-backed guest cart store.

Each guest cart is a hash ``cart:<guest_id>`` mapping variant id to quantity.
Writes run in a MULTI/EXEC pipeline together with the expiry refresh.
"""

import redis

from ordering.cart.guest_store.memory_adapter import GUEST_CART_TTL_SECONDS
from ordering.cart.storage import CartStorage


class RedisGuestCartStore(CartStorage):
    def __init__(
        self,
        client: redis.Redis,
        ttl_seconds: int = GUEST_CART_TTL_SECONDS,
        key_prefix: str = "cart:",
    ) -> None:
        self._client = client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisGuestCartStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), **kwargs)

    def _key(self, guest_id: str) -> str:
        return f"{self.key_prefix}{guest_id}"

    def quantities(self, shopper_id: str) -> dict[str, int]:
        raw = self._client.hgetall(self._key(shopper_id))
        result = {}
        for field, value in raw.items():
            if isinstance(field, bytes):
                field = field.decode()
            result[field] = int(value)
        return result

    def increment(self, shopper_id: str, variant_id: str, quantity: int) -> int:
        key = self._key(shopper_id)
        pipe = self._client.pipeline()
        pipe.hincrby(key, variant_id, quantity)
        pipe.expire(key, self.ttl_seconds)
        new_quantity, _ = pipe.execute()
        return int(new_quantity)

    def set_quantity(self, shopper_id: str, variant_id: str, quantity: int) -> None:
        key = self._key(shopper_id)
        pipe = self._client.pipeline()
        pipe.hset(key, variant_id, quantity)
        pipe.expire(key, self.ttl_seconds)
        pipe.execute()

    def remove(self, shopper_id: str, variant_id: str) -> None:
        self._client.hdel(self._key(shopper_id), variant_id)

    def clear(self, shopper_id: str) -> None:
        self._client.delete(self._key(shopper_id))
