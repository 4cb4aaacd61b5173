"""Tests for order numbers and tracking tokens."""

import re

from ordering.order.numbering import generate_order_number, generate_tracking_token

ORDER_NUMBER = re.compile(r"^ORD-[0-9A-Z]+-[0-9A-F]{8}$")


class TestOrderNumber:
    def test_format(self):
        assert ORDER_NUMBER.match(generate_order_number())

    def test_timestamp_is_base36(self):
        number = generate_order_number(now_ms=36**3)
        assert number.startswith("ORD-1000-")

    def test_numbers_are_unique(self):
        numbers = {generate_order_number(now_ms=1_700_000_000_000) for _ in range(200)}
        assert len(numbers) == 200


class TestTrackingToken:
    def test_tokens_are_unguessable_and_unique(self):
        tokens = {generate_tracking_token() for _ in range(100)}
        assert len(tokens) == 100
        assert all(len(token) >= 32 for token in tokens)
