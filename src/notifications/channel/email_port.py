"""Outbound mail contract used by the order notifier."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        """Deliver one message to a single recipient.

        Delivery problems are reported in the result, not raised:
        ``{"message_id": str | None, "status": "sent" | "failed", "error": str}``.
        Adapters may still raise on programming errors.
        """
        ...
