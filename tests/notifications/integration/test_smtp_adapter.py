"""Tests for the SMTP email channel with smtplib mocked out."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from notifications.channel.smtp_adapter import SmtpEmailAdapter


@pytest.fixture()
def smtp():
    with patch("notifications.channel.smtp_adapter.smtplib.SMTP") as smtp_cls:
        client = MagicMock()
        smtp_cls.return_value.__enter__.return_value = client
        yield smtp_cls, client


class TestSmtpEmailAdapter:
    def test_sends_with_tls_and_login(self, smtp):
        smtp_cls, client = smtp
        adapter = SmtpEmailAdapter(host="mail.test", port=2525, username="orders", password="pw")

        result = adapter.send("mona@example.com", "Order ORD-1 Confirmed", "Thanks!")

        assert result["status"] == "sent"
        assert result["message_id"]
        smtp_cls.assert_called_once_with("mail.test", 2525, timeout=10.0)
        client.starttls.assert_called_once()
        client.login.assert_called_once_with("orders", "pw")
        message = client.send_message.call_args.args[0]
        assert message["To"] == "mona@example.com"
        assert message["From"] == "orders@furnishop.example"
        assert message["Subject"] == "Order ORD-1 Confirmed"
        assert message.get_content().strip() == "Thanks!"

    def test_anonymous_plain_connection(self, smtp):
        _, client = smtp
        SmtpEmailAdapter(host="localhost", port=25, use_tls=False).send("a@b.test", "Hi", "Body")
        client.starttls.assert_not_called()
        client.login.assert_not_called()

    def test_html_alternative(self, smtp):
        _, client = smtp
        SmtpEmailAdapter(host="mail.test").send("a@b.test", "Hi", "Body", html_body="<p>Body</p>")
        message = client.send_message.call_args.args[0]
        assert message.is_multipart()

    @pytest.mark.parametrize("error", [smtplib.SMTPRecipientsRefused({}), ConnectionRefusedError("refused")])
    def test_delivery_failure_is_reported(self, smtp, error):
        _, client = smtp
        client.send_message.side_effect = error

        result = SmtpEmailAdapter(host="mail.test").send("a@b.test", "Hi", "Body")

        assert result["status"] == "failed"
        assert result["message_id"] is None
