"""Email channel factory.

build_email_channel() returns the SMTP adapter when SMTP_HOST is set and
the fake adapter otherwise.
"""

import os

from notifications.channel.email_port import EmailPort
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.channel.smtp_adapter import SmtpEmailAdapter


def build_email_channel() -> EmailPort:
    host = os.getenv("SMTP_HOST")
    if not host:
        return FakeEmailAdapter()

    return SmtpEmailAdapter(
        host=host,
        port=int(os.getenv("SMTP_PORT", "587")),
        username=os.getenv("SMTP_USERNAME"),
        password=os.getenv("SMTP_PASSWORD"),
        sender=os.getenv("MAIL_FROM", "orders@furnishop.example"),
    )
