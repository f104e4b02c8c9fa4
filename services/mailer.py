"""
Outgoing mail. Delivery is not wired up yet: messages are logged with the
recipient redacted, and the token itself never reaches the log.
"""
from __future__ import annotations

import logging
from collections import deque

logger = logging.getLogger(__name__)


def redact_email(email: str) -> str:
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class LogMailer:
    """Stand-in for an SMTP client; records what would have been sent."""

    def __init__(self):
        # recent messages only, for inspection in dev and tests
        self.outbox = deque(maxlen=100)

    def send_password_reset(self, email: str, reset_token: str) -> None:
        self.outbox.append({"to": email, "kind": "password_reset", "token": reset_token})
        logger.info("Password reset mail queued for %s (delivery not configured)", redact_email(email))
