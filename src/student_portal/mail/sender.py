from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised by a MailSender when a message could not be handed to the server."""


class MailSender(Protocol):
    """Outgoing mail interface.

    Implementations must return within a bounded time and raise
    MailDeliveryError on failure.
    """

    def send(self, to_address: str, subject: str, body_html: str) -> None:
        raise NotImplementedError


class ConsoleMailSender(MailSender):
    """Development sender: writes the message to the log instead of SMTP."""

    def send(self, to_address: str, subject: str, body_html: str) -> None:
        logger.info("Mail (console) to=%s subject=%r\n%s", to_address, subject, body_html)
