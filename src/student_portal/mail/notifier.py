from __future__ import annotations

import logging

from . import templates
from .sender import MailDeliveryError, MailSender

logger = logging.getLogger(__name__)


class AccountMailer:
    """Account emails with a log-and-continue fallback.

    Delivery failures never fail the request: the code or link is written to
    the log so development and test flows keep working without SMTP.
    """

    def __init__(self, sender: MailSender, *, base_url: str, otp_ttl_minutes: int, reset_ttl_minutes: int):
        self._sender = sender
        self._base_url = base_url.rstrip("/")
        self._otp_ttl = int(otp_ttl_minutes)
        self._reset_ttl = int(reset_ttl_minutes)

    def reset_link(self, token: str) -> str:
        return f"{self._base_url}/reset-password.html?token={token}"

    def send_signup_otp(self, email: str, otp: str) -> bool:
        body = templates.render_signup_otp(otp=otp, ttl_minutes=self._otp_ttl)
        try:
            self._sender.send(email, templates.SIGNUP_OTP_SUBJECT, body)
            return True
        except MailDeliveryError as exc:
            logger.warning(
                "Failed to send signup OTP to %s (%s). Fallback mode: OTP=%s, expires in %s minutes",
                email,
                exc,
                otp,
                self._otp_ttl,
            )
            return False

    def send_password_reset(self, email: str, token: str) -> bool:
        link = self.reset_link(token)
        body = templates.render_password_reset(reset_link=link, ttl_minutes=self._reset_ttl)
        try:
            self._sender.send(email, templates.PASSWORD_RESET_SUBJECT, body)
            return True
        except MailDeliveryError as exc:
            logger.warning(
                "Failed to send password reset email to %s (%s). Fallback mode: link=%s",
                email,
                exc,
                link,
            )
            return False

    def close(self) -> None:
        """Release the sender's worker pool, if it has one."""
        shutdown = getattr(self._sender, "shutdown", None)
        if shutdown is not None:
            shutdown()
