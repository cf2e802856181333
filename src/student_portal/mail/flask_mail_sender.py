from __future__ import annotations

import logging
import smtplib
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout

from flask import Flask
from flask_mail import Mail, Message

from ..core.constants import DEFAULT_MAIL_TIMEOUT_SECONDS
from .sender import MailDeliveryError, MailSender

logger = logging.getLogger(__name__)


class FlaskMailSender(MailSender):
    """SMTP delivery through Flask-Mail.

    Flask-Mail has no socket timeout setting, so delivery runs on a small
    worker pool and the caller waits at most ``timeout_seconds``.
    """

    def __init__(self, app: Flask, *, timeout_seconds: float = DEFAULT_MAIL_TIMEOUT_SECONDS, max_workers: int = 2):
        self._app = app
        self._mail = Mail(app)
        self._timeout = float(timeout_seconds)
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="mail")

    def _deliver(self, message: Message) -> None:
        with self._app.app_context():
            self._mail.send(message)

    def send(self, to_address: str, subject: str, body_html: str) -> None:
        with self._app.app_context():
            # Message reads the default sender from the current app
            message = Message(subject=subject, recipients=[to_address], html=body_html)
        future = self._pool.submit(self._deliver, message)
        try:
            future.result(timeout=self._timeout)
        except FutureTimeout:
            future.cancel()
            raise MailDeliveryError(f"SMTP delivery timed out after {self._timeout:g}s")
        except smtplib.SMTPAuthenticationError as exc:
            logger.error("SMTP authentication failed, check MAIL_USERNAME/MAIL_PASSWORD")
            raise MailDeliveryError(str(exc)) from exc
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(str(exc)) from exc
        logger.info("Mail sent to %s", to_address)

    def shutdown(self) -> None:
        self._pool.shutdown(wait=False)
