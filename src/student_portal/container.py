from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from flask import Flask

from .accounts.memory_repository import InMemoryAccountRepository
from .accounts.mongo_repository import MongoAccountRepository
from .accounts.service import AuthService, PasswordResetService, SignupService
from .common.datetime_utils import Clock, utc_now
from .core.constants import (
    DEFAULT_MAIL_TIMEOUT_SECONDS,
    DEFAULT_OTP_MAX_ATTEMPTS,
    DEFAULT_OTP_TTL_MINUTES,
    DEFAULT_RESET_TOKEN_TTL_MINUTES,
)
from .core.enums import StorageMode
from .database.bootstrap import ensure_indexes, ping
from .database.connection import MongoConfig, MongoConnection
from .database.connectivity import ConnectivityState, MongoTopologyListener
from .database.mongo_base import translate_errors
from .mail.flask_mail_sender import FlaskMailSender
from .mail.notifier import AccountMailer
from .mail.sender import ConsoleMailSender, MailSender

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    connectivity: ConnectivityState
    mongo: Optional[MongoConnection]
    mailer: AccountMailer

    signup_service: SignupService
    auth_service: AuthService
    password_reset_service: PasswordResetService

    def close(self) -> None:
        self.mailer.close()
        if self.mongo is not None:
            self.mongo.close()


def build_connectivity(settings: Any) -> tuple[ConnectivityState, Optional[MongoConnection]]:
    mode = StorageMode(str(getattr(settings, "STORAGE_BACKEND", StorageMode.AUTO.value)).lower())
    memory = InMemoryAccountRepository()
    if mode == StorageMode.MEMORY:
        logger.info("Storage: in-memory (STORAGE_BACKEND=memory)")
        return ConnectivityState(memory), None

    listener = MongoTopologyListener()
    conn = MongoConnection(
        MongoConfig(
            uri=str(settings.MONGODB_URI),
            database=str(settings.MONGODB_DB),
            timeout_ms=int(getattr(settings, "MONGODB_TIMEOUT_MS", 3000)),
        ),
        event_listeners=[listener],
    )

    def prepare_database() -> None:
        with translate_errors("ensure_indexes"):
            ensure_indexes(conn.database())

    state = ConnectivityState(memory, MongoAccountRepository(conn.database()), on_connect=prepare_database)
    listener.attach(state)
    if ping(conn.client()):
        state.mark_online()

    if state.online:
        logger.info("Connected to MongoDB (%s)", conn.config.database)
    elif mode == StorageMode.MONGO:
        conn.close()
        raise RuntimeError(f"MongoDB is not reachable at {settings.MONGODB_URI} and STORAGE_BACKEND=mongo")
    else:
        logger.warning("MongoDB not reachable, server will continue with in-memory storage")

    return state, conn


def build_mail_sender(settings: Any, app: Optional[Flask]) -> MailSender:
    if app is not None and getattr(settings, "MAIL_SERVER", None):
        return FlaskMailSender(
            app,
            timeout_seconds=float(getattr(settings, "MAIL_TIMEOUT_SECONDS", DEFAULT_MAIL_TIMEOUT_SECONDS)),
        )
    logger.info("MAIL_SERVER not configured, emails are written to the log")
    return ConsoleMailSender()


def build_container(
    settings: Any,
    *,
    app: Optional[Flask] = None,
    mail_sender: Optional[MailSender] = None,
    connectivity: Optional[ConnectivityState] = None,
    clock: Clock = utc_now,
) -> Container:
    mongo = None
    if connectivity is None:
        connectivity, mongo = build_connectivity(settings)

    otp_ttl = int(getattr(settings, "OTP_TTL_MINUTES", DEFAULT_OTP_TTL_MINUTES))
    reset_ttl = int(getattr(settings, "RESET_TOKEN_TTL_MINUTES", DEFAULT_RESET_TOKEN_TTL_MINUTES))

    mailer = AccountMailer(
        mail_sender or build_mail_sender(settings, app),
        base_url=str(getattr(settings, "APP_BASE_URL", "http://localhost:5000")),
        otp_ttl_minutes=otp_ttl,
        reset_ttl_minutes=reset_ttl,
    )

    signup_service = SignupService(
        connectivity,
        mailer,
        clock=clock,
        otp_ttl_minutes=otp_ttl,
        max_attempts=int(getattr(settings, "OTP_MAX_ATTEMPTS", DEFAULT_OTP_MAX_ATTEMPTS)),
    )
    auth_service = AuthService(connectivity, clock=clock)
    password_reset_service = PasswordResetService(connectivity, mailer, clock=clock, token_ttl_minutes=reset_ttl)

    return Container(
        connectivity=connectivity,
        mongo=mongo,
        mailer=mailer,
        signup_service=signup_service,
        auth_service=auth_service,
        password_reset_service=password_reset_service,
    )
