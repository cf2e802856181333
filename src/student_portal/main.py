from __future__ import annotations

import atexit
import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .accounts.controller import register as register_accounts
from .common.logging_config import setup_logging
from .container import build_container
from .database.connectivity import ConnectivityState
from .mail.sender import MailSender
from .system.controller import register as register_system

logger = logging.getLogger(__name__)

MAIL_SETTINGS = (
    "MAIL_SERVER",
    "MAIL_PORT",
    "MAIL_USE_TLS",
    "MAIL_USE_SSL",
    "MAIL_USERNAME",
    "MAIL_PASSWORD",
    "MAIL_DEFAULT_SENDER",
)


def create_app(
    settings_module: Optional[str] = None,
    *,
    mail_sender: Optional[MailSender] = None,
    connectivity: Optional[ConnectivityState] = None,
) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    for key in MAIL_SETTINGS:
        if hasattr(settings, key):
            app.config[key] = getattr(settings, key)

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))
    logger.info("Starting student portal (settings=%s)", settings_module)

    container = build_container(settings, app=app, mail_sender=mail_sender, connectivity=connectivity)
    app.extensions["student_portal"] = container
    atexit.register(container.close)

    register_accounts(app, container)
    register_system(app, container)

    logger.info("Database: %s", "MongoDB connected" if container.connectivity.online else "in-memory mode")
    return app
