from __future__ import annotations

import logging
from typing import List

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

USERS = "users"
PENDING_REGISTRATIONS = "pending_registrations"
PASSWORD_RESET_TOKENS = "password_reset_tokens"


def ensure_indexes(db: Database) -> None:
    """Create the unique indexes the account flows rely on (idempotent)."""
    db[USERS].create_index([("email", ASCENDING)], unique=True, name="uniq_user_email")
    db[PENDING_REGISTRATIONS].create_index([("email", ASCENDING)], unique=True, name="uniq_pending_email")
    db[PASSWORD_RESET_TOKENS].create_index([("token", ASCENDING)], unique=True, name="uniq_reset_token")
    db[PASSWORD_RESET_TOKENS].create_index([("email", ASCENDING)], name="reset_token_email")


def list_collections(db: Database) -> List[str]:
    return sorted(db.list_collection_names())


def ping(client: MongoClient) -> bool:
    try:
        client.admin.command("ping")
        return True
    except PyMongoError as exc:
        logger.warning("MongoDB ping failed: %s", exc)
        return False
