from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for login checks."""

    STUDENT = "student"
    ADMIN = "admin"


class StorageMode(str, Enum):
    """How the storage backend is chosen at startup."""

    AUTO = "auto"
    MONGO = "mongo"
    MEMORY = "memory"
