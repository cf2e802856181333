from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import Role


@dataclass(frozen=True)
class PendingRegistration:
    """Domain entity: a signup that has been started but not completed.

    Note: Plain data object, no storage access. Keyed by normalized email.
    """

    email: str
    otp: str
    otp_expires_at: datetime
    role: Role = Role.STUDENT
    verified: bool = False
    failed_attempts: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now > self.otp_expires_at


@dataclass(frozen=True)
class User:
    """Domain entity: a durable, verified account."""

    user_id: str
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: datetime
    verified: bool = True
    last_login_at: Optional[datetime] = None
    reset_token: Optional[str] = None
    reset_token_expires_at: Optional[datetime] = None

    def to_public(self) -> "PublicUser":
        return PublicUser(user_id=self.user_id, name=self.name, email=self.email, role=self.role)

    def to_profile(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "verified": self.verified,
            "createdAt": to_iso(self.created_at),
            "lastLogin": to_iso(self.last_login_at),
        }


@dataclass(frozen=True)
class PublicUser:
    """What register/login hand back to the client. Never carries the hash."""

    user_id: str
    name: str
    email: str
    role: Role

    def to_dict(self) -> dict:
        return {"id": self.user_id, "name": self.name, "email": self.email, "role": self.role.value}


@dataclass(frozen=True)
class PasswordResetToken:
    token: str
    email: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
