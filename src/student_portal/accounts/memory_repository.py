from __future__ import annotations

import threading
from typing import Optional

from ..core.exceptions import UserAlreadyExists
from .model import PasswordResetToken, PendingRegistration, User
from .repository import AccountRepository


class InMemoryAccountRepository(AccountRepository):
    """Process-local backend used when MongoDB is not reachable.

    Note: data lives only as long as the process and is not copied into
    MongoDB when the connection comes back.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: dict[str, PendingRegistration] = {}
        self._users: dict[str, User] = {}
        self._reset_tokens: dict[str, PasswordResetToken] = {}

    def upsert_pending(self, pending: PendingRegistration) -> None:
        with self._lock:
            self._pending[pending.email] = pending

    def find_pending(self, email: str) -> Optional[PendingRegistration]:
        with self._lock:
            return self._pending.get(email)

    def delete_pending(self, email: str) -> bool:
        with self._lock:
            return self._pending.pop(email, None) is not None

    def create_user(self, user: User) -> None:
        # Check and insert under one lock so concurrent registrations cannot both win.
        with self._lock:
            if user.email in self._users:
                raise UserAlreadyExists("User with this email already exists")
            self._users[user.email] = user

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return self._users.get(email)

    def update_user(self, user: User) -> bool:
        with self._lock:
            if user.email not in self._users:
                return False
            self._users[user.email] = user
            return True

    def create_reset_token(self, token: PasswordResetToken) -> None:
        with self._lock:
            self._reset_tokens[token.token] = token

    def find_reset_token(self, token: str) -> Optional[PasswordResetToken]:
        with self._lock:
            return self._reset_tokens.get(token)

    def delete_reset_token(self, token: str) -> bool:
        with self._lock:
            return self._reset_tokens.pop(token, None) is not None

    def counts(self) -> dict:
        with self._lock:
            return {
                "users": len(self._users),
                "pending": len(self._pending),
                "reset_tokens": len(self._reset_tokens),
            }
