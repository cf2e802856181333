from __future__ import annotations

from typing import Optional, Protocol

from .model import PasswordResetToken, PendingRegistration, User


class AccountRepository(Protocol):
    """Storage interface for pending registrations, users and reset tokens.

    Note: services depend on this interface only. Both the MongoDB and the
    in-memory backends implement the same operation set.
    """

    def upsert_pending(self, pending: PendingRegistration) -> None:
        raise NotImplementedError

    def find_pending(self, email: str) -> Optional[PendingRegistration]:
        raise NotImplementedError

    def delete_pending(self, email: str) -> bool:
        raise NotImplementedError

    def create_user(self, user: User) -> None:
        """Insert a new user. Raises UserAlreadyExists if the email is taken."""
        raise NotImplementedError

    def find_user_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def update_user(self, user: User) -> bool:
        raise NotImplementedError

    def create_reset_token(self, token: PasswordResetToken) -> None:
        raise NotImplementedError

    def find_reset_token(self, token: str) -> Optional[PasswordResetToken]:
        raise NotImplementedError

    def delete_reset_token(self, token: str) -> bool:
        raise NotImplementedError
