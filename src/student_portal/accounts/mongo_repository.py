from __future__ import annotations

from typing import Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..common.datetime_utils import ensure_utc
from ..core.enums import Role
from ..core.exceptions import UserAlreadyExists
from ..database.bootstrap import PASSWORD_RESET_TOKENS, PENDING_REGISTRATIONS, USERS
from ..database.mongo_base import translate_errors
from .model import PasswordResetToken, PendingRegistration, User
from .repository import AccountRepository


class MongoAccountRepository(AccountRepository):
    def __init__(self, db: Database):
        self._users = db[USERS]
        self._pending = db[PENDING_REGISTRATIONS]
        self._reset_tokens = db[PASSWORD_RESET_TOKENS]

    def upsert_pending(self, pending: PendingRegistration) -> None:
        with translate_errors("upsert_pending"):
            self._pending.replace_one(
                {"email": pending.email},
                {
                    "email": pending.email,
                    "otp": pending.otp,
                    "otp_expires_at": pending.otp_expires_at,
                    "role": pending.role.value,
                    "verified": bool(pending.verified),
                    "failed_attempts": int(pending.failed_attempts),
                },
                upsert=True,
            )

    def find_pending(self, email: str) -> Optional[PendingRegistration]:
        with translate_errors("find_pending"):
            row = self._pending.find_one({"email": email})
        if not row:
            return None
        return PendingRegistration(
            email=row["email"],
            otp=str(row["otp"]),
            otp_expires_at=ensure_utc(row["otp_expires_at"]),
            role=Role(row.get("role", Role.STUDENT.value)),
            verified=bool(row.get("verified", False)),
            failed_attempts=int(row.get("failed_attempts", 0)),
        )

    def delete_pending(self, email: str) -> bool:
        with translate_errors("delete_pending"):
            return self._pending.delete_one({"email": email}).deleted_count > 0

    def create_user(self, user: User) -> None:
        with translate_errors("create_user"):
            if self._users.find_one({"email": user.email}, {"_id": 1}):
                raise UserAlreadyExists()
            try:
                self._users.insert_one(self._user_document(user))
            except DuplicateKeyError:
                # Unique index on email: a concurrent registration got there first.
                raise UserAlreadyExists("User with this email already exists")

    def find_user_by_email(self, email: str) -> Optional[User]:
        with translate_errors("find_user_by_email"):
            row = self._users.find_one({"email": email})
        if not row:
            return None
        return User(
            user_id=str(row["_id"]),
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=Role(row.get("role", Role.STUDENT.value)),
            created_at=ensure_utc(row["created_at"]),
            verified=bool(row.get("verified", True)),
            last_login_at=ensure_utc(row.get("last_login_at")),
            reset_token=row.get("reset_token"),
            reset_token_expires_at=ensure_utc(row.get("reset_token_expires_at")),
        )

    def update_user(self, user: User) -> bool:
        doc = self._user_document(user)
        doc.pop("_id")
        with translate_errors("update_user"):
            result = self._users.update_one({"email": user.email}, {"$set": doc})
        return result.matched_count > 0

    def create_reset_token(self, token: PasswordResetToken) -> None:
        with translate_errors("create_reset_token"):
            self._reset_tokens.insert_one(
                {"token": token.token, "email": token.email, "expires_at": token.expires_at}
            )

    def find_reset_token(self, token: str) -> Optional[PasswordResetToken]:
        with translate_errors("find_reset_token"):
            row = self._reset_tokens.find_one({"token": token})
        if not row:
            return None
        return PasswordResetToken(
            token=row["token"],
            email=row["email"],
            expires_at=ensure_utc(row["expires_at"]),
        )

    def delete_reset_token(self, token: str) -> bool:
        with translate_errors("delete_reset_token"):
            return self._reset_tokens.delete_one({"token": token}).deleted_count > 0

    @staticmethod
    def _user_document(user: User) -> dict:
        return {
            "_id": user.user_id,
            "name": user.name,
            "email": user.email,
            "password_hash": user.password_hash,
            "role": user.role.value,
            "verified": bool(user.verified),
            "created_at": user.created_at,
            "last_login_at": user.last_login_at,
            "reset_token": user.reset_token,
            "reset_token_expires_at": user.reset_token_expires_at,
        }
