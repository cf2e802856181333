from __future__ import annotations

import logging
from dataclasses import replace
from datetime import timedelta
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import Clock, utc_now
from ..common.validators import (
    normalize_email,
    parse_role,
    require_email,
    require_fields,
    require_matching_passwords,
    require_min_length,
)
from ..core.constants import (
    DEFAULT_OTP_MAX_ATTEMPTS,
    DEFAULT_OTP_TTL_MINUTES,
    DEFAULT_RESET_TOKEN_TTL_MINUTES,
    MIN_PASSWORD_LENGTH,
)
from ..core.exceptions import (
    EmailNotVerified,
    InvalidPassword,
    InvalidResetToken,
    OtpAttemptsExceeded,
    OtpExpired,
    OtpMismatch,
    PendingRegistrationNotFound,
    RoleMismatch,
    UserAlreadyExists,
    UserNotFound,
)
from ..database.connectivity import ConnectivityState
from ..mail.notifier import AccountMailer
from .model import PasswordResetToken, PendingRegistration, PublicUser, User
from .tokens import generate_otp, generate_reset_token, generate_user_id, otp_matches

logger = logging.getLogger(__name__)


def _validate_new_password(password: str, confirm_password: str) -> None:
    require_matching_passwords(password, confirm_password)
    require_min_length(password, "Password", MIN_PASSWORD_LENGTH)


class SignupService:
    """Use case: email-verified signup (send OTP, verify OTP, complete registration).

    Lifecycle of a pending registration:
    - created or overwritten by ``request_otp`` (any earlier code stops working)
    - marked verified by ``verify_otp``; kept for the registration step
    - deleted when the account is created, when the code expires, or after too
      many wrong codes

    Known race: a verify running while a new code is being issued for the same
    email may verify the old code. Requests are not serialized per email.
    """

    def __init__(
        self,
        stores: ConnectivityState,
        mailer: AccountMailer,
        *,
        clock: Clock = utc_now,
        otp_ttl_minutes: int = DEFAULT_OTP_TTL_MINUTES,
        max_attempts: int = DEFAULT_OTP_MAX_ATTEMPTS,
    ):
        self._stores = stores
        self._mailer = mailer
        self._clock = clock
        self._otp_ttl = timedelta(minutes=int(otp_ttl_minutes))
        self._max_attempts = int(max_attempts)

    def request_otp(self, email: str, role: Optional[str] = None) -> None:
        email = require_email(email)
        role_value = parse_role(role)
        store = self._stores.accounts

        if store.find_user_by_email(email):
            raise UserAlreadyExists()

        otp = generate_otp()
        store.upsert_pending(
            PendingRegistration(
                email=email,
                otp=otp,
                otp_expires_at=self._clock() + self._otp_ttl,
                role=role_value,
            )
        )
        logger.info("Signup OTP issued for %s (role=%s, backend=%s)", email, role_value.value, self._stores.describe())

        self._mailer.send_signup_otp(email, otp)

    def verify_otp(self, email: str, otp) -> None:
        require_fields("Email and OTP are required", email, otp)
        email = normalize_email(email)
        store = self._stores.accounts

        pending = store.find_pending(email)
        if not pending:
            raise PendingRegistrationNotFound()

        if pending.is_expired(self._clock()):
            store.delete_pending(email)
            raise OtpExpired()

        if not otp_matches(pending.otp, otp):
            attempts = pending.failed_attempts + 1
            if attempts >= self._max_attempts:
                store.delete_pending(email)
                logger.warning("Pending signup for %s dropped after %s wrong OTPs", email, attempts)
                raise OtpAttemptsExceeded()
            store.upsert_pending(replace(pending, failed_attempts=attempts))
            raise OtpMismatch()

        if not pending.verified:
            store.upsert_pending(replace(pending, verified=True))
        logger.info("Email verified for %s", email)

    def complete_registration(
        self,
        *,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
        role: Optional[str] = None,
    ) -> PublicUser:
        require_fields("All fields are required", name, email, password, confirm_password)
        _validate_new_password(password, confirm_password)

        email = normalize_email(email)
        store = self._stores.accounts

        if store.find_user_by_email(email):
            raise UserAlreadyExists()

        pending = store.find_pending(email)
        if not pending or not pending.verified:
            if pending and pending.is_expired(self._clock()):
                store.delete_pending(email)
            raise EmailNotVerified()

        if role and str(role).strip().lower() != pending.role.value:
            logger.info("Ignoring requested role %r for %s, verified role is %s", role, email, pending.role.value)

        user = User(
            user_id=generate_user_id(),
            name=name.strip(),
            email=email,
            password_hash=generate_password_hash(password),
            role=pending.role,
            created_at=self._clock(),
            verified=True,
        )
        store.create_user(user)
        store.delete_pending(email)

        logger.info("%s registered: %s", user.role.value.upper(), email)
        return user.to_public()


class AuthService:
    """Use case: authenticate user (login) and look up accounts."""

    def __init__(self, stores: ConnectivityState, *, clock: Clock = utc_now):
        self._stores = stores
        self._clock = clock

    def login(self, email: str, password: str, role: Optional[str] = None) -> PublicUser:
        require_fields("Email and password are required", email, password)
        email = normalize_email(email)
        store = self._stores.accounts

        user = store.find_user_by_email(email)
        if not user:
            raise UserNotFound()

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # unknown hash method, e.g. a record written by another tool
            ok = False
        if not ok:
            raise InvalidPassword()

        if role:
            expected = parse_role(role)
            if user.role != expected:
                raise RoleMismatch(f"Access denied. This is for {expected.value}s only.")

        store.update_user(replace(user, last_login_at=self._clock()))
        logger.info("%s logged in: %s", user.role.value.upper(), email)
        return user.to_public()

    def get_user(self, email: str) -> User:
        user = self._stores.accounts.find_user_by_email(normalize_email(email))
        if not user:
            raise UserNotFound()
        return user


class PasswordResetService:
    """Use case: forgot password / reset password with a single-use token."""

    def __init__(
        self,
        stores: ConnectivityState,
        mailer: AccountMailer,
        *,
        clock: Clock = utc_now,
        token_ttl_minutes: int = DEFAULT_RESET_TOKEN_TTL_MINUTES,
    ):
        self._stores = stores
        self._mailer = mailer
        self._clock = clock
        self._token_ttl = timedelta(minutes=int(token_ttl_minutes))

    def request_reset(self, email: str) -> None:
        """Issue a reset link if the account exists.

        Returns the same way whether or not the email is registered.
        """
        require_fields("Email is required", email)
        email = normalize_email(email)
        store = self._stores.accounts

        user = store.find_user_by_email(email)
        if not user:
            logger.info("Password reset requested for unknown email")
            return

        if user.reset_token:
            store.delete_reset_token(user.reset_token)

        token = PasswordResetToken(
            token=generate_reset_token(),
            email=email,
            expires_at=self._clock() + self._token_ttl,
        )
        store.create_reset_token(token)
        store.update_user(replace(user, reset_token=token.token, reset_token_expires_at=token.expires_at))

        self._mailer.send_password_reset(email, token.token)

    def complete_reset(self, *, token: str, new_password: str, confirm_password: str) -> None:
        require_fields("All fields are required", token, new_password, confirm_password)
        _validate_new_password(new_password, confirm_password)
        store = self._stores.accounts

        record = store.find_reset_token(token)
        if not record:
            raise InvalidResetToken()
        if record.is_expired(self._clock()):
            store.delete_reset_token(token)
            raise InvalidResetToken()

        user = store.find_user_by_email(record.email)
        if not user:
            store.delete_reset_token(token)
            raise InvalidResetToken()

        store.update_user(
            replace(
                user,
                password_hash=generate_password_hash(new_password),
                reset_token=None,
                reset_token_expires_at=None,
            )
        )
        store.delete_reset_token(token)
        logger.info("Password reset for %s", record.email)

