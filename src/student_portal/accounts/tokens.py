from __future__ import annotations

import hmac
import secrets
import uuid

from ..core.constants import OTP_LENGTH


def generate_otp(length: int = OTP_LENGTH) -> str:
    """Numeric one-time code from the OS CSPRNG, zero padded."""
    return f"{secrets.randbelow(10 ** length):0{length}d}"


def otp_matches(expected: str, presented: str) -> bool:
    return hmac.compare_digest(str(expected).encode("utf-8"), str(presented).strip().encode("utf-8"))


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)


def generate_user_id() -> str:
    return uuid.uuid4().hex
