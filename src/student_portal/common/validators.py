from __future__ import annotations

import re

from ..core.enums import Role
from ..core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(value) -> str:
    """Emails are keyed case-insensitively."""
    return str(value or "").strip().lower()


def require_email(value) -> str:
    email = normalize_email(require_str(value, "Invalid email address"))
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email address")
    return email


def require_str(value, message: str) -> str:
    """Accept only non-blank strings; JSON numbers, lists and nulls are malformed input."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value


def require_fields(message: str, *values) -> None:
    for value in values:
        require_str(value, message)


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_matching_passwords(password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise ValidationError("Passwords do not match")


def parse_role(value, *, default: Role = Role.STUDENT) -> Role:
    if value is None or value == "":
        return default
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        raise ValidationError("Invalid role")
