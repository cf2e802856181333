"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

OTP_LENGTH = 6
DEFAULT_OTP_TTL_MINUTES = 10
DEFAULT_OTP_MAX_ATTEMPTS = 5
DEFAULT_RESET_TOKEN_TTL_MINUTES = 60
MIN_PASSWORD_LENGTH = 6
DEFAULT_MAIL_TIMEOUT_SECONDS = 10
