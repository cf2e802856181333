class DomainError(Exception):
    """Base exception for business rule violations."""

    default_message = "Request could not be processed"
    status_code = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    default_message = "Invalid request"


class NotFoundError(DomainError):
    """Raised when a pending registration, user or token does not exist."""

    default_message = "Not found"


class ConflictError(DomainError):
    """Raised when a record with the same unique key already exists."""

    default_message = "Already exists"


class ExpiredError(DomainError):
    """Raised when an OTP or token is past its expiry."""

    default_message = "Expired"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    default_message = "Invalid credentials"


class UnavailableError(DomainError):
    """Raised when the storage backend cannot be reached."""

    default_message = "Storage is temporarily unavailable"
    status_code = 503


class UserAlreadyExists(ConflictError):
    default_message = "User already exists"


class EmailNotVerified(ValidationError):
    default_message = "Email not verified"


class PendingRegistrationNotFound(NotFoundError):
    default_message = "OTP not found or expired"


class OtpExpired(ExpiredError):
    default_message = "OTP has expired. Please request a new one"


class OtpMismatch(ValidationError):
    default_message = "Invalid OTP"


class OtpAttemptsExceeded(ExpiredError):
    default_message = "Too many incorrect attempts. Please request a new OTP"


class UserNotFound(NotFoundError):
    default_message = "User not found"


class InvalidPassword(AuthenticationError):
    default_message = "Invalid password"


class RoleMismatch(AuthenticationError):
    default_message = "Access denied"


class InvalidResetToken(ExpiredError):
    default_message = "Invalid or expired reset token"
