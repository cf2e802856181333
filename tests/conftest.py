from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from student_portal.accounts.memory_repository import InMemoryAccountRepository
from student_portal.accounts.service import AuthService, PasswordResetService, SignupService
from student_portal.database.connectivity import ConnectivityState
from student_portal.mail.notifier import AccountMailer
from student_portal.mail.sender import MailDeliveryError


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingMailSender:
    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to_address: str, subject: str, body_html: str) -> None:
        self.sent.append((to_address, subject, body_html))


class FailingMailSender:
    def __init__(self):
        self.attempts = 0

    def send(self, to_address: str, subject: str, body_html: str) -> None:
        self.attempts += 1
        raise MailDeliveryError("SMTP server unreachable")


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 1, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def memory_repo() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def connectivity(memory_repo) -> ConnectivityState:
    return ConnectivityState(memory_repo)


@pytest.fixture
def outbox() -> RecordingMailSender:
    return RecordingMailSender()


@pytest.fixture
def mailer(outbox) -> AccountMailer:
    return AccountMailer(outbox, base_url="http://testserver", otp_ttl_minutes=10, reset_ttl_minutes=60)


@pytest.fixture
def signup(connectivity, mailer, clock) -> SignupService:
    return SignupService(connectivity, mailer, clock=clock, otp_ttl_minutes=10, max_attempts=5)


@pytest.fixture
def auth(connectivity, clock) -> AuthService:
    return AuthService(connectivity, clock=clock)


@pytest.fixture
def password_reset(connectivity, mailer, clock) -> PasswordResetService:
    return PasswordResetService(connectivity, mailer, clock=clock, token_ttl_minutes=60)


@pytest.fixture
def register_user(signup, memory_repo):
    """Run the full signup flow and return the public user."""

    def _register(email: str = "a@x.com", password: str = "secret1", *, role: str = "student", name: str = "Alice"):
        signup.request_otp(email, role)
        signup.verify_otp(email, memory_repo.find_pending(email.lower()).otp)
        return signup.complete_registration(
            name=name,
            email=email,
            password=password,
            confirm_password=password,
        )

    return _register


@pytest.fixture
def failing_sender() -> FailingMailSender:
    return FailingMailSender()
