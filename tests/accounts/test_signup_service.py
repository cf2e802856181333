from __future__ import annotations

from datetime import timedelta

import pytest

from student_portal.core.enums import Role
from student_portal.core.exceptions import (
    EmailNotVerified,
    OtpAttemptsExceeded,
    OtpExpired,
    OtpMismatch,
    PendingRegistrationNotFound,
    UserAlreadyExists,
    ValidationError,
)


def _wrong(otp: str) -> str:
    return "000000" if otp != "000000" else "111111"


def test_request_otp_creates_pending_entry_and_sends_mail(signup, memory_repo, outbox, fixed_now):
    signup.request_otp("A@X.com")

    pending = memory_repo.find_pending("a@x.com")
    assert pending is not None
    assert len(pending.otp) == 6 and pending.otp.isdigit()
    assert pending.otp_expires_at == fixed_now + timedelta(minutes=10)
    assert pending.verified is False
    assert pending.role == Role.STUDENT

    assert len(outbox.sent) == 1
    to_address, _, body = outbox.sent[0]
    assert to_address == "a@x.com"
    assert pending.otp in body


def test_request_otp_returns_nothing(signup):
    assert signup.request_otp("a@x.com") is None


@pytest.mark.parametrize("email", ["", "plainaddress", "a@b", "a b@x.com", None])
def test_request_otp_rejects_invalid_email(signup, email):
    with pytest.raises(ValidationError, match="Invalid email address"):
        signup.request_otp(email)


def test_request_otp_rejects_unknown_role(signup):
    with pytest.raises(ValidationError, match="Invalid role"):
        signup.request_otp("a@x.com", "superuser")


def test_request_otp_for_existing_user_fails(signup, register_user):
    register_user("a@x.com")

    with pytest.raises(UserAlreadyExists):
        signup.request_otp("a@x.com")


def test_second_request_invalidates_first_code(signup, memory_repo, monkeypatch):
    codes = iter(["123456", "654321"])
    monkeypatch.setattr("student_portal.accounts.service.generate_otp", lambda: next(codes))

    signup.request_otp("a@x.com")
    signup.request_otp("a@x.com")

    with pytest.raises(OtpMismatch):
        signup.verify_otp("a@x.com", "123456")
    signup.verify_otp("a@x.com", "654321")
    assert memory_repo.find_pending("a@x.com").verified is True


def test_mail_failure_still_reports_success_and_logs_otp(connectivity, clock, memory_repo, failing_sender, caplog):
    from student_portal.accounts.service import SignupService
    from student_portal.mail.notifier import AccountMailer

    sender = failing_sender
    mailer = AccountMailer(sender, base_url="http://testserver", otp_ttl_minutes=10, reset_ttl_minutes=60)
    svc = SignupService(connectivity, mailer, clock=clock)

    with caplog.at_level("WARNING"):
        svc.request_otp("a@x.com")

    otp = memory_repo.find_pending("a@x.com").otp
    assert sender.attempts == 1
    assert otp in caplog.text


def test_verify_with_correct_code_marks_verified_and_keeps_entry(signup, memory_repo):
    signup.request_otp("a@x.com")
    otp = memory_repo.find_pending("a@x.com").otp

    signup.verify_otp("a@x.com", otp)

    pending = memory_repo.find_pending("a@x.com")
    assert pending is not None
    assert pending.verified is True


def test_verify_is_idempotent(signup, memory_repo):
    signup.request_otp("a@x.com")
    otp = memory_repo.find_pending("a@x.com").otp

    signup.verify_otp("a@x.com", otp)
    signup.verify_otp("a@x.com", otp)

    assert memory_repo.find_pending("a@x.com").verified is True


def test_verify_requires_both_fields(signup):
    with pytest.raises(ValidationError, match="Email and OTP are required"):
        signup.verify_otp("a@x.com", "")


def test_verify_without_pending_entry(signup):
    with pytest.raises(PendingRegistrationNotFound):
        signup.verify_otp("a@x.com", "123456")


def test_wrong_code_keeps_entry_for_retry(signup, memory_repo):
    signup.request_otp("a@x.com")
    otp = memory_repo.find_pending("a@x.com").otp

    with pytest.raises(OtpMismatch):
        signup.verify_otp("a@x.com", _wrong(otp))

    pending = memory_repo.find_pending("a@x.com")
    assert pending is not None
    assert pending.failed_attempts == 1

    signup.verify_otp("a@x.com", otp)
    assert memory_repo.find_pending("a@x.com").verified is True


def test_too_many_wrong_codes_drops_entry(signup, memory_repo):
    signup.request_otp("a@x.com")
    otp = memory_repo.find_pending("a@x.com").otp

    for _ in range(4):
        with pytest.raises(OtpMismatch):
            signup.verify_otp("a@x.com", _wrong(otp))

    with pytest.raises(OtpAttemptsExceeded):
        signup.verify_otp("a@x.com", _wrong(otp))

    assert memory_repo.find_pending("a@x.com") is None
    with pytest.raises(PendingRegistrationNotFound):
        signup.verify_otp("a@x.com", otp)


def test_verify_at_expiry_boundary(signup, memory_repo, clock):
    signup.request_otp("a@x.com")
    otp = memory_repo.find_pending("a@x.com").otp

    clock.advance(minutes=10)
    signup.verify_otp("a@x.com", otp)


def test_verify_one_millisecond_after_expiry_fails_and_deletes(signup, memory_repo, clock):
    signup.request_otp("a@x.com")
    otp = memory_repo.find_pending("a@x.com").otp

    clock.advance(minutes=10, milliseconds=1)
    with pytest.raises(OtpExpired):
        signup.verify_otp("a@x.com", otp)

    assert memory_repo.find_pending("a@x.com") is None
    with pytest.raises(PendingRegistrationNotFound):
        signup.verify_otp("a@x.com", otp)


def test_verify_is_case_insensitive_on_email(signup, memory_repo):
    signup.request_otp("Mixed@Example.com")
    otp = memory_repo.find_pending("mixed@example.com").otp

    signup.verify_otp("MIXED@example.COM", otp)


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"name": "", "password": "secret1", "confirm_password": "secret1"}, "All fields are required"),
        ({"name": "A", "password": "secret1", "confirm_password": ""}, "All fields are required"),
        ({"name": "A", "password": "secret1", "confirm_password": "secret2"}, "Passwords do not match"),
        ({"name": "A", "password": "abc", "confirm_password": "abd"}, "Passwords do not match"),
        ({"name": "A", "password": "abc", "confirm_password": "abc"}, "Password must be at least 6 characters"),
    ],
)
def test_registration_validation_order(signup, kwargs, message):
    with pytest.raises(ValidationError, match=message):
        signup.complete_registration(email="a@x.com", **kwargs)


def test_registration_without_verification_fails(signup):
    signup.request_otp("a@x.com")

    with pytest.raises(EmailNotVerified):
        signup.complete_registration(name="A", email="a@x.com", password="secret1", confirm_password="secret1")


def test_registration_without_pending_entry_fails(signup):
    with pytest.raises(EmailNotVerified):
        signup.complete_registration(name="A", email="a@x.com", password="secret1", confirm_password="secret1")


def test_registration_creates_user_and_consumes_pending(signup, memory_repo):
    signup.request_otp("a@x.com")
    signup.verify_otp("a@x.com", memory_repo.find_pending("a@x.com").otp)

    user = signup.complete_registration(name="Alice", email="a@x.com", password="secret1", confirm_password="secret1")

    assert user.to_dict() == {"id": user.user_id, "name": "Alice", "email": "a@x.com", "role": "student"}
    assert "password" not in user.to_dict()
    assert memory_repo.find_pending("a@x.com") is None

    stored = memory_repo.find_user_by_email("a@x.com")
    assert stored.verified is True
    assert stored.password_hash != "secret1"


def test_registration_uses_role_from_pending_entry(signup, memory_repo):
    signup.request_otp("boss@x.com", "admin")
    signup.verify_otp("boss@x.com", memory_repo.find_pending("boss@x.com").otp)

    user = signup.complete_registration(
        name="Boss", email="boss@x.com", password="secret1", confirm_password="secret1", role="student"
    )

    assert user.role == Role.ADMIN


def test_registration_succeeds_only_once(signup, register_user):
    register_user("a@x.com")

    with pytest.raises(UserAlreadyExists):
        signup.complete_registration(name="A", email="a@x.com", password="other12", confirm_password="other12")


def test_registration_with_verified_pending_but_existing_user_fails(signup, memory_repo, register_user, fixed_now):
    from student_portal.accounts.model import PendingRegistration

    register_user("a@x.com")
    memory_repo.upsert_pending(
        PendingRegistration(email="a@x.com", otp="123456", otp_expires_at=fixed_now + timedelta(minutes=10), verified=True)
    )

    with pytest.raises(UserAlreadyExists):
        signup.complete_registration(name="A", email="a@x.com", password="secret1", confirm_password="secret1")


def test_expired_unverified_entry_is_cleaned_up_on_registration(signup, memory_repo, clock):
    signup.request_otp("a@x.com")
    clock.advance(minutes=11)

    with pytest.raises(EmailNotVerified):
        signup.complete_registration(name="A", email="a@x.com", password="secret1", confirm_password="secret1")

    assert memory_repo.find_pending("a@x.com") is None


def test_complete_registration_rejects_non_string_values(signup, memory_repo):
    signup.request_otp("a@x.com")
    signup.verify_otp("a@x.com", memory_repo.find_pending("a@x.com").otp)

    with pytest.raises(ValidationError, match="All fields are required"):
        signup.complete_registration(name="A", email="a@x.com", password=1234567, confirm_password=1234567)
    with pytest.raises(ValidationError, match="All fields are required"):
        signup.complete_registration(name=["A"], email="a@x.com", password="secret1", confirm_password="secret1")

    assert memory_repo.find_user_by_email("a@x.com") is None


def test_request_otp_rejects_list_email(signup):
    with pytest.raises(ValidationError, match="Invalid email address"):
        signup.request_otp(["a@x.com"])
