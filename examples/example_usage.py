"""Example: drive the signup flow through the service layer (no Flask).

Uses in-memory storage and the console mail sender, so it runs without MongoDB or SMTP.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from student_portal.accounts.memory_repository import InMemoryAccountRepository
from student_portal.accounts.service import AuthService, SignupService
from student_portal.common.logging_config import setup_logging
from student_portal.database.connectivity import ConnectivityState
from student_portal.mail.notifier import AccountMailer
from student_portal.mail.sender import ConsoleMailSender


def main():
    setup_logging("INFO")
    repo = InMemoryAccountRepository()
    stores = ConnectivityState(repo)
    mailer = AccountMailer(ConsoleMailSender(), base_url="http://localhost:5000", otp_ttl_minutes=10, reset_ttl_minutes=60)

    signup = SignupService(stores, mailer)
    signup.request_otp("student@example.edu")
    signup.verify_otp("student@example.edu", repo.find_pending("student@example.edu").otp)
    signup.complete_registration(
        name="Demo Student",
        email="student@example.edu",
        password="changeme",
        confirm_password="changeme",
    )

    print(AuthService(stores).login("student@example.edu", "changeme").to_dict())


if __name__ == "__main__":
    main()
