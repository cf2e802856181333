from __future__ import annotations

from jinja2 import Environment, PackageLoader, select_autoescape

_env = Environment(
    loader=PackageLoader("student_portal", "templates"),
    autoescape=select_autoescape(["html"]),
)

SIGNUP_OTP_SUBJECT = "Email Verification - Student Management System"
PASSWORD_RESET_SUBJECT = "Password Reset - Student Management System"


def render_signup_otp(*, otp: str, ttl_minutes: int) -> str:
    return _env.get_template("email/signup_otp.html").render(otp=otp, ttl_minutes=ttl_minutes)


def render_password_reset(*, reset_link: str, ttl_minutes: int) -> str:
    return _env.get_template("email/password_reset.html").render(reset_link=reset_link, ttl_minutes=ttl_minutes)
