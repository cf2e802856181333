from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request

from ..core.exceptions import DomainError, NotFoundError
from ..container import Container

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error occurred"


def _ok(message: str | None = None, **payload):
    body = {"success": True}
    if message:
        body["message"] = message
    body.update(payload)
    return jsonify(body), 200


def _fail(message: str, status_code: int = 400):
    return jsonify({"success": False, "message": message}), status_code


def register(app: Flask, container: Container) -> None:
    def json_endpoint(view):
        """Map domain errors onto the shared {success, message} envelope."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                return _fail(str(e), e.status_code)
            except Exception:
                logger.exception("Unhandled error in %s", request.path)
                return _fail(SERVER_ERROR_MESSAGE, 500)

        return wrapper

    def body() -> dict:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    @app.route("/api/send-otp", methods=["POST"], endpoint="send_otp")
    @json_endpoint
    def send_otp():
        data = body()
        container.signup_service.request_otp(data.get("email"), data.get("role"))
        return _ok("OTP sent successfully to your email")

    @app.route("/api/verify-otp", methods=["POST"], endpoint="verify_otp")
    @json_endpoint
    def verify_otp():
        data = body()
        container.signup_service.verify_otp(data.get("email"), data.get("otp"))
        return _ok("Email verified successfully")

    @app.route("/api/register", methods=["POST"], endpoint="register")
    @json_endpoint
    def register_account():
        data = body()
        user = container.signup_service.complete_registration(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            confirm_password=data.get("confirmPassword"),
            role=data.get("role"),
        )
        return _ok("Registration completed successfully", user=user.to_dict())

    @app.route("/api/login", methods=["POST"], endpoint="login")
    @json_endpoint
    def login():
        data = body()
        user = container.auth_service.login(data.get("email"), data.get("password"), data.get("role"))
        return _ok("Login successful", user=user.to_dict())

    @app.route("/api/forgot-password", methods=["POST"], endpoint="forgot_password")
    @json_endpoint
    def forgot_password():
        container.password_reset_service.request_reset(body().get("email"))
        return _ok("If the email exists, a reset link has been sent")

    @app.route("/api/reset-password", methods=["POST"], endpoint="reset_password")
    @json_endpoint
    def reset_password():
        data = body()
        container.password_reset_service.complete_reset(
            token=data.get("token"),
            new_password=data.get("newPassword"),
            confirm_password=data.get("confirmPassword"),
        )
        return _ok("Password reset successfully")

    @app.route("/api/user/<path:email>", methods=["GET"], endpoint="get_user")
    @json_endpoint
    def get_user(email: str):
        try:
            user = container.auth_service.get_user(email)
        except NotFoundError as e:
            # direct resource lookup: 404 rather than the flow-level 400
            return _fail(str(e), 404)
        return _ok(user=user.to_profile())
