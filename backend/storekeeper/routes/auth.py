# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/storekeeper/routes/auth.py
"""
Authentication API routes

- Login under the throttle rules (lock after 3 failures, email
  verification after 10)
- Email verification code request/confirm
- Public lockout status lookup
"""

from datetime import timedelta

from flask import Blueprint, current_app, g, jsonify, request
from flask_mail import Message

from ..decorators import require_auth
from ..extensions import get_repository, mail
from ..services import login_throttle_service, session_service, verification_service
from ..services.login_throttle_service import (
    AccountLocked,
    LoginError,
    VerificationRequired,
)
from ..services.verification_service import (
    InvalidVerificationCode,
    VerificationError,
)


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _credentials(data: dict) -> tuple[str | None, str | None]:
    username = data.get("username")
    password = data.get("password")
    if not isinstance(username, str) or not isinstance(password, str):
        return None, None
    return username, password


def _mask_email(address: str) -> str:
    local, _, domain = address.partition("@")
    if not domain:
        return "***"
    return f"{local[:1]}***@{domain}"


def _send_code_by_email(recipient: str, code: str) -> None:
    store_name = get_repository().get_settings().store_name
    ttl = current_app.config["VERIFICATION_CODE_TTL_MINUTES"]
    msg = Message(
        subject=f"{store_name}: login verification code",
        recipients=[recipient],
        body=(
            f"Your verification code is {code}\n\n"
            f"It expires in {ttl} minutes. If you did not try to sign in, "
            "someone may be guessing your password."
        ),
    )
    mail.send(msg)


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and return a bearer token.

    401 unknown user / wrong password, 429 locked, 403 verification required.
    """
    try:
        data = request.get_json(silent=True) or {}
        username, password = _credentials(data)
        if not username or password is None:
            return jsonify({"error": "username and password required"}), 400

        repo = get_repository()
        try:
            user = login_throttle_service.attempt_login(repo, username, password)
        except AccountLocked as e:
            return jsonify({
                "error": str(e),
                "locked": True,
                "failed_attempts": e.failed_attempts,
                "retry_after_seconds": e.remaining_seconds,
            }), 429
        except VerificationRequired as e:
            return jsonify({
                "error": str(e),
                "requires_email_verification": True,
                "failed_attempts": e.failed_attempts,
            }), 403
        except LoginError as e:
            return jsonify({"error": str(e), **e.details}), 401

        token = session_service.issue_token(current_app.config["SECRET_KEY"], user)
        return jsonify({
            "user": user.to_dict(),
            "token": token,
            "expires_in": current_app.config["SESSION_MAX_AGE_SECONDS"],
            "message": "Login successful",
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/verification/request")
def request_verification_route():
    """Email a one-time code to lift the verification requirement."""
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        if not isinstance(username, str) or not username:
            return jsonify({"error": "username required"}), 400

        ttl = timedelta(minutes=current_app.config["VERIFICATION_CODE_TTL_MINUTES"])
        try:
            recipient = verification_service.request_verification(
                get_repository(), username, _send_code_by_email, ttl=ttl
            )
        except VerificationError as e:
            return jsonify({"error": str(e)}), 400

        return jsonify({
            "message": "Verification code sent",
            "sent_to": _mask_email(recipient),
        }), 200

    except Exception:
        current_app.logger.exception("Failed to send verification code")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/verification/confirm")
def confirm_verification_route():
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        code = data.get("code")
        if not isinstance(username, str) or not isinstance(code, str) or not username or not code:
            return jsonify({"error": "username and code required"}), 400

        try:
            verification_service.verify_email(get_repository(), username, code)
        except InvalidVerificationCode as e:
            return jsonify({"error": str(e)}), 401
        except VerificationError as e:
            return jsonify({"error": str(e)}), 400

        return jsonify({"message": "Verification successful. You can log in again."}), 200

    except Exception:
        current_app.logger.exception("Failed to confirm verification code")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/lockout-status/<username>")
def lockout_status_route(username: str):
    """
    Public endpoint so the login screen can show lock and verification state.
    """
    status = login_throttle_service.get_lockout_status(get_repository(), username)
    return jsonify(status)


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()}), 200
