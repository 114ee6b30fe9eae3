# Overview: Flask API routes for user management (owner only).

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_owner
from ..extensions import get_repository
from ..models import ROLE_ADMIN
from ..services import auth_service, login_throttle_service
from ..services.auth_service import PasswordValidationError, UserError, UserNotFoundError


users_bp = Blueprint("users", __name__, url_prefix="/api/users")

USER_TEXT_FIELDS = ("username", "password", "email", "role")


def _payload_error(data) -> str | None:
    """User fields are all strings when present."""
    if not isinstance(data, dict):
        return "Invalid JSON payload"
    for key in USER_TEXT_FIELDS:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            return f"{key} must be a string"
    return None


@users_bp.get("")
@require_auth
@require_owner
def list_users_route():
    users = auth_service.list_users(get_repository())
    return jsonify({"users": [u.to_dict() for u in users]}), 200


@users_bp.post("")
@require_auth
@require_owner
def create_user_route():
    """
    Create a user. Body: username, password, optional email and role
    (defaults to admin).
    """
    try:
        data = request.get_json(silent=True) or {}
        error = _payload_error(data)
        if error:
            return jsonify({"error": error}), 400

        try:
            user = auth_service.create_user(
                get_repository(),
                username=data.get("username"),
                password=data.get("password"),
                role=data.get("role") or ROLE_ADMIN,
                email=data.get("email"),
                created_by=g.current_user,
            )
        except PasswordValidationError as e:
            return jsonify({"error": str(e)}), 400
        except UserError as e:
            status = 409 if "username" in e.details else 400
            return jsonify({"error": str(e)}), status

        return jsonify({"user": user.to_dict()}), 201

    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.put("/<user_id>")
@require_auth
@require_owner
def update_user_route(user_id: str):
    try:
        data = request.get_json(silent=True) or {}
        error = _payload_error(data)
        if error:
            return jsonify({"error": error}), 400

        try:
            user = auth_service.update_user(
                get_repository(),
                user_id,
                actor=g.current_user,
                username=data.get("username"),
                password=data.get("password"),
                email=data.get("email"),
            )
        except UserNotFoundError as e:
            return jsonify({"error": str(e)}), 404
        except PasswordValidationError as e:
            return jsonify({"error": str(e)}), 400
        except UserError as e:
            status = 409 if "username" in e.details else 400
            return jsonify({"error": str(e)}), status

        return jsonify({"user": user.to_dict()}), 200

    except Exception:
        current_app.logger.exception("Failed to update user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.delete("/<user_id>")
@require_auth
@require_owner
def delete_user_route(user_id: str):
    """Deleting an unknown id succeeds (no-op); deleting yourself is refused."""
    try:
        deleted = auth_service.delete_user(get_repository(), user_id, actor=g.current_user)
    except UserError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"ok": True, "deleted": deleted}), 200


@users_bp.delete("/login-attempts/<username>")
@require_auth
@require_owner
def clear_login_attempts_route(username: str):
    """Manually unlock a username."""
    cleared = login_throttle_service.clear_attempts(get_repository(), username)
    return jsonify({"ok": True, "cleared": cleared}), 200
