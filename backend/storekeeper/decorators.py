# Overview: Request decorators for API routes.

from functools import wraps
from flask import current_app, g, jsonify, request

from .extensions import get_repository
from .services import session_service


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.current_user (the User) and g.session_context.
    Returns 401 if the header is missing, the token is invalid or expired,
    or the user no longer exists.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if token is None:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.resolve_token(
            get_repository(),
            current_app.config["SECRET_KEY"],
            token,
            max_age=current_app.config["SESSION_MAX_AGE_SECONDS"],
        )
        if context is None:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.session_context = context
        return f(*args, **kwargs)

    return decorated_function


def require_owner(f):
    """Require the authenticated user to have the owner role. Use after @require_auth."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = getattr(g, "current_user", None)
        if user is None:
            return jsonify({"error": "Authentication required"}), 401
        if not user.is_owner:
            return jsonify({
                "error": "Permission denied",
                "message": "Only the owner can perform this action",
            }), 403
        return f(*args, **kwargs)

    return decorated_function
