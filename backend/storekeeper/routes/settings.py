from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_owner
from ..extensions import get_repository
from ..services import settings_service
from ..services.settings_service import SettingsValidationError


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/public")
def public_settings_route():
    """Login-screen branding; no authentication."""
    return jsonify({"settings": settings_service.get_public_settings(get_repository())}), 200


@settings_bp.get("")
@require_auth
def get_settings_route():
    return jsonify({"settings": settings_service.get_settings(get_repository()).to_dict()}), 200


@settings_bp.patch("")
@require_auth
@require_owner
def patch_settings_route():
    payload = request.get_json(silent=True)
    try:
        settings = settings_service.update_settings(get_repository(), payload, actor=g.current_user)
    except SettingsValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"settings": settings.to_dict()}), 200
