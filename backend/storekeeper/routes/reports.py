# Overview: Flask API routes for dashboard reporting.

from flask import Blueprint, jsonify

from ..decorators import require_auth
from ..extensions import get_repository
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
@require_auth
def dashboard_route():
    return jsonify(reporting_service.dashboard_summary(get_repository())), 200
