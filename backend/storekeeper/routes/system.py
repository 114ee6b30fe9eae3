# backend/storekeeper/routes/system.py
"""
System health endpoint.
"""

import time
from flask import Blueprint, current_app, jsonify

from ..errors import StoreIOError
from ..extensions import get_repository

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


@system_bp.get("/health")
def health_route():
    """Load the store document once and report basic counts."""
    start_time = time.time()
    try:
        snapshot = get_repository().snapshot()
    except StoreIOError:
        current_app.logger.exception("Document store health check failed")
        return jsonify({
            "status": "unhealthy",
            "document_store": current_app.config["DOCUMENT_STORE"],
            "error": "Document store error",
        }), 503

    elapsed_ms = (time.time() - start_time) * 1000
    return jsonify({
        "status": "healthy",
        "document_store": current_app.config["DOCUMENT_STORE"],
        "latency_ms": round(elapsed_ms, 2),
        "details": {
            "users": len(snapshot.users),
            "products": len(snapshot.products),
            "stock_transactions": len(snapshot.stock_transactions),
            "sales": len(snapshot.sales),
        },
    }), 200
