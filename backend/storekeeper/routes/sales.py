# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/storekeeper/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth
from ..errors import InsufficientStock, InvalidQuantity, ProductNotFound
from ..extensions import get_repository
from ..services import sales_service
from ..time_utils import parse_iso_datetime


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
def record_sale_route():
    """
    Record a sale; the paired stock-out is written with it.

    Body: product_id, quantity.
    """
    try:
        data = request.get_json(silent=True) or {}
        product_id = data.get("product_id")
        if not product_id:
            return jsonify({"error": "product_id required"}), 400

        try:
            sale = sales_service.record_sale(
                get_repository(),
                product_id,
                data.get("quantity"),
                g.current_user,
                enforce_stock=current_app.config["ENFORCE_STOCK_LEVELS"],
            )
        except ProductNotFound:
            return jsonify({"error": "Product not found"}), 404
        except InvalidQuantity as e:
            return jsonify({"error": str(e)}), 400
        except InsufficientStock as e:
            return jsonify({"error": str(e), "details": e.details}), 409

        return jsonify({"sale": sale.to_dict()}), 201

    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("")
@require_auth
def list_sales_route():
    """
    Query params (ISO-8601, optional):
    - start: inclusive
    - end: exclusive
    - product_id
    """
    try:
        start = parse_iso_datetime(request.args.get("start"))
        end = parse_iso_datetime(request.args.get("end"))
    except ValueError:
        return jsonify({"error": "start/end must be ISO-8601 datetimes"}), 400

    sales = sales_service.list_sales(
        get_repository(),
        start=start,
        end=end,
        product_id=request.args.get("product_id"),
    )
    return jsonify({"sales": [s.to_dict() for s in sales]}), 200
