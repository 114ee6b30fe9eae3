# Overview: Flask API routes for the stock ledger; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth
from ..errors import InsufficientStock, InvalidQuantity, ProductNotFound
from ..extensions import get_repository
from ..services import inventory_service
from ..validation import ValidationError


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/transactions")
@require_auth
def list_transactions_route():
    """
    Stock ledger, newest first.

    Query params:
    - product_id: str (optional)
    - type: "in" | "out" (optional)
    """
    try:
        transactions = inventory_service.list_stock_transactions(
            get_repository(),
            product_id=request.args.get("product_id"),
            type=request.args.get("type"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"transactions": [t.to_dict() for t in transactions]}), 200


@inventory_bp.post("/transactions")
@require_auth
def record_transaction_route():
    """
    Record stock in/out.

    Body: product_id, type ("in"|"out"), quantity (> 0), optional buy_price
    (in), sell_price (out), notes.
    """
    try:
        data = request.get_json(silent=True) or {}
        product_id = data.get("product_id")
        if not product_id:
            return jsonify({"error": "product_id required"}), 400

        try:
            transaction = inventory_service.record_stock_transaction(
                get_repository(),
                product_id,
                data.get("type"),
                data.get("quantity"),
                created_by=g.current_user,
                buy_price=data.get("buy_price"),
                sell_price=data.get("sell_price"),
                notes=data.get("notes"),
                enforce_stock=current_app.config["ENFORCE_STOCK_LEVELS"],
            )
        except (ValidationError, InvalidQuantity) as e:
            return jsonify({"error": str(e)}), 400
        except ProductNotFound:
            return jsonify({"error": "Product not found"}), 404
        except InsufficientStock as e:
            return jsonify({"error": str(e), "details": e.details}), 409

        return jsonify({"transaction": transaction.to_dict()}), 201

    except Exception:
        current_app.logger.exception("Failed to record stock transaction")
        return jsonify({"error": "Internal server error"}), 500
