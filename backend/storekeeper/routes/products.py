# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/storekeeper/routes/products.py
"""
Product management routes.

All routes require authentication; owners and admins both manage products.
Stock is not writable here: it moves only through /api/inventory/transactions
and /api/sales.
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth
from ..errors import InvalidQuantity, ProductNotFound
from ..extensions import get_repository
from ..services import inventory_service
from ..validation import (
    PayloadPolicy,
    ValidationError,
    coerce_decimal,
    coerce_optional_text,
    coerce_price,
    coerce_text,
    validate_payload,
)

PRODUCT_CREATE_POLICY = PayloadPolicy(
    fields={
        "name": coerce_text,
        "sku": coerce_optional_text,
        "unit": coerce_optional_text,
        "buy_price": coerce_price,
        "sell_price": coerce_price,
        "opening_stock": coerce_decimal,
    },
    required_on_create=frozenset({"name", "buy_price", "sell_price"}),
)

PRODUCT_UPDATE_POLICY = PayloadPolicy(
    fields={
        "name": coerce_text,
        "sku": coerce_optional_text,
        "unit": coerce_optional_text,
        "buy_price": coerce_price,
        "sell_price": coerce_price,
        "profit_percentage": coerce_decimal,
    },
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
def list_products_route():
    products = inventory_service.list_products(get_repository())
    return jsonify({"products": [p.to_dict() for p in products]}), 200


@products_bp.get("/<product_id>")
@require_auth
def get_product_route(product_id: str):
    try:
        product = inventory_service.get_product(get_repository(), product_id)
    except ProductNotFound:
        return jsonify({"error": "Product not found"}), 404
    return jsonify({"product": product.to_dict()}), 200


@products_bp.post("")
@require_auth
def create_product_route():
    """
    Create a product. opening_stock, when given, is recorded as an "in"
    transaction in the same write.
    """
    try:
        payload = request.get_json(silent=True) or {}
        try:
            patch = validate_payload(payload=payload, policy=PRODUCT_CREATE_POLICY, partial=False)
            product = inventory_service.create_product(
                get_repository(),
                name=patch["name"],
                sku=patch.get("sku") or "",
                unit=patch.get("unit") or "pcs",
                buy_price=patch["buy_price"],
                sell_price=patch["sell_price"],
                opening_stock=patch.get("opening_stock"),
                created_by=g.current_user,
            )
        except (ValidationError, InvalidQuantity) as e:
            return jsonify({"error": str(e)}), 400

        return jsonify({"product": product.to_dict()}), 201

    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.put("/<product_id>")
@require_auth
def update_product_route(product_id: str):
    """
    Partial update. profit_percentage is stored as sent; the client
    recomputes it when prices change.
    """
    try:
        payload = request.get_json(silent=True) or {}
        try:
            patch = validate_payload(payload=payload, policy=PRODUCT_UPDATE_POLICY, partial=True)
            product = inventory_service.update_product(
                get_repository(), product_id, patch, updated_by=g.current_user
            )
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except ProductNotFound:
            return jsonify({"error": "Product not found"}), 404

        return jsonify({"product": product.to_dict()}), 200

    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<product_id>")
@require_auth
def delete_product_route(product_id: str):
    deleted = inventory_service.delete_product(get_repository(), product_id)
    return jsonify({"ok": True, "deleted": deleted}), 200

