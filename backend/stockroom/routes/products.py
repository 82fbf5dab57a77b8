# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/stockroom/routes/products.py
"""
Product management routes with multi-tenant support.

MULTI-TENANT: All product operations are scoped to the caller's business.
The business_id is derived from g.principal (set by @require_auth).

SECURITY: All routes require authentication and a business context.
"""
from flask import Blueprint, current_app, request

from ..decorators import current_principal, require_auth
from ..services import products_service
from ..validation import require_fields

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _low_stock_threshold() -> int:
    return current_app.config.get("LOW_STOCK_THRESHOLD", 10)


@products_bp.get("")
@require_auth
def list_products_route():
    items = products_service.list_products(current_principal())
    return {"items": items, "count": len(items)}, 200


@products_bp.post("")
@require_auth
def create_product_route():
    """
    Create product.

    Body: category_id, name, price (required); quantity, description (optional).
    A positive starting quantity is recorded as the first stock entry.
    """
    data = require_fields(request.get_json(silent=True), "category_id", "name", "price")
    product = products_service.create_product(
        current_principal(),
        category_id=data["category_id"],
        name=data["name"],
        price=data["price"],
        quantity=data.get("quantity", 0),
        description=data.get("description"),
    )
    return product.to_dict(), 201


@products_bp.delete("")
@require_auth
def delete_all_products_route():
    deleted = products_service.delete_all_products(current_principal())
    return {"deleted": deleted}, 200


@products_bp.get("/total")
@require_auth
def count_products_route():
    return {"total": products_service.count_products(current_principal())}, 200


@products_bp.get("/low-stock")
@require_auth
def count_low_stock_route():
    count = products_service.count_low_stock(current_principal(), _low_stock_threshold())
    return {"low_stock": count, "threshold": _low_stock_threshold()}, 200


@products_bp.get("/low-stock-items")
@require_auth
def low_stock_items_route():
    items = products_service.low_stock_products(current_principal(), _low_stock_threshold())
    return {"items": items, "count": len(items)}, 200


@products_bp.get("/total-value")
@require_auth
def total_value_route():
    return {"total_value": products_service.total_inventory_value(current_principal())}, 200


@products_bp.get("/<int:product_id>")
@require_auth
def get_product_route(product_id: int):
    return products_service.get_product(current_principal(), product_id), 200


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    product = products_service.update_product(current_principal(), product_id, request.get_json(silent=True))
    return product.to_dict(), 200


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    products_service.delete_product(current_principal(), product_id)
    return {"ok": True}, 200
