# Overview: Flask API routes for categories; parses input and returns JSON responses.

from flask import Blueprint, request

from ..decorators import current_principal, require_auth
from ..services import category_service
from ..validation import require_fields

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@require_auth
def list_categories_route():
    items = category_service.list_categories(current_principal())
    return {"items": items, "count": len(items)}, 200


@categories_bp.post("")
@require_auth
def create_category_route():
    data = require_fields(request.get_json(silent=True), "name")
    category = category_service.create_category(current_principal(), name=data["name"])
    return category.to_dict(), 201


@categories_bp.get("/<int:category_id>")
@require_auth
def get_category_route(category_id: int):
    return category_service.get_category(current_principal(), category_id), 200


@categories_bp.put("/<int:category_id>")
@require_auth
def edit_category_route(category_id: int):
    data = require_fields(request.get_json(silent=True), "name")
    category = category_service.edit_category(current_principal(), category_id, name=data["name"])
    return category.to_dict(), 200


@categories_bp.delete("/<int:category_id>")
@require_auth
def delete_category_route(category_id: int):
    category_service.delete_category(current_principal(), category_id)
    return {"ok": True}, 200


@categories_bp.get("/<int:category_id>/products")
@require_auth
def category_products_route(category_id: int):
    items = category_service.list_category_products(current_principal(), category_id)
    return {"items": items, "count": len(items)}, 200
