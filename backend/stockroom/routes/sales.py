# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

from flask import Blueprint, request

from ..decorators import current_principal, require_auth
from ..services import sales_service
from ..validation import require_fields

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
def create_sale_route():
    """
    Record a sale.

    Body: product_id, quantity. 409 when quantity exceeds stock on hand.
    """
    data = require_fields(request.get_json(silent=True), "product_id", "quantity")
    sale = sales_service.create_sale(
        current_principal(),
        product_id=data["product_id"],
        quantity=data["quantity"],
    )
    return {"sale": sale.to_dict(include_product=True), "message": "Sale recorded successfully"}, 201


@sales_bp.get("")
@require_auth
def list_sales_route():
    items = sales_service.list_sales(current_principal())
    return {"items": items, "count": len(items)}, 200


@sales_bp.delete("")
@require_auth
def delete_sales_route():
    purged = sales_service.delete_sale_records(current_principal())
    return {"deleted": purged, "message": "Sales records deleted successfully"}, 200


@sales_bp.get("/products")
@require_auth
def products_for_sale_route():
    items = sales_service.products_for_sale(current_principal())
    return {"items": items, "count": len(items)}, 200


@sales_bp.get("/last-five-sales")
@require_auth
def recent_sales_route():
    items = sales_service.recent_sales(current_principal())
    return {"items": items, "count": len(items)}, 200
