# Overview: Flask API routes for stock additions; parses input and returns JSON responses.

from flask import Blueprint, request

from ..decorators import current_principal, require_auth
from ..services import inventory_service
from ..validation import parse_int, require_fields

stock_bp = Blueprint("stock", __name__, url_prefix="/api/stock")


@stock_bp.get("")
@require_auth
def list_stock_route():
    product_id = request.args.get("product_id")
    if product_id is not None:
        product_id = parse_int(product_id, "product_id", minimum=1)
    items = inventory_service.list_stock_entries(current_principal(), product_id=product_id)
    return {"items": items, "count": len(items)}, 200


@stock_bp.post("")
@require_auth
def add_stock_route():
    data = require_fields(request.get_json(silent=True), "product_id", "quantity")
    entry = inventory_service.add_stock(
        current_principal(),
        product_id=data["product_id"],
        quantity=data["quantity"],
    )
    return entry.to_dict(), 201


@stock_bp.get("/<int:product_id>/balance")
@require_auth
def balance_route(product_id: int):
    return inventory_service.ledger_balance(current_principal(), product_id), 200
