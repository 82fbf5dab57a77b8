"""
Sales Service - single-product sales that decrement stock

WHY: A sale is the only path that lowers stock through the ledger. The
check (enough on hand) and the write (sale row + decrement) must be one
serialized unit of work, or two concurrent sales could both pass the check.

No automatic retry: a sale that fails with InternalError was fully rolled
back and may be resubmitted, at which point the stock check runs again.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from ..errors import InsufficientStockError, NotFoundError
from ..models import Product, Sale
from ..validation import parse_int
from .concurrency import lock_for_update, unit_of_work
from .tenant_service import require_tenant, scoped_query
from stockroom.models.catalog import money_str
from stockroom.time_utils import utcnow

logger = logging.getLogger(__name__)

RECENT_SALES_LIMIT = 5


def create_sale(principal, *, product_id, quantity) -> Sale:
    """
    Sell `quantity` units of one product.

    Steps, all inside one unit of work:
    1. SELECT the product FOR UPDATE, scoped to the caller's business
    2. reject quantity > on-hand with InsufficientStockError
    3. insert the Sale (total = quantity x current price)
    4. decrement product.quantity

    Raises:
        ValidationError: quantity not a positive integer
        NotFoundError: product absent or owned by another business
        InsufficientStockError: quantity exceeds on-hand
    """
    business_id = require_tenant(principal)
    product_id = parse_int(product_id, "product_id", minimum=1)
    quantity = parse_int(quantity, "quantity", minimum=1)

    with unit_of_work("sale") as session:
        product = lock_for_update(
            scoped_query(Product, business_id).filter(Product.id == product_id)
        ).first()
        if product is None:
            raise NotFoundError("Product not found")

        if quantity > product.quantity:
            raise InsufficientStockError(
                "Insufficient stock",
                details={
                    "product_id": product.id,
                    "requested_quantity": quantity,
                    "on_hand": product.quantity,
                },
            )

        sale = Sale(
            business_id=business_id,
            product_id=product.id,
            quantity=quantity,
            total=Decimal(product.price) * quantity,
            sold_at=utcnow(),
        )
        session.add(sale)
        session.flush()

        product.quantity = product.quantity - quantity

    logger.info("Sale id=%s product_id=%s quantity=%s business_id=%s", sale.id, product_id, quantity, business_id)
    return sale


def list_sales(principal) -> list[dict]:
    business_id = require_tenant(principal)
    sales = scoped_query(Sale, business_id).order_by(Sale.sold_at.desc(), Sale.id.desc()).all()
    return [s.to_dict(include_product=True) for s in sales]


def recent_sales(principal, limit: int = RECENT_SALES_LIMIT) -> list[dict]:
    """Newest sales first."""
    business_id = require_tenant(principal)
    sales = (
        scoped_query(Sale, business_id)
        .order_by(Sale.sold_at.desc(), Sale.id.desc())
        .limit(limit)
        .all()
    )
    return [s.to_dict(include_product=True) for s in sales]


def products_for_sale(principal) -> list[dict]:
    """Lightweight product list for the sale form."""
    business_id = require_tenant(principal)
    products = scoped_query(Product, business_id).order_by(Product.name.asc(), Product.id.asc()).all()
    return [
        {"id": p.id, "name": p.name, "price": money_str(p.price), "quantity": p.quantity}
        for p in products
    ]


def delete_sale_records(principal) -> int:
    """
    Purge the caller's sales history. Stock is NOT restored.

    Returns the number of sales purged.
    """
    business_id = require_tenant(principal)
    with unit_of_work("sales purge"):
        sales = scoped_query(Sale, business_id).all()
        for sale in sales:
            sale.soft_delete()
    logger.info("Purged %s sales business_id=%s", len(sales), business_id)
    return len(sales)
