# Overview: Inventory ledger, stock side; stock additions and ledger reconciliation.

"""
Inventory Service

Quantity changes and their ledger rows are written in the same unit of work
with the product row locked, so for any product touched only through the
stock and sale paths:

    product.quantity == SUM(stock_entries.quantity) - SUM(sales.quantity)

where purged (soft-deleted) sales still count toward the sold total.
"""

from __future__ import annotations

import logging

from sqlalchemy import func

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Product, Sale, StockEntry
from ..validation import MAX_INT, parse_int
from .concurrency import lock_for_update, unit_of_work
from .tenant_service import require_tenant, scoped_query

logger = logging.getLogger(__name__)


def add_stock(principal, *, product_id, quantity) -> StockEntry:
    """
    Receive stock for a product: increment quantity and append a StockEntry.

    Raises:
        ValidationError: quantity not a positive integer
        NotFoundError: product absent or owned by another business
    """
    business_id = require_tenant(principal)
    product_id = parse_int(product_id, "product_id", minimum=1)
    quantity = parse_int(quantity, "quantity", minimum=1)

    with unit_of_work("stock addition") as session:
        product = lock_for_update(
            scoped_query(Product, business_id).filter(Product.id == product_id)
        ).first()
        if product is None:
            raise NotFoundError("Product not found")

        if product.quantity + quantity > MAX_INT:
            raise ValidationError(f"Stock on hand cannot exceed {MAX_INT}")

        product.quantity = product.quantity + quantity
        entry = StockEntry(business_id=business_id, product_id=product.id, quantity=quantity)
        session.add(entry)

    logger.info("Stock added product_id=%s quantity=%s business_id=%s", product_id, quantity, business_id)
    return entry


def list_stock_entries(principal, product_id: int | None = None) -> list[dict]:
    """Stock additions of the caller's business, newest first."""
    business_id = require_tenant(principal)
    query = scoped_query(StockEntry, business_id)
    if product_id is not None:
        query = query.filter(StockEntry.product_id == product_id)
    entries = query.order_by(StockEntry.added_at.desc(), StockEntry.id.desc()).all()
    return [e.to_dict() for e in entries]


def ledger_balance(principal, product_id: int) -> dict:
    """
    Reconcile a product's cached quantity against its ledger.

    sold includes purged sales: purging history never restores stock.
    """
    business_id = require_tenant(principal)
    product_id = parse_int(product_id, "product_id")
    product = scoped_query(Product, business_id).filter(Product.id == product_id).first()
    if product is None:
        raise NotFoundError("Product not found")

    stock_added = (
        scoped_query(StockEntry, business_id)
        .filter(StockEntry.product_id == product.id)
        .with_entities(func.coalesce(func.sum(StockEntry.quantity), 0))
        .scalar()
    )
    sold = (
        db.session.query(func.coalesce(func.sum(Sale.quantity), 0))
        .filter(Sale.business_id == business_id, Sale.product_id == product.id)
        .scalar()
    )

    return {
        "product_id": product.id,
        "stock_added": int(stock_added),
        "sold": int(sold),
        "ledger_quantity": int(stock_added) - int(sold),
        "quantity": product.quantity,
    }
