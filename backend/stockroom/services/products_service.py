# backend/stockroom/services/products_service.py
"""
Products Service with Multi-Tenant Support

MULTI-TENANT: All product operations are tenant-scoped.
- every read goes through scoped_query(Product, business_id)
- create_product requires a category inside the same business
- update_product and delete_product treat other tenants' ids as missing

LEDGER: quantity changes that increase stock (initial quantity, upward edits)
append a StockEntry in the same unit of work. Decreases made by direct edit
are not ledgered.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import func

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Category, Product, StockEntry
from ..validation import clean_name, parse_int, parse_price
from .concurrency import lock_for_update, unit_of_work
from .tenant_service import require_tenant, scoped_query
from stockroom.models.catalog import money_str
from stockroom.time_utils import utcnow

logger = logging.getLogger(__name__)

PRODUCT_MUTABLE_FIELDS = {"category_id", "name", "description", "quantity", "price"}


def _name_taken(business_id: int, category_id: int, name: str, exclude_id: int | None = None) -> bool:
    query = scoped_query(Product, business_id).filter(
        Product.category_id == category_id,
        func.lower(Product.name) == name.lower(),
    )
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def _require_category(business_id: int, category_id: int) -> Category:
    # Lock, then touch the row: a concurrent delete_category fails its version check
    category = lock_for_update(
        scoped_query(Category, business_id).filter(Category.id == category_id)
    ).first()
    if category is None:
        raise NotFoundError("Category not found")
    category.updated_at = utcnow()
    return category


def _get_scoped(business_id: int, product_id: int, *, lock: bool = False) -> Product:
    product_id = parse_int(product_id, "product_id")
    query = scoped_query(Product, business_id).filter(Product.id == product_id)
    if lock:
        query = lock_for_update(query)
    product = query.first()
    if product is None:
        raise NotFoundError("Product not found")
    return product


def _clean_description(value) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("description must be a string")
    return value.strip() or None


def list_products(principal) -> list[dict]:
    business_id = require_tenant(principal)
    products = scoped_query(Product, business_id).order_by(Product.name.asc(), Product.id.asc()).all()
    return [p.to_dict() for p in products]


def get_product(principal, product_id: int) -> dict:
    business_id = require_tenant(principal)
    return _get_scoped(business_id, product_id).to_dict()


def create_product(
    principal,
    *,
    category_id,
    name,
    price,
    quantity=0,
    description=None,
) -> Product:
    """
    Create a product in one of the caller's categories.

    The product row and its initial StockEntry (only when quantity > 0) are
    one unit of work, so the ledger always accounts for the starting count.

    Raises:
        NotFoundError: category absent or owned by another business
        ConflictError: same name (any case) already in this category
    """
    business_id = require_tenant(principal)
    category_id = parse_int(category_id, "category_id", minimum=1)
    name = clean_name(name)
    quantity = parse_int(quantity if quantity is not None else 0, "quantity", minimum=0)
    price = parse_price(price)
    description = _clean_description(description)

    with unit_of_work("product creation") as session:
        _require_category(business_id, category_id)

        if _name_taken(business_id, category_id, name):
            raise ConflictError("Product name already exists in this category")

        product = Product(
            business_id=business_id,
            category_id=category_id,
            name=name,
            description=description,
            quantity=quantity,
            price=price,
        )
        session.add(product)
        session.flush()

        if quantity > 0:
            session.add(StockEntry(business_id=business_id, product_id=product.id, quantity=quantity))

    logger.info("Product created id=%s business_id=%s quantity=%s", product.id, business_id, quantity)
    return product


def update_product(principal, product_id: int, fields: dict) -> Product:
    """
    Partial update of a product.

    Uniqueness is re-checked only when name or category changes.
    A quantity increase appends a StockEntry for the difference; a decrease
    is applied without a ledger row.
    """
    business_id = require_tenant(principal)
    if not isinstance(fields, dict):
        raise ValidationError("Request body must be a JSON object")

    patch = {k: v for k, v in fields.items() if k in PRODUCT_MUTABLE_FIELDS}
    if "name" in patch:
        patch["name"] = clean_name(patch["name"])
    if "category_id" in patch:
        patch["category_id"] = parse_int(patch["category_id"], "category_id", minimum=1)
    if "quantity" in patch:
        patch["quantity"] = parse_int(patch["quantity"], "quantity", minimum=0)
    if "price" in patch:
        patch["price"] = parse_price(patch["price"])
    if "description" in patch:
        patch["description"] = _clean_description(patch["description"])

    with unit_of_work("product update") as session:
        product = _get_scoped(business_id, product_id, lock=True)

        new_name = patch.get("name", product.name)
        new_category_id = patch.get("category_id", product.category_id)

        if new_category_id != product.category_id:
            _require_category(business_id, new_category_id)

        if new_name.lower() != product.name.lower() or new_category_id != product.category_id:
            if _name_taken(business_id, new_category_id, new_name, exclude_id=product.id):
                raise ConflictError("Product name already exists in this category")

        delta = 0
        if "quantity" in patch:
            delta = patch["quantity"] - product.quantity

        for key, value in patch.items():
            setattr(product, key, value)

        if delta > 0:
            session.add(StockEntry(business_id=business_id, product_id=product.id, quantity=delta))

    if delta:
        logger.info("Product id=%s quantity changed by %s via edit", product_id, delta)
    return product


def delete_product(principal, product_id: int) -> None:
    business_id = require_tenant(principal)
    with unit_of_work("product deletion"):
        product = _get_scoped(business_id, product_id, lock=True)
        product.soft_delete()
    logger.info("Product deleted id=%s business_id=%s", product_id, business_id)


def delete_all_products(principal) -> int:
    """Soft-delete every active product of the caller's business. Returns the count."""
    business_id = require_tenant(principal)
    with unit_of_work("product purge"):
        products = lock_for_update(scoped_query(Product, business_id)).all()
        for product in products:
            product.soft_delete()
    logger.info("Deleted %s products business_id=%s", len(products), business_id)
    return len(products)


def count_products(principal) -> int:
    business_id = require_tenant(principal)
    return scoped_query(Product, business_id).count()


def low_stock_products(principal, threshold: int) -> list[dict]:
    """Products with quantity <= threshold, lowest first."""
    business_id = require_tenant(principal)
    products = (
        scoped_query(Product, business_id)
        .filter(Product.quantity <= threshold)
        .order_by(Product.quantity.asc(), Product.name.asc())
        .all()
    )
    return [p.to_dict() for p in products]


def count_low_stock(principal, threshold: int) -> int:
    business_id = require_tenant(principal)
    return scoped_query(Product, business_id).filter(Product.quantity <= threshold).count()


def total_inventory_value(principal) -> str:
    """Sum of price x quantity over active products, as a 2-place decimal string."""
    business_id = require_tenant(principal)
    total = Decimal("0")
    for price, quantity in scoped_query(Product, business_id).with_entities(Product.price, Product.quantity):
        total += Decimal(price) * quantity
    return money_str(total)
