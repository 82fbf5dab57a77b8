# Overview: Service-layer operations for categories; tenant-scoped CRUD with per-tenant name uniqueness.

"""
Category Service

MULTI-TENANT: every lookup goes through scoped_query, so a category id
belonging to another business behaves exactly like a missing id.

Name rules: trimmed, 2-50 characters, unique per business compared
case-insensitively among active categories.
"""

from __future__ import annotations

import logging

from sqlalchemy import func

from ..errors import ConflictError, NotFoundError
from ..models import Category, Product
from ..validation import clean_category_name, parse_int
from .concurrency import lock_for_update, unit_of_work
from .tenant_service import require_tenant, scoped_query

logger = logging.getLogger(__name__)


def _name_taken(business_id: int, name: str, exclude_id: int | None = None) -> bool:
    query = scoped_query(Category, business_id).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


def _get_scoped(business_id: int, category_id: int, *, lock: bool = False) -> Category:
    category_id = parse_int(category_id, "category_id")
    query = scoped_query(Category, business_id).filter(Category.id == category_id)
    if lock:
        query = lock_for_update(query)
    category = query.first()
    if category is None:
        raise NotFoundError("Category not found")
    return category


def list_categories(principal) -> list[dict]:
    business_id = require_tenant(principal)
    categories = scoped_query(Category, business_id).order_by(Category.name.asc(), Category.id.asc()).all()
    return [c.to_dict() for c in categories]


def get_category(principal, category_id: int) -> dict:
    business_id = require_tenant(principal)
    return _get_scoped(business_id, category_id).to_dict()


def list_category_products(principal, category_id: int) -> list[dict]:
    business_id = require_tenant(principal)
    category_id = _get_scoped(business_id, category_id).id
    products = (
        scoped_query(Product, business_id)
        .filter(Product.category_id == category_id)
        .order_by(Product.name.asc(), Product.id.asc())
        .all()
    )
    return [p.to_dict() for p in products]


def create_category(principal, *, name: str) -> Category:
    """
    Raises:
        ValidationError: name fails the length rule
        ConflictError: name already used in this business (any case)
    """
    business_id = require_tenant(principal)
    name = clean_category_name(name)

    with unit_of_work("category creation") as session:
        if _name_taken(business_id, name):
            raise ConflictError("Category name already exists")
        category = Category(business_id=business_id, name=name)
        session.add(category)

    logger.info("Category created id=%s business_id=%s", category.id, business_id)
    return category


def edit_category(principal, category_id: int, *, name: str) -> Category:
    business_id = require_tenant(principal)
    name = clean_category_name(name)

    with unit_of_work("category edit"):
        category = _get_scoped(business_id, category_id, lock=True)
        if _name_taken(business_id, name, exclude_id=category.id):
            raise ConflictError("Category name already exists")
        category.name = name

    return category


def delete_category(principal, category_id: int) -> None:
    """
    Soft-delete a category that no active product references.

    The category row is locked for the count-then-delete sequence so a
    product cannot be attached between the check and the delete.
    """
    business_id = require_tenant(principal)

    with unit_of_work("category deletion"):
        category = _get_scoped(business_id, category_id, lock=True)

        in_use = (
            scoped_query(Product, business_id)
            .filter(Product.category_id == category.id)
            .count()
        )
        if in_use:
            raise ConflictError(
                "Category has products; delete or move them first",
                details={"product_count": in_use},
            )

        category.soft_delete()

    logger.info("Category deleted id=%s business_id=%s", category_id, business_id)
