"""
Multi-Tenant Service: Tenant Validation, Scoping and the Business Directory

WHY: Centralize tenant validation logic for reuse across services and routes.
Every tenant-scoped operation must be scoped to exactly one business, and
cross-tenant access must be impossible rather than merely checked.

SECURITY INVARIANTS:
1. The tenant of a request is principal.business_id, taken from the verified token
2. business_id == 0 means "no tenant"; require_tenant rejects it
3. Every catalog/ledger read goes through scoped_query(model, business_id)
4. Rows owned by another tenant are reported as not found

USAGE:
    from stockroom.services.tenant_service import require_tenant, scoped_query

    business_id = require_tenant(principal)
    product = scoped_query(Product, business_id).filter(Product.id == product_id).first()
"""

from __future__ import annotations

import logging

from ..errors import ConflictError, ForbiddenError, NotFoundError, UnauthenticatedError, ValidationError
from ..extensions import db
from ..models import Business, User, ROLE_ADMIN
from .concurrency import unit_of_work
from .permission_service import require_role

logger = logging.getLogger(__name__)


def require_tenant(principal) -> int:
    """
    Return the principal's business_id, or raise ForbiddenError when it is 0.

    SECURITY: the single place tenant context is resolved. There is no
    fallback to a default business.
    """
    business_id = getattr(principal, "business_id", 0) or 0
    if business_id == 0:
        logger.warning("Tenant-scoped call without business context user_id=%s", getattr(principal, "user_id", None))
        raise ForbiddenError("Business context required")
    return business_id


def scoped_query(model, business_id: int):
    """
    Query `model` restricted to one tenant's active rows.

    SECURITY: Core tenant isolation primitive. Never query tenant-owned
    models without it.
    """
    if not business_id:
        raise ForbiddenError("Business context required")
    return db.session.query(model).filter(model.business_id == business_id, model.active())


def _load_caller(principal) -> User:
    user = db.session.query(User).filter(User.id == principal.user_id, User.active()).first()
    if user is None:
        raise UnauthenticatedError("User account no longer exists")
    return user


def _clean_business_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Business name is required")
    name = name.strip()
    if len(name) > 255:
        raise ValidationError("Business name must be at most 255 characters")
    return name


def create_business(principal, *, name: str, password: str, codec) -> tuple[Business, str]:
    """
    Register a business and link the creating user to it.

    Business name is globally unique and compared case-sensitively.
    The business row and the user link are one unit of work.

    Returns:
        (business, token) where token is freshly issued and carries the new
        business_id. The caller's previous token still names the old tenant.
    """
    from .auth_service import hash_password

    name = _clean_business_name(name)
    password_hash = hash_password(password)

    with unit_of_work("business creation") as session:
        user = _load_caller(principal)

        existing = session.query(Business).filter(Business.name == name).first()
        if existing:
            raise ConflictError("Business name already exists")

        business = Business(name=name, password_hash=password_hash)
        session.add(business)
        session.flush()

        user.business_id = business.id

    token, _claims = codec.issue_for_user(user)
    logger.info("Business created id=%s by user_id=%s", business.id, user.id)
    return business, token


def login_business(principal, *, name: str, password: str, codec) -> tuple[Business, str]:
    """
    Business login: second factor layered on the user's own login.

    - ForbiddenError unless the caller is linked to a business named exactly `name`
    - UnauthenticatedError on a wrong business password

    Returns (business, token) with a token carrying the linked business_id.
    """
    from .auth_service import verify_password

    user = _load_caller(principal)
    business = user.business if user.business_id else None

    if business is None or business.is_deleted or business.name != name:
        logger.warning("Business login for unlinked business by user_id=%s", user.id)
        raise ForbiddenError("User does not belong to this business")

    if not verify_password(password, business.password_hash):
        logger.warning("Business login with wrong password business_id=%s user_id=%s", business.id, user.id)
        raise UnauthenticatedError("Invalid business credentials")

    token, _claims = codec.issue_for_user(user)
    return business, token


def assign_user_to_business(admin, *, user_id: int) -> User:
    """
    Admin-only: link an existing user to the admin's business.

    The target's own session keeps its old tenant until the target
    re-authenticates and receives a fresh token.
    """
    require_role(admin, ROLE_ADMIN)
    business_id = require_tenant(admin)

    with unit_of_work("user assignment") as session:
        user = session.query(User).filter(User.id == user_id, User.active()).first()
        if user is None:
            raise NotFoundError("User not found")
        user.business_id = business_id

    logger.info("User id=%s assigned to business_id=%s by admin user_id=%s", user_id, business_id, admin.user_id)
    return user


def change_business_password(principal, *, old_password: str, new_password: str) -> None:
    from .auth_service import hash_password, verify_password

    business_id = require_tenant(principal)
    new_hash = hash_password(new_password)

    with unit_of_work("business password change") as session:
        business = session.query(Business).filter(Business.id == business_id, Business.active()).first()
        if business is None:
            raise NotFoundError("Business not found")
        if not verify_password(old_password, business.password_hash):
            logger.warning("Business password change with wrong old password business_id=%s", business_id)
            raise UnauthenticatedError("Old business password is incorrect")
        business.password_hash = new_hash

    logger.info("Business password changed business_id=%s", business_id)


def get_business(principal) -> dict:
    """The caller's own business with its users. Never lists other tenants."""
    business_id = require_tenant(principal)
    business = db.session.query(Business).filter(Business.id == business_id, Business.active()).first()
    if business is None:
        raise NotFoundError("Business not found")
    return business.to_dict(include_users=True)
