# Overview: Service-layer operations for user accounts; credential hashing, signup, login and profile.

"""
Authentication Service with Multi-Tenant Support

WHY: Every action must be attributable to a user, and every tenant-scoped
action to that user's business.

MULTI-TENANT: A user belongs to at most one business (business_id).
- Admins sign up unassigned and later create or are linked to a business.
- Plain users must name a business_id at signup.
- Employees are created by an admin inside the admin's own business.
Email is globally unique (login is by email alone).

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Unknown email and wrong password produce the same error
- Session tokens are issued separately (see token_service.py)
"""

from __future__ import annotations

import logging

import bcrypt

from ..errors import ConflictError, NotFoundError, UnauthenticatedError, ValidationError
from ..extensions import db
from ..models import Business, User, ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_USER, ROLES
from ..validation import clean_name, parse_int
from .concurrency import unit_of_work
from .permission_service import require_role
from .session_service import Principal, load_user
from .tenant_service import require_tenant

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    WHY: Cost factor 12 provides good security/performance balance.
    """
    if not isinstance(password, str) or not password:
        raise ValidationError("Password is required")
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    A digest that is not a bcrypt hash never matches.
    """
    if not isinstance(password, str) or not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash ("Invalid salt")
        return False


def _normalize_email(email) -> str:
    if not isinstance(email, str) or "@" not in email.strip():
        raise ValidationError("A valid email is required")
    return email.strip().lower()


def create_user(
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    role: str = ROLE_USER,
    business_id: int | None = None,
) -> User:
    """
    Signup.

    Role rules:
    - admin: always created unassigned (any business_id supplied is ignored)
    - user: business_id required, and it must name an existing business
    - employee: same as user; normally created via create_employee

    Raises:
        ValidationError: unknown role, missing business for a non-admin
        ConflictError: email already registered
        NotFoundError: business_id does not exist
    """
    if role is None:
        role = ROLE_USER
    if not isinstance(role, str):
        raise ValidationError("role must be a string", details={"allowed": list(ROLES)})
    role = role.strip().lower() or ROLE_USER
    if role not in ROLES:
        raise ValidationError(f"Unknown role {role!r}", details={"allowed": list(ROLES)})

    email = _normalize_email(email)
    first_name = clean_name(first_name, "first_name", max_length=100)
    last_name = clean_name(last_name, "last_name", max_length=100)
    password_hash = hash_password(password)

    if role == ROLE_ADMIN:
        business_id = None
    elif not business_id:
        raise ValidationError("business_id is required for non-admin users")
    else:
        business_id = parse_int(business_id, "business_id", minimum=1)

    with unit_of_work("user signup") as session:
        if business_id is not None:
            business = session.query(Business).filter(Business.id == business_id, Business.active()).first()
            if business is None:
                raise NotFoundError("Business not found")

        existing = session.query(User).filter(User.email == email).first()
        if existing:
            raise ConflictError("Email already registered")

        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            role=role,
            business_id=business_id,
        )
        session.add(user)

    logger.info("User created id=%s role=%s business_id=%s", user.id, user.role, user.business_id)
    return user


def authenticate(email: str, password: str) -> User:
    """
    Verify primary login credentials.

    Returns the User on success. Unknown email and wrong password both raise
    the same UnauthenticatedError.
    """
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        raise UnauthenticatedError("Invalid email or password")

    user = (
        db.session.query(User)
        .filter(User.email == email.strip().lower(), User.active())
        .first()
    )
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for email=%s", email)
        raise UnauthenticatedError("Invalid email or password")

    return user


def get_profile(principal: Principal) -> dict:
    user = load_user(principal)
    data = user.to_dict()
    if user.business is not None and not user.business.is_deleted:
        data["business"] = user.business.to_dict()
    return data


def change_password(principal: Principal, *, old_password: str, new_password: str) -> None:
    """Wrong old password raises UnauthenticatedError; nothing is written."""
    new_hash = hash_password(new_password)

    with unit_of_work("password change"):
        user = load_user(principal)
        if not verify_password(old_password, user.password_hash):
            logger.warning("Password change with wrong old password user_id=%s", user.id)
            raise UnauthenticatedError("Old password is incorrect")
        user.password_hash = new_hash

    logger.info("Password changed user_id=%s", principal.user_id)


def create_employee(
    admin: Principal,
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
) -> User:
    """
    Admin-only: create an employee inside the admin's business.

    Role is forced to employee and business_id to the admin's tenant,
    whatever the caller supplied.
    """
    require_role(admin, ROLE_ADMIN)
    business_id = require_tenant(admin)

    return create_user(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password=password,
        role=ROLE_EMPLOYEE,
        business_id=business_id,
    )


def list_business_users(principal: Principal) -> list[dict]:
    """MULTI-TENANT: users linked to the caller's business only."""
    business_id = require_tenant(principal)
    users = (
        db.session.query(User)
        .filter(User.business_id == business_id, User.active())
        .order_by(User.id.asc())
        .all()
    )
    return [u.to_dict() for u in users]
