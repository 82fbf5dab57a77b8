# Overview: Authentication gate; turns a transport credential into a request Principal.

"""
Session handling with tenant context

MULTI-TENANT: The Principal captures business_id from the verified token.
That token value is the tenant context for the whole request; it is never
re-read from the user row mid-request. A business_id of 0 means "no tenant".
Tenant-scoped services reject it (see tenant_service.require_tenant) instead
of falling back to any default business.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ..errors import NotFoundError, UnauthenticatedError
from ..extensions import db
from ..models import User
from .token_service import TokenClaims, TokenCodec
from stockroom.time_utils import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """
    Authenticated identity + tenant + role for one request.

    Derived from a verified token; never persisted.
    """
    user_id: int
    business_id: int
    role: str
    email: str | None
    token_expiry: datetime

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "Principal":
        return cls(
            user_id=claims.user_id,
            business_id=claims.business_id or 0,
            role=claims.role,
            email=claims.email,
            token_expiry=claims.expires_at,
        )

    @property
    def has_tenant(self) -> bool:
        return self.business_id != 0


def extract_token(request, cookie_name: str = "token") -> str:
    """
    Pull the raw credential from the request.

    The cookie is the primary transport; an Authorization bearer header is
    accepted for non-browser clients.
    """
    token = request.cookies.get(cookie_name)
    if token:
        return token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        if token:
            return token

    raise UnauthenticatedError("Authentication token required")


def authenticate(token: str, codec: TokenCodec) -> Principal:
    """Verify the token and build the Principal. TokenErrors propagate as-is."""
    claims = codec.verify(token)
    return Principal.from_claims(claims)


def verify_session(principal: Principal) -> dict:
    """
    Confirm the session's user still exists and report remaining lifetime.
    """
    user = db.session.query(User).filter(User.id == principal.user_id, User.active()).first()
    if user is None:
        logger.warning("Session for missing user_id=%s", principal.user_id)
        raise UnauthenticatedError("User account no longer exists")

    remaining = principal.token_expiry - utcnow()
    return {
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
        "business_id": principal.business_id,
        "expires_in": max(int(remaining.total_seconds()), 0),
    }


def load_user(principal: Principal) -> User:
    """Fetch the principal's user row or raise NotFoundError."""
    user = db.session.query(User).filter(User.id == principal.user_id, User.active()).first()
    if user is None:
        raise NotFoundError("User not found")
    return user
