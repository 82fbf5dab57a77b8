# Overview: Session token codec; issues and verifies signed claim sets.

"""
Session Token Codec

A token is an HS256-signed JWT embedding the full session claims:

    {user_id, business_id, email, role, exp}

The business_id carried in the token is the ONLY source of tenant context for
a request. Any operation that changes a user's tenant binding (creating a
business, business login) must hand the caller a freshly issued token.

The signing secret is process-wide configuration, read once by create_app.
A codec is never built lazily per request.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Mapping

import jwt

from ..errors import (
    BadSignatureError,
    ExpiredTokenError,
    MalformedTokenError,
    WrongAlgorithmError,
)
from stockroom.time_utils import from_epoch_seconds, to_epoch_seconds, utcnow

DEFAULT_TTL = timedelta(hours=24)


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    business_id: int
    role: str
    email: str | None = None
    expires_at: datetime | None = None

    @classmethod
    def for_user(cls, user, expires_at: datetime | None = None) -> "TokenClaims":
        return cls(
            user_id=user.id,
            business_id=user.business_id or 0,
            role=user.role,
            email=user.email,
            expires_at=expires_at,
        )

    def to_payload(self) -> dict:
        payload = {
            "user_id": self.user_id,
            "business_id": self.business_id,
            "role": self.role,
        }
        if self.email is not None:
            payload["email"] = self.email
        if self.expires_at is not None:
            payload["exp"] = to_epoch_seconds(self.expires_at)
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping) -> "TokenClaims":
        user_id = payload.get("user_id")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise MalformedTokenError("Invalid user context")

        business_id = payload.get("business_id") or 0
        if not isinstance(business_id, int) or isinstance(business_id, bool):
            raise MalformedTokenError("Invalid business context")

        role = payload.get("role")
        if not isinstance(role, str) or not role:
            raise MalformedTokenError("Invalid role claim")

        email = payload.get("email")
        if email is not None and not isinstance(email, str):
            raise MalformedTokenError("Invalid email claim")

        return cls(
            user_id=user_id,
            business_id=business_id,
            role=role,
            email=email,
            expires_at=from_epoch_seconds(payload["exp"]),
        )


class TokenCodec:
    """Signs and verifies session tokens with a symmetric secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = DEFAULT_TTL):
        if not secret:
            raise ValueError("Token signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_config(cls, config: Mapping) -> "TokenCodec":
        return cls(
            secret=config.get("JWT_SECRET_KEY"),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            ttl=timedelta(hours=config.get("TOKEN_TTL_HOURS", 24)),
        )

    def issue(self, claims: TokenClaims) -> str:
        """Sign claims. Unset expiry is stamped as now + ttl."""
        if claims.expires_at is None:
            claims = replace(claims, expires_at=utcnow() + self.ttl)
        return jwt.encode(claims.to_payload(), self._secret, algorithm=self.algorithm)

    def issue_for_user(self, user, expires_at: datetime | None = None) -> tuple[str, TokenClaims]:
        """Issue a token reflecting the user's current role and tenant binding."""
        claims = TokenClaims.for_user(user, expires_at=expires_at or utcnow() + self.ttl)
        return self.issue(claims), claims

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature, algorithm and expiry, then decode the claims.

        Expiry is checked against the current time at verification.
        Raises exactly one TokenError subclass per defect.
        """
        if not token or not isinstance(token, str):
            raise MalformedTokenError("Authentication token required")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError("Token expired") from exc
        except jwt.InvalidAlgorithmError as exc:
            raise WrongAlgorithmError("Unexpected signing method") from exc
        # InvalidSignatureError subclasses DecodeError, so it must be caught first
        except jwt.InvalidSignatureError as exc:
            raise BadSignatureError("Invalid token signature") from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError("Invalid token") from exc

        return TokenClaims.from_payload(payload)
