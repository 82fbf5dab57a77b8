# Overview: Service error taxonomy shared by every service and rendered by the app error handler.

from __future__ import annotations


class ServiceError(Exception):
    """Base for every error a service may surface to a caller."""

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ServiceError):
    """400-level input problem."""
    status_code = 400


class UnauthenticatedError(ServiceError):
    """401: missing, invalid or expired credential."""
    status_code = 401


class TokenError(UnauthenticatedError):
    """Token could not be verified."""


class MalformedTokenError(TokenError):
    pass


class WrongAlgorithmError(TokenError):
    pass


class ExpiredTokenError(TokenError):
    pass


class BadSignatureError(TokenError):
    pass


class ForbiddenError(ServiceError):
    """403: identity is valid but the role or tenant does not allow the action."""
    status_code = 403


class NotFoundError(ServiceError):
    """
    404: entity absent or owned by another tenant.

    The two cases are deliberately indistinguishable so callers cannot probe
    for other tenants' ids.
    """
    status_code = 404


class ConflictError(ServiceError):
    """409-level business rule conflict (e.g., duplicate name)."""
    status_code = 409


class InsufficientStockError(ConflictError):
    """Sale quantity exceeds the product's on-hand quantity."""


class InternalError(ServiceError):
    """Storage or transaction failure; the unit of work was rolled back."""
    status_code = 500
