# Overview: Request and permission decorators for API routes.

import logging
from functools import wraps

from flask import current_app, g, jsonify, request

from .errors import ForbiddenError, UnauthenticatedError
from .services import permission_service, session_service

logger = logging.getLogger(__name__)


def current_principal():
    """The Principal established by @require_auth for this request, or None."""
    return getattr(g, "principal", None)


def require_auth(f):
    """
    Require authentication and establish tenant context.

    MULTI-TENANT: Sets g.principal (user_id, business_id, role, email,
    token_expiry) for this request only. business_id may be 0; tenant-scoped
    services reject that themselves via tenant_service.require_tenant.

    SECURITY: Returns 401 if:
    - No token cookie and no Authorization bearer header
    - Token malformed, wrongly signed, signed with another algorithm, or expired
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        codec = current_app.extensions["token_codec"]
        cookie_name = current_app.config.get("TOKEN_COOKIE_NAME", "token")

        try:
            token = session_service.extract_token(request, cookie_name)
            principal = session_service.authenticate(token, codec)
        except UnauthenticatedError as e:
            logger.warning(
                "Rejected credential on %s %s: %s (%s)",
                request.method, request.path, e.message, type(e).__name__,
            )
            return jsonify(e.to_dict()), e.status_code

        g.principal = principal
        return f(*args, **kwargs)

    return decorated_function


def require_role(role: str):
    """
    Require the authenticated principal to hold `role`.

    Must be applied below @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            principal = current_principal()
            if principal is None:
                return jsonify({"error": "Authentication required"}), 401

            try:
                permission_service.require_role(principal, role)
            except ForbiddenError as e:
                logger.warning(
                    "Role %s required on %s %s; user_id=%s has %s",
                    role, request.method, request.path, principal.user_id, principal.role,
                )
                return jsonify(e.to_dict()), e.status_code

            return f(*args, **kwargs)

        return decorated_function
    return decorator
