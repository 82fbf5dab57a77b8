# Overview: Role-based authorization policy applied after authentication.

"""
Authorization Policy

DESIGN PRINCIPLES:
- Fail closed: deny unless the principal's role matches the required role.
- Pure: decisions depend only on (principal.role, required role). No I/O.
- Denials are logged by the caller layer (decorators) where request context
  is available.
"""

from __future__ import annotations

from ..errors import ForbiddenError
from ..models import ROLES


def has_role(principal, role: str) -> bool:
    if role not in ROLES:
        raise ValueError(f"Unknown role {role!r}")
    return principal is not None and principal.role == role


def require_role(principal, role: str) -> None:
    """Raise ForbiddenError unless the principal holds `role`."""
    if not has_role(principal, role):
        raise ForbiddenError("Insufficient permissions", details={"required_role": role})
