"""Authorization guards shared by the use cases."""
from __future__ import annotations

from typing import Optional

from backend.errors import AuthorizationError

from .domain import Principal


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None or not principal.id:
        raise AuthorizationError("Unauthorized")
    return principal


def require_admin(principal: Optional[Principal]) -> Principal:
    actor = require_principal(principal)
    if not actor.is_admin:
        raise AuthorizationError("Admin access required")
    return actor


def require_self_or_admin(principal: Optional[Principal], target_id: str) -> Principal:
    actor = require_principal(principal)
    if actor.id != target_id and not actor.is_admin:
        raise AuthorizationError("Not allowed to modify another account")
    return actor


__all__ = ["require_principal", "require_admin", "require_self_or_admin"]
