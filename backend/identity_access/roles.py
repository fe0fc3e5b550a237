"""
Role resolution for authenticated principals.

Intent:
    Decide exactly once per request whether a principal acts as ``admin`` or
    ``user``. Routes branch on the result instead of re-deriving roles.

Behavior:
    1. Read ``profiles.role`` for the principal id; a stored ``admin`` wins.
    2. Otherwise, an exact match of the principal email against
       ``BOOTSTRAP_ADMIN_EMAIL`` grants ``admin``. Unset disables this rule;
       it only exists to seed the first administrator before a profile row
       carries the role.
    3. Everything else resolves to ``user``.

    Profile read failures are logged and fall through to rule 2.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from backend.datastore.ports import TableStore

from .domain import DEFAULT_ROLE, Principal

logger = logging.getLogger("camptrack.identity")


def get_bootstrap_admin_email() -> Optional[str]:
    value = (os.getenv("BOOTSTRAP_ADMIN_EMAIL") or "").strip()
    return value or None


def resolve_role(principal: Principal, *, store: TableStore, bootstrap_admin_email: Optional[str] = None) -> str:
    """Return ``admin`` or ``user`` for `principal`."""
    try:
        rows = store.select("profiles", columns="role", eq={"id": principal.id}, limit=1)
    except Exception as exc:
        logger.warning("profile role lookup failed for principal=%s: %s", principal.id, type(exc).__name__)
        rows = []
    stored = str((rows[0].get("role") if rows else "") or "").strip().lower()
    if stored == "admin":
        return "admin"
    if bootstrap_admin_email and principal.email == bootstrap_admin_email:
        return "admin"
    return DEFAULT_ROLE


__all__ = ["resolve_role", "get_bootstrap_admin_email"]
