"""
Identity domain constants and simple helpers.

Why:
- Centralize allowed roles to avoid drift between provisioning and web layer.
- Keep the principal shape shared by identity adapters and use cases.
"""

from __future__ import annotations

from dataclasses import dataclass

# Keep roles minimal and explicit. Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset({"admin", "user"})
DEFAULT_ROLE = "user"


def normalize_role(value: object) -> str:
    """Return `value` as an allowed role, falling back to DEFAULT_ROLE."""
    role = str(value or "").strip().lower()
    return role if role in ALLOWED_ROLES else DEFAULT_ROLE


@dataclass(frozen=True)
class Principal:
    """Authenticated identity as seen by the use cases."""

    id: str
    email: str
    name: str = ""
    role: str = DEFAULT_ROLE

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def with_role(self, role: str) -> "Principal":
        return Principal(id=self.id, email=self.email, name=self.name, role=normalize_role(role))

    def as_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name, "role": self.role}


__all__ = ["ALLOWED_ROLES", "DEFAULT_ROLE", "Principal", "normalize_role"]
