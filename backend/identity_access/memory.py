"""
In-memory identity provider for development and tests.

Why: Run the API without a hosted identity backend (``CAMPTRACK_BACKEND=memory``).
Tokens are opaque random strings mapped to principal ids; they never expire.

Security: Passwords are kept only as salted hashes. Not thread-safe and not
durable; never enable in production.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import hashlib
import secrets
import uuid
from typing import Any, Dict, Mapping, Optional

from backend.errors import AuthorizationError, NotFoundError, UpstreamError

from .domain import Principal, normalize_role


def _hash_password(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()


@dataclass
class IdentityRecord:
    id: str
    email: str
    password_hash: str
    salt: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    email_confirmed: bool = True

    def to_principal(self) -> Principal:
        return Principal(
            id=self.id,
            email=self.email,
            name=str(self.metadata.get("name") or ""),
            role=normalize_role(self.metadata.get("role")),
        )


class InMemoryIdentityProvider:
    def __init__(self) -> None:
        self._users: Dict[str, IdentityRecord] = {}
        self._tokens: Dict[str, str] = {}

    # --- Dev/test helpers ----------------------------------------------------

    def issue_token(self, principal_id: str) -> str:
        """Return a new bearer token for an existing principal."""
        if principal_id not in self._users:
            raise NotFoundError("user_not_found")
        token = secrets.token_urlsafe(24)
        self._tokens[token] = principal_id
        return token

    def sign_in(self, *, email: str, password: str) -> str:
        rec = self.find_by_email(email)
        if rec is None or rec.password_hash != _hash_password(password, rec.salt):
            raise AuthorizationError("invalid_credentials")
        return self.issue_token(rec.id)

    def find_by_email(self, email: str) -> Optional[IdentityRecord]:
        wanted = (email or "").strip().lower()
        for rec in self._users.values():
            if rec.email.lower() == wanted:
                return rec
        return None

    def get(self, principal_id: str) -> Optional[IdentityRecord]:
        return self._users.get(principal_id)

    # --- IdentityProvider ----------------------------------------------------

    def create_principal(self, *, email: str, password: str, metadata: Mapping[str, Any]) -> Principal:
        if self.find_by_email(email) is not None:
            raise UpstreamError("A user with this email address has already been registered", status_code=400)
        salt = secrets.token_hex(8)
        rec = IdentityRecord(
            id=str(uuid.uuid4()),
            email=email.strip(),
            password_hash=_hash_password(password, salt),
            salt=salt,
            metadata=dict(metadata),
        )
        self._users[rec.id] = rec
        return rec.to_principal()

    def get_principal_from_token(self, token: str) -> Principal:
        principal_id = self._tokens.get(token or "")
        rec = self._users.get(principal_id or "")
        if rec is None:
            raise AuthorizationError("Unauthorized")
        return rec.to_principal()

    def delete_principal(self, principal_id: str) -> None:
        if self._users.pop(principal_id, None) is None:
            raise UpstreamError("User not found", status_code=400)
        self._tokens = {t: uid for t, uid in self._tokens.items() if uid != principal_id}

    def update_principal(
        self,
        principal_id: str,
        *,
        email: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        rec = self._users.get(principal_id)
        if rec is None:
            raise UpstreamError("User not found", status_code=400)
        if email is not None:
            other = self.find_by_email(email)
            if other is not None and other.id != principal_id:
                raise UpstreamError("A user with this email address has already been registered", status_code=400)
            rec.email = email.strip()
            rec.email_confirmed = True
        if metadata:
            rec.metadata.update(dict(metadata))


__all__ = ["InMemoryIdentityProvider", "IdentityRecord"]
