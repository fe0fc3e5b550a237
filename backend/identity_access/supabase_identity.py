"""
Supabase Auth backed identity provider.

The adapter is duck-typed to avoid a hard dependency during testing. The client
is expected to expose ``.auth.get_user(jwt)`` and the admin API
``.auth.admin.create_user/delete_user/update_user_by_id`` (e.g.
``supabase.create_client(url, service_role_key)``).

Security:
- Requires the Service Role key; never expose this client to browsers.
- Do not log passwords or tokens.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from backend.errors import AuthorizationError, UpstreamError

from .domain import Principal, normalize_role


def _describe(exc: Exception) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message.strip():
        return message.strip()
    return str(exc) or exc.__class__.__name__


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _to_principal(user: Any) -> Principal:
    metadata = _get(user, "user_metadata") or {}
    return Principal(
        id=str(_get(user, "id") or ""),
        email=str(_get(user, "email") or ""),
        name=str(_get(metadata, "name") or ""),
        role=normalize_role(_get(metadata, "role")),
    )


class SupabaseIdentityProvider:
    def __init__(self, client: Any):
        self._client = client

    @property
    def _auth(self) -> Any:
        return self._client.auth

    def create_principal(self, *, email: str, password: str, metadata: Mapping[str, Any]) -> Principal:
        try:
            res = self._auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": dict(metadata),
                }
            )
        except Exception as exc:
            raise UpstreamError(_describe(exc), status_code=400) from exc
        user = _get(res, "user")
        if not user or not _get(user, "id"):
            raise UpstreamError("Failed to create user", status_code=400)
        return _to_principal(user)

    def get_principal_from_token(self, token: str) -> Principal:
        if not token:
            raise AuthorizationError("Unauthorized")
        try:
            res = self._auth.get_user(token)
        except Exception as exc:
            # Invalid or expired tokens surface as auth API errors.
            raise AuthorizationError("Unauthorized") from exc
        user = _get(res, "user") if res is not None else None
        if not user or not _get(user, "id"):
            raise AuthorizationError("Unauthorized")
        return _to_principal(user)

    def delete_principal(self, principal_id: str) -> None:
        try:
            self._auth.admin.delete_user(principal_id)
        except Exception as exc:
            raise UpstreamError(_describe(exc), status_code=400) from exc

    def update_principal(
        self,
        principal_id: str,
        *,
        email: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        attributes: dict = {}
        if email is not None:
            attributes["email"] = email
            attributes["email_confirm"] = True
        if metadata:
            attributes["user_metadata"] = dict(metadata)
        if not attributes:
            return
        try:
            self._auth.admin.update_user_by_id(principal_id, attributes)
        except Exception as exc:
            raise UpstreamError(_describe(exc), status_code=400) from exc


__all__ = ["SupabaseIdentityProvider"]
