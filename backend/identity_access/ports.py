"""
Identity provider port.

Keep this small and framework-agnostic so tests can supply simple fakes.
Token issuance is out of scope: the provider only resolves bearer tokens it
issued and administers principals with the service-role credentials.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

from backend.errors import ConfigurationError

from .domain import Principal


class IdentityProvider(Protocol):
    def create_principal(self, *, email: str, password: str, metadata: Mapping[str, Any]) -> Principal: ...

    def get_principal_from_token(self, token: str) -> Principal: ...

    def delete_principal(self, principal_id: str) -> None: ...

    def update_principal(
        self,
        principal_id: str,
        *,
        email: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None: ...


class NullIdentityProvider:
    """Fallback provider that signals the identity backend is not configured."""

    def create_principal(self, *, email: str, password: str, metadata: Mapping[str, Any]) -> Principal:  # noqa: D401
        raise ConfigurationError("identity_provider_not_configured")

    def get_principal_from_token(self, token: str) -> Principal:  # noqa: D401
        raise ConfigurationError("identity_provider_not_configured")

    def delete_principal(self, principal_id: str) -> None:  # noqa: D401
        raise ConfigurationError("identity_provider_not_configured")

    def update_principal(self, principal_id: str, **_: Any) -> None:  # noqa: D401
        raise ConfigurationError("identity_provider_not_configured")


__all__ = ["IdentityProvider", "NullIdentityProvider"]
