"""
Object storage port used by the learning and catalog contexts.

Keep this small and framework-agnostic so tests can supply simple fakes.
"""
from __future__ import annotations

from typing import Protocol

from backend.errors import ConfigurationError


class ObjectStorage(Protocol):
    """Minimal interface to write, locate and remove objects in a bucket.

    Permissions:
        Implementations must enforce bucket/key ACLs and validation.
    """

    def put_object(self, *, bucket: str, key: str, body: bytes, content_type: str) -> None: ...

    def public_url(self, *, bucket: str, key: str) -> str: ...

    def delete_object(self, *, bucket: str, key: str) -> None: ...


class NullStorageAdapter:
    """Fallback adapter that signals the storage backend is not configured."""

    def put_object(self, *, bucket: str, key: str, body: bytes, content_type: str) -> None:  # noqa: D401
        raise ConfigurationError("storage_adapter_not_configured")

    def public_url(self, *, bucket: str, key: str) -> str:  # noqa: D401
        raise ConfigurationError("storage_adapter_not_configured")

    def delete_object(self, *, bucket: str, key: str) -> None:  # noqa: D401
        raise ConfigurationError("storage_adapter_not_configured")


__all__ = ["ObjectStorage", "NullStorageAdapter"]
