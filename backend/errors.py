"""
Error taxonomy shared by all contexts.

Why:
    Use cases raise domain errors; HTTP adapters translate them into status
    codes and `{"error": ...}` bodies. Keeping the mapping on the exception
    (``status_code``) avoids per-route drift.

Design:
    Each class also derives from the closest builtin (ValueError,
    PermissionError, LookupError, RuntimeError) so callers that only know the
    builtins keep working.
"""
from __future__ import annotations


class CampTrackError(Exception):
    """Base class for errors that carry an HTTP status hint."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(CampTrackError, RuntimeError):
    """Required external credentials or adapters are missing."""

    status_code = 500


class ValidationError(CampTrackError, ValueError):
    """Missing or malformed input supplied by the caller."""

    status_code = 400


class AuthorizationError(CampTrackError, PermissionError):
    """Missing, invalid or insufficiently privileged credentials."""

    status_code = 401


class NotFoundError(CampTrackError, LookupError):
    """A referenced entity does not exist."""

    status_code = 404


class UpstreamError(CampTrackError, RuntimeError):
    """Identity, database, storage or email provider reported a failure."""

    status_code = 500


__all__ = [
    "CampTrackError",
    "ConfigurationError",
    "ValidationError",
    "AuthorizationError",
    "NotFoundError",
    "UpstreamError",
]
