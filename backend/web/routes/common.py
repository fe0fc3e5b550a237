"""Shared helpers for JSON API routes."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from backend.errors import CampTrackError, ValidationError
from backend.identity_access.domain import Principal

logger = logging.getLogger("camptrack.web")


def _private_no_store() -> dict:
    return {"Cache-Control": "private, no-store"}


def _private_response(body: Any, *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=_private_no_store())


def _error_response(exc: Exception) -> JSONResponse:
    """Translate an exception into ``{"error": ...}`` with its status code.

    Domain errors carry their status; anything else is logged with traceback
    and reported as a generic 500.
    """
    if isinstance(exc, CampTrackError):
        if exc.status_code >= 500:
            logger.warning("request failed: %s: %s", exc.__class__.__name__, exc.message)
        return _private_response({"error": exc.message}, status_code=exc.status_code)
    logger.exception("unexpected error: %s", exc.__class__.__name__)
    return _private_response({"error": "internal_error"}, status_code=500)


def current_principal(request: Request) -> Optional[Principal]:
    """Principal resolved by the auth middleware (None on public paths)."""
    user = getattr(request.state, "user", None)
    return user if isinstance(user, Principal) else None


async def read_json_object(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("invalid_json")
    if not isinstance(body, dict):
        raise ValidationError("invalid_json")
    return body


async def read_upload(value: Any, *, max_bytes: int) -> tuple[Optional[str], Optional[str], bytes]:
    """Return ``(filename, content_type, body)`` for a multipart file field.

    Reads at most ``max_bytes + 1`` bytes so oversize uploads are detected
    without buffering them completely. Non-file values yield an empty body.
    """
    if not isinstance(value, UploadFile):
        return None, None, b""
    try:
        body = await value.read(max_bytes + 1)
    finally:
        await value.close()
    return value.filename, value.content_type, body


__all__ = [
    "_private_no_store",
    "_private_response",
    "_error_response",
    "current_principal",
    "read_json_object",
    "read_upload",
]
