"""Account self-service API: current principal, email and display name."""

from __future__ import annotations

from fastapi import APIRouter, Request

from backend.accounts.usecases import UpdateDisplayNameUseCase, UpdateEmailInput, UpdateEmailUseCase
from backend.identity_access.guards import require_principal
from backend.web import providers

from .common import _error_response, _private_response, current_principal, read_json_object

profile_router = APIRouter(tags=["Profile"])


@profile_router.get("/api/me")
async def get_me(request: Request):
    """Return the authenticated principal with its resolved role."""
    try:
        principal = require_principal(current_principal(request))
    except Exception as exc:
        return _error_response(exc)
    return _private_response(principal.as_dict())


@profile_router.post("/api/user/update-email")
async def update_email(request: Request):
    """Change an account email without confirmation (self or admin).

    Request: ``{userId, newEmail}``; ``userId`` defaults to the caller.
    """
    try:
        body = await read_json_object(request)
        actor = current_principal(request)
        user_id = body.get("userId") or (actor.id if actor else "")
        effect = UpdateEmailUseCase(providers.get_identity_provider(), providers.get_table_store()).execute(
            actor, UpdateEmailInput(user_id=str(user_id), new_email=str(body.get("newEmail") or ""))
        )
    except Exception as exc:
        return _error_response(exc)
    return _private_response({"success": True, "profileUpdated": effect.ok})


@profile_router.patch("/api/user/profile")
async def update_profile(request: Request):
    """Update the caller's display name (``{name}``)."""
    try:
        body = await read_json_object(request)
        principal = UpdateDisplayNameUseCase(
            providers.get_table_store(), providers.get_identity_provider()
        ).execute(current_principal(request), str(body.get("name") or ""))
    except Exception as exc:
        return _error_response(exc)
    return _private_response(principal.as_dict())
