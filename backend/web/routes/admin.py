"""
Admin console API: accounts, proof review and dashboard counters.

Permissions:
    Every endpoint requires the ``admin`` role resolved by the auth
    middleware; the use cases enforce it and raise AuthorizationError (401).
"""
from __future__ import annotations

from fastapi import APIRouter, Request

from backend.accounts.usecases import (
    AdminStatsUseCase,
    CreateAccountInput,
    CreateAccountUseCase,
    DeleteAccountUseCase,
    ListLearnersUseCase,
)
from backend.learning.usecases import DecideProofInput, DecideProofUseCase, ListProofsForAdminUseCase
from backend.web import providers

from .common import _error_response, _private_response, current_principal, read_json_object

admin_router = APIRouter(tags=["Admin"])


@admin_router.post("/api/admin/create-account")
async def create_account(request: Request):
    """Create a learner account and send the welcome email.

    Behavior:
        - 201 with ``{id, email, name, role, emailSent, emailError}`` once the
          identity exists, even when the email could not be sent.
        - 400 for missing fields or identity provider rejections.
    """
    try:
        body = await read_json_object(request)
        uc = CreateAccountUseCase(
            providers.get_identity_provider(), providers.get_table_store(), providers.get_mailer()
        )
        result = uc.execute(
            current_principal(request),
            CreateAccountInput(
                name=str(body.get("name") or ""),
                email=str(body.get("email") or ""),
                password=str(body.get("password") or ""),
                role=str(body.get("role") or "user"),
            ),
        )
    except Exception as exc:
        return _error_response(exc)
    return _private_response(result.as_dict(), status_code=201)


@admin_router.get("/api/admin/users")
async def list_users(request: Request):
    """Learners (non-admin profiles) with verified-week counts."""
    try:
        items = ListLearnersUseCase(providers.get_table_store()).execute(current_principal(request))
    except Exception as exc:
        return _error_response(exc)
    return _private_response(items)


@admin_router.delete("/api/admin/users/{user_id}")
async def delete_user(request: Request, user_id: str):
    """Delete a learner: progress and profile rows first, then the identity."""
    try:
        effects = DeleteAccountUseCase(providers.get_identity_provider(), providers.get_table_store()).execute(
            current_principal(request), user_id
        )
    except Exception as exc:
        return _error_response(exc)
    return _private_response({"success": True, "effects": [e.as_dict() for e in effects]})


@admin_router.get("/api/admin/proofs")
async def list_proofs(request: Request):
    try:
        items = ListProofsForAdminUseCase(providers.get_table_store()).execute(current_principal(request))
    except Exception as exc:
        return _error_response(exc)
    return _private_response(items)


@admin_router.post("/api/admin/verify-proof")
async def verify_proof(request: Request):
    """Approve (``approved: true``) or reject a proof.

    Validation:
        ``proofId`` is required and ``approved`` must be a JSON boolean; an
        unknown proof id is reported as 400.
    """
    try:
        body = await read_json_object(request)
        result = DecideProofUseCase(providers.get_table_store()).execute(
            current_principal(request),
            DecideProofInput(proof_id=body.get("proofId"), approved=body.get("approved")),
        )
    except Exception as exc:
        return _error_response(exc)
    return _private_response(result.as_dict())


@admin_router.get("/api/admin/stats")
async def admin_stats(request: Request):
    try:
        stats = AdminStatsUseCase(providers.get_table_store()).execute(current_principal(request))
    except Exception as exc:
        return _error_response(exc)
    return _private_response(stats)
