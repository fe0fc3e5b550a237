"""Learner API: proof submission, own proof history and progress."""

from __future__ import annotations

from fastapi import APIRouter, Request

from backend.learning.usecases import (
    GetProgressUseCase,
    ListProofsForUserUseCase,
    SubmitProofInput,
    SubmitProofUseCase,
)
from backend.storage.config import get_proof_max_upload_bytes
from backend.web import providers

from .common import _error_response, _private_response, current_principal, read_upload

learning_router = APIRouter(tags=["Learning"])


@learning_router.get("/api/user/proofs")
async def list_my_proofs(request: Request):
    """The caller's proofs, newest first."""
    try:
        items = ListProofsForUserUseCase(providers.get_table_store()).execute(current_principal(request))
    except Exception as exc:
        return _error_response(exc)
    return _private_response(items)


@learning_router.post("/api/user/submit-proof")
async def submit_proof(request: Request):
    """Submit a proof of completion for a module week.

    Request (multipart/form-data):
        - ``file``: the proof image or PDF
        - ``weekNumber``: positive integer
        - ``weekTitle``: optional module title snapshot

    Behavior:
        - 201 with ``{success, proof, message}``; the proof starts ``pending``.
        - 400 for missing file/week or policy violations (no storage write).
    """
    try:
        form = await request.form()
        filename, content_type, body = await read_upload(
            form.get("file"), max_bytes=get_proof_max_upload_bytes()
        )
        week_title = form.get("weekTitle")
        row = SubmitProofUseCase(providers.get_table_store(), providers.get_storage_adapter()).execute(
            current_principal(request),
            SubmitProofInput(
                week=form.get("weekNumber"),
                week_title=week_title if isinstance(week_title, str) else None,
                filename=filename,
                content_type=content_type,
                body=body,
            ),
        )
    except Exception as exc:
        return _error_response(exc)
    return _private_response(
        {"success": True, "proof": row, "message": "Proof submitted successfully"}, status_code=201
    )


@learning_router.get("/api/user/progress")
async def my_progress(request: Request):
    """Per-week completion/verification flags over published modules."""
    try:
        summary = GetProgressUseCase(providers.get_table_store()).execute(current_principal(request))
    except Exception as exc:
        return _error_response(exc)
    return _private_response(summary.as_dict())
