"""Course catalog API: admin module management and the learner module list."""

from __future__ import annotations

from fastapi import APIRouter, Request

from backend.catalog.usecases import (
    CreateModuleUseCase,
    DeleteModuleUseCase,
    GetModuleUseCase,
    ListModulesUseCase,
    UpdateModuleUseCase,
    UploadThumbnailInput,
    UploadThumbnailUseCase,
)
from backend.storage.config import get_thumbnail_max_upload_bytes
from backend.web import providers

from .common import _error_response, _private_response, current_principal, read_json_object, read_upload

catalog_router = APIRouter(tags=["Catalog"])


@catalog_router.get("/api/weeks")
async def list_published_weeks(request: Request):
    """Published modules ordered by week number (any authenticated principal)."""
    try:
        rows = ListModulesUseCase(providers.get_table_store()).execute(current_principal(request))
    except Exception as exc:
        return _error_response(exc)
    return _private_response(rows)


@catalog_router.get("/api/weeks/{week_id}")
async def get_week(request: Request, week_id: str):
    """A single module; unpublished modules are 404 unless the caller is an admin."""
    try:
        row = GetModuleUseCase(providers.get_table_store()).execute(current_principal(request), week_id)
    except Exception as exc:
        return _error_response(exc)
    return _private_response(row)


@catalog_router.get("/api/admin/weeks")
async def list_all_weeks(request: Request):
    """All modules, including unpublished ones (admin only)."""
    try:
        rows = ListModulesUseCase(providers.get_table_store()).execute(
            current_principal(request), published_only=False
        )
    except Exception as exc:
        return _error_response(exc)
    return _private_response(rows)


@catalog_router.post("/api/admin/weeks")
async def create_week(request: Request):
    try:
        body = await read_json_object(request)
        row = CreateModuleUseCase(providers.get_table_store()).execute(current_principal(request), body)
    except Exception as exc:
        return _error_response(exc)
    return _private_response(row, status_code=201)


# Registered before the `{week_id}` routes so the literal path wins.
@catalog_router.post("/api/admin/weeks/thumbnail")
async def upload_week_thumbnail(request: Request):
    """Upload a module thumbnail (multipart field ``file``); returns its public URL."""
    try:
        form = await request.form()
        filename, content_type, body = await read_upload(
            form.get("file"), max_bytes=get_thumbnail_max_upload_bytes()
        )
        result = UploadThumbnailUseCase(providers.get_storage_adapter()).execute(
            current_principal(request),
            UploadThumbnailInput(filename=filename, content_type=content_type, body=body),
        )
    except Exception as exc:
        return _error_response(exc)
    return _private_response(result, status_code=201)


@catalog_router.patch("/api/admin/weeks/{week_id}")
async def update_week(request: Request, week_id: str):
    try:
        body = await read_json_object(request)
        row = UpdateModuleUseCase(providers.get_table_store()).execute(current_principal(request), week_id, body)
    except Exception as exc:
        return _error_response(exc)
    return _private_response(row)


@catalog_router.delete("/api/admin/weeks/{week_id}")
async def delete_week(request: Request, week_id: str):
    try:
        DeleteModuleUseCase(providers.get_table_store()).execute(current_principal(request), week_id)
    except Exception as exc:
        return _error_response(exc)
    return _private_response({"success": True})
