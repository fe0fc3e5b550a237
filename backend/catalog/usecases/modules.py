"""
Course catalog use cases: weekly modules authored by admins.

Modules live in table ``weeks`` and are ordered by ``week_number`` (a positive,
unique, unbounded integer). Learners only ever see published modules; all
writes require an admin.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import time
import uuid
from typing import Any, Callable, Mapping, Optional

from backend.datastore.ports import Row, TableStore
from backend.errors import NotFoundError, ValidationError
from backend.identity_access.domain import Principal
from backend.identity_access.guards import require_admin, require_principal
from backend.storage.config import get_thumbnails_bucket
from backend.storage.keys import make_thumbnail_key
from backend.storage.ports import ObjectStorage
from backend.storage.upload_policy import thumbnail_policy

logger = logging.getLogger("camptrack.catalog")

MODULE_TEXT_FIELDS = (
    "title",
    "start_date",
    "video_url",
    "module_link",
    "drive_embed_url",
    "thumbnail_url",
    "primary_text",
    "secondary_text",
)
MODULE_FIELDS = ("week_number", *MODULE_TEXT_FIELDS, "is_published")


def parse_week_number(value: Any) -> int:
    """Return `value` as a positive int or raise ValidationError."""
    if isinstance(value, bool) or value is None:
        raise ValidationError("week_number must be a positive integer")
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            raise ValidationError("week_number must be a positive integer")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("week_number must be a positive integer")
    if isinstance(value, float) and value != number:
        raise ValidationError("week_number must be a positive integer")
    if number <= 0:
        raise ValidationError("week_number must be a positive integer")
    return number


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise ValidationError("is_published must be a boolean")


def _normalize_fields(data: Mapping[str, Any]) -> dict:
    """Keep known fields only; empty strings become None."""
    values: dict = {}
    for name in MODULE_FIELDS:
        if name not in data:
            continue
        value = data[name]
        if isinstance(value, str):
            value = value.strip() or None
        values[name] = value
    if "week_number" in values:
        values["week_number"] = parse_week_number(values["week_number"])
    if "title" in values and not values["title"]:
        raise ValidationError("Title is required")
    if "is_published" in values:
        values["is_published"] = True if values["is_published"] is None else _parse_bool(values["is_published"])
    return values


class _CatalogUseCase:
    def __init__(self, store: TableStore) -> None:
        self._store = store

    def _ensure_week_number_free(self, week_number: int, *, exclude_id: Optional[str] = None) -> None:
        for row in self._store.select("weeks", columns="id, week_number", eq={"week_number": week_number}):
            if exclude_id is None or str(row.get("id")) != str(exclude_id):
                raise ValidationError(f"Week {week_number} already exists")


class ListModulesUseCase(_CatalogUseCase):
    def execute(self, actor: Optional[Principal], *, published_only: bool = True) -> list[Row]:
        """Return modules ordered by ``week_number``.

        Permissions:
            Any principal may list published modules; unpublished modules are
            only listed for admins (``published_only=False``).
        """
        require_principal(actor)
        if not published_only:
            require_admin(actor)
            return self._store.select("weeks", order_by="week_number")
        return self._store.select("weeks", eq={"is_published": True}, order_by="week_number")


class GetModuleUseCase(_CatalogUseCase):
    def execute(self, actor: Optional[Principal], week_id: str) -> Row:
        principal = require_principal(actor)
        rows = self._store.select("weeks", eq={"id": week_id}, limit=1)
        if not rows or (not rows[0].get("is_published") and not principal.is_admin):
            raise NotFoundError("Week not found")
        return rows[0]


class CreateModuleUseCase(_CatalogUseCase):
    def execute(self, actor: Optional[Principal], data: Mapping[str, Any]) -> Row:
        """Create a module; ``week_number`` and ``title`` are required.

        ``is_published`` defaults to true. The week number must be unused.
        """
        require_admin(actor)
        if data.get("week_number") in (None, "") or not str(data.get("title") or "").strip():
            raise ValidationError("Week number and title are required")
        values = _normalize_fields(data)
        values.setdefault("is_published", True)
        self._ensure_week_number_free(values["week_number"])
        row = self._store.insert("weeks", values)
        logger.info("module created week_number=%s", values["week_number"])
        return row


class UpdateModuleUseCase(_CatalogUseCase):
    def execute(self, actor: Optional[Principal], week_id: str, data: Mapping[str, Any]) -> Row:
        """Apply a partial update; omitted fields stay unchanged."""
        require_admin(actor)
        values = _normalize_fields(data)
        if not values:
            raise ValidationError("No fields to update")
        if not self._store.select("weeks", columns="id", eq={"id": week_id}, limit=1):
            raise NotFoundError("Week not found")
        if "week_number" in values:
            self._ensure_week_number_free(values["week_number"], exclude_id=week_id)
        rows = self._store.update("weeks", values, eq={"id": week_id})
        if not rows:
            raise NotFoundError("Week not found")
        return rows[0]


class DeleteModuleUseCase(_CatalogUseCase):
    def execute(self, actor: Optional[Principal], week_id: str) -> None:
        require_admin(actor)
        if not self._store.delete("weeks", eq={"id": week_id}):
            raise NotFoundError("Week not found")
        logger.info("module deleted id=%s", week_id)


@dataclass
class UploadThumbnailInput:
    filename: Optional[str]
    content_type: Optional[str]
    body: bytes


class UploadThumbnailUseCase:
    def __init__(
        self,
        storage: ObjectStorage,
        *,
        clock_ms: Callable[[], int] = lambda: int(time.time() * 1000),
    ) -> None:
        self._storage = storage
        self._clock_ms = clock_ms

    def execute(self, actor: Optional[Principal], req: UploadThumbnailInput) -> dict:
        """Store a thumbnail image and return its public URL.

        Behavior:
            - Enforces the thumbnail upload policy before any storage write.
            - Stores under ``thumbnails/{epoch_ms}-{uuid}.{ext}`` in the
              thumbnails bucket.
        """
        require_admin(actor)
        body = req.body or b""
        mime = thumbnail_policy().check(filename=req.filename, declared_mime=req.content_type, size=len(body))
        bucket = get_thumbnails_bucket()
        key = make_thumbnail_key(filename=req.filename, epoch_ms=self._clock_ms(), uuid_hex=uuid.uuid4().hex)
        self._storage.put_object(bucket=bucket, key=key, body=body, content_type=mime)
        return {"url": self._storage.public_url(bucket=bucket, key=key), "key": key}


__all__ = [
    "parse_week_number",
    "ListModulesUseCase",
    "GetModuleUseCase",
    "CreateModuleUseCase",
    "UpdateModuleUseCase",
    "DeleteModuleUseCase",
    "UploadThumbnailInput",
    "UploadThumbnailUseCase",
]
