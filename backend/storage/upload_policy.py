"""
Shared upload policy for proof files and week thumbnails.

Centralises MIME/type/size constraints so that use cases stay slim and both
tests and documentation can reference a single source of truth.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass

from backend.errors import ValidationError
from backend.storage.config import get_proof_max_upload_bytes, get_thumbnail_max_upload_bytes

ALLOWED_IMAGE_MIME = frozenset({"image/jpeg", "image/png", "image/webp", "image/gif", "image/heic"})
ALLOWED_FILE_MIME = frozenset({"application/pdf"})


@dataclass(frozen=True, slots=True)
class UploadPolicy:
    """Immutable policy object used at request-handling time."""

    allowed_mime_types: frozenset[str]
    max_size_bytes: int

    def resolve_mime(self, filename: str | None, declared: str | None) -> str:
        """Return the effective MIME type, guessing from the filename when absent."""
        mime = (declared or "").split(";", 1)[0].strip().lower()
        if not mime or mime == "application/octet-stream":
            guessed, _ = mimetypes.guess_type(filename or "")
            mime = (guessed or mime or "application/octet-stream").lower()
        return mime

    def check(self, *, filename: str | None, declared_mime: str | None, size: int) -> str:
        """Validate an upload and return its effective MIME type.

        Raises:
            ValidationError: empty body, size above limit, or MIME not allowed.
        """
        if size <= 0:
            raise ValidationError("File and week number are required")
        if size > self.max_size_bytes:
            raise ValidationError("file_too_large")
        mime = self.resolve_mime(filename, declared_mime)
        if mime not in self.allowed_mime_types:
            raise ValidationError("unsupported_file_type")
        return mime


def proof_policy() -> UploadPolicy:
    return UploadPolicy(
        allowed_mime_types=frozenset(ALLOWED_IMAGE_MIME | ALLOWED_FILE_MIME),
        max_size_bytes=get_proof_max_upload_bytes(),
    )


def thumbnail_policy() -> UploadPolicy:
    return UploadPolicy(allowed_mime_types=ALLOWED_IMAGE_MIME, max_size_bytes=get_thumbnail_max_upload_bytes())


__all__ = [
    "ALLOWED_IMAGE_MIME",
    "ALLOWED_FILE_MIME",
    "UploadPolicy",
    "proof_policy",
    "thumbnail_policy",
]
