"""
Helpers to generate standardized object keys for Supabase Storage.

Why:
    Keep path shapes consistent across contexts and provide simple, testable
    sanitization that avoids path traversal and exotic characters while
    remaining human-readable.

Conventions:
    - Proofs: {user}/{week}-{epoch_ms}.{ext}  (per-user, per-week and
      timestamp-qualified so resubmissions never collide)
    - Week thumbnails: thumbnails/{epoch_ms}-{uuid}.{ext}

Security:
    - Sanitization removes characters outside [A-Za-z0-9._-] from segments.
    - Filename extensions are lowercased and filtered to alphanumeric + dot.
"""
from __future__ import annotations

import os
import re
import unicodedata

_SEGMENT_RE = re.compile(r"[^A-Za-z0-9._-]+")


def _sanitize_segment(value: str, *, fallback: str = "x") -> str:
    value = value or ""
    normalized = unicodedata.normalize("NFKD", value)
    ascii_value = normalized.encode("ascii", "ignore").decode("ascii")
    sanitized = _SEGMENT_RE.sub("-", ascii_value).strip("-_.")
    return sanitized or fallback


def _sanitize_ext_from_filename(filename: str | None, default_ext: str = "") -> str:
    if not filename:
        ext = default_ext
    else:
        _, ext = os.path.splitext(os.path.basename(filename))
    ext = (ext or default_ext or "").lower()
    # keep only alnum and dots; collapse invalids
    ext = "".join(ch for ch in ext if ch.isalnum() or ch == ".")
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


def make_proof_key(*, user_id: str, week: int, filename: str | None, epoch_ms: int, default_ext: str = "") -> str:
    """Build a storage key for a proof upload.

    Returns: {user}/{week}-{epoch_ms}.{ext}
    """
    u = _sanitize_segment(user_id, fallback="user")
    ext = _sanitize_ext_from_filename(filename, default_ext=default_ext)
    return f"{u}/{int(week)}-{int(epoch_ms)}{ext}"


def make_thumbnail_key(*, filename: str | None, epoch_ms: int, uuid_hex: str) -> str:
    """Build a storage key for a week thumbnail.

    Returns: thumbnails/{epoch_ms}-{uuid}.{ext}
    """
    ext = _sanitize_ext_from_filename(filename)
    hexpart = _sanitize_segment((uuid_hex or "").strip(), fallback="file")
    return f"thumbnails/{int(epoch_ms)}-{hexpart}{ext}"


__all__ = ["make_proof_key", "make_thumbnail_key"]
