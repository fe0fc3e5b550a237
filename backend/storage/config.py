"""
Centralized storage configuration for buckets and size limits.

Intent:
    Provide a single source of truth for default bucket names and their
    environment-variable overrides used by the learning (proofs) and catalog
    (week thumbnails) contexts. Prevents drift across modules and enables
    simple testing.

Behavior:
    - PROOFS_BUCKET_DEFAULT and THUMBNAILS_BUCKET_DEFAULT define canonical
      defaults ("proofs" / "week_thumbnails").
    - get_proofs_bucket() and get_thumbnails_bucket() read env overrides
      (PROOFS_STORAGE_BUCKET / THUMBNAILS_STORAGE_BUCKET) with sane fallbacks.

Permissions:
    Pure configuration; no external calls or privileges required.
"""
from __future__ import annotations

import os


PROOFS_BUCKET_DEFAULT = "proofs"
THUMBNAILS_BUCKET_DEFAULT = "week_thumbnails"


def get_proofs_bucket() -> str:
    """Return the configured proofs bucket name.

    Env:
        PROOFS_STORAGE_BUCKET – optional override; otherwise defaults to
        PROOFS_BUCKET_DEFAULT.
    """
    return (os.getenv("PROOFS_STORAGE_BUCKET") or PROOFS_BUCKET_DEFAULT).strip()


def get_thumbnails_bucket() -> str:
    """Return the configured week thumbnails bucket name."""
    return (os.getenv("THUMBNAILS_STORAGE_BUCKET") or THUMBNAILS_BUCKET_DEFAULT).strip()


__all__ = [
    "PROOFS_BUCKET_DEFAULT",
    "THUMBNAILS_BUCKET_DEFAULT",
    "get_proofs_bucket",
    "get_thumbnails_bucket",
]

# --- Size limits --------------------------------------------------------------

def _parse_int_env(name: str, default: int, *, contract_max: int | None = None) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if value <= 0:
        return default
    if isinstance(contract_max, int) and contract_max > 0:
        value = min(value, contract_max)
    return value


def get_proof_max_upload_bytes() -> int:
    """Maximum upload size for proof files (default/clamped 10 MiB)."""
    contract_max = 10 * 1024 * 1024
    return _parse_int_env("PROOF_MAX_UPLOAD_BYTES", contract_max, contract_max=contract_max)


def get_thumbnail_max_upload_bytes() -> int:
    """Maximum upload size for week thumbnails (default/clamped 5 MiB)."""
    contract_max = 5 * 1024 * 1024
    return _parse_int_env("THUMBNAIL_MAX_UPLOAD_BYTES", contract_max, contract_max=contract_max)


__all__ += [
    "get_proof_max_upload_bytes",
    "get_thumbnail_max_upload_bytes",
]
