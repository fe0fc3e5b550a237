"""
Startup wiring of Supabase-backed adapters.

Why:
    App startup may occur before Supabase is reachable locally, leaving the
    Null adapters in place. This helper is idempotent and can be called again
    later to (re)attempt wiring once configuration is present.

Security:
    Requires SUPABASE_SERVICE_ROLE_KEY and SUPABASE_URL environment variables.
    The helper only wires server-side adapters; no secrets are exposed to clients.
"""
from __future__ import annotations

import logging
import os

from backend.accounts.mailer import build_mailer_from_env
from backend.datastore.supabase_tables import SupabaseTableStore
from backend.identity_access.supabase_identity import SupabaseIdentityProvider
from backend.storage.bootstrap import ensure_buckets_from_env
from backend.storage.supabase_storage import SupabaseStorageAdapter
from backend.web import providers

logger = logging.getLogger("camptrack.web")


def _memory_backend_requested() -> bool:
    return (os.getenv("CAMPTRACK_BACKEND") or "").strip().lower() == "memory"


def wire_supabase_adapters_if_configured() -> bool:
    """Attempt to wire Supabase table, storage and identity adapters.

    Behavior:
        - Returns True when wiring succeeds (adapters injected).
        - Returns False when not configured or client creation fails (keeps Null).
        - Safe and idempotent to call multiple times.

    Logging:
        - On success, logs an info message.
        - On failure, logs a warning including exception class and message.
    """
    url = (os.getenv("SUPABASE_URL") or "").strip()
    key = (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip()
    if not url or not key:
        logger.warning("SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not set; data adapters stay unconfigured")
        return False
    try:
        from supabase import create_client

        client = create_client(url, key)
    except Exception as exc:
        logger.warning("Supabase client unavailable: %s: %s", exc.__class__.__name__, str(exc))
        return False

    providers.set_table_store(SupabaseTableStore(client))
    providers.set_storage_adapter(SupabaseStorageAdapter(client))
    providers.set_identity_provider(SupabaseIdentityProvider(client))
    logger.info("Data adapters wired: Supabase")
    try:
        ensure_buckets_from_env()
    except Exception as exc:
        # Do not block wiring on bootstrap issues in dev.
        logger.warning("Bucket bootstrap failed: %s", exc.__class__.__name__)
    return True


def wire_backends_from_env() -> str:
    """Wire all adapters according to the environment and return the backend name.

    ``CAMPTRACK_BACKEND=memory`` selects in-memory adapters for local
    development; otherwise Supabase is used when configured and the Null
    adapters remain in place when it is not.
    """
    if _memory_backend_requested():
        providers.use_in_memory_backends()
        logger.warning("In-memory backends wired (CAMPTRACK_BACKEND=memory); data is not persisted")
        return "memory"
    wired = wire_supabase_adapters_if_configured()
    providers.set_mailer(build_mailer_from_env())
    return "supabase" if wired else "unconfigured"


__all__ = ["wire_supabase_adapters_if_configured", "wire_backends_from_env"]
