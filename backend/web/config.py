"""
Configuration and startup security checks for CampTrack.

Why: Learner credentials and proofs are personal data; we must prevent
accidental insecure deployments. This module provides a single guard that
enforces minimal production safety constraints without burdening local
development.

Permissions: The caller needs no special privileges. The function simply reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os


def get_environment() -> str:
    return (os.getenv("CAMPTRACK_ENV", "dev") or "dev").strip().lower()


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def is_prod_like() -> bool:
    return _is_prod_like(get_environment())


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Intent: Abort process startup when obviously insecure settings are detected
    in production/staging. Development remains permissive for convenience.

    Checks:
    - Supabase Service Role key must be set and not a known dummy placeholder.
    - SUPABASE_URL must be set and use https.
    - In-memory backends (CAMPTRACK_BACKEND=memory) are forbidden.
    - Bucket auto-creation (AUTO_CREATE_STORAGE_BUCKETS=true) is forbidden.
    """
    if not is_prod_like():
        return  # dev/test remain permissive

    # 1) Supabase Service Role key
    srole = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "").strip()
    if not srole or srole.upper() in {"DUMMY_DO_NOT_USE", "CHANGE_ME"}:
        raise SystemExit(
            "Refusing to start: SUPABASE_SERVICE_ROLE_KEY is unset or a dummy placeholder in production."
        )

    # 2) Supabase endpoint must use HTTPS in production-like environments
    url = (os.getenv("SUPABASE_URL", "") or "").strip().lower()
    if not url.startswith("https://"):
        raise SystemExit("Refusing to start: SUPABASE_URL must be set and use https in production.")

    # 3) In-memory adapters lose all data on restart
    if (os.getenv("CAMPTRACK_BACKEND", "") or "").strip().lower() == "memory":
        raise SystemExit("Refusing to start: CAMPTRACK_BACKEND=memory is not allowed in production/staging.")

    # 4) Buckets are provisioned out of band in prod-like envs
    if (os.getenv("AUTO_CREATE_STORAGE_BUCKETS", "false") or "").strip().lower() == "true":
        raise SystemExit(
            "Refusing to start: AUTO_CREATE_STORAGE_BUCKETS must be false in production/staging."
        )


__all__ = ["ensure_secure_config_on_startup", "get_environment", "is_prod_like"]
