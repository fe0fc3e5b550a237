"CampTrack API"
from __future__ import annotations

import logging
import os
import sys

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out/opt-in via CAMPTRACK_ENABLE_DOTENV (default true
      outside pytest).
    """
    # Under pytest, do not load .env – tests provide their own env.
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("CAMPTRACK_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


from dotenv import load_dotenv

if _should_load_dotenv():
    load_dotenv()

from backend.errors import AuthorizationError, CampTrackError
from backend.identity_access.roles import get_bootstrap_admin_email, resolve_role
from backend.web import config as _cfg
from backend.web import providers
from backend.web.routes.admin import admin_router
from backend.web.routes.catalog import catalog_router
from backend.web.routes.common import _private_no_store
from backend.web.routes.learning import learning_router
from backend.web.routes.profile import profile_router
from backend.web.wiring import wire_backends_from_env

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()

logger = logging.getLogger("camptrack.web")

app = FastAPI(title="CampTrack", description="Course progress tracking API", version="0.1.0")

# Call wiring early so routes receive adapters before first request handling.
BACKEND = wire_backends_from_env()
logger.info("CampTrack starting: env=%s backend=%s", _cfg.get_environment(), BACKEND)


def _is_public_path(path: str) -> bool:
    return not path.startswith("/api/")


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@app.middleware("http")
async def auth_context(request: Request, call_next):
    """Resolve the bearer token and role once per request.

    Behavior:
        - Public paths pass through untouched.
        - Missing/invalid tokens yield 401 ``{"error": "Unauthorized"}``.
        - The resolved principal (with its role) is exposed read-only as
          ``request.state.user`` for the routes.
    """
    path = request.url.path
    if _is_public_path(path):
        return await call_next(request)

    headers = {**_private_no_store(), "Vary": "Authorization"}
    token = _bearer_token(request)
    if not token:
        return JSONResponse({"error": "Unauthorized"}, status_code=401, headers=headers)
    try:
        principal = providers.get_identity_provider().get_principal_from_token(token)
    except AuthorizationError:
        return JSONResponse({"error": "Unauthorized"}, status_code=401, headers=headers)
    except CampTrackError as exc:
        logger.warning("token resolution failed: %s: %s", exc.__class__.__name__, exc.message)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code, headers=headers)

    role = resolve_role(
        principal,
        store=providers.get_table_store(),
        bootstrap_admin_email=get_bootstrap_admin_email(),
    )
    request.state.user = principal.with_role(role)
    return await call_next(request)


# --- Security Headers Middleware ----------------------------------------------

@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    # JSON-only API: deny all active content and framing.
    response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    if _cfg.is_prod_like():
        response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response


app.include_router(profile_router)
app.include_router(admin_router)
app.include_router(catalog_router)
app.include_router(learning_router)


@app.get("/health")
async def health_check():
    # Minimal health endpoint used by orchestrators and tests.
    # Security: include no-store to avoid caching any runtime status.
    return JSONResponse({"status": "healthy"}, headers=_private_no_store())
