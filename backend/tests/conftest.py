"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend to avoid sandbox restrictions
that can affect the Trio backend (e.g., socketpair permission errors), and
give every test fresh in-memory adapters so no state leaks between tests.
"""
import sys
from pathlib import Path

import pytest

# Ensure the repository root and test helpers are importable across tests
REPO_ROOT = Path(__file__).resolve().parents[2]
TESTS_DIR = REPO_ROOT / "backend" / "tests"
for p in (str(REPO_ROOT), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_env_toggles(monkeypatch: pytest.MonkeyPatch):
    """Clear env-driven toggles that may leak in from the developer shell.

    Behavior:
        - Default to the dev environment unless a test opts into prod.
        - Drop credentials and feature flags so wiring and guards start from a
          known state; tests set what they need explicitly.
    """
    for var in (
        "CAMPTRACK_ENV",
        "CAMPTRACK_BACKEND",
        "SUPABASE_URL",
        "SUPABASE_SERVICE_ROLE_KEY",
        "AUTO_CREATE_STORAGE_BUCKETS",
        "PROOFS_STORAGE_BUCKET",
        "THUMBNAILS_STORAGE_BUCKET",
        "PROOF_MAX_UPLOAD_BYTES",
        "THUMBNAIL_MAX_UPLOAD_BYTES",
        "RESEND_API_KEY",
        "MAIL_FROM",
        "MAIL_REPLY_TO",
        "APP_BASE_URL",
        "BOOTSTRAP_ADMIN_EMAIL",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture(autouse=True)
def backends():
    """Wire fresh in-memory adapters for each test and reset them afterwards."""
    from backend.web import providers

    wired = providers.use_in_memory_backends()
    yield wired
    providers.reset_to_null()
