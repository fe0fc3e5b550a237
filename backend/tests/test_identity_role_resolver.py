"""
Role resolution - stored profile role first, bootstrap email second.

Why:
    Routes branch on a single resolved role; these tests pin the rules and
    the fallback when the profile store is unavailable.
"""
from __future__ import annotations

import logging

from backend.datastore.memory import InMemoryTableStore
from backend.datastore.ports import NullTableStore
from backend.identity_access.domain import Principal
from backend.identity_access.roles import get_bootstrap_admin_email, resolve_role


def _principal(email: str = "ada@example.com") -> Principal:
    return Principal(id="u-1", email=email, name="Ada")


def test_stored_admin_role_wins():
    store = InMemoryTableStore()
    store.insert("profiles", {"id": "u-1", "email": "ada@example.com", "role": "admin"})
    assert resolve_role(_principal(), store=store) == "admin"


def test_missing_profile_defaults_to_user():
    assert resolve_role(_principal(), store=InMemoryTableStore()) == "user"


def test_unknown_stored_role_reads_as_user():
    store = InMemoryTableStore()
    store.insert("profiles", {"id": "u-1", "email": "ada@example.com", "role": "superuser"})
    assert resolve_role(_principal(), store=store) == "user"


def test_bootstrap_email_requires_exact_match():
    store = InMemoryTableStore()
    assert resolve_role(_principal("boss@example.com"), store=store, bootstrap_admin_email="boss@example.com") == "admin"
    assert resolve_role(_principal("Boss@example.com"), store=store, bootstrap_admin_email="boss@example.com") == "user"


def test_bootstrap_email_disabled_when_unset(monkeypatch):
    monkeypatch.delenv("BOOTSTRAP_ADMIN_EMAIL", raising=False)
    assert get_bootstrap_admin_email() is None
    monkeypatch.setenv("BOOTSTRAP_ADMIN_EMAIL", "  boss@example.com ")
    assert get_bootstrap_admin_email() == "boss@example.com"


def test_profile_read_failure_is_logged_and_falls_back(caplog):
    caplog.set_level(logging.WARNING, logger="camptrack.identity")
    role = resolve_role(_principal("boss@example.com"), store=NullTableStore(), bootstrap_admin_email="boss@example.com")
    assert role == "admin"
    assert any("profile role lookup failed" in rec.getMessage() for rec in caplog.records)
    assert resolve_role(_principal(), store=NullTableStore()) == "user"
