"""
Storage bootstrap - ensure proofs/thumbnail buckets exist.

Scope:
    - Unit-style: monkeypatch requests.get/post to avoid network calls.
    - Verifies: only missing buckets are created, both as public buckets,
      failures are logged and network errors never raise.
"""
from __future__ import annotations

import logging
import types

import pytest
import requests

import backend.storage.bootstrap as bootstrap


@pytest.fixture
def bootstrap_env(monkeypatch):
    monkeypatch.setenv("AUTO_CREATE_STORAGE_BUCKETS", "true")
    monkeypatch.setenv("SUPABASE_URL", "http://local.test:54321")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "secret")


def _resp(status_code: int, payload, text: str = ""):
    class _Resp:
        def json(self):
            return payload

    r = _Resp()
    r.status_code = status_code
    r.text = text
    return r


def test_creates_only_missing_bucket(monkeypatch, bootstrap_env):
    created: list[dict] = []

    def fake_get(url: str, headers: dict[str, str]):
        assert url == "http://local.test:54321/storage/v1/bucket"
        names = [{"id": "proofs", "name": "proofs"}] + [{"name": c["name"]} for c in created]
        return _resp(200, names)

    def fake_post(url: str, headers: dict[str, str], json: dict):
        created.append(json)
        return _resp(200, {"name": json["name"]})

    monkeypatch.setattr(bootstrap, "requests", types.SimpleNamespace(get=fake_get, post=fake_post))

    assert bootstrap.ensure_buckets_from_env() is True
    assert created == [{"name": "week_thumbnails", "public": True}]


def test_noop_without_flag(monkeypatch):
    monkeypatch.delenv("AUTO_CREATE_STORAGE_BUCKETS", raising=False)

    def boom(*args, **kwargs):
        raise AssertionError("no HTTP expected")

    monkeypatch.setattr(bootstrap, "requests", types.SimpleNamespace(get=boom, post=boom))
    assert bootstrap.ensure_buckets_from_env() is False


def test_missing_credentials_returns_false(monkeypatch):
    monkeypatch.setenv("AUTO_CREATE_STORAGE_BUCKETS", "true")
    assert bootstrap.ensure_buckets_from_env() is False


def test_logs_when_create_fails(monkeypatch, caplog, bootstrap_env):
    monkeypatch.setattr(
        bootstrap,
        "requests",
        types.SimpleNamespace(
            get=lambda url, headers: _resp(200, []),
            post=lambda url, headers, json: _resp(409, {"message": "conflict"}, text="conflict"),
        ),
    )
    caplog.set_level(logging.DEBUG, logger="camptrack.storage")
    bootstrap.ensure_buckets_from_env()

    msgs = "\n".join(rec.getMessage() for rec in caplog.records)
    assert "create bucket 'proofs' failed" in msgs and "status=409" in msgs
    assert "still missing after create attempt" in msgs


def test_network_errors_use_timeouts_and_do_not_raise(monkeypatch, bootstrap_env):
    calls: list[tuple[str, dict]] = []

    def raise_get(*args, **kwargs):
        calls.append(("get", kwargs))
        raise requests.exceptions.ConnectTimeout("boom")

    def raise_post(*args, **kwargs):
        calls.append(("post", kwargs))
        raise requests.exceptions.ReadTimeout("boom")

    monkeypatch.setattr(bootstrap, "requests", types.SimpleNamespace(get=raise_get, post=raise_post))

    assert bootstrap.ensure_buckets_from_env() is True
    kinds = [k for (k, _kw) in calls]
    assert "get" in kinds and "post" in kinds
    for _k, kw in calls:
        assert kw.get("timeout") == (3, 10)
