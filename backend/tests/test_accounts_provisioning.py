"""
Account provisioning - primary identity effect plus best-effort side effects.
"""
from __future__ import annotations

import pytest

from backend.accounts.mailer import MailMessage, NullMailer
from backend.accounts.usecases import (
    AdminStatsUseCase,
    CreateAccountInput,
    CreateAccountUseCase,
    DeleteAccountUseCase,
    ListLearnersUseCase,
    UpdateDisplayNameUseCase,
    UpdateEmailInput,
    UpdateEmailUseCase,
)
from backend.datastore.ports import NullTableStore
from backend.errors import AuthorizationError, UpstreamError, ValidationError
from backend.identity_access.domain import Principal
from utils.seed import seed_user, seed_week

ADMIN = Principal(id="admin-1", email="admin@example.com", name="Admin", role="admin")


class _UnreachableMailer:
    def send(self, message: MailMessage) -> str:
        raise UpstreamError("email provider unreachable: ConnectionError")


def _create(backends, *, mailer=None, **overrides):
    data = {"name": "Alice", "email": "alice@example.com", "password": "Temp-Pass-1", **overrides}
    uc = CreateAccountUseCase(backends.identity, backends.store, mailer or backends.mailer)
    return uc.execute(ADMIN, CreateAccountInput(**data))


def test_create_account_mirrors_profile_and_sends_welcome(backends, monkeypatch):
    monkeypatch.setenv("APP_BASE_URL", "https://camp.example.com")
    result = _create(backends)

    assert result.email_sent is True
    assert result.email_error is None
    assert backends.identity.find_by_email("alice@example.com") is not None
    profile = backends.store.rows("profiles")[0]
    assert profile["id"] == result.principal.id
    assert profile["role"] == "user"
    message = backends.mailer.outbox[0]
    assert message.to == ["alice@example.com"]
    assert "Temp-Pass-1" in message.text
    assert "https://camp.example.com/" in message.text
    assert "https://camp.example.com/" in message.html
    assert result.as_dict() == {
        "id": result.principal.id,
        "email": "alice@example.com",
        "name": "Alice",
        "role": "user",
        "emailSent": True,
        "emailError": None,
    }


def test_unreachable_email_provider_keeps_account(backends):
    result = _create(backends, mailer=_UnreachableMailer())
    assert result.email_sent is False
    assert result.email_error
    assert backends.identity.find_by_email("alice@example.com") is not None
    assert [e.name for e in result.effects] == ["profile_mirror", "welcome_email"]


def test_missing_mail_configuration_is_reported(backends):
    result = _create(backends, mailer=NullMailer())
    assert result.email_sent is False
    assert result.email_error == "RESEND_API_KEY not configured"


def test_profile_mirror_failure_does_not_fail_creation(backends):
    uc = CreateAccountUseCase(backends.identity, NullTableStore(), backends.mailer)
    result = uc.execute(ADMIN, CreateAccountInput(name="Alice", email="alice@example.com", password="pw-123456"))
    assert result.effects[0].ok is False
    assert result.email_sent is True


@pytest.mark.parametrize(
    "overrides",
    [{"name": ""}, {"email": ""}, {"password": ""}, {"email": "not-an-email"}, {"role": "owner"}],
)
def test_create_account_validation(backends, overrides):
    with pytest.raises(ValidationError):
        _create(backends, **overrides)
    assert backends.identity.find_by_email("alice@example.com") is None


def test_duplicate_email_is_upstream_400(backends):
    _create(backends)
    with pytest.raises(UpstreamError) as exc:
        _create(backends)
    assert exc.value.status_code == 400


def test_create_account_requires_admin(backends):
    learner, _ = seed_user(backends, email="learner@example.com")
    uc = CreateAccountUseCase(backends.identity, backends.store, backends.mailer)
    with pytest.raises(AuthorizationError):
        uc.execute(learner, CreateAccountInput(name="X", email="x@example.com", password="pw-123456"))
    with pytest.raises(AuthorizationError):
        uc.execute(None, CreateAccountInput(name="X", email="x@example.com", password="pw-123456"))


def test_delete_account_cascades_before_identity(backends):
    learner, _ = seed_user(backends, email="learner@example.com")
    backends.store.upsert("user_progress", {"user_id": learner.id, "week": 1, "verified": True}, on_conflict="user_id,week")

    effects = DeleteAccountUseCase(backends.identity, backends.store).execute(ADMIN, learner.id)

    assert all(e.ok for e in effects)
    assert backends.store.rows("user_progress") == []
    assert backends.store.rows("profiles") == []
    assert backends.identity.get(learner.id) is None


def test_delete_account_proceeds_when_dependent_rows_fail(backends):
    learner, _ = seed_user(backends, email="learner@example.com")
    effects = DeleteAccountUseCase(backends.identity, NullTableStore()).execute(ADMIN, learner.id)
    assert [e.ok for e in effects] == [False, False]
    assert backends.identity.get(learner.id) is None


class _CallLog:
    def __init__(self):
        self.calls: list[tuple] = []


class _LoggingStore:
    def __init__(self, log: _CallLog):
        self._log = log

    def delete(self, table, *, eq):
        self._log.calls.append(("delete", table))
        return []


class _LoggingIdentity:
    def __init__(self, log: _CallLog):
        self._log = log

    def delete_principal(self, principal_id):
        self._log.calls.append(("delete_principal", principal_id))


def test_delete_account_removes_rows_before_identity():
    log = _CallLog()
    DeleteAccountUseCase(_LoggingIdentity(log), _LoggingStore(log)).execute(ADMIN, "u-1")
    assert log.calls == [
        ("delete", "user_progress"),
        ("delete", "profiles"),
        ("delete_principal", "u-1"),
    ]


def test_delete_unknown_account_raises(backends):
    with pytest.raises(UpstreamError):
        DeleteAccountUseCase(backends.identity, backends.store).execute(ADMIN, "missing")


def test_update_email_self_and_admin(backends):
    alice, _ = seed_user(backends, email="alice@example.com")
    bob, _ = seed_user(backends, email="bob@example.com")
    uc = UpdateEmailUseCase(backends.identity, backends.store)

    assert uc.execute(alice, UpdateEmailInput(user_id=alice.id, new_email="alice@new.example.com")).ok
    assert backends.identity.get(alice.id).email == "alice@new.example.com"
    assert backends.store.rows("profiles")[0]["email"] == "alice@new.example.com"

    with pytest.raises(AuthorizationError):
        uc.execute(alice, UpdateEmailInput(user_id=bob.id, new_email="hijack@example.com"))
    uc.execute(ADMIN, UpdateEmailInput(user_id=bob.id, new_email="bob@new.example.com"))
    assert backends.identity.get(bob.id).email == "bob@new.example.com"

    with pytest.raises(ValidationError):
        uc.execute(alice, UpdateEmailInput(user_id=alice.id, new_email=""))


def test_update_display_name(backends):
    alice, _ = seed_user(backends, email="alice@example.com", name="Alice")
    updated = UpdateDisplayNameUseCase(backends.store, backends.identity).execute(alice, "  Alice B. ")
    assert updated.name == "Alice B."
    assert backends.store.rows("profiles")[0]["name"] == "Alice B."
    assert backends.identity.get(alice.id).metadata["name"] == "Alice B."
    with pytest.raises(ValidationError):
        UpdateDisplayNameUseCase(backends.store).execute(alice, "   ")


def test_display_name_change_keeps_stored_role(backends):
    # resolved as admin for this request (e.g. via the bootstrap email)
    root, _ = seed_user(backends, email="root@example.com", name="Root", role="user")
    UpdateDisplayNameUseCase(backends.store).execute(root.with_role("admin"), "Root Admin")
    [profile] = backends.store.rows("profiles")
    assert profile["name"] == "Root Admin"
    assert profile["role"] == "user"


def test_display_name_without_profile_creates_learner_row(backends):
    root, _ = seed_user(backends, email="root@example.com", with_profile=False)
    UpdateDisplayNameUseCase(backends.store).execute(root.with_role("admin"), "Root")
    [profile] = backends.store.rows("profiles")
    assert profile["id"] == root.id
    assert profile["role"] == "user"


def test_list_learners_excludes_admins_and_counts_verified(backends):
    alice, _ = seed_user(backends, email="alice@example.com", name="Alice")
    seed_user(backends, email="root@example.com", name="Root", role="admin")
    seed_week(backends, 1)
    seed_week(backends, 2)
    seed_week(backends, 3, published=False)
    backends.store.upsert("user_progress", {"user_id": alice.id, "week": 1, "verified": True}, on_conflict="user_id,week")
    backends.store.upsert("user_progress", {"user_id": alice.id, "week": 2, "verified": False}, on_conflict="user_id,week")
    backends.store.insert("profiles", {"id": "legacy", "email": "legacy@example.com", "name": "Legacy", "role": None})

    items = ListLearnersUseCase(backends.store).execute(ADMIN)

    by_email = {i["email"]: i for i in items}
    assert set(by_email) == {"alice@example.com", "legacy@example.com"}
    assert by_email["alice@example.com"]["completed"] == 1
    assert by_email["alice@example.com"]["total"] == 2
    assert by_email["legacy@example.com"]["role"] == "user"


def test_stats_counts_and_failure_fallback(backends):
    seed_user(backends, email="alice@example.com")
    backends.store.insert("proofs", {"user_id": "x", "week": 1, "status": "pending"})
    backends.store.insert("proofs", {"user_id": "x", "week": 2, "status": "verified"})

    assert AdminStatsUseCase(backends.store).execute(ADMIN) == {
        "totalUsers": 1,
        "accountsCreated": 1,
        "pendingVerifications": 1,
        "verifiedModules": 1,
    }
    assert AdminStatsUseCase(NullTableStore()).execute(ADMIN) == {
        "totalUsers": 0,
        "accountsCreated": 0,
        "pendingVerifications": 0,
        "verifiedModules": 0,
    }
