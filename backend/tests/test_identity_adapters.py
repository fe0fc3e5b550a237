"""
Identity adapters - Supabase Auth (via client stub) and the in-memory provider.
"""
from __future__ import annotations

from types import SimpleNamespace

import pytest

from backend.errors import AuthorizationError, ConfigurationError, UpstreamError
from backend.identity_access.guards import require_admin, require_principal, require_self_or_admin
from backend.identity_access.domain import Principal
from backend.identity_access.memory import InMemoryIdentityProvider
from backend.identity_access.ports import NullIdentityProvider
from backend.identity_access.supabase_identity import SupabaseIdentityProvider


class _AdminStub:
    def __init__(self, *, fail: Exception | None = None):
        self.calls: list[tuple] = []
        self._fail = fail

    def create_user(self, attributes):
        self.calls.append(("create_user", attributes))
        if self._fail:
            raise self._fail
        user = SimpleNamespace(id="u-1", email=attributes["email"], user_metadata=attributes["user_metadata"])
        return SimpleNamespace(user=user)

    def delete_user(self, user_id):
        self.calls.append(("delete_user", user_id))
        if self._fail:
            raise self._fail

    def update_user_by_id(self, user_id, attributes):
        self.calls.append(("update_user_by_id", user_id, attributes))
        if self._fail:
            raise self._fail


class _AuthStub:
    def __init__(self, *, admin: _AdminStub | None = None, user=None, fail_get: bool = False):
        self.admin = admin or _AdminStub()
        self._user = user
        self._fail_get = fail_get

    def get_user(self, jwt):
        if self._fail_get:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=self._user)


def _provider(**auth_kwargs) -> tuple[SupabaseIdentityProvider, _AuthStub]:
    auth = _AuthStub(**auth_kwargs)
    return SupabaseIdentityProvider(SimpleNamespace(auth=auth)), auth


def test_create_principal_confirms_email_and_passes_metadata():
    provider, auth = _provider()
    principal = provider.create_principal(
        email="new@example.com", password="pw-123456", metadata={"name": "New", "role": "user"}
    )
    assert principal == Principal(id="u-1", email="new@example.com", name="New", role="user")
    name, attributes = auth.admin.calls[0]
    assert name == "create_user"
    assert attributes["email_confirm"] is True
    assert attributes["password"] == "pw-123456"


def test_create_principal_failure_is_a_client_error():
    class _AuthApiError(Exception):
        message = "A user with this email address has already been registered"

    provider, _ = _provider(admin=_AdminStub(fail=_AuthApiError()))
    with pytest.raises(UpstreamError) as exc:
        provider.create_principal(email="dup@example.com", password="x", metadata={})
    assert exc.value.status_code == 400
    assert "already been registered" in exc.value.message


def test_token_resolution():
    user = {"id": "u-2", "email": "me@example.com", "user_metadata": {"name": "Me"}}
    provider, _ = _provider(user=user)
    assert provider.get_principal_from_token("jwt").email == "me@example.com"

    for kwargs in ({"user": None}, {"fail_get": True}):
        bad, _ = _provider(**kwargs)
        with pytest.raises(AuthorizationError):
            bad.get_principal_from_token("jwt")
    with pytest.raises(AuthorizationError):
        provider.get_principal_from_token("")


def test_update_principal_email_and_metadata():
    provider, auth = _provider()
    provider.update_principal("u-1", email="next@example.com")
    provider.update_principal("u-1", metadata={"name": "Renamed"})
    provider.update_principal("u-1")
    assert auth.admin.calls == [
        ("update_user_by_id", "u-1", {"email": "next@example.com", "email_confirm": True}),
        ("update_user_by_id", "u-1", {"user_metadata": {"name": "Renamed"}}),
    ]


def test_delete_principal_failure():
    provider, _ = _provider(admin=_AdminStub(fail=RuntimeError("User not found")))
    with pytest.raises(UpstreamError):
        provider.delete_principal("ghost")


def test_in_memory_provider_tokens_and_credentials():
    idp = InMemoryIdentityProvider()
    principal = idp.create_principal(email="a@example.com", password="pw", metadata={"name": "A"})
    token = idp.sign_in(email="A@example.com", password="pw")
    assert idp.get_principal_from_token(token) == principal
    with pytest.raises(AuthorizationError):
        idp.sign_in(email="a@example.com", password="wrong")
    with pytest.raises(UpstreamError):
        idp.create_principal(email="a@example.com", password="pw", metadata={})

    idp.delete_principal(principal.id)
    with pytest.raises(AuthorizationError):
        idp.get_principal_from_token(token)


def test_null_identity_provider():
    with pytest.raises(ConfigurationError):
        NullIdentityProvider().get_principal_from_token("t")


def test_guards():
    admin = Principal(id="a", email="a@example.com", role="admin")
    user = Principal(id="u", email="u@example.com")
    with pytest.raises(AuthorizationError):
        require_principal(None)
    with pytest.raises(AuthorizationError):
        require_admin(user)
    assert require_admin(admin) is admin
    require_self_or_admin(user, "u")
    require_self_or_admin(admin, "u")
    with pytest.raises(AuthorizationError):
        require_self_or_admin(user, "someone-else")
