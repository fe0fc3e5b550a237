"""
Account provisioning use cases (admin console and learner settings).

Every use case has a single primary effect whose failure is raised to the
caller. Profile mirroring and the welcome email are secondary effects: they
run after the primary effect, are logged on failure and reported through
`EffectResult`s, but never undo or fail the operation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
from typing import List, Optional

from backend.accounts.mailer import Mailer
from backend.accounts.welcome import build_welcome_message
from backend.datastore.ports import TableStore
from backend.effects import EffectResult, run_secondary_effect
from backend.errors import ValidationError
from backend.identity_access.domain import ALLOWED_ROLES, DEFAULT_ROLE, Principal
from backend.identity_access.guards import require_admin, require_principal, require_self_or_admin
from backend.identity_access.ports import IdentityProvider

logger = logging.getLogger("camptrack.accounts")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _require_email(value: Optional[str]) -> str:
    email = _clean(value)
    if not _EMAIL_RE.match(email):
        raise ValidationError("invalid_email")
    return email


# --- Create -------------------------------------------------------------------


@dataclass
class CreateAccountInput:
    name: str
    email: str
    password: str
    role: str = DEFAULT_ROLE


@dataclass
class CreateAccountResult:
    principal: Principal
    email_sent: bool
    email_error: Optional[str]
    effects: List[EffectResult] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            **self.principal.as_dict(),
            "emailSent": self.email_sent,
            "emailError": self.email_error,
        }


class CreateAccountUseCase:
    def __init__(self, identity: IdentityProvider, store: TableStore, mailer: Mailer) -> None:
        self._identity = identity
        self._store = store
        self._mailer = mailer

    def execute(self, actor: Optional[Principal], req: CreateAccountInput) -> CreateAccountResult:
        """Create a confirmed learner (or admin) account and notify it.

        Behavior:
            - Validates name/email/password and the requested role.
            - Primary effect: create the principal with email pre-confirmed and
              metadata ``{name, role}``; failures raise UpstreamError (400).
            - Secondary effects, in order: upsert the profile mirror
              (``on_conflict=id``), then send the welcome email.

        Permissions:
            Caller must be an admin.
        """
        require_admin(actor)
        name, email, password = _clean(req.name), _clean(req.email), req.password or ""
        if not name or not email or not password:
            raise ValidationError("Name, email and password are required")
        _require_email(email)
        role = _clean(req.role).lower() or DEFAULT_ROLE
        if role not in ALLOWED_ROLES:
            raise ValidationError("invalid_role")

        created = self._identity.create_principal(
            email=email, password=password, metadata={"name": name, "role": role}
        )
        principal = Principal(id=created.id, email=created.email or email, name=name, role=role)
        logger.info("account created id=%s role=%s", principal.id, role)

        profile = run_secondary_effect(
            "profile_mirror",
            lambda: self._store.upsert(
                "profiles",
                {"id": principal.id, "email": principal.email, "name": name, "role": role},
                on_conflict="id",
            ),
            logger=logger,
        )
        message = build_welcome_message(name=name, email=principal.email, password=password)
        mail = run_secondary_effect("welcome_email", lambda: self._mailer.send(message), logger=logger)
        return CreateAccountResult(
            principal=principal,
            email_sent=mail.ok,
            email_error=mail.error,
            effects=[profile, mail],
        )


# --- Delete -------------------------------------------------------------------


class DeleteAccountUseCase:
    def __init__(self, identity: IdentityProvider, store: TableStore) -> None:
        self._identity = identity
        self._store = store

    def execute(self, actor: Optional[Principal], user_id: str) -> List[EffectResult]:
        """Delete a principal after best-effort removal of its app-side rows.

        Behavior:
            - Deletes ``user_progress`` rows, then the ``profiles`` row. Each is
              attempted independently; failures are logged and reported.
            - Identity deletion always runs afterwards and is the primary
              effect (UpstreamError on failure).

        Permissions:
            Caller must be an admin.
        """
        require_admin(actor)
        target = _clean(user_id)
        if not target:
            raise ValidationError("User id is required")
        effects = [
            run_secondary_effect(
                "delete_progress",
                lambda: self._store.delete("user_progress", eq={"user_id": target}),
                logger=logger,
            ),
            run_secondary_effect(
                "delete_profile",
                lambda: self._store.delete("profiles", eq={"id": target}),
                logger=logger,
            ),
        ]
        self._identity.delete_principal(target)
        logger.info("account deleted id=%s", target)
        return effects


# --- Update email / display name ----------------------------------------------


@dataclass
class UpdateEmailInput:
    user_id: str
    new_email: str


class UpdateEmailUseCase:
    def __init__(self, identity: IdentityProvider, store: TableStore) -> None:
        self._identity = identity
        self._store = store

    def execute(self, actor: Optional[Principal], req: UpdateEmailInput) -> EffectResult:
        """Change a principal's email without a confirmation round-trip.

        Behavior:
            - Primary effect: confirmed email update at the identity provider.
            - Secondary effect: mirror the new email into ``profiles``.

        Permissions:
            The principal itself or an admin.
        """
        require_principal(actor)
        user_id = _clean(req.user_id)
        if not user_id or not _clean(req.new_email):
            raise ValidationError("Missing userId or newEmail")
        require_self_or_admin(actor, user_id)
        new_email = _require_email(req.new_email)
        self._identity.update_principal(user_id, email=new_email)
        return run_secondary_effect(
            "profile_email",
            lambda: self._store.update("profiles", {"email": new_email}, eq={"id": user_id}),
            logger=logger,
        )


class UpdateDisplayNameUseCase:
    def __init__(self, store: TableStore, identity: Optional[IdentityProvider] = None) -> None:
        self._store = store
        self._identity = identity

    def execute(self, principal: Optional[Principal], name: str) -> Principal:
        """Set the caller's display name in the profile mirror.

        The identity metadata is refreshed as a secondary effect when an
        identity provider is available.
        """
        actor = require_principal(principal)
        cleaned = _clean(name)
        if not cleaned:
            raise ValidationError("Name is required")
        if len(cleaned) > 120:
            raise ValidationError("Name is too long")
        # The resolved role never becomes stored profile data.
        if not self._store.update("profiles", {"name": cleaned}, eq={"id": actor.id}):
            self._store.insert(
                "profiles", {"id": actor.id, "email": actor.email, "name": cleaned, "role": DEFAULT_ROLE}
            )
        if self._identity is not None:
            run_secondary_effect(
                "identity_metadata",
                lambda: self._identity.update_principal(actor.id, metadata={"name": cleaned}),
                logger=logger,
            )
        return Principal(id=actor.id, email=actor.email, name=cleaned, role=actor.role)


# --- Admin listings -----------------------------------------------------------


class ListLearnersUseCase:
    def __init__(self, store: TableStore) -> None:
        self._store = store

    def execute(self, actor: Optional[Principal]) -> list[dict]:
        """Return non-admin profiles with their verified-week counts.

        Behavior:
            - Profiles without a stored role count as learners.
            - ``completed`` counts verified ``user_progress`` rows per learner;
              ``total`` is the number of published modules.

        Permissions:
            Caller must be an admin.
        """
        require_admin(actor)
        profiles = [
            p
            for p in self._store.select("profiles", columns="id, name, email, role", order_by="name")
            if str(p.get("role") or "").lower() != "admin"
        ]
        ids = [str(p["id"]) for p in profiles if p.get("id")]
        verified: dict[str, set] = {}
        if ids:
            rows = self._store.select(
                "user_progress", columns="user_id, week, verified", in_={"user_id": ids}, eq={"verified": True}
            )
            for row in rows:
                verified.setdefault(str(row.get("user_id")), set()).add(row.get("week"))
        total = self._store.count("weeks", eq={"is_published": True})
        return [
            {
                "id": p.get("id"),
                "name": p.get("name") or "",
                "email": p.get("email") or "",
                "role": p.get("role") or DEFAULT_ROLE,
                "completed": len(verified.get(str(p.get("id")), ())),
                "total": total,
            }
            for p in profiles
        ]


class AdminStatsUseCase:
    def __init__(self, store: TableStore) -> None:
        self._store = store

    def _count(self, label: str, table: str, **filters) -> int:
        try:
            return self._store.count(table, **filters)
        except Exception as exc:
            logger.warning("stats count '%s' failed: %s", label, type(exc).__name__)
            return 0

    def execute(self, actor: Optional[Principal]) -> dict:
        """Dashboard counters; individual count failures are reported as 0."""
        require_admin(actor)
        total_users = self._count("users", "profiles")
        return {
            "totalUsers": total_users,
            "accountsCreated": total_users,
            "pendingVerifications": self._count("pending", "proofs", eq={"status": "pending"}),
            "verifiedModules": self._count("verified", "proofs", eq={"status": "verified"}),
        }


__all__ = [
    "CreateAccountInput",
    "CreateAccountResult",
    "CreateAccountUseCase",
    "DeleteAccountUseCase",
    "UpdateEmailInput",
    "UpdateEmailUseCase",
    "UpdateDisplayNameUseCase",
    "ListLearnersUseCase",
    "AdminStatsUseCase",
]
