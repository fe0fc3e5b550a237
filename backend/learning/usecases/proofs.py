"""
Proof submission workflow: submit, decide and list proofs of completion.

Ordering:
    submit stores the file first and inserts the ``proofs`` row second. When
    the insert fails the stored object is removed again (best effort) so no
    orphan persists; the failure is re-raised as UpstreamError.

Joins:
    Proof listings are joined with ``profiles`` (by ``user_id``) and ``weeks``
    (by ``week_number``) in application code: read both sides, then map.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
import mimetypes
from typing import Any, Callable, List, Optional

from backend.datastore.ports import Row, TableStore
from backend.effects import EffectResult, run_secondary_effect
from backend.errors import CampTrackError, NotFoundError, UpstreamError, ValidationError
from backend.identity_access.domain import Principal
from backend.identity_access.guards import require_admin, require_principal
from backend.learning.progress import ProgressSummary, summarize_progress
from backend.learning.status import ProofStatus, decision_status, transition
from backend.storage.config import get_proofs_bucket
from backend.storage.keys import make_proof_key
from backend.storage.ports import ObjectStorage
from backend.storage.upload_policy import proof_policy

logger = logging.getLogger("camptrack.learning")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _week_title(week: Any, *candidates: Any) -> str:
    for value in candidates:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return f"Week {week}"


def _optional_week(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value.lstrip("-").isdigit():
            return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# --- Submit -------------------------------------------------------------------


@dataclass
class SubmitProofInput:
    week: Any
    week_title: Optional[str]
    filename: Optional[str]
    content_type: Optional[str]
    body: Optional[bytes]


class SubmitProofUseCase:
    def __init__(self, store: TableStore, storage: ObjectStorage, *, clock: Clock = _utcnow) -> None:
        self._store = store
        self._storage = storage
        self._clock = clock

    def execute(self, principal: Optional[Principal], req: SubmitProofInput) -> Row:
        """Store a proof file and record a ``pending`` submission.

        Behavior:
            - Rejects a missing/empty file or a non-positive week, and files
              violating the upload policy, before any storage write.
            - Stores the file under ``{user_id}/{week}-{epoch_ms}{.ext}``.
            - Inserts the ``proofs`` row with the object's public URL and a
              snapshot of the module title.
            - On insert failure removes the stored object, then raises
              UpstreamError.

        Permissions:
            Any authenticated principal, for itself only.
        """
        actor = require_principal(principal)
        week = _optional_week(req.week)
        body = req.body or b""
        if week is None or week <= 0 or not body:
            raise ValidationError("File and week number are required")
        mime = proof_policy().check(filename=req.filename, declared_mime=req.content_type, size=len(body))

        now = self._clock()
        bucket = get_proofs_bucket()
        key = make_proof_key(
            user_id=actor.id,
            week=week,
            filename=req.filename,
            epoch_ms=int(now.timestamp() * 1000),
            default_ext=mimetypes.guess_extension(mime) or "",
        )
        self._storage.put_object(bucket=bucket, key=key, body=body, content_type=mime)
        try:
            url = self._storage.public_url(bucket=bucket, key=key)
            row = self._store.insert(
                "proofs",
                {
                    "user_id": actor.id,
                    "week": week,
                    "module_title": _week_title(week, req.week_title),
                    "proof_url": url,
                    "status": ProofStatus.PENDING.value,
                    "submitted_at": now.isoformat(),
                },
            )
        except Exception as exc:
            run_secondary_effect(
                "remove_orphaned_upload",
                lambda: self._storage.delete_object(bucket=bucket, key=key),
                logger=logger,
            )
            message = exc.message if isinstance(exc, CampTrackError) else str(exc)
            logger.warning("proof insert failed user=%s week=%s: %s", actor.id, week, type(exc).__name__)
            raise UpstreamError(message or "Failed to save proof") from exc
        logger.info("proof submitted id=%s user=%s week=%s", row.get("id"), actor.id, week)
        return row


# --- Decide -------------------------------------------------------------------


@dataclass
class DecideProofInput:
    proof_id: Any
    approved: Any


@dataclass
class DecisionResult:
    proof_id: str
    status: ProofStatus
    changed: bool
    effects: List[EffectResult] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "success": True,
            "proofId": self.proof_id,
            "status": self.status.value,
            "progressUpdated": any(e.ok for e in self.effects if e.name == "progress_upsert"),
        }


class DecideProofUseCase:
    def __init__(self, store: TableStore) -> None:
        self._store = store

    def execute(self, actor: Optional[Principal], req: DecideProofInput) -> DecisionResult:
        """Verify or reject a proof.

        Behavior:
            - ``approved`` must be a real boolean; unknown ids raise
              NotFoundError (reported as 400).
            - Repeating a decision is idempotent; flipping a decided proof
              raises ``proof_already_decided``.
            - On approval upserts ``user_progress(user_id, week, verified)``
              keyed on ``user_id,week`` as a secondary effect.

        Permissions:
            Caller must be an admin.
        """
        require_admin(actor)
        proof_id = str(req.proof_id or "").strip()
        if not proof_id or not isinstance(req.approved, bool):
            raise ValidationError("proofId and approved flag are required")
        rows = self._store.select("proofs", columns="id, user_id, week, status", eq={"id": proof_id}, limit=1)
        if not rows:
            raise NotFoundError("Proof not found", status_code=400)
        proof = rows[0]
        current = ProofStatus.parse(proof.get("status"))
        target = transition(current, decision_status(req.approved))
        changed = target is not current
        if changed:
            self._store.update("proofs", {"status": target.value}, eq={"id": proof_id})
            logger.info("proof decided id=%s status=%s", proof_id, target.value)

        effects: List[EffectResult] = []
        if target is ProofStatus.VERIFIED and proof.get("user_id") and proof.get("week"):
            effects.append(
                run_secondary_effect(
                    "progress_upsert",
                    lambda: self._store.upsert(
                        "user_progress",
                        {"user_id": proof["user_id"], "week": proof["week"], "verified": True},
                        on_conflict="user_id,week",
                    ),
                    logger=logger,
                )
            )
        return DecisionResult(proof_id=proof_id, status=target, changed=changed, effects=effects)


# --- Queries ------------------------------------------------------------------


class ListProofsForAdminUseCase:
    def __init__(self, store: TableStore) -> None:
        self._store = store

    def execute(self, actor: Optional[Principal]) -> list[dict]:
        """All proofs newest first, each joined with the submitter's profile."""
        require_admin(actor)
        proofs = self._store.select("proofs", order_by="submitted_at", descending=True)
        user_ids = sorted({str(p["user_id"]) for p in proofs if p.get("user_id")})
        profiles: dict[str, Row] = {}
        if user_ids:
            for row in self._store.select("profiles", columns="id, name, email", in_={"id": user_ids}):
                profiles[str(row.get("id"))] = row
        items = []
        for p in proofs:
            profile = profiles.get(str(p.get("user_id")), {})
            items.append(
                {
                    "id": p.get("id"),
                    "userId": p.get("user_id"),
                    "userName": profile.get("name") or "User",
                    "userEmail": profile.get("email") or "",
                    "week": p.get("week"),
                    "moduleTitle": _week_title(p.get("week"), p.get("module_title")),
                    "proofUrl": p.get("proof_url"),
                    "status": ProofStatus.from_stored(p.get("status")).value,
                    "submittedAt": p.get("submitted_at"),
                }
            )
        return items


class ListProofsForUserUseCase:
    def __init__(self, store: TableStore) -> None:
        self._store = store

    def execute(self, principal: Optional[Principal]) -> list[dict]:
        """The caller's own proofs newest first with resolved week titles."""
        actor = require_principal(principal)
        proofs = self._store.select("proofs", eq={"user_id": actor.id}, order_by="submitted_at", descending=True)
        if not proofs:
            return []
        weeks = sorted({p["week"] for p in proofs if p.get("week") is not None})
        titles: dict[Any, Any] = {}
        if weeks:
            for row in self._store.select("weeks", columns="week_number, title", in_={"week_number": weeks}):
                titles[row.get("week_number")] = row.get("title")
        return [
            {
                "id": p.get("id"),
                "weekNumber": p.get("week"),
                "weekTitle": _week_title(p.get("week"), titles.get(p.get("week")), p.get("module_title")),
                "proofUrl": p.get("proof_url"),
                "status": ProofStatus.from_stored(p.get("status")).value,
                "submittedAt": p.get("submitted_at"),
                "reviewedAt": None,
            }
            for p in proofs
        ]


class GetProgressUseCase:
    def __init__(self, store: TableStore) -> None:
        self._store = store

    def execute(self, principal: Optional[Principal]) -> ProgressSummary:
        """Aggregate the caller's progress over published modules."""
        actor = require_principal(principal)
        proofs = self._store.select("proofs", columns="week, status, submitted_at", eq={"user_id": actor.id})
        modules = self._store.select(
            "weeks", columns="week_number, title, is_published", eq={"is_published": True}, order_by="week_number"
        )
        return summarize_progress(proofs, modules)


__all__ = [
    "SubmitProofInput",
    "SubmitProofUseCase",
    "DecideProofInput",
    "DecisionResult",
    "DecideProofUseCase",
    "ListProofsForAdminUseCase",
    "ListProofsForUserUseCase",
    "GetProgressUseCase",
]
