"""
Proof status values and the allowed transitions between them.

``pending`` is the only initial state. Admin decisions move a proof to
``verified`` or ``rejected``; repeating the same decision is a no-op and no
transition ever leads back to ``pending``.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from backend.errors import ValidationError

logger = logging.getLogger("camptrack.learning")


class ProofStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: Any) -> "ProofStatus":
        """Return the status for a stored value; missing values read as pending."""
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            raise ValidationError(f"invalid_status: {raw}")

    @classmethod
    def from_stored(cls, value: Any) -> "ProofStatus":
        """Lenient read for listings and progress; unknown values read as pending."""
        try:
            return cls.parse(value)
        except ValidationError:
            logger.warning("Unknown stored proof status %r; treating as pending", value)
            return cls.PENDING


ALLOWED_TRANSITIONS: dict[ProofStatus, frozenset[ProofStatus]] = {
    ProofStatus.PENDING: frozenset({ProofStatus.VERIFIED, ProofStatus.REJECTED}),
    ProofStatus.VERIFIED: frozenset({ProofStatus.VERIFIED}),
    ProofStatus.REJECTED: frozenset({ProofStatus.REJECTED}),
}


def decision_status(approved: bool) -> ProofStatus:
    return ProofStatus.VERIFIED if approved else ProofStatus.REJECTED


def transition(current: ProofStatus, target: ProofStatus) -> ProofStatus:
    """Validate ``current -> target`` and return the target.

    Raises:
        ValidationError: ``proof_already_decided`` for cross transitions out
        of a decided state, ``invalid_transition`` for anything else.
    """
    if target in ALLOWED_TRANSITIONS[current]:
        return target
    if current is not ProofStatus.PENDING:
        raise ValidationError("proof_already_decided")
    raise ValidationError("invalid_transition")


__all__ = ["ProofStatus", "ALLOWED_TRANSITIONS", "decision_status", "transition"]
