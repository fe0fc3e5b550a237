"""
Secondary effects executed after a primary write has committed.

Why:
    Profile mirroring, progress upserts and welcome emails must never decide
    whether an operation succeeded. Instead of nesting try/except blocks in
    every use case, each side effect runs through `run_secondary_effect` and
    yields a tagged result the caller can report or ignore.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class EffectResult:
    name: str
    ok: bool
    error: Optional[str] = None
    value: Any = None

    def as_dict(self) -> dict:
        return {"name": self.name, "ok": self.ok, "error": self.error}


def run_secondary_effect(name: str, action: Callable[[], Any], *, logger: logging.Logger) -> EffectResult:
    """Run `action` and capture its outcome without raising.

    Behavior:
        - Returns ``EffectResult(ok=True, value=...)`` on success.
        - Logs a warning with the exception class and message on failure and
          returns ``EffectResult(ok=False, error=...)``.
    """
    try:
        value = action()
    except Exception as exc:
        message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
        logger.warning("secondary effect '%s' failed: %s: %s", name, exc.__class__.__name__, message)
        return EffectResult(name=name, ok=False, error=message)
    return EffectResult(name=name, ok=True, value=value)


__all__ = ["EffectResult", "run_secondary_effect"]
