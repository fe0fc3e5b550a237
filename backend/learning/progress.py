"""
Progress aggregation over a learner's proofs and the published catalog.

Pure functions only: callers load rows, this module derives per-week flags
and counts. A week counts as *completed* once any proof is pending or verified
and as *verified* once any proof is verified.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional

from backend.learning.status import ProofStatus


@dataclass(frozen=True)
class WeekProgress:
    week_number: int
    title: str
    completed: bool
    verified: bool
    latest_status: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "weekNumber": self.week_number,
            "title": self.title,
            "completed": self.completed,
            "verified": self.verified,
            "latestStatus": self.latest_status,
        }


@dataclass(frozen=True)
class ProgressSummary:
    weeks: List[WeekProgress] = field(default_factory=list)
    completed_count: int = 0
    submitted_count: int = 0
    total_count: int = 0

    @property
    def percent(self) -> int:
        if self.total_count <= 0:
            return 0
        # Rounds half up.
        return (self.completed_count * 200 + self.total_count) // (2 * self.total_count)

    def as_dict(self) -> dict:
        return {
            "weeks": [w.as_dict() for w in self.weeks],
            "completedCount": self.completed_count,
            "submittedCount": self.submitted_count,
            "totalCount": self.total_count,
            "percent": self.percent,
        }


def _week_of(row: Mapping[str, Any]) -> Optional[int]:
    try:
        return int(row.get("week"))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def summarize_progress(
    submissions: Iterable[Mapping[str, Any]],
    modules: Iterable[Mapping[str, Any]],
) -> ProgressSummary:
    """Derive per-week progress for published modules.

    Parameters:
        submissions: proof rows of a single learner (``week``, ``status``,
            optional ``submitted_at``).
        modules: module rows (``week_number``, ``title``, ``is_published``).

    Behavior:
        - Unpublished modules and proofs for unknown weeks are ignored.
        - ``completed_count`` counts verified weeks; ``total_count`` counts
          published modules.
        - ``latest_status`` is the status of the newest proof per week.
    """
    by_week: dict[int, list[Mapping[str, Any]]] = {}
    for row in submissions:
        week = _week_of(row)
        if week is not None:
            by_week.setdefault(week, []).append(row)

    published = sorted(
        (m for m in modules if m.get("is_published")),
        key=lambda m: int(m.get("week_number") or 0),
    )
    weeks: List[WeekProgress] = []
    for module in published:
        number = int(module.get("week_number") or 0)
        rows = by_week.get(number, [])
        statuses = {ProofStatus.from_stored(r.get("status")) for r in rows}
        latest = max(rows, key=lambda r: str(r.get("submitted_at") or ""), default=None)
        weeks.append(
            WeekProgress(
                week_number=number,
                title=str(module.get("title") or f"Week {number}"),
                completed=bool(statuses & {ProofStatus.PENDING, ProofStatus.VERIFIED}),
                verified=ProofStatus.VERIFIED in statuses,
                latest_status=ProofStatus.from_stored(latest.get("status")).value if latest is not None else None,
            )
        )
    return ProgressSummary(
        weeks=weeks,
        completed_count=sum(1 for w in weeks if w.verified),
        submitted_count=sum(1 for w in weeks if w.completed),
        total_count=len(weeks),
    )


__all__ = ["WeekProgress", "ProgressSummary", "summarize_progress"]
