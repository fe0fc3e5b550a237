"""
In-memory TableStore for development and tests.

Why: Run the API without a Supabase project (``CAMPTRACK_BACKEND=memory``) and
give tests a deterministic store. Mirrors the few database behaviours the use
cases rely on: generated ``id`` columns, unique constraints and
``on_conflict`` upserts.

Not thread-safe and not durable; never enable in production.
"""
from __future__ import annotations

import copy
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from backend.errors import UpstreamError

from .ports import Row

# Mirrors the unique indexes of the hosted schema.
DEFAULT_UNIQUE_KEYS: Dict[str, List[Tuple[str, ...]]] = {
    "profiles": [("id",)],
    "weeks": [("id",), ("week_number",)],
    "proofs": [("id",)],
    "user_progress": [("user_id", "week")],
}


def _matches(
    row: Mapping[str, Any],
    eq: Optional[Mapping[str, Any]],
    neq: Optional[Mapping[str, Any]],
    in_: Optional[Mapping[str, Sequence[Any]]],
) -> bool:
    for col, val in (eq or {}).items():
        if row.get(col) != val:
            return False
    for col, val in (neq or {}).items():
        # PostgREST `neq` never matches NULL columns.
        if row.get(col) is None or row.get(col) == val:
            return False
    for col, values in (in_ or {}).items():
        if row.get(col) not in set(values):
            return False
    return True


def _project(row: Row, columns: str) -> Row:
    if columns.strip() == "*":
        return copy.deepcopy(row)
    wanted = [c.strip() for c in columns.split(",") if c.strip()]
    return {c: copy.deepcopy(row.get(c)) for c in wanted}


class InMemoryTableStore:
    def __init__(self, unique: Optional[Mapping[str, Iterable[Tuple[str, ...]]]] = None) -> None:
        self._tables: Dict[str, List[Row]] = {}
        source = DEFAULT_UNIQUE_KEYS if unique is None else unique
        self._unique: Dict[str, List[Tuple[str, ...]]] = {k: list(v) for k, v in source.items()}

    def rows(self, table: str) -> List[Row]:
        """Return a deep copy of all rows in `table` (test helper)."""
        return copy.deepcopy(self._tables.get(table, []))

    def _table(self, table: str) -> List[Row]:
        return self._tables.setdefault(table, [])

    def _check_unique(self, table: str, candidate: Mapping[str, Any], *, ignore: Optional[Row] = None) -> None:
        for key in self._unique.get(table, []):
            if any(candidate.get(col) is None for col in key):
                continue
            for existing in self._table(table):
                if existing is ignore:
                    continue
                if all(existing.get(col) == candidate.get(col) for col in key):
                    raise UpstreamError(
                        f"duplicate key value violates unique constraint on {table}({', '.join(key)})"
                    )

    # --- TableStore --------------------------------------------------------

    def select(
        self,
        table: str,
        *,
        columns: str = "*",
        eq: Optional[Mapping[str, Any]] = None,
        neq: Optional[Mapping[str, Any]] = None,
        in_: Optional[Mapping[str, Sequence[Any]]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        found = [r for r in self._table(table) if _matches(r, eq, neq, in_)]
        if order_by:
            present = [r for r in found if r.get(order_by) is not None]
            missing = [r for r in found if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            found = present + missing
        if limit is not None:
            found = found[: max(0, int(limit))]
        return [_project(r, columns) for r in found]

    def count(
        self,
        table: str,
        *,
        eq: Optional[Mapping[str, Any]] = None,
        neq: Optional[Mapping[str, Any]] = None,
    ) -> int:
        return sum(1 for r in self._table(table) if _matches(r, eq, neq, None))

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        record = copy.deepcopy(dict(row))
        record.setdefault("id", str(uuid.uuid4()))
        self._check_unique(table, record)
        self._table(table).append(record)
        return copy.deepcopy(record)

    def update(self, table: str, values: Mapping[str, Any], *, eq: Mapping[str, Any]) -> List[Row]:
        updated: List[Row] = []
        for record in self._table(table):
            if not _matches(record, eq, None, None):
                continue
            candidate = {**record, **copy.deepcopy(dict(values))}
            self._check_unique(table, candidate, ignore=record)
            record.update(copy.deepcopy(dict(values)))
            updated.append(copy.deepcopy(record))
        return updated

    def upsert(self, table: str, row: Mapping[str, Any], *, on_conflict: str) -> Row:
        keys = [c.strip() for c in on_conflict.split(",") if c.strip()]
        if not keys:
            raise UpstreamError("upsert requires on_conflict columns")
        for record in self._table(table):
            if all(record.get(k) == row.get(k) for k in keys):
                record.update(copy.deepcopy(dict(row)))
                return copy.deepcopy(record)
        return self.insert(table, row)

    def delete(self, table: str, *, eq: Mapping[str, Any]) -> List[Row]:
        rows = self._table(table)
        removed = [r for r in rows if _matches(r, eq, None, None)]
        self._tables[table] = [r for r in rows if not _matches(r, eq, None, None)]
        return copy.deepcopy(removed)


__all__ = ["InMemoryTableStore", "DEFAULT_UNIQUE_KEYS"]
