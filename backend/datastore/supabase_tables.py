"""
Supabase (PostgREST) backed TableStore.

The adapter is duck-typed to avoid a hard dependency during testing. The client
is expected to expose ``.table(name)`` returning a PostgREST request builder
offering ``select/insert/update/upsert/delete``, the filters ``eq/neq/in_``,
``order``, ``limit`` and ``execute()`` returning an object with ``.data`` and
``.count`` (e.g. ``supabase.create_client(...)``).

Security:
- The caller must ensure the client is initialised with the Service Role key;
  authorisation is enforced by the use cases before any call reaches here.
"""
from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from backend.errors import UpstreamError

from .ports import Row


def _describe(exc: Exception) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message.strip():
        return message.strip()
    return str(exc) or exc.__class__.__name__


def _filter_value(value: Any) -> Any:
    # PostgREST expects lowercase boolean literals in filters.
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class SupabaseTableStore:
    """TableStore using a supabase client for PostgREST operations."""

    def __init__(self, client: Any):
        self._client = client

    # --- Helpers -----------------------------------------------------------

    def _builder(self, table: str) -> Any:
        return self._client.table(table)

    @staticmethod
    def _apply_filters(
        query: Any,
        *,
        eq: Optional[Mapping[str, Any]] = None,
        neq: Optional[Mapping[str, Any]] = None,
        in_: Optional[Mapping[str, Sequence[Any]]] = None,
    ) -> Any:
        for col, val in (eq or {}).items():
            query = query.eq(col, _filter_value(val))
        for col, val in (neq or {}).items():
            query = query.neq(col, _filter_value(val))
        for col, values in (in_ or {}).items():
            query = query.in_(col, [_filter_value(v) for v in values])
        return query

    @staticmethod
    def _execute(query: Any, *, table: str, op: str) -> Any:
        try:
            return query.execute()
        except Exception as exc:
            raise UpstreamError(f"{op} on {table} failed: {_describe(exc)}") from exc

    @staticmethod
    def _rows(response: Any) -> List[Row]:
        data = getattr(response, "data", None)
        if isinstance(data, list):
            return [dict(r) for r in data if isinstance(r, Mapping)]
        if isinstance(data, Mapping):
            return [dict(data)]
        return []

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
        if in_ and any(len(list(values)) == 0 for values in in_.values()):
            return []
        query = self._apply_filters(self._builder(table).select(columns), eq=eq, neq=neq, in_=in_)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.limit(int(limit))
        return self._rows(self._execute(query, table=table, op="select"))

    def count(
        self,
        table: str,
        *,
        eq: Optional[Mapping[str, Any]] = None,
        neq: Optional[Mapping[str, Any]] = None,
    ) -> int:
        query = self._apply_filters(self._builder(table).select("*", count="exact", head=True), eq=eq, neq=neq)
        response = self._execute(query, table=table, op="count")
        try:
            return int(getattr(response, "count", 0) or 0)
        except (TypeError, ValueError):
            return 0

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        response = self._execute(self._builder(table).insert(dict(row)), table=table, op="insert")
        rows = self._rows(response)
        if not rows:
            raise UpstreamError(f"insert on {table} returned no row")
        return rows[0]

    def update(self, table: str, values: Mapping[str, Any], *, eq: Mapping[str, Any]) -> List[Row]:
        query = self._apply_filters(self._builder(table).update(dict(values)), eq=eq)
        return self._rows(self._execute(query, table=table, op="update"))

    def upsert(self, table: str, row: Mapping[str, Any], *, on_conflict: str) -> Row:
        query = self._builder(table).upsert(dict(row), on_conflict=on_conflict)
        rows = self._rows(self._execute(query, table=table, op="upsert"))
        return rows[0] if rows else dict(row)

    def delete(self, table: str, *, eq: Mapping[str, Any]) -> List[Row]:
        query = self._apply_filters(self._builder(table).delete(), eq=eq)
        return self._rows(self._execute(query, table=table, op="delete"))


__all__ = ["SupabaseTableStore"]
