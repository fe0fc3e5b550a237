"""
Table-store port: the generic relational access used by every context.

Keep this small and framework-agnostic so tests can supply simple fakes.
Predicates are plain mappings:

- ``eq``  - column equals value
- ``neq`` - column differs from value
- ``in_`` - column is one of the given values

Implementations raise `backend.errors.UpstreamError` when the backend reports
a failure and `ConfigurationError` when no backend is wired.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from backend.errors import ConfigurationError

Row = dict


class TableStore(Protocol):
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
    ) -> list[Row]: ...

    def count(
        self,
        table: str,
        *,
        eq: Optional[Mapping[str, Any]] = None,
        neq: Optional[Mapping[str, Any]] = None,
    ) -> int: ...

    def insert(self, table: str, row: Mapping[str, Any]) -> Row: ...

    def update(self, table: str, values: Mapping[str, Any], *, eq: Mapping[str, Any]) -> list[Row]: ...

    def upsert(self, table: str, row: Mapping[str, Any], *, on_conflict: str) -> Row: ...

    def delete(self, table: str, *, eq: Mapping[str, Any]) -> list[Row]: ...


class NullTableStore:
    """Fallback store that signals the database backend is not configured."""

    def _fail(self) -> Any:
        raise ConfigurationError("database_not_configured")

    def select(self, table: str, **_: Any) -> list[Row]:  # noqa: D401
        return self._fail()

    def count(self, table: str, **_: Any) -> int:  # noqa: D401
        return self._fail()

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:  # noqa: D401
        return self._fail()

    def update(self, table: str, values: Mapping[str, Any], *, eq: Mapping[str, Any]) -> list[Row]:  # noqa: D401
        return self._fail()

    def upsert(self, table: str, row: Mapping[str, Any], *, on_conflict: str) -> Row:  # noqa: D401
        return self._fail()

    def delete(self, table: str, *, eq: Mapping[str, Any]) -> list[Row]:  # noqa: D401
        return self._fail()


__all__ = ["Row", "TableStore", "NullTableStore"]
