"""Base class for live-database introspectors."""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from sqlt.schema.table import Table

logger = logging.getLogger(__name__)

_TYPE_RE = re.compile(r"^\s*([^(]+?)\s*\(\s*([\d\s,]+)\s*\)\s*(.*)$")


@runtime_checkable
class SQLClient(Protocol):
    """Protocol for the SQL client used by introspectors."""

    driver_name: str

    def fetchall(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> list[dict[str, Any]]: ...

    def close(self) -> None: ...


def split_type(declared: Optional[str]) -> tuple[str, list[int]]:
    """Split a declared type like "VARCHAR(255)" into ("VARCHAR", [255])."""
    if not declared:
        return "", []
    match = _TYPE_RE.match(declared)
    if not match:
        return declared.strip(), []
    base, sizes, suffix = match.groups()
    data_type = f"{base} {suffix}".strip() if suffix else base
    return data_type, [int(s) for s in sizes.split(",") if s.strip()]


def group_rows(rows: list[dict[str, Any]], key: str) -> dict[Any, list[dict[str, Any]]]:
    """Group rows by a column, keeping first-seen order."""
    groups: dict[Any, list[dict[str, Any]]] = {}
    for row in rows:
        groups.setdefault(row[key], []).append(row)
    return groups


class Introspector(ABC):
    """Build unattached Table objects from a live database.

    Tables are returned rather than registered so the caller can add them to
    a schema only once the whole database was read successfully.
    """

    database: str = ""

    def __init__(self, client: SQLClient, **options: Any) -> None:
        self._client = client
        self._options = options

    def introspect_tables(self) -> list[Table]:
        """Introspect every table the connection can see."""
        tables = []
        for name in self._fetch_table_names():
            table = self.introspect_table(name)
            if table is None:
                logger.debug(f"Skipping {name}")
                continue
            logger.debug(f"Introspected {name} ({len(table.field_names())} fields)")
            tables.append(table)
        return tables

    @abstractmethod
    def _fetch_table_names(self) -> list[str]:
        """List the names of tables to introspect."""

    @abstractmethod
    def introspect_table(self, table_name: str) -> Optional[Table]:
        """Introspect a single table. Returns None if it should be skipped."""
