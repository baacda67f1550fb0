"""Schema: the registry of tables for one translation run."""

from __future__ import annotations

from typing import Any, Optional

from sqlt.exceptions import (
    EmptyCollectionError,
    MissingNameError,
    NameConflictError,
    NotFoundError,
    SchemaTypeError,
)
from sqlt.schema.models import ValidityMixin
from sqlt.schema.table import Table

__all__ = ["Schema"]


class Schema(ValidityMixin):
    """Complete schema definition.

    Tables are kept in registration order, keyed by their case-sensitive name.
    """

    def __init__(self, name: str = "", database: str = "") -> None:
        self.name = name
        self.database = database
        self._tables: dict[str, Table] = {}

    def __repr__(self) -> str:
        return f"Schema(name={self.name!r}, tables={list(self._tables)!r})"

    def add_table(self, table: Optional[Table] = None, /, **params: Any) -> Table:
        """Register a table, either an existing Table or built from keyword params.

            schema.add_table(name="users")
            schema.add_table(Table(name="orders"))

        Raises:
            MissingNameError: If the table has no name.
            NameConflictError: If another table already has that name.
            SchemaTypeError: If both shapes or a non-Table object are given.
        """
        if table is None:
            table = Table(schema=self, **params)
        elif params:
            raise SchemaTypeError("Pass either a Table or keyword parameters, not both")
        elif not isinstance(table, Table):
            raise SchemaTypeError(f"Not a Table object: {table!r}")

        if not table.name:
            raise MissingNameError("No table name")
        existing = self._tables.get(table.name)
        if existing is not None and existing is not table:
            raise NameConflictError(table.name)

        table.set_schema(self)
        self._tables[table.name] = table
        return table

    def get_table(self, name: str) -> Optional[Table]:
        """Get a table by name."""
        return self._tables.get(name)

    def get_tables(self) -> list[Table]:
        """Return all tables in registration order.

        Raises:
            EmptyCollectionError: If the schema has no tables.
        """
        if not self._tables:
            raise EmptyCollectionError("tables")
        return list(self._tables.values())

    def table_names(self) -> list[str]:
        """Get all table names in registration order."""
        return list(self._tables)

    def drop_table(self, name: str) -> Table:
        """Unregister a table and return it, detached from this schema.

        Raises:
            NotFoundError: If no table has that name.
        """
        try:
            table = self._tables.pop(name)
        except KeyError:
            raise NotFoundError(f'Table "{name}" does not exist') from None
        table.detach()
        return table

    def reindex_table(self, table: Table, old_name: str) -> None:
        """Move a renamed table to its new key, keeping its position."""
        if self._tables.get(old_name) is not table:
            return
        self._tables = {
            (table.name if key == old_name else key): value
            for key, value in self._tables.items()
        }

    def validate(self) -> None:
        """Validate every table, raising the first error found."""
        for table in self.get_tables():
            table.validate()
