"""MySQL introspection."""

from typing import Any

from sqlt.introspect.information_schema import InformationSchemaIntrospector
from sqlt.schema.table import Table
from sqlt.types import IndexType


class MySQLIntrospector(InformationSchemaIntrospector):
    """Introspect a MySQL database; the schema defaults to the current database."""

    database = "MySQL"
    CURRENT_SCHEMA_SQL = "SELECT DATABASE() AS name"

    def _fetch_foreign_key_rows(self, table_name: str) -> list[dict[str, Any]]:
        return self._client.fetchall(
            """
            SELECT kcu.constraint_name, kcu.column_name,
                   kcu.referenced_table_name, kcu.referenced_column_name,
                   rc.update_rule, rc.delete_rule
            FROM information_schema.key_column_usage kcu
            JOIN information_schema.referential_constraints rc
              ON rc.constraint_schema = kcu.constraint_schema
             AND rc.constraint_name = kcu.constraint_name
            WHERE kcu.table_schema = %s
              AND kcu.table_name = %s
              AND kcu.referenced_table_name IS NOT NULL
            ORDER BY kcu.constraint_name, kcu.ordinal_position
            """,
            (self.db_schema, table_name),
        )

    def _fetch_index_rows(self, table_name: str) -> list[dict[str, Any]]:
        return self._client.fetchall(
            """
            SELECT index_name, non_unique, index_type, column_name
            FROM information_schema.statistics
            WHERE table_schema = %s
              AND table_name = %s
            ORDER BY index_name, seq_in_index
            """,
            (self.db_schema, table_name),
        )

    def _index_type(self, row: dict[str, Any]) -> IndexType:
        index_type = (row.get("index_type") or "").upper()
        if index_type in ("FULLTEXT", "SPATIAL"):
            return IndexType(index_type)
        return IndexType.NORMAL if int(row["non_unique"]) else IndexType.UNIQUE

    def _add_options(self, table: Table) -> None:
        rows = self._client.fetchall(
            """
            SELECT engine, table_collation
            FROM information_schema.tables
            WHERE table_schema = %s
              AND table_name = %s
            """,
            (self.db_schema, table.name),
        )
        if not rows:
            return
        if engine := rows[0].get("engine"):
            table.options(f"ENGINE={engine}")
        if collation := rows[0].get("table_collation"):
            table.options(f"COLLATE={collation}")
