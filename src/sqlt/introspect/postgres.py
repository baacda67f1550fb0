"""PostgreSQL introspection."""

from typing import Any

from sqlt.introspect.information_schema import InformationSchemaIntrospector
from sqlt.schema.table import Table
from sqlt.types import ConstraintType


class PostgresIntrospector(InformationSchemaIntrospector):
    """Introspect a PostgreSQL schema; defaults to current_schema()."""

    database = "PostgreSQL"
    CURRENT_SCHEMA_SQL = "SELECT current_schema() AS name"

    def _fetch_foreign_key_rows(self, table_name: str) -> list[dict[str, Any]]:
        return self._client.fetchall(
            """
            SELECT tc.constraint_name, kcu.column_name,
                   ccu.table_name AS referenced_table_name,
                   ccu.column_name AS referenced_column_name,
                   rc.update_rule, rc.delete_rule
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
              ON tc.constraint_name = kcu.constraint_name
             AND tc.table_schema = kcu.table_schema
            JOIN information_schema.constraint_column_usage ccu
              ON ccu.constraint_name = tc.constraint_name
             AND ccu.constraint_schema = tc.table_schema
            JOIN information_schema.referential_constraints rc
              ON rc.constraint_name = tc.constraint_name
             AND rc.constraint_schema = tc.table_schema
            WHERE tc.constraint_type = 'FOREIGN KEY'
              AND tc.table_schema = %s
              AND tc.table_name = %s
            ORDER BY tc.constraint_name, kcu.ordinal_position
            """,
            (self.db_schema, table_name),
        )

    def _fetch_index_rows(self, table_name: str) -> list[dict[str, Any]]:
        return self._client.fetchall(
            """
            SELECT i.relname AS index_name, ix.indisunique AS is_unique,
                   a.attname AS column_name
            FROM pg_catalog.pg_class t
            JOIN pg_catalog.pg_namespace n ON n.oid = t.relnamespace
            JOIN pg_catalog.pg_index ix ON ix.indrelid = t.oid
            JOIN pg_catalog.pg_class i ON i.oid = ix.indexrelid
            JOIN pg_catalog.pg_attribute a
              ON a.attrelid = t.oid AND a.attnum = ANY(ix.indkey)
            WHERE n.nspname = %s
              AND t.relname = %s
              AND NOT ix.indisprimary
            ORDER BY i.relname, array_position(ix.indkey::smallint[], a.attnum)
            """,
            (self.db_schema, table_name),
        )

    def _add_check_constraints(self, table: Table) -> None:
        rows = self._client.fetchall(
            """
            SELECT tc.constraint_name, cc.check_clause
            FROM information_schema.table_constraints tc
            JOIN information_schema.check_constraints cc
              ON cc.constraint_name = tc.constraint_name
             AND cc.constraint_schema = tc.table_schema
            WHERE tc.constraint_type = 'CHECK'
              AND tc.table_schema = %s
              AND tc.table_name = %s
            ORDER BY tc.constraint_name
            """,
            (self.db_schema, table.name),
        )
        for row in rows:
            # NOT NULL columns show up here as implicit checks
            if row["constraint_name"].endswith("_not_null"):
                continue
            table.add_constraint(
                name=row["constraint_name"],
                type=ConstraintType.CHECK,
                expression=row["check_clause"],
            )
