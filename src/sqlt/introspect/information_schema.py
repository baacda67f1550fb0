"""Shared introspection over the SQL-standard information_schema views."""

from abc import abstractmethod
from typing import Any, Optional

from sqlt.introspect.base import Introspector, group_rows
from sqlt.schema.table import Table
from sqlt.types import ConstraintType, IndexType

NUMERIC_TYPES = {"decimal", "numeric"}


class InformationSchemaIntrospector(Introspector):
    """Introspect one database schema (namespace) through information_schema.

    Subclasses supply the query for the current schema name, foreign keys and
    indices, which the standard views do not describe portably.

    Queries use the `%s` parameter style shared by psycopg2 and pymysql.
    """

    CURRENT_SCHEMA_SQL = ""

    def __init__(self, client: Any, db_schema: Optional[str] = None, **options: Any):
        super().__init__(client, **options)
        self._db_schema = db_schema

    @property
    def db_schema(self) -> str:
        if self._db_schema is None:
            rows = self._client.fetchall(self.CURRENT_SCHEMA_SQL)
            self._db_schema = (rows[0]["name"] or "") if rows else ""
        return self._db_schema

    def _fetch_table_names(self) -> list[str]:
        rows = self._client.fetchall(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = %s
              AND table_type = 'BASE TABLE'
            ORDER BY table_name
            """,
            (self.db_schema,),
        )
        return [row["table_name"] for row in rows]

    def introspect_table(self, table_name: str) -> Optional[Table]:
        table = Table(name=table_name)
        self._add_fields(table)
        constraint_names = self._add_key_constraints(table)
        self._add_foreign_keys(table)
        self._add_check_constraints(table)
        self._add_indices(table, constraint_names)
        self._add_options(table)
        return table

    def _add_fields(self, table: Table) -> None:
        rows = self._client.fetchall(
            """
            SELECT column_name, data_type, character_maximum_length,
                   numeric_precision, numeric_scale, is_nullable, column_default
            FROM information_schema.columns
            WHERE table_schema = %s
              AND table_name = %s
            ORDER BY ordinal_position
            """,
            (self.db_schema, table.name),
        )
        for row in rows:
            table.add_field(
                name=row["column_name"],
                data_type=row["data_type"],
                size=self._column_size(row),
                is_nullable=row["is_nullable"] != "NO",
                default_value=self._column_default(row),
            )

    def _column_size(self, row: dict[str, Any]) -> list[int]:
        if row.get("character_maximum_length"):
            return [int(row["character_maximum_length"])]
        if (row["data_type"] or "").lower() in NUMERIC_TYPES and row.get(
            "numeric_precision"
        ):
            return [int(row["numeric_precision"]), int(row.get("numeric_scale") or 0)]
        return []

    def _column_default(self, row: dict[str, Any]) -> Optional[str]:
        default = row.get("column_default")
        return None if default is None else str(default)

    def _add_key_constraints(self, table: Table) -> set[str]:
        """Add PRIMARY KEY and UNIQUE constraints; return their names."""
        rows = self._client.fetchall(
            """
            SELECT tc.constraint_name, tc.constraint_type, kcu.column_name
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
              ON tc.constraint_name = kcu.constraint_name
             AND tc.table_schema = kcu.table_schema
             AND tc.table_name = kcu.table_name
            WHERE tc.table_schema = %s
              AND tc.table_name = %s
              AND tc.constraint_type IN ('PRIMARY KEY', 'UNIQUE')
            ORDER BY tc.constraint_name, kcu.ordinal_position
            """,
            (self.db_schema, table.name),
        )
        groups = group_rows(rows, "constraint_name")
        for name, key_rows in groups.items():
            columns = [r["column_name"] for r in key_rows]
            if key_rows[0]["constraint_type"] == "PRIMARY KEY":
                pk = table.primary_key(columns)
                pk.name = pk.name or name
            else:
                table.add_constraint(
                    name=name, type=ConstraintType.UNIQUE, fields=columns
                )
        return set(groups)

    def _add_foreign_keys(self, table: Table) -> None:
        rows = self._fetch_foreign_key_rows(table.name)
        for name, fk_rows in group_rows(rows, "constraint_name").items():
            fields: list[str] = []
            reference_fields: list[str] = []
            for r in fk_rows:
                if r["column_name"] not in fields:
                    fields.append(r["column_name"])
                if r["referenced_column_name"] not in reference_fields:
                    reference_fields.append(r["referenced_column_name"])
            first = fk_rows[0]
            table.add_constraint(
                name=name,
                type=ConstraintType.FOREIGN_KEY,
                fields=fields,
                reference_table=first["referenced_table_name"],
                reference_fields=reference_fields,
                on_update=first.get("update_rule") or "",
                on_delete=first.get("delete_rule") or "",
            )

    def _add_check_constraints(self, table: Table) -> None:
        """Add CHECK constraints. Not every vendor exposes them."""

    def _add_indices(self, table: Table, constraint_names: set[str]) -> None:
        rows = self._fetch_index_rows(table.name)
        for name, index_rows in group_rows(rows, "index_name").items():
            if name in constraint_names:
                continue
            table.add_index(
                name=name,
                type=self._index_type(index_rows[0]),
                fields=[r["column_name"] for r in index_rows],
            )

    def _index_type(self, row: dict[str, Any]) -> IndexType:
        return IndexType.UNIQUE if row.get("is_unique") else IndexType.NORMAL

    def _add_options(self, table: Table) -> None:
        """Add vendor table options. Nothing by default."""

    @abstractmethod
    def _fetch_foreign_key_rows(self, table_name: str) -> list[dict[str, Any]]:
        """Rows of constraint_name, column_name, referenced_table_name,
        referenced_column_name, update_rule, delete_rule in key order."""

    @abstractmethod
    def _fetch_index_rows(self, table_name: str) -> list[dict[str, Any]]:
        """Rows of index_name, is_unique, column_name in column order."""
