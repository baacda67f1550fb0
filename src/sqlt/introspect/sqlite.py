"""SQLite introspection through sqlite_master and PRAGMA queries."""

import logging
from typing import Any, Optional

from sqlt.introspect.base import Introspector, group_rows, split_type
from sqlt.schema.table import Table
from sqlt.types import ConstraintType, IndexType

logger = logging.getLogger(__name__)

# Columns declared without a type get BLOB affinity.
NO_TYPE_AFFINITY = "BLOB"


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


class SQLiteIntrospector(Introspector):
    """Introspect a SQLite database.

    PRAGMA statements take no bind parameters, so identifiers are quoted.
    """

    database = "SQLite"

    def _fetch_table_names(self) -> list[str]:
        rows = self._client.fetchall(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
        )
        return [row["name"] for row in rows]

    def introspect_table(self, table_name: str) -> Optional[Table]:
        table = Table(name=table_name)
        quoted = _quote(table_name)

        pk_columns = self._add_fields(table, quoted)
        if pk_columns:
            table.primary_key(pk_columns)
            if len(pk_columns) == 1:
                pk_field = table.get_field(pk_columns[0])
                # AUTOINCREMENT is only allowed on an INTEGER PRIMARY KEY
                if pk_field.normalized_type == "INTEGER" and self._has_autoincrement(
                    table_name
                ):
                    pk_field.is_auto_increment = True

        self._add_indices(table, quoted)
        self._add_foreign_keys(table, quoted)
        return table

    def _add_fields(self, table: Table, quoted: str) -> list[str]:
        """Add fields and return the primary key columns in key order."""
        pk: list[tuple[int, str]] = []
        for row in self._client.fetchall(f"PRAGMA table_info({quoted})"):
            data_type, size = split_type(row["type"])
            data_type = data_type or NO_TYPE_AFFINITY
            table.add_field(
                name=row["name"],
                data_type=data_type,
                size=size,
                is_nullable=not row["notnull"],
                default_value=row["dflt_value"],
            )
            if row["pk"]:
                pk.append((row["pk"], row["name"]))
        return [name for _, name in sorted(pk)]

    def _has_autoincrement(self, table_name: str) -> bool:
        rows = self._client.fetchall(
            "SELECT sql FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table_name,),
        )
        create_sql = (rows[0]["sql"] or "") if rows else ""
        return "AUTOINCREMENT" in create_sql.upper()

    def _add_indices(self, table: Table, quoted: str) -> None:
        for row in self._client.fetchall(f"PRAGMA index_list({quoted})"):
            origin = row.get("origin", "c")
            if origin == "pk":
                continue

            columns = self._index_columns(row["name"])
            if None in columns:
                logger.debug(f"Skipping expression index {row['name']}")
                continue
            if origin == "u":
                table.add_constraint(
                    name=row["name"], type=ConstraintType.UNIQUE, fields=columns
                )
            else:
                table.add_index(
                    name=row["name"],
                    type=IndexType.UNIQUE if row["unique"] else IndexType.NORMAL,
                    fields=columns,
                )

    def _index_columns(self, index_name: str) -> list[Optional[str]]:
        """Indexed column names in key order; None for an expression column."""
        rows = self._client.fetchall(f"PRAGMA index_info({_quote(index_name)})")
        return [row["name"] for row in sorted(rows, key=lambda r: r["seqno"])]

    def _add_foreign_keys(self, table: Table, quoted: str) -> None:
        rows = self._client.fetchall(f"PRAGMA foreign_key_list({quoted})")
        for fk_rows in group_rows(rows, "id").values():
            fk_rows.sort(key=lambda r: r["seq"])
            first: dict[str, Any] = fk_rows[0]
            table.add_constraint(
                type=ConstraintType.FOREIGN_KEY,
                fields=[r["from"] for r in fk_rows],
                reference_table=first["table"],
                reference_fields=[r["to"] for r in fk_rows if r["to"]],
                on_update=first.get("on_update") or "",
                on_delete=first.get("on_delete") or "",
                match_type=first.get("match") or "",
            )
