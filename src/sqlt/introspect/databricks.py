"""Unity Catalog introspection through a Databricks client."""

import json
from typing import Any, Optional

from sqlt.exceptions import ConfigError
from sqlt.introspect.base import Introspector, split_type
from sqlt.schema.table import Table
from sqlt.types import ConstraintType


class DatabricksIntrospector(Introspector):
    """Introspect Delta tables of one Unity Catalog schema.

    Table properties become `key=value` options and liquid clustering becomes
    a `CLUSTER BY (...)` option.
    """

    database = "Databricks"
    VALID_TABLE_TYPES = {"MANAGED", "EXTERNAL"}

    def __init__(
        self,
        client: Any,
        catalog: Optional[str] = None,
        db_schema: Optional[str] = None,
        **options: Any,
    ) -> None:
        if not catalog or not db_schema:
            raise ConfigError("Databricks introspection needs a catalog and db_schema")
        super().__init__(client, **options)
        self._catalog = catalog
        self._schema = db_schema

    def _row_get(self, row: Any, key: str, default: Any = None) -> Any:
        """Safely get a value from a row, supporting dict-like and pyspark Row."""
        if hasattr(row, "get"):
            return row.get(key, default)
        if hasattr(row, "asDict"):
            return row.asDict().get(key, default)
        try:
            return row[key]
        except (KeyError, IndexError, TypeError):
            return default

    def _fetch_table_names(self) -> list[str]:
        sql = f"""
            SELECT table_name
            FROM {self._catalog}.information_schema.tables
            WHERE table_schema = '{self._schema}'
        """
        rows = self._client.fetchall(sql)
        return [self._row_get(row, "table_name") for row in rows]

    def introspect_table(self, table_name: str) -> Optional[Table]:
        """Introspect a single table. Returns None if not found or not a Delta table."""
        table_info = self._fetch_table_info(table_name)
        if table_info is None or not self._is_valid_table(table_info):
            return None

        table = Table(name=table_name)
        self._add_fields(table)
        self._add_primary_key(table)
        self._add_check_constraints(table)

        if clustering := self._parse_clustering_columns(table_info):
            table.options([f"CLUSTER BY ({', '.join(clustering)})"])
        table.options([f"{k}={v}" for k, v in self._fetch_table_properties(table_name)])
        return table

    def _fetch_table_info(self, table_name: str) -> dict | None:
        """Fetch table metadata from information_schema.tables."""
        sql = f"""
            SELECT table_name, table_type, data_source_format, clustering_columns
            FROM {self._catalog}.information_schema.tables
            WHERE table_schema = '{self._schema}'
              AND table_name = '{table_name}'
        """
        for row in self._client.fetchall(sql):
            if self._row_get(row, "table_name") == table_name:
                return {
                    "table_type": self._row_get(row, "table_type"),
                    "data_source_format": self._row_get(row, "data_source_format"),
                    "clustering_columns": self._row_get(row, "clustering_columns"),
                }
        return None

    def _is_valid_table(self, table_info: dict) -> bool:
        """Check if table is a Delta table (not view, temp, streaming)."""
        table_type = (table_info.get("table_type") or "").upper()
        data_source_format = (table_info.get("data_source_format") or "").strip().upper()

        if table_type not in self.VALID_TABLE_TYPES:
            return False
        return not data_source_format or data_source_format == "DELTA"

    def _add_fields(self, table: Table) -> None:
        sql = f"""
            SELECT column_name, data_type, is_nullable, column_default, comment
            FROM {self._catalog}.information_schema.columns
            WHERE table_schema = '{self._schema}'
              AND table_name = '{table.name}'
            ORDER BY ordinal_position
        """
        for row in self._client.fetchall(sql):
            data_type, size = split_type(self._row_get(row, "data_type"))
            table.add_field(
                name=self._row_get(row, "column_name"),
                data_type=data_type.upper(),
                size=size,
                is_nullable=self._row_get(row, "is_nullable") != "NO",
                default_value=self._row_get(row, "column_default"),
                comments=self._row_get(row, "comment"),
            )

    def _add_primary_key(self, table: Table) -> None:
        sql = f"""
            SELECT tc.constraint_name, ccu.column_name
            FROM {self._catalog}.information_schema.table_constraints tc
            JOIN {self._catalog}.information_schema.constraint_column_usage ccu
              ON tc.constraint_name = ccu.constraint_name
            WHERE tc.table_schema = '{self._schema}'
              AND tc.table_name = '{table.name}'
              AND tc.constraint_type = 'PRIMARY KEY'
        """
        rows = self._client.fetchall(sql)
        if not rows:
            return
        pk = table.primary_key([self._row_get(row, "column_name") for row in rows])
        pk.name = self._row_get(rows[0], "constraint_name") or ""

    def _add_check_constraints(self, table: Table) -> None:
        sql = f"""
            SELECT tc.constraint_name, cc.check_clause
            FROM {self._catalog}.information_schema.table_constraints tc
            JOIN {self._catalog}.information_schema.check_constraints cc
              ON tc.constraint_name = cc.constraint_name
            WHERE tc.table_schema = '{self._schema}'
              AND tc.table_name = '{table.name}'
              AND tc.constraint_type = 'CHECK'
        """
        for row in self._client.fetchall(sql):
            table.add_constraint(
                name=self._row_get(row, "constraint_name"),
                type=ConstraintType.CHECK,
                expression=self._row_get(row, "check_clause"),
            )

    def _fetch_table_properties(self, table_name: str) -> list[tuple[str, str]]:
        """Fetch table properties using SHOW TBLPROPERTIES."""
        sql = f"SHOW TBLPROPERTIES `{self._catalog}`.`{self._schema}`.`{table_name}`"
        return [
            (self._row_get(row, "key"), self._row_get(row, "value"))
            for row in self._client.fetchall(sql)
        ]

    def _parse_clustering_columns(self, table_info: dict) -> list[str]:
        """Parse clustering columns from table info."""
        clustering = table_info.get("clustering_columns")
        if not clustering:
            return []

        if isinstance(clustering, list):
            return [str(c).strip() for c in clustering if str(c).strip()]

        text = str(clustering).strip()

        if text.startswith("[") and text.endswith("]"):
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                return [str(c).strip() for c in parsed if str(c).strip()]

        return [c.strip() for c in text.split(",") if c.strip()]
