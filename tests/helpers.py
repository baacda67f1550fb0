"""Shared test helpers for sqlt tests."""

from unittest.mock import MagicMock

from sqlt.schema.registry import Schema
from sqlt.schema.table import Table


class FakeRow:
    """Mock row from DatabricksClient.fetchall().

    Supports dict-like access via __getitem__, .get(), and .asDict().
    """

    def __init__(self, data: dict):
        self._data = data

    def __getitem__(self, key):
        return self._data[key]

    def get(self, key, default=None):
        return self._data.get(key, default)

    def asDict(self):
        return self._data


class FakeSQLClient:
    """SQL client answering queries from canned rows.

    `responses` maps a lowercase SQL fragment to the rows returned for any
    query containing it; the first matching fragment wins. Queries are
    recorded with their params.
    """

    def __init__(self, driver_name: str, responses: list[tuple[str, list[dict]]]):
        self.driver_name = driver_name
        self.responses = responses
        self.queries: list[tuple[str, object]] = []
        self.closed = False

    def fetchall(self, sql, params=None):
        self.queries.append((sql, params))
        sql_lower = sql.lower()
        for fragment, rows in self.responses:
            if fragment in sql_lower:
                return [dict(r) for r in rows]
        return []

    def close(self):
        self.closed = True


def make_users_table(schema: Schema | None = None) -> Table:
    """Create a users table with id, email and name plus a primary key on id.

    The table is registered in schema when one is given.
    """
    table = Table(name="users")
    table.add_field(name="id", data_type="integer", size=11, is_nullable=False)
    table.add_field(name="email", data_type="varchar", size=255, is_nullable=False)
    table.add_field(name="name", data_type="varchar", size=100)
    table.primary_key("id")
    if schema is not None:
        schema.add_table(table)
    return table


def make_mock_databricks_client(
    tables_data: list[dict] | None = None,
    columns_data: dict[str, list[dict]] | None = None,
    pk_constraints_data: dict[str, list[dict]] | None = None,
    check_constraints_data: dict[str, list[dict]] | None = None,
    table_properties_data: dict[str, list[dict]] | None = None,
) -> MagicMock:
    """Create a mock DatabricksClient with test data.

    Args:
        tables_data: List of table metadata dicts
        columns_data: Dict mapping table_name -> list of column dicts
        pk_constraints_data: Dict mapping table_name -> list of PK constraint dicts
        check_constraints_data: Dict mapping table_name -> list of CHECK constraint dicts
        table_properties_data: Dict mapping table_name -> list of property dicts
    """
    client = MagicMock()
    client.driver_name = "databricks"
    columns_data = columns_data or {}
    pk_constraints_data = pk_constraints_data or {}
    check_constraints_data = check_constraints_data or {}
    table_properties_data = table_properties_data or {}

    def fetchall_side_effect(sql: str, params=None):
        sql_lower = sql.lower()
        if "information_schema.tables" in sql_lower:
            for table in tables_data or []:
                if f"'{table['table_name']}'" in sql_lower:
                    return [FakeRow(table)]
            return [FakeRow(t) for t in (tables_data or [])]

        if "information_schema.columns" in sql_lower:
            for table_name, cols in columns_data.items():
                if f"'{table_name}'" in sql_lower:
                    return [FakeRow(c) for c in cols]
            return []

        if "constraint_column_usage" in sql_lower:
            for table_name, pks in pk_constraints_data.items():
                if f"'{table_name}'" in sql_lower:
                    return [FakeRow(pk) for pk in pks]
            return []

        if "table_constraints" in sql_lower and "check" in sql_lower:
            for table_name, checks in check_constraints_data.items():
                if f"'{table_name}'" in sql_lower:
                    return [FakeRow(c) for c in checks]
            return []

        if "tblproperties" in sql_lower:
            for table_name, props in table_properties_data.items():
                if f"`{table_name}`" in sql_lower:
                    return [FakeRow(p) for p in props]
            return []

        return []

    client.fetchall.side_effect = fetchall_side_effect
    return client
