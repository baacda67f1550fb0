"""Populate a Schema by querying a live database.

The vendor is worked out from the connection's driver and exactly one
introspector handles it:

    import sqlite3
    from sqlt.schema import Schema
    from sqlt.introspect import introspect_database

    schema = Schema()
    introspect_database(schema, sqlite3.connect("shop.db"))

or, letting sqlt open the connection:

    introspect_database(schema, dsn="postgresql://app@db/shop", password="...")
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlt.client import DBAPIClient, connect
from sqlt.config import Config
from sqlt.exceptions import (
    ConfigError,
    IntrospectionError,
    NameConflictError,
    SqltError,
    UnsupportedDatabaseError,
)
from sqlt.introspect.base import Introspector, SQLClient
from sqlt.introspect.databricks import DatabricksIntrospector
from sqlt.introspect.mysql import MySQLIntrospector
from sqlt.introspect.postgres import PostgresIntrospector
from sqlt.introspect.sqlite import SQLiteIntrospector
from sqlt.schema.registry import Schema
from sqlt.schema.table import Table

__all__ = [
    "DRIVERS",
    "Introspector",
    "SQLClient",
    "get_introspector",
    "introspect_database",
    "pull_schema",
]

logger = logging.getLogger(__name__)

# Driver name (lowercase) -> introspector
DRIVERS: dict[str, type[Introspector]] = {
    "sqlite3": SQLiteIntrospector,
    "psycopg2": PostgresIntrospector,
    "pymysql": MySQLIntrospector,
    "databricks": DatabricksIntrospector,
}


def get_introspector(driver: str) -> type[Introspector]:
    """Look up the introspector for a driver name, ignoring case.

    Raises:
        UnsupportedDatabaseError: If the driver is not supported.
    """
    introspector_cls = DRIVERS.get(driver.lower())
    if introspector_cls is None:
        raise UnsupportedDatabaseError(driver)
    return introspector_cls


def introspect_database(
    schema: Schema,
    connection: Any = None,
    *,
    dsn: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    **options: Any,
) -> list[Table]:
    """Introspect a database and register its tables in schema.

    Args:
        schema: Schema to populate.
        connection: An open DB-API connection or SQL client. Opened from dsn
            when not given.
        dsn: Connection string, see sqlt.client.connect.
        user: User name overriding the one in dsn.
        password: Password overriding the one in dsn.
        **options: Passed to the vendor introspector (db_schema, catalog).

    Returns:
        The tables added to schema.

    The connection is always closed, whether introspection succeeds or not.
    Tables are registered only after every table was read and none of them
    clashes with a table already in schema, so a failure leaves schema as it
    was.

    Raises:
        ConfigError: If neither connection nor dsn is given.
        UnsupportedDatabaseError: If no introspector handles the driver.
        IntrospectionError: If the driver cannot be determined or a query fails.
        NameConflictError: If schema already holds a table of the same name.
    """
    if connection is None:
        if not dsn:
            raise ConfigError("No connection and no DSN given")
        connection = connect(dsn, user, password)

    client = connection if isinstance(connection, SQLClient) else DBAPIClient(connection)

    try:
        driver = client.driver_name
        if not driver:
            raise IntrospectionError("Cannot determine database driver")
        introspector_cls = get_introspector(driver)

        logger.info(f"Introspecting {introspector_cls.database} database")
        introspector = introspector_cls(client, **options)
        try:
            tables = introspector.introspect_tables()
        except SqltError:
            raise
        except Exception as e:
            raise IntrospectionError(
                f"{introspector_cls.database} introspection failed: {e}"
            ) from e
    finally:
        client.close()

    _register_tables(schema, tables)
    if not schema.database:
        schema.database = introspector_cls.database
    logger.info(f"Introspected {len(tables)} tables")
    return tables


def _register_tables(schema: Schema, tables: list[Table]) -> None:
    for table in tables:
        if schema.get_table(table.name) is not None:
            raise NameConflictError(table.name)
    for table in tables:
        schema.add_table(table)


def pull_schema(config: Config) -> Schema:
    """Introspect the database described by config into a new Schema.

    Raises:
        ConfigError: If config does not describe a reachable database.
    """
    config.validate_for_introspection()
    schema = Schema()

    if config.uses_databricks:
        from sqlt.databricks.client import DatabricksClient

        client = DatabricksClient(
            host=config.databricks_host, token=config.databricks_token
        )
        client.connect()
        introspect_database(
            schema, client, catalog=config.catalog, db_schema=config.db_schema
        )
        return schema

    introspect_database(
        schema,
        dsn=config.dsn,
        user=config.db_user,
        password=config.db_password,
        db_schema=config.db_schema,
    )
    return schema
