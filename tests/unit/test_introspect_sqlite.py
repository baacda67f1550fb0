"""Tests for SQLite introspection against a real in-memory database."""

import sqlite3

import pytest

from sqlt.client import DBAPIClient
from sqlt.introspect import introspect_database
from sqlt.introspect.sqlite import SQLiteIntrospector
from sqlt.schema.registry import Schema
from sqlt.types import ConstraintType, IndexType

DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email VARCHAR(255) NOT NULL UNIQUE,
    name TEXT DEFAULT 'anonymous'
);
CREATE INDEX idx_users_name ON users (name);
CREATE UNIQUE INDEX idx_users_name_email ON users (name, email);

CREATE TABLE orders (
    id INTEGER NOT NULL,
    line INTEGER NOT NULL,
    user_id INTEGER REFERENCES users (id) ON DELETE CASCADE,
    amount DECIMAL(10, 2),
    PRIMARY KEY (id, line)
);
"""


@pytest.fixture
def client():
    connection = sqlite3.connect(":memory:")
    connection.executescript(DDL)
    yield DBAPIClient(connection)
    connection.close()


@pytest.fixture
def tables(client):
    return {t.name: t for t in SQLiteIntrospector(client).introspect_tables()}


def test_internal_tables_skipped(tables):
    """sqlite_sequence and other internal tables are not introspected."""
    assert sorted(tables) == ["orders", "users"]


def test_fields(tables):
    users = tables["users"]
    assert users.field_names() == ["id", "email", "name"]

    email = users.get_field("email")
    assert email.data_type == "VARCHAR"
    assert email.size == [255]
    assert email.is_nullable is False

    assert users.get_field("name").default_value == "'anonymous'"
    assert tables["orders"].get_field("amount").size == [10, 2]


def test_autoincrement_primary_key(tables):
    users = tables["users"]
    assert users.primary_key().fields == ["id"]
    assert users.get_field("id").is_auto_increment is True


def test_composite_primary_key_in_key_order(tables):
    orders = tables["orders"]
    assert orders.primary_key().fields == ["id", "line"]
    assert orders.get_field("id").is_auto_increment is False


def test_unique_constraint_and_indices(tables):
    users = tables["users"]

    [unique] = [
        c for c in users.get_constraints() if c.type is ConstraintType.UNIQUE
    ]
    assert unique.fields == ["email"]

    indices = {i.name: i for i in users.get_indices()}
    assert indices["idx_users_name"].type is IndexType.NORMAL
    assert indices["idx_users_name"].fields == ["name"]
    assert indices["idx_users_name_email"].type is IndexType.UNIQUE
    assert indices["idx_users_name_email"].fields == ["name", "email"]


def test_foreign_keys(tables):
    [fk] = [
        c
        for c in tables["orders"].get_constraints()
        if c.type is ConstraintType.FOREIGN_KEY
    ]
    assert fk.fields == ["user_id"]
    assert fk.reference_table == "users"
    assert fk.reference_fields == ["id"]
    assert fk.on_delete == "CASCADE"


def test_introspected_tables_are_valid(tables):
    for table in tables.values():
        assert table.is_valid(), table.error
        assert table.schema is None


def test_quoted_table_names(client):
    client.connection.execute('CREATE TABLE "odd ""name""" (x INTEGER)')
    table = SQLiteIntrospector(client).introspect_table('odd "name"')
    assert table.field_names() == ["x"]


def test_expression_index_skipped(client):
    client.connection.executescript(
        """
        CREATE TABLE tags (id INTEGER PRIMARY KEY, label TEXT);
        CREATE INDEX idx_tags_lower ON tags (lower(label));
        CREATE INDEX idx_tags_label ON tags (label);
        """
    )
    tags = SQLiteIntrospector(client).introspect_table("tags")

    assert [i.name for i in tags.get_indices()] == ["idx_tags_label"]
    assert tags.is_valid(), tags.error


def test_expression_index_does_not_abort_run(client):
    client.connection.execute("CREATE INDEX idx_users_lower ON users (lower(name))")
    schema = Schema()

    introspect_database(schema, client)

    assert sorted(schema.table_names()) == ["orders", "users"]
    assert "idx_users_lower" not in [i.name for i in schema.get_table("users").get_indices()]


def test_untyped_column_gets_blob_affinity(client):
    client.connection.execute("CREATE TABLE blobs (id INTEGER PRIMARY KEY, payload)")
    blobs = SQLiteIntrospector(client).introspect_table("blobs")

    assert blobs.get_field("payload").data_type == "BLOB"
    assert blobs.get_field("payload").size == []
    assert blobs.is_valid(), blobs.error


def test_autoincrement_only_on_integer_primary_key(client):
    client.connection.execute(
        "CREATE TABLE notes (code TEXT PRIMARY KEY, body TEXT DEFAULT 'AUTOINCREMENT')"
    )
    notes = SQLiteIntrospector(client).introspect_table("notes")

    assert notes.primary_key().fields == ["code"]
    assert notes.get_field("code").is_auto_increment is False
