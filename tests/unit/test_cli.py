"""Tests for CLI commands."""

import argparse
import sqlite3
from unittest.mock import patch

import pytest
import yaml

from sqlt.cli import cmd_pull, cmd_show, cmd_validate, main
from sqlt.exceptions import IntrospectionError
from sqlt.schema.loader import load_schema


@pytest.fixture
def sqlite_dsn(tmp_path):
    path = tmp_path / "shop.db"
    connection = sqlite3.connect(path)
    connection.executescript(
        """
        CREATE TABLE users (id INTEGER PRIMARY KEY, email VARCHAR(255) NOT NULL);
        CREATE INDEX idx_users_email ON users (email);
        """
    )
    connection.close()
    return f"sqlite:///{path}"


@pytest.fixture
def schema_dir(tmp_path):
    directory = tmp_path / "schema"
    directory.mkdir()
    (directory / "users.yaml").write_text(
        """
table: users
fields:
  - name: id
    data_type: BIGINT
    nullable: false
  - name: email
    data_type: STRING
constraints:
  - type: PRIMARY KEY
    fields: [id]
"""
    )
    return directory


def pull_args(**overrides):
    values = dict(
        dsn=None,
        user=None,
        password=None,
        db_schema=None,
        catalog=None,
        profile=None,
        output=None,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ("SQLT_DSN", "SQLT_CATALOG", "SQLT_DB_SCHEMA", "DATABRICKS_CONFIG_PROFILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))


class TestCmdPull:
    """Test cmd_pull."""

    def test_pull_to_stdout(self, sqlite_dsn, capsys):
        result = cmd_pull(pull_args(dsn=sqlite_dsn))

        assert result == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["schema"] == {"database": "SQLite"}
        [users] = data["tables"]
        assert users["table"] == "users"
        assert [f["name"] for f in users["fields"]] == ["id", "email"]
        assert users["indices"] == [{"name": "idx_users_email", "fields": ["email"]}]

    def test_pull_to_file(self, sqlite_dsn, tmp_path):
        output = tmp_path / "out" / "shop.yaml"

        assert cmd_pull(pull_args(dsn=sqlite_dsn, output=output)) == 0
        assert load_schema(output).table_names() == ["users"]

    def test_pull_to_directory(self, sqlite_dsn, tmp_path):
        output = tmp_path / "tables"

        assert cmd_pull(pull_args(dsn=sqlite_dsn, output=output)) == 0
        assert (output / "users.yaml").exists()

    def test_pull_dsn_from_env(self, sqlite_dsn, monkeypatch, capsys):
        monkeypatch.setenv("SQLT_DSN", sqlite_dsn)

        assert cmd_pull(pull_args()) == 0
        assert "table: users" in capsys.readouterr().out

    def test_pull_missing_config_returns_2(self):
        with patch("builtins.print"):
            assert cmd_pull(pull_args()) == 2

    def test_pull_bad_scheme_returns_2(self):
        with patch("builtins.print"):
            assert cmd_pull(pull_args(dsn="oracle://db/xe")) == 2

    def test_pull_introspection_error_returns_1(self, capsys):
        with patch(
            "sqlt.cli.pull_schema", side_effect=IntrospectionError("Sybase not supported")
        ):
            result = cmd_pull(pull_args(dsn="sqlite://"))

        assert result == 1
        assert "Sybase not supported" in capsys.readouterr().err

    def test_pull_empty_database_returns_1(self, tmp_path, capsys):
        path = tmp_path / "empty.db"
        sqlite3.connect(path).close()

        assert cmd_pull(pull_args(dsn=f"sqlite:///{path}")) == 1
        assert "No tables" in capsys.readouterr().err


class TestCmdValidate:
    """Test cmd_validate."""

    def test_valid_schema(self, schema_dir):
        args = argparse.Namespace(schema_path=schema_dir)

        with patch("builtins.print") as mock_print:
            result = cmd_validate(args)

        assert result == 0
        mock_print.assert_any_call("Validated 1 tables:")
        mock_print.assert_any_call("  - users (2 fields, primary key: id, 1 constraints)")

    def test_invalid_schema(self, schema_dir, capsys):
        (schema_dir / "orders.yaml").write_text(
            """
table: orders
fields:
  - name: id
    data_type: BIGINT
indices:
  - fields: [missing]
"""
        )

        result = cmd_validate(argparse.Namespace(schema_path=schema_dir))

        assert result == 1
        assert 'Invalid field "missing"' in capsys.readouterr().err

    def test_load_error(self, tmp_path, capsys):
        result = cmd_validate(argparse.Namespace(schema_path=tmp_path / "nope"))
        assert result == 1
        assert "does not exist" in capsys.readouterr().err


class TestCmdShow:
    """Test cmd_show."""

    def test_show_all(self, schema_dir, capsys):
        result = cmd_show(argparse.Namespace(schema_path=schema_dir, table=None))

        assert result == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert [t["table"] for t in data["tables"]] == ["users"]

    def test_show_table(self, schema_dir, capsys):
        result = cmd_show(argparse.Namespace(schema_path=schema_dir, table="users"))

        assert result == 0
        assert capsys.readouterr().out.startswith("table: users\n")

    def test_show_missing_table(self, schema_dir, capsys):
        result = cmd_show(argparse.Namespace(schema_path=schema_dir, table="orders"))

        assert result == 1
        assert "not found" in capsys.readouterr().err


class TestMain:
    """Test argument parsing."""

    def test_main_dispatches_validate(self, schema_dir):
        with patch("builtins.print"):
            assert main(["validate", "--schema-path", str(schema_dir)]) == 0

    def test_main_dispatches_pull(self, sqlite_dsn, tmp_path):
        output = tmp_path / "out.yaml"
        assert main(["--verbose", "pull", "--dsn", sqlite_dsn, "--output", str(output)]) == 0
        assert output.exists()

    def test_main_requires_command(self):
        with pytest.raises(SystemExit):
            main([])
