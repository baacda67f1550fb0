"""Load schema definitions from YAML files."""

from pathlib import Path
from typing import Any

import yaml

from sqlt.exceptions import SchemaLoadError, SqltError
from sqlt.schema.registry import Schema
from sqlt.schema.table import Table

VALID_SCHEMA_FIELDS = {"schema", "tables"}

VALID_TABLE_FIELDS = {
    "table",
    "options",
    "fields",
    "indices",
    "constraints",
}

# YAML key -> Field parameter
FIELD_KEYS = {
    "name": "name",
    "data_type": "data_type",
    "size": "size",
    "nullable": "is_nullable",
    "default": "default_value",
    "auto_increment": "is_auto_increment",
    "comments": "comments",
    "extra": "extra",
}

VALID_INDEX_FIELDS = {"name", "type", "fields", "options"}

VALID_CONSTRAINT_FIELDS = {
    "name",
    "type",
    "fields",
    "reference_table",
    "reference_fields",
    "expression",
    "on_delete",
    "on_update",
    "match_type",
    "deferrable",
    "options",
}


def load_schema(schema_path: Path) -> Schema:
    """Load schema from a directory of YAML files or a single file."""
    if schema_path.is_file():
        return _load_single_file(schema_path)
    elif schema_path.is_dir():
        return _load_directory(schema_path)
    else:
        raise SchemaLoadError(f"Schema path does not exist: {schema_path}")


def _load_directory(directory: Path) -> Schema:
    """Load schema from a directory of YAML files, one table per file."""
    schema = Schema()
    for yaml_file in sorted(directory.glob("*.yaml")):
        data = _read_yaml(yaml_file)
        _add_table(schema, data)
    return schema


def _load_single_file(file_path: Path) -> Schema:
    """Load schema from a single YAML file."""
    data = _read_yaml(file_path)

    if "tables" not in data:
        schema = Schema()
        _add_table(schema, data)
        return schema

    unknown_fields = set(data.keys()) - VALID_SCHEMA_FIELDS
    if unknown_fields:
        raise SchemaLoadError(
            f"Unknown field(s) in schema definition: {', '.join(sorted(unknown_fields))}"
        )

    meta = data.get("schema") or {}
    if not isinstance(meta, dict):
        raise SchemaLoadError("Expected a mapping for 'schema'")
    schema = Schema(name=meta.get("name", ""), database=meta.get("database", ""))
    for table_data in _entries(data, "tables"):
        _add_table(schema, table_data)
    return schema


def _read_yaml(file_path: Path) -> dict:
    with open(file_path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SchemaLoadError(f"Invalid YAML in {file_path}: {e}") from e
    if data is None:
        raise SchemaLoadError(f"Empty YAML file: {file_path}")
    if not isinstance(data, dict):
        raise SchemaLoadError(f"Expected a mapping in {file_path}")
    return data


def _add_table(schema: Schema, data: Any) -> Table:
    """Parse a table definition and register it in schema."""
    _check_keys(data, VALID_TABLE_FIELDS, "table")

    name = data.get("table")
    if not name:
        raise SchemaLoadError("Table definition missing 'table' field")
    if not isinstance(name, str):
        raise SchemaLoadError(f"Table name must be a string, got {name!r}")

    try:
        table = _parse_table(name, data)
        return schema.add_table(table)
    except SqltError as e:
        raise SchemaLoadError(f"Table '{name}': {e}") from e


def _parse_table(name: str, data: dict) -> Table:
    table = Table(name=name)

    for field_data in _entries(data, "fields"):
        table.add_field(**_field_params(field_data))

    for index_data in _entries(data, "indices"):
        _check_keys(index_data, VALID_INDEX_FIELDS, "index")
        table.add_index(**index_data)

    for constraint_data in _entries(data, "constraints"):
        _check_keys(constraint_data, VALID_CONSTRAINT_FIELDS, "constraint")
        table.add_constraint(**constraint_data)

    if options := data.get("options"):
        table.options(options)

    return table


def _field_params(data: Any) -> dict[str, Any]:
    """Map a field definition onto Field parameters."""
    _check_keys(data, set(FIELD_KEYS), "field")
    if not data.get("name"):
        raise SchemaLoadError("Field definition missing 'name' field")
    return {FIELD_KEYS[key]: value for key, value in data.items()}


def _entries(data: dict, key: str) -> list[Any]:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        raise SchemaLoadError(f"Expected a list for '{key}', got {entries!r}")
    return entries


def _check_keys(data: Any, valid: set[str], kind: str) -> None:
    if not isinstance(data, dict):
        raise SchemaLoadError(f"Expected a mapping for {kind} definition, got {data!r}")
    unknown_fields = set(data.keys()) - valid
    if unknown_fields:
        raise SchemaLoadError(
            f"Unknown field(s) in {kind} definition: {', '.join(sorted(unknown_fields))}"
        )
