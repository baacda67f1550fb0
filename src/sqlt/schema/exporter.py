"""Export schema models to YAML."""

from pathlib import Path
from typing import Any, Callable

import yaml

from sqlt.exceptions import EmptyCollectionError
from sqlt.schema.models import Constraint, Field, Index
from sqlt.schema.registry import Schema
from sqlt.schema.table import Table
from sqlt.types import IndexType


def table_to_dict(table: Table) -> dict[str, Any]:
    """Convert a Table to a dictionary suitable for YAML export."""
    data: dict[str, Any] = {"table": table.name}

    if options := table.options():
        data["options"] = options

    data["fields"] = [_field_to_dict(f) for f in table.get_fields()]

    if indices := _collect(table.get_indices):
        data["indices"] = [_index_to_dict(i) for i in indices]

    if constraints := _collect(table.get_constraints):
        data["constraints"] = [_constraint_to_dict(c) for c in constraints]

    return data


def _collect(getter: Callable[[], list]) -> list:
    """Call a collection accessor, treating "none" as an empty list."""
    try:
        return getter()
    except EmptyCollectionError:
        return []


def _field_to_dict(field: Field) -> dict[str, Any]:
    data: dict[str, Any] = {"name": field.name, "data_type": field.data_type}

    if field.size:
        data["size"] = field.size

    if not field.is_nullable:
        data["nullable"] = False

    if field.default_value is not None:
        data["default"] = field.default_value

    if field.is_auto_increment:
        data["auto_increment"] = True

    if field.comments is not None:
        data["comments"] = field.comments

    if field.extra:
        data["extra"] = field.extra

    return data


def _index_to_dict(index: Index) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if index.name:
        data["name"] = index.name
    if index.type is not IndexType.NORMAL:
        data["type"] = index.type.value
    data["fields"] = index.fields
    if index.options:
        data["options"] = index.options
    return data


def _constraint_to_dict(constraint: Constraint) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if constraint.name:
        data["name"] = constraint.name
    if constraint.type is not None:
        data["type"] = constraint.type.value
    if constraint.fields:
        data["fields"] = constraint.fields

    for key in ("reference_table", "expression", "on_delete", "on_update", "match_type"):
        if value := getattr(constraint, key):
            data[key] = value

    if constraint.reference_fields:
        data["reference_fields"] = constraint.reference_fields
    if not constraint.deferrable:
        data["deferrable"] = False
    if constraint.options:
        data["options"] = constraint.options
    return data


def schema_to_dict(schema: Schema) -> dict[str, Any]:
    """Convert a whole Schema to a single YAML document."""
    data: dict[str, Any] = {}
    meta = {
        key: value
        for key, value in (("name", schema.name), ("database", schema.database))
        if value
    }
    if meta:
        data["schema"] = meta
    data["tables"] = [table_to_dict(t) for t in schema.get_tables()]
    return data


def _dump(data: dict[str, Any]) -> str:
    return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)


def export_table_yaml(table: Table) -> str:
    """Export a single table to YAML string."""
    return _dump(table_to_dict(table))


def export_schema_yaml(schema: Schema) -> str:
    """Export a whole schema to one YAML string."""
    return _dump(schema_to_dict(schema))


def export_schema_to_directory(schema: Schema, output_dir: Path) -> list[Path]:
    """Export all tables in a schema to individual YAML files.

    Returns list of created file paths.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    created_files = []

    for table in schema.get_tables():
        file_path = output_dir / f"{table.name}.yaml"
        file_path.write_text(export_table_yaml(table))
        created_files.append(file_path)

    return created_files
