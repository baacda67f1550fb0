"""Schema model: tables, fields, indices, constraints and their registry."""

from sqlt.schema.args import normalize_names, split_names
from sqlt.schema.models import Constraint, Field, Index
from sqlt.schema.registry import Schema
from sqlt.schema.table import SchemaLike, Table

__all__ = [
    "Constraint",
    "Field",
    "Index",
    "Schema",
    "SchemaLike",
    "Table",
    "normalize_names",
    "split_names",
]
