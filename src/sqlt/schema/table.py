"""The Table aggregate: fields, indices and constraints under one name."""

from __future__ import annotations

import itertools
import weakref
from typing import Any, Optional, Protocol, runtime_checkable

from sqlt.exceptions import (
    ChildInvalidError,
    DuplicateFieldError,
    EmptyCollectionError,
    MissingNameError,
    NameConflictError,
    NoFieldsError,
    NoPrimaryKeyError,
    NotFoundError,
    SchemaTypeError,
    UnknownFieldError,
)
from sqlt.schema.args import split_names
from sqlt.schema.models import Constraint, Field, Index, ValidityMixin
from sqlt.types import ConstraintType

__all__ = ["SchemaLike", "Table"]


@runtime_checkable
class SchemaLike(Protocol):
    """What a table needs from the schema that owns it."""

    def get_table(self, name: str) -> Optional[Table]:
        """Return the table registered under name, or None."""
        ...

    def reindex_table(self, table: Table, old_name: str) -> None:
        """Re-key a registered table after it was renamed."""
        ...


class Table(ValidityMixin):
    """
    Table definition.

    A table may live on its own or belong to a schema. Once it belongs to a
    schema, renaming it onto the name of another table of that schema is
    refused. The schema back-reference is weak: the schema owns the table,
    not the other way round.

    Fields are stored by name; each one gets the next value of the table's
    order counter so `get_fields()` returns them in the order they were added.
    """

    def __init__(self, name: str = "", schema: Optional[SchemaLike] = None) -> None:
        self._name = ""
        self._schema: Optional[weakref.ref] = None
        self._fields: dict[str, Field] = {}
        self._indices: list[Index] = []
        self._constraints: list[Constraint] = []
        self._options: list[str] = []
        self._field_order = itertools.count(1)

        if schema is not None:
            self.set_schema(schema)
        if name:
            self.set_name(name)

    def __repr__(self) -> str:
        return f"Table(name={self._name!r}, fields={list(self._fields)!r})"

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        self.set_name(name)

    def set_name(self, name: str) -> str:
        """Rename the table.

        Raises:
            MissingNameError: If name is empty.
            NameConflictError: If the owning schema holds another table
                with that name. The current name is kept.
        """
        if not name:
            raise MissingNameError("No table name")

        schema = self.schema
        if schema is not None:
            existing = schema.get_table(name)
            if existing is not None and existing is not self:
                raise NameConflictError(name)

        old_name = self._name
        self._name = name
        if schema is not None and old_name and schema.get_table(old_name) is self:
            schema.reindex_table(self, old_name)
        return name

    @property
    def schema(self) -> Optional[SchemaLike]:
        if self._schema is None:
            return None
        return self._schema()

    @schema.setter
    def schema(self, schema: SchemaLike) -> None:
        self.set_schema(schema)

    def set_schema(self, schema: SchemaLike) -> SchemaLike:
        """Attach the table to a schema (weakly).

        Raises:
            SchemaTypeError: If schema does not look like a schema.
        """
        if not isinstance(schema, SchemaLike):
            raise SchemaTypeError(f"Not a schema object: {schema!r}")
        self._schema = weakref.ref(schema)
        return schema

    def detach(self) -> None:
        """Drop the schema back-reference."""
        self._schema = None

    def add_field(self, field: Optional[Field] = None, /, **params: Any) -> Field:
        """Add a field, either an existing Field or built from keyword params.

            table.add_field(name="id", data_type="integer", size=11)
            table.add_field(Field(name="email", data_type="varchar"))

        Raises:
            MissingNameError: If the field has no name.
            DuplicateFieldError: If a field of that name already exists.
            SchemaTypeError: If both shapes or a non-Field object are given.
            ChildInvalidError: If the field already belongs to another table.
        """
        field = self._resolve_child(Field, field, params)

        if not field.name:
            raise MissingNameError("No field name")
        if field.name in self._fields:
            raise DuplicateFieldError(field.name)

        field.table = self
        field.order = next(self._field_order)
        self._fields[field.name] = field
        return field

    def add_index(self, index: Optional[Index] = None, /, **params: Any) -> Index:
        """Add an index, either an existing Index or built from keyword params."""
        index = self._resolve_child(Index, index, params)
        index.table = self
        self._indices.append(index)
        return index

    def add_constraint(
        self, constraint: Optional[Constraint] = None, /, **params: Any
    ) -> Constraint:
        """Add a constraint, either an existing Constraint or built from keyword params."""
        constraint = self._resolve_child(Constraint, constraint, params)
        constraint.table = self
        self._constraints.append(constraint)
        return constraint

    def _resolve_child(self, child_cls: type, obj: Any, params: dict[str, Any]) -> Any:
        if obj is None:
            return child_cls(**params)
        if params:
            raise SchemaTypeError(
                f"Pass either a {child_cls.__name__} or keyword parameters, not both"
            )
        if not isinstance(obj, child_cls):
            raise SchemaTypeError(f"Not a {child_cls.__name__} object: {obj!r}")
        owner = obj.table
        if owner is not None and owner is not self:
            raise ChildInvalidError(
                child_cls.__name__.lower(),
                f'{child_cls.__name__} "{obj.name}" already belongs to table "{owner.name}"',
            )
        return obj

    def get_field(self, name: str) -> Field:
        """Get a field by exact name.

        Raises:
            MissingNameError: If name is empty.
            NotFoundError: If no such field exists.
        """
        if not name:
            raise MissingNameError("No field name")
        try:
            return self._fields[name]
        except KeyError:
            raise NotFoundError(f'Field "{name}" does not exist') from None

    def get_fields(self) -> list[Field]:
        """Return all fields in the order they were added.

        Raises:
            NoFieldsError: If the table has no fields.
        """
        if not self._fields:
            raise NoFieldsError()
        return sorted(self._fields.values(), key=lambda f: f.order)

    def field_names(self) -> list[str]:
        """Get field names in order; empty list when there are none."""
        return [f.name for f in sorted(self._fields.values(), key=lambda f: f.order)]

    def get_indices(self) -> list[Index]:
        """Return all indices in insertion order.

        Raises:
            EmptyCollectionError: If the table has no indices.
        """
        if not self._indices:
            raise EmptyCollectionError("indices")
        return list(self._indices)

    def get_constraints(self) -> list[Constraint]:
        """Return all constraints in insertion order.

        Raises:
            EmptyCollectionError: If the table has no constraints.
        """
        if not self._constraints:
            raise EmptyCollectionError("constraints")
        return list(self._constraints)

    def primary_key(self, *fields: Any) -> Constraint:
        """Get or extend the table's primary key.

        Field names may be given as "id", "id,name", "id", "name" or
        ["id", "name"]. Given names are appended to an existing primary key
        constraint as-is (no de-duplication); without one, a new PRIMARY KEY
        constraint is created. With no arguments this is a pure accessor.

        Raises:
            UnknownFieldError: If a name is not a field of this table.
            NoPrimaryKeyError: If the table ends up with no primary key.
        """
        names = split_names(fields)

        if names:
            for name in names:
                try:
                    self.get_field(name)
                except NotFoundError:
                    raise UnknownFieldError(name) from None

            has_pk = False
            for constraint in self._constraints:
                if constraint.type is ConstraintType.PRIMARY_KEY:
                    has_pk = True
                    constraint.fields.extend(names)

            if not has_pk:
                self.add_constraint(type=ConstraintType.PRIMARY_KEY, fields=names)

        for constraint in self._constraints:
            if constraint.type is ConstraintType.PRIMARY_KEY:
                return constraint
        raise NoPrimaryKeyError("No primary key")

    def options(self, *values: Any) -> list[str]:
        """Append table options (e.g. "ENGINE=InnoDB") and return all of them."""
        self._options.extend(split_names(values))
        return list(self._options)

    def validate(self) -> None:
        """Check the table and then each field, index and constraint.

        The first child failure is raised unchanged.

        Raises:
            MissingNameError: If the table has no name.
            NoFieldsError: If the table has no fields.
        """
        if not self._name:
            raise MissingNameError("No table name")
        fields = self.get_fields()

        for child in [*fields, *self._indices, *self._constraints]:
            child.validate()
