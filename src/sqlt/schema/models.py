"""Schema representation classes: fields, indices and constraints."""

from __future__ import annotations

import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from sqlt.exceptions import (
    ChildInvalidError,
    MissingNameError,
    NoPrimaryKeyError,
    NotFoundError,
    SchemaTypeError,
    SqltError,
    UnknownFieldError,
)
from sqlt.schema.args import split_names
from sqlt.types import ConstraintType, IndexType

if TYPE_CHECKING:
    from sqlt.schema.table import Table


class ValidityMixin(ABC):
    """`validate()` raises, `is_valid()` answers and remembers why not."""

    error: str = ""

    @abstractmethod
    def validate(self) -> None:
        """Raise a SqltError describing the first rule this object breaks."""

    def is_valid(self) -> bool:
        """Return True if valid, otherwise False with the reason in `error`."""
        try:
            self.validate()
        except SqltError as e:
            self.error = str(e)
            return False
        self.error = ""
        return True


class TableChildMixin:
    """Weak back-reference from a child object to its owning table."""

    _table: Optional[weakref.ref]

    @property
    def table(self) -> Optional[Table]:
        if self._table is None:
            return None
        return self._table()

    @table.setter
    def table(self, table: Optional[Table]) -> None:
        self._table = weakref.ref(table) if table is not None else None


def _clean_str(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SchemaTypeError(f"Expected a string for {what}, got {value!r}")
    return value.strip()


def _parse_size(value: Any) -> list[int]:
    """Coerce 11, "10,2" or [10, 2] into a list of ints."""
    if value is None or value == "":
        return []
    if isinstance(value, bool):
        raise ChildInvalidError("field", f"Invalid size {value!r}")
    if isinstance(value, int):
        return [value] if value else []
    if isinstance(value, str):
        parts: list[Any] = split_names([value])
    elif isinstance(value, (list, tuple)):
        parts = list(value)
    else:
        raise ChildInvalidError("field", f"Invalid size {value!r}")

    sizes = []
    for part in parts:
        try:
            sizes.append(int(part))
        except (TypeError, ValueError):
            raise ChildInvalidError("field", f"Invalid size {value!r}") from None
    return sizes


def _check_fields_exist(table: Table, names: list[str]) -> None:
    for name in names:
        try:
            table.get_field(name)
        except NotFoundError:
            raise UnknownFieldError(name) from None


@dataclass
class Field(TableChildMixin, ValidityMixin):
    """Column definition.

    `size` accepts an int, a comma-separated string or a list and is stored as
    a list of ints (`[10, 2]` for DECIMAL(10,2)). `order` is assigned by the
    owning table when the field is added.
    """

    name: str = ""
    data_type: str = ""
    size: list[int] = field(default_factory=list)
    is_nullable: bool = True
    default_value: Optional[str] = None
    is_auto_increment: bool = False
    comments: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)
    order: int = field(default=0, init=False, compare=False)
    _table: Optional[weakref.ref] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.name = _clean_str(self.name, "field name")
        self.data_type = _clean_str(self.data_type, "data type")
        self.size = _parse_size(self.size)

    @property
    def normalized_type(self) -> str:
        """Return uppercase type for case-insensitive comparisons."""
        return self.data_type.upper()

    @property
    def is_primary_key(self) -> bool:
        """True when the owning table's primary key lists this field."""
        table = self.table
        if table is None:
            return False
        try:
            pk = table.primary_key()
        except NoPrimaryKeyError:
            return False
        return self.name in pk.fields

    def validate(self) -> None:
        if not self.name:
            raise MissingNameError("No field name")
        if not self.data_type:
            raise ChildInvalidError("field", f'Field "{self.name}" has no data type')

        table = self.table
        if table is None:
            raise ChildInvalidError("field", f'Field "{self.name}" has no table')
        try:
            registered = table.get_field(self.name)
        except NotFoundError:
            registered = None
        if registered is not self:
            raise ChildInvalidError(
                "field", f'Field "{self.name}" is not part of table "{table.name}"'
            )


@dataclass
class Index(TableChildMixin, ValidityMixin):
    """Index over an ordered list of field names."""

    name: str = ""
    fields: list[str] = field(default_factory=list)
    type: IndexType = IndexType.NORMAL
    options: list[str] = field(default_factory=list)
    _table: Optional[weakref.ref] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.name = _clean_str(self.name, "index name")
        self.fields = split_names([self.fields])
        self.options = split_names([self.options])
        try:
            self.type = IndexType.parse(self.type)
        except ValueError:
            raise ChildInvalidError(
                "index", f'Invalid index type "{self.type}"'
            ) from None

    def validate(self) -> None:
        label = self.name or "(unnamed)"
        table = self.table
        if table is None:
            raise ChildInvalidError("index", f'Index "{label}" has no table')
        if not self.fields:
            raise ChildInvalidError("index", f'Index "{label}" has no fields')
        _check_fields_exist(table, self.fields)


@dataclass
class Constraint(TableChildMixin, ValidityMixin):
    """
    Table constraint: primary key, unique, foreign key, check or not null.

    Foreign keys name the referenced table and fields; the referenced table
    does not have to be loaded yet. When the owning schema does hold it, its
    fields are checked during validation.
    """

    name: str = ""
    type: Optional[ConstraintType] = None
    fields: list[str] = field(default_factory=list)
    reference_table: str = ""
    reference_fields: list[str] = field(default_factory=list)
    expression: str = ""
    on_delete: str = ""
    on_update: str = ""
    match_type: str = ""
    deferrable: bool = True
    options: list[str] = field(default_factory=list)
    _table: Optional[weakref.ref] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.name = _clean_str(self.name, "constraint name")
        self.fields = split_names([self.fields])
        self.reference_fields = split_names([self.reference_fields])
        self.options = split_names([self.options])
        if self.type is None or self.type == "":
            self.type = None
        else:
            try:
                self.type = ConstraintType.parse(self.type)
            except ValueError:
                raise ChildInvalidError(
                    "constraint", f'Invalid constraint type "{self.type}"'
                ) from None

    def add_fields(self, *names: Any) -> list[str]:
        """Append field names (same shapes as Table.primary_key)."""
        self.fields.extend(split_names(names))
        return self.fields

    def validate(self) -> None:
        label = self.name or (self.type.value if self.type else "(unnamed)")
        table = self.table
        if table is None:
            raise ChildInvalidError("constraint", f'Constraint "{label}" has no table')
        if self.type is None:
            raise ChildInvalidError("constraint", f'Constraint "{label}" has no type')

        if self.type is ConstraintType.CHECK:
            if not self.expression:
                raise ChildInvalidError(
                    "constraint", f'Check constraint "{label}" has no expression'
                )
        elif not self.fields:
            raise ChildInvalidError("constraint", f'Constraint "{label}" has no fields')
        _check_fields_exist(table, self.fields)

        if self.type is ConstraintType.FOREIGN_KEY:
            self._validate_reference(label, table)

    def _validate_reference(self, label: str, table: Table) -> None:
        if not self.reference_table:
            raise ChildInvalidError(
                "constraint", f'Foreign key "{label}" has no reference table'
            )
        schema = table.schema
        if schema is None:
            return
        ref_table = schema.get_table(self.reference_table)
        if ref_table is None:
            return
        _check_fields_exist(ref_table, self.reference_fields)
