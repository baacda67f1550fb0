"""Exception classes for sqlt."""

from typing import Optional

__all__ = [
    "SqltError",
    "MissingNameError",
    "DuplicateFieldError",
    "UnknownFieldError",
    "NameConflictError",
    "NoPrimaryKeyError",
    "EmptyCollectionError",
    "NoFieldsError",
    "NotFoundError",
    "SchemaTypeError",
    "ChildInvalidError",
    "SchemaLoadError",
    "ConfigError",
    "IntrospectionError",
    "UnsupportedDatabaseError",
]


class SqltError(Exception):
    """Base exception for sqlt."""


class MissingNameError(SqltError):
    """An object that requires a name has none."""


class DuplicateFieldError(SqltError):
    """A field with the same name already exists on the table."""

    def __init__(self, field_name: str, message: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message or f'Can\'t create field: "{field_name}" exists')


class UnknownFieldError(SqltError):
    """A field name does not refer to a field of the table."""

    def __init__(self, field_name: str, message: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message or f'Invalid field "{field_name}"')


class NameConflictError(SqltError):
    """A table name is already taken in the owning schema."""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f'Can\'t use table name "{name}": table exists')


class NoPrimaryKeyError(SqltError):
    """The table has no primary key constraint."""


class EmptyCollectionError(SqltError):
    """A child collection was requested but holds nothing.

    This is a reported condition, not necessarily an invalid model: a table
    without indices is fine, callers decide.
    """

    def __init__(self, kind: str, message: Optional[str] = None):
        self.kind = kind
        super().__init__(message or f"No {kind}")


class NoFieldsError(EmptyCollectionError):
    """The table has no fields."""

    def __init__(self, message: Optional[str] = None):
        super().__init__("fields", message)


class NotFoundError(SqltError, LookupError):
    """A named object does not exist."""


class SchemaTypeError(SqltError, TypeError):
    """A value does not provide the capability an operation needs."""


class ChildInvalidError(SqltError):
    """A field, index or constraint breaks one of its own rules."""

    def __init__(self, kind: str, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


class SchemaLoadError(SqltError):
    """Error loading schema definition files."""


class ConfigError(SqltError):
    """Error in configuration."""


class IntrospectionError(SqltError):
    """Error introspecting a live database."""


class UnsupportedDatabaseError(IntrospectionError):
    """No introspector exists for the connection's driver."""

    def __init__(self, driver: str):
        self.driver = driver
        super().__init__(f"{driver} not supported")
