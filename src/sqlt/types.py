"""Core type definitions for sqlt."""

from enum import Enum

__all__ = [
    "ConstraintType",
    "IndexType",
]


def _canonical(value: str) -> str:
    return " ".join(value.replace("_", " ").split()).upper()


class ConstraintType(Enum):
    """Kinds of table constraints."""

    PRIMARY_KEY = "PRIMARY KEY"
    UNIQUE = "UNIQUE"
    FOREIGN_KEY = "FOREIGN KEY"
    CHECK = "CHECK"
    NOT_NULL = "NOT NULL"

    @classmethod
    def parse(cls, value: "ConstraintType | str") -> "ConstraintType":
        """Accept an enum member or a case-insensitive name like 'primary_key'.

        Raises:
            ValueError: If the value names no known constraint type.
        """
        if isinstance(value, cls):
            return value
        return cls(_canonical(str(value)))


class IndexType(Enum):
    """Kinds of indices."""

    NORMAL = "NORMAL"
    UNIQUE = "UNIQUE"
    FULLTEXT = "FULLTEXT"
    SPATIAL = "SPATIAL"

    @classmethod
    def parse(cls, value: "IndexType | str") -> "IndexType":
        """Accept an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        return cls(_canonical(str(value)))
