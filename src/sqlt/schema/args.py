"""Normalisation of flexible name-list arguments.

Several model operations take a list of names in whatever shape a source
adapter finds convenient:

    table.primary_key("id")
    table.primary_key("id, name")
    table.primary_key("id", "name")
    table.primary_key(["id", "name"])

`split_names` adapts those call shapes into one ordered sequence, and
`normalize_names` is the single-shaped core every operation shares.
"""

from typing import Any, Iterable, Sequence

from sqlt.exceptions import SchemaTypeError


def normalize_names(names: Sequence[str]) -> list[str]:
    """Trim whitespace from each name and drop the empty ones."""
    result = []
    for name in names:
        stripped = name.strip()
        if stripped:
            result.append(stripped)
    return result


def split_names(values: Iterable[Any]) -> list[str]:
    """Flatten variadic name arguments into a normalised list.

    String values are split on commas. A list or tuple value contributes its
    items as-is (trimmed, never split), so an option containing a comma can
    still be passed inside a list.

    Raises:
        SchemaTypeError: If a value or list item is not a string.
    """
    names: list[str] = []
    for value in values:
        if isinstance(value, str):
            names.extend(value.split(","))
        elif isinstance(value, (list, tuple)):
            for item in value:
                if not isinstance(item, str):
                    raise SchemaTypeError(f"Expected a name string, got {item!r}")
                names.append(item)
        elif value is None:
            continue
        else:
            raise SchemaTypeError(f"Expected a name string or list, got {value!r}")
    return normalize_names(names)
