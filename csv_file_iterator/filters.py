from typing import Any

from csv_file_iterator.types import RowContext, ValueFilter


def strip_whitespace(value: Any, context: RowContext) -> Any:
    """Trim surrounding whitespace from strings; anything else (e.g., None padding) passes through."""
    if isinstance(value, str):
        return value.strip()
    return value


def empty_as_none(value: Any, context: RowContext) -> Any:
    """Turn empty strings into None, so missing and blank cells look the same."""
    if value == "":
        return None
    return value


def chain(*filters: ValueFilter) -> ValueFilter:
    """
    Compose value filters left to right; each one gets the same context.
    chain() with no filters is the identity.
    """
    def _chained(value: Any, context: RowContext) -> Any:
        for fn in filters:
            value = fn(value, context)
        return value

    return _chained
