from collections.abc import Sequence
from typing import Any


def synthetic_name(index: int) -> str:
    """Generated name for a column that has no usable name of its own."""
    return f"COL_{index}"


def normalize_column_names(names: Sequence[Any]) -> list[Any]:
    """
    Return a normalized copy of `names`:
      1) an empty string at index i becomes COL_<i>
      2) a later duplicate at index j becomes <value>_<j>; the first occurrence
         keeps its value. If <value>_<j> is itself taken, _<j> is appended again.
    Duplicates are compared by their string form.
    """
    normalized = [synthetic_name(i) if name == "" else name for i, name in enumerate(names)]

    first_seen = set()
    dupes = []
    for i, name in enumerate(normalized):
        key = str(name)
        if key in first_seen:
            dupes.append(i)
        else:
            first_seen.add(key)

    if not dupes:
        return normalized

    # first occurrences keep their names; renamed dupes join as they are resolved
    taken = first_seen
    for i in dupes:
        renamed = f"{normalized[i]}_{i}"
        while renamed in taken:
            renamed = f"{renamed}_{i}"
        normalized[i] = renamed
        taken.add(renamed)
    return normalized


def fit_row(column_names: Sequence[Any], values: Sequence[Any]) -> tuple[list[Any], list[Any]]:
    """
    Reconcile widths of column names and row values (never mutates the inputs).
    - more names than values: pad values with None
    - more values than names: extend names with COL_<i> for the extra positions
    Returns (names, values) of equal length.
    """
    names = list(column_names)
    row = list(values)
    if len(names) > len(row):
        row.extend([None] * (len(names) - len(row)))
    elif len(names) < len(row):
        names.extend(synthetic_name(i) for i in range(len(names), len(row)))
    return names, row


def combine(names: Sequence[Any], values: Sequence[Any]) -> dict[Any, Any]:
    """Zip names and values positionally; the first occurrence of a key wins."""
    row: dict[Any, Any] = {}
    for name, value in zip(names, values):
        if name not in row:
            row[name] = value
    return row
