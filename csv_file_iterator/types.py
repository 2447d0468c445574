from collections.abc import Callable
from typing import Any, TypedDict


class RowContext(TypedDict):
    row: int          # zero-based row index of the cursor
    column: str | int  # column name; positional index while resolving the header

# A value filter: fn(value, context) -> value
ValueFilter = Callable[[Any, RowContext], Any]

Row = dict[Any, Any]  # keys are column names; a header filter may make them non-str

class ReaderOptions(TypedDict):
    delimiter: str
    enclosure: str
    escape: str
    encoding: str

class ExportSummary(TypedDict):
    rows: int
    padded: int     # rows shorter than the column names
    extended: int   # rows longer than the column names
    duration_s: float
