import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from csv_file_iterator.columns import combine, fit_row, normalize_column_names
from csv_file_iterator.config import DEFAULT_DELIMITER, DEFAULT_ENCLOSURE, DEFAULT_ESCAPE, DEFAULT_ENCODING
from csv_file_iterator.errors import RowWidthError
from csv_file_iterator.source import RawRowSource
from csv_file_iterator.types import Row, ValueFilter

logger = logging.getLogger(__name__)


class CsvFileIterator:
    """
    Streaming CSV reader that returns each row as a dict keyed by column name.
    What it does:
      - Column names are set explicitly (set_column_names) or taken from the
        first row (use_first_row_as_header); empty/duplicate names are fixed up.
      - current() builds the row dict fresh on every call: short rows are padded
        with None, long rows get COL_<i> names for the extra fields.
      - An optional value filter fn(value, {"row": ..., "column": ...}) is run on
        every field, header names included.
    How to use:
      with CsvFileIterator("data.csv") as reader:
          reader.use_first_row_as_header({"Banner_id": "banner"})
          for row in reader:
              ...
    Notes:
      - One reader owns one file cursor; it is not safe to share across threads.
      - strict=True raises RowWidthError on width mismatch instead of padding.
    """

    def __init__(
        self,
        path: str,
        delimiter: str = DEFAULT_DELIMITER,
        enclosure: str = DEFAULT_ENCLOSURE,
        escape: str = DEFAULT_ESCAPE,
        *,
        encoding: str = DEFAULT_ENCODING,
        strict: bool = False,
    ) -> None:
        self._source = RawRowSource(
            path, delimiter=delimiter, enclosure=enclosure, escape=escape, encoding=encoding
        )
        self._strict = strict
        self._first_row_is_header = False
        self._column_names: list[Any] = []
        self._value_filter: ValueFilter | None = None

    # ---------- value filter ----------

    def set_value_filter(self, fn: ValueFilter | None) -> None:
        """Install a per-value filter, or remove it with None."""
        if fn is not None and not callable(fn):
            raise TypeError(f"value filter must be callable or None (got {type(fn).__name__})")
        self._value_filter = fn

    def _apply_filter(self, values: Mapping[Any, Any]) -> dict[Any, Any]:
        if self._value_filter is None:
            return dict(values)
        row_index = self._source.current_index()
        # column by column, left to right
        return {
            column: self._value_filter(value, {"row": row_index, "column": column})
            for column, value in values.items()
        }

    # ---------- column names ----------

    def get_column_names(self) -> list[Any]:
        return list(self._column_names)

    def set_column_names(self, names: Sequence[Any]) -> "CsvFileIterator":
        """Replace column names (no-op for empty input or anything but a list/tuple)."""
        if not isinstance(names, (list, tuple)) or not names:
            return self
        self._column_names = normalize_column_names(names)
        logger.debug("Column names set: %s", self._column_names)
        return self

    def use_first_row_as_header(self, rename_map: Mapping[str, Any] | None = None) -> "CsvFileIterator":
        """
        Take column names from the first row, renaming via `rename_map`
        ({"name_in_file": "new_name"}). The first row is skipped by iteration
        from then on. The cursor is put back where it was.
        """
        saved = self._source.current_index()
        if saved > 0:
            self._source.rewind()

        header = self._source.current_row()
        if header is None:
            logger.warning("CSV %s: no header row found (empty file)", self._source.path)
        else:
            names = list(self._apply_filter(dict(enumerate(header))).values())
            if rename_map:
                names = [rename_map[name] if name and name in rename_map else name for name in names]
            self.set_column_names(names)

        self._first_row_is_header = True

        if saved > 0:
            self._source.seek(saved)
        return self

    # ---------- rows ----------

    def current(self) -> Row:
        """The row under the cursor as {column_name: value}; {} at the end."""
        # never surface the header line as data
        if self._source.current_index() == 0 and self._first_row_is_header:
            self._source.advance()

        values = self._source.current_row()
        if not values:
            return {}

        if self._strict and self._column_names and len(self._column_names) != len(values):
            index = self._source.current_index()
            logger.error(
                "CSV %s: row %d has %d fields, expected %d",
                self._source.path, index, len(values), len(self._column_names),
            )
            raise RowWidthError(
                f"Row {index} has {len(values)} fields, expected {len(self._column_names)}",
                path=self._source.path,
                row_index=index,
                expected=len(self._column_names),
                actual=len(values),
            )

        names, values = fit_row(self._column_names, values)
        return self._apply_filter(combine(names, values))

    def raw_width(self) -> int | None:
        """Number of raw fields under the cursor, or None at the end."""
        values = self._source.current_row()
        return None if values is None else len(values)

    def count(self) -> int:
        """Number of data rows (header excluded). Scans the whole file."""
        saved = self._source.current_index()
        self._source.rewind()

        if self._first_row_is_header:
            self._source.advance()

        total = 0
        while not self._source.at_end():
            total += 1
            self._source.advance()

        # put the cursor back
        if self._source.current_index() != saved:
            self._source.seek(saved)
        return total

    def __iter__(self) -> Iterator[Row]:
        self.rewind()
        while not self._source.at_end():
            row = self.current()
            if self._source.at_end():  # header-only file
                return
            yield row
            self._source.advance()

    # ---------- cursor ----------

    def rewind(self) -> None:
        self._source.rewind()

    def advance(self) -> None:
        self._source.advance()

    def at_end(self) -> bool:
        return self._source.at_end()

    def current_index(self) -> int:
        return self._source.current_index()

    def seek(self, index: int) -> None:
        self._source.seek(index)

    # ---------- lifetime ----------

    def close(self) -> None:
        self._source.close()

    def __enter__(self) -> "CsvFileIterator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        source = getattr(self, "_source", None)
        if source is not None:
            source.close()
