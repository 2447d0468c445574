import logging
import os
from collections.abc import Iterator
from typing import TextIO

from csv_file_iterator.config import (
    DEFAULT_DELIMITER,
    DEFAULT_ENCLOSURE,
    DEFAULT_ESCAPE,
    DEFAULT_ENCODING,
    validate_control_chars,
)
from csv_file_iterator import errors as err

logger = logging.getLogger(__name__)

_LINE_BREAKS = "\r\n"


class RawRowSource:
    """
    Forward-only cursor over the records of a delimited text file.
    What it does:
      - Opens the file once at construction and keeps the handle until close().
      - Holds exactly one parsed record (the one under the cursor) in memory.
      - Skips empty lines; they never get a row index.
      - seek(n) is rewind() + n * advance(), since the file is read as a stream.
    Parsing rules:
      - A field starting with the enclosure may hold delimiters and line breaks;
        a doubled enclosure inside it is one literal enclosure.
      - The escape character only matters inside an enclosed field: it keeps the
        next character (usually the enclosure) from closing the field. Both
        characters are kept as they are, e.g. "a \\"b\\"" -> a \\"b\\".
      - Outside an enclosure the escape character is a plain character.
      - An unterminated enclosure runs to the end of the file and is passed through.
    """

    def __init__(
        self,
        path: str,
        *,
        delimiter: str = DEFAULT_DELIMITER,
        enclosure: str = DEFAULT_ENCLOSURE,
        escape: str = DEFAULT_ESCAPE,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        try:
            validate_control_chars(delimiter, enclosure, escape)
        except err.ConfigurationError as e:
            e.path = path
            logger.error("CSV %s: invalid control characters: %s", path, e)
            raise

        if os.path.isdir(path):
            logger.error("CSV %s: path is a directory", path)
            raise err.ConfigurationError(f"Path is a directory, not a file: {path}", path=path)

        try:
            self._file: TextIO = open(path, "r", encoding=encoding, newline="")
        except OSError as e:
            logger.error("CSV %s: cannot open for reading (%s)", path, e.__class__.__name__)
            raise err.from_os_error(e, path=path) from e

        self._path = path
        self._delimiter = delimiter
        self._enclosure = enclosure
        self._escape = escape or None  # "" disables escape processing
        self._records: Iterator[list[str]] = iter(())
        self._line_num = 0
        self._row: list[str] | None = None
        self._index = 0

        logger.debug(
            "Opened %s delimiter=%r enclosure=%r escape=%r encoding=%s",
            path, delimiter, enclosure, self._escape, encoding,
        )
        self.rewind()

    # ----- public API -----

    @property
    def path(self) -> str:
        return self._path

    def rewind(self) -> None:
        """Reset the cursor to the first record (row index 0)."""
        self._file.seek(0)
        self._line_num = 0
        self._records = self._parse_records()
        self._index = 0
        self._row = next(self._records, None)

    def advance(self) -> None:
        """Move to the next non-empty record. No-op once the end is reached."""
        if self._row is None:
            return
        self._row = next(self._records, None)
        self._index += 1

    def at_end(self) -> bool:
        """True when no record is under the cursor."""
        return self._row is None

    def current_index(self) -> int:
        return self._index

    def current_row(self) -> list[str] | None:
        """Raw fields under the cursor (a copy), or None at the end."""
        if self._row is None:
            return None
        return list(self._row)

    def seek(self, index: int) -> None:
        """Position the cursor at row `index` (O(n): rewind then advance)."""
        if index < 0:
            raise ValueError(f"row index must be >= 0 (got {index})")
        self.rewind()
        while self._index < index and self._row is not None:
            self.advance()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
            logger.debug("Closed %s", self._path)

    def __enter__(self) -> "RawRowSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ----- internal helpers -----

    def _parse_records(self) -> Iterator[list[str]]:
        """
        Yield one list of fields per non-empty record, reading line by line.
        No field size limit; only the record being built is held in memory.
        """
        fields: list[str] = []
        field: list[str] = []
        started = False        # anything besides a line break seen for this record
        in_enclosure = False
        escaped = False        # previous char was the escape char (inside an enclosure)
        start_line = 0

        for line in self._file:  # newline="" keeps \r\n / \r / \n as-is
            self._line_num += 1
            if not started:
                start_line = self._line_num

            i = 0
            while i < len(line):
                ch = line[i]
                if in_enclosure:
                    if escaped:
                        field.append(ch)
                        escaped = False
                    elif ch == self._escape:
                        field.append(ch)
                        escaped = True
                    elif ch == self._enclosure:
                        if line[i + 1:i + 2] == self._enclosure:
                            field.append(ch)  # doubled enclosure
                            i += 1
                        else:
                            in_enclosure = False
                    else:
                        field.append(ch)
                elif ch in _LINE_BREAKS:
                    break  # rest of the line is the terminator
                elif ch == self._delimiter:
                    fields.append("".join(field))
                    field = []
                    started = True
                elif ch == self._enclosure and not field:
                    in_enclosure = True
                    started = True
                else:
                    field.append(ch)
                    started = True
                i += 1

            if in_enclosure or not started:
                continue  # enclosed line break, or a blank line

            fields.append("".join(field))
            yield fields
            fields, field, started = [], [], False

        if started:
            if in_enclosure:
                logger.warning(
                    "CSV %s: unterminated enclosure starting near line %d (passed through)",
                    self._path, start_line,
                )
            fields.append("".join(field))
            yield fields
