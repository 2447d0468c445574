# ---- exceptions ----

class CsvIteratorError(Exception):
    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path

class AccessError(CsvIteratorError): ...          # missing file, permissions
class ConfigurationError(CsvIteratorError): ...   # directory path, bad control chars, bad options


class RowWidthError(CsvIteratorError):
    """Raised in strict mode when a data row and the column names differ in width."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        row_index: int,
        expected: int,
        actual: int,
    ) -> None:
        super().__init__(message, path=path)
        self.row_index = row_index
        self.expected = expected
        self.actual = actual


# ---- helpers ----

def from_os_error(exc: OSError, *, path: str) -> CsvIteratorError:
    """
    Wrap a low-level open() failure into a typed error with context.
    - IsADirectoryError -> ConfigurationError (asked to read a directory as a file)
    - anything else (missing, permissions, ...) -> AccessError
    """
    if isinstance(exc, IsADirectoryError):
        return ConfigurationError(f"Path is a directory, not a file: {path}", path=path)
    return AccessError(f"Cannot open {path} for reading: {exc.__class__.__name__}: {exc}", path=path)
