import json
import logging
import os

from csv_file_iterator.errors import ConfigurationError
from csv_file_iterator.types import ReaderOptions

logger = logging.getLogger(__name__)

# Defaults and env var names
DEFAULT_DELIMITER = ","
DEFAULT_ENCLOSURE = '"'
DEFAULT_ESCAPE = "\\"
DEFAULT_ENCODING = "utf-8-sig"  # tolerate BOM

ENV_DELIMITER = "CSV_DELIMITER"
ENV_ENCLOSURE = "CSV_ENCLOSURE"
ENV_ESCAPE = "CSV_ESCAPE"
ENV_ENCODING = "CSV_ENCODING"

_LINE_BREAKS = frozenset({"\n", "\r"})


# ---------- helper functions ----------

def _env_str(name: str, default: str) -> str:
    """Read a string from the environment; return default if missing."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw


def _load_json_file(path: str) -> dict:
    """
    Read a small JSON options file. If the file is missing or invalid,
    return {} and log a message.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.info("Options file not found: %s (using env/defaults)", path)
        return {}
    except Exception as e:
        logger.warning("Could not read options file %s: %s (using env/defaults)", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Options file %s must hold a JSON object, got %s (ignored)", path, type(data).__name__)
        return {}
    return data


def validate_control_chars(delimiter: object, enclosure: object, escape: object) -> None:
    """
    Make sure the CSV control characters make sense.
    - delimiter and enclosure: exactly one character
    - escape: at most one character ("" disables escaping)
    - none of them may be a line break; enclosure must differ from delimiter and escape
    """
    for label, value, allow_empty in (
        ("delimiter", delimiter, False),
        ("enclosure", enclosure, False),
        ("escape", escape, True),
    ):
        if not isinstance(value, str):
            raise ConfigurationError(f"{label} must be a string (got {type(value).__name__})")
        if len(value) > 1 or (len(value) == 0 and not allow_empty):
            expected = "at most one character" if allow_empty else "exactly one character"
            raise ConfigurationError(f"{label} must be {expected} (got {value!r})")
        if value in _LINE_BREAKS:
            raise ConfigurationError(f"{label} cannot be a line break (got {value!r})")

    if delimiter == enclosure:
        raise ConfigurationError(f"delimiter and enclosure must differ (both {delimiter!r})")
    if escape == enclosure:
        raise ConfigurationError(f"escape and enclosure must differ (both {escape!r})")


# ---------- options resolution ----------

def load_reader_options(
    *,
    file_path: str | None = None,
    delimiter: str | None = None,
    enclosure: str | None = None,
    escape: str | None = None,
    encoding: str | None = None,
) -> ReaderOptions:
    """
    Build reader options from:
      1) defaults
      2) env vars (CSV_DELIMITER, CSV_ENCLOSURE, CSV_ESCAPE, CSV_ENCODING)
      3) JSON file (if provided), keys: delimiter/enclosure/escape/encoding
      4) CLI overrides (always win)
    Raises ConfigurationError if the result is invalid.
    """
    options: ReaderOptions = {
        "delimiter": _env_str(ENV_DELIMITER, DEFAULT_DELIMITER),
        "enclosure": _env_str(ENV_ENCLOSURE, DEFAULT_ENCLOSURE),
        "escape": _env_str(ENV_ESCAPE, DEFAULT_ESCAPE),
        "encoding": _env_str(ENV_ENCODING, DEFAULT_ENCODING),
    }

    # file
    if file_path:
        data = _load_json_file(file_path)
        for key in options:
            if key not in data:
                continue
            if isinstance(data[key], str):
                options[key] = data[key]
            else:
                logger.warning("Ignoring non-string %r in %s: %r", key, file_path, data[key])

    # cli overrides
    overrides = {"delimiter": delimiter, "enclosure": enclosure, "escape": escape, "encoding": encoding}
    for key, value in overrides.items():
        if value is not None:
            options[key] = value

    validate_control_chars(options["delimiter"], options["enclosure"], options["escape"])
    if not options["encoding"].strip():
        raise ConfigurationError("encoding cannot be empty")

    logger.debug("Reader options: %s", options)
    return options
