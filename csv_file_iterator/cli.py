import argparse
import logging
import sys
from dotenv import load_dotenv

from csv_file_iterator.config import load_reader_options
from csv_file_iterator.errors import ConfigurationError, CsvIteratorError
from csv_file_iterator.export import export_json_lines
from csv_file_iterator.filters import chain, empty_as_none, strip_whitespace
from csv_file_iterator.reader import CsvFileIterator

load_dotenv()  # loads .env into process env (CSV_DELIMITER, ...)

def _parse_rename(items: list[str]) -> dict[str, str]:
    """Turn ["old=new", ...] into {"old": "new", ...}."""
    mapping: dict[str, str] = {}
    for item in items:
        old, sep, new = item.partition("=")
        if not sep or not old:
            raise ValueError(f"--rename expects OLD=NEW (got {item!r})")
        mapping[old] = new
    return mapping


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="csv-file-iterator",
        description="Stream a CSV file and print each row as a JSON object.",
    )
    p.add_argument("csv", help="Path to input CSV")

    # Dialect options (CLI > config file > env > defaults)
    p.add_argument(
        "--config-file",
        default=None,
        help='Path to JSON options (e.g., {"delimiter": ";", "encoding": "latin-1"})',
    )
    p.add_argument("--delimiter", default=None, help="Field delimiter (one character)")
    p.add_argument("--enclosure", default=None, help="Field enclosure (one character)")
    p.add_argument("--escape", default=None, help='Escape character (at most one; "" disables)')
    p.add_argument("--encoding", default=None, help="File encoding")

    # Columns
    p.add_argument("--header", action="store_true", help="Use the first row as column names")
    p.add_argument(
        "--rename",
        action="append",
        default=[],
        metavar="OLD=NEW",
        help="Rename a header column (repeatable; needs --header)",
    )
    p.add_argument("--columns", default=None, help="Comma-separated column names (ignored with --header)")

    # Values
    p.add_argument("--strip", action="store_true", help="Trim whitespace around values (header included)")
    p.add_argument("--empty-as-null", action="store_true", help="Output empty cells as null")
    p.add_argument("--strict", action="store_true", help="Fail on rows whose width differs from the header")

    # Output
    p.add_argument("--count", action="store_true", help="Print only the number of data rows")
    p.add_argument("--log-every-rows", type=int, default=10_000, help="Progress log cadence")

    # Logging
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level",
    )
    return p


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --- logging setup (stderr; stdout carries the rows) ---
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger("cli")

    # --- resolve options ---
    try:
        options = load_reader_options(
            file_path=args.config_file,
            delimiter=args.delimiter,
            enclosure=args.enclosure,
            escape=args.escape,
            encoding=args.encoding,
        )
        rename_map = _parse_rename(args.rename)
    except (ConfigurationError, ValueError) as e:
        logger.error("Invalid options: %s", e)
        sys.exit(1)

    if rename_map and not args.header:
        logger.warning("--rename has no effect without --header")

    # --- read ---
    try:
        with CsvFileIterator(
            args.csv,
            options["delimiter"],
            options["enclosure"],
            options["escape"],
            encoding=options["encoding"],
            strict=args.strict,
        ) as reader:
            # strip runs before header resolution so column names get trimmed too
            if args.strip:
                reader.set_value_filter(strip_whitespace)

            if args.header:
                reader.use_first_row_as_header(rename_map)
            elif args.columns:
                reader.set_column_names(args.columns.split(","))

            # installed after the header so empty header cells still become COL_<i>
            if args.empty_as_null:
                reader.set_value_filter(chain(strip_whitespace, empty_as_none) if args.strip else empty_as_none)

            if args.count:
                print(reader.count())
                sys.exit(0)

            summary = export_json_lines(reader, sys.stdout, log_every_rows=args.log_every_rows)
            logger.info("Summary: %s", summary)
    except CsvIteratorError as e:
        logger.exception("Fatal error: %s", e)
        sys.exit(2)

    sys.exit(0)


if __name__ == "__main__":
    main()
