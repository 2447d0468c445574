import json
import logging
import time
from typing import TextIO

from .reader import CsvFileIterator
from .types import ExportSummary

logger = logging.getLogger(__name__)


def export_json_lines(
    reader: CsvFileIterator,
    out: TextIO,
    *,
    log_every_rows: int = 10_000,  # periodic progress log
) -> ExportSummary:
    """
    Stream every data row of `reader` to `out`, one JSON object per line.

    Returns a summary dict:
      {
        "rows": int,         # rows written
        "padded": int,       # rows with fewer fields than column names (None-padded)
        "extended": int,     # rows with more fields than column names (COL_<i> added)
        "duration_s": float
      }

    Notes:
    - Only one row is held in memory at a time.
    - Width counts compare against the column names set before the export;
      with no column names every row counts as neither.
    """
    if log_every_rows <= 0:
        raise ValueError("log_every_rows must be > 0")

    t0 = time.time()
    declared = len(reader.get_column_names())

    rows = 0
    padded = 0
    extended = 0

    for row in reader:
        rows += 1

        raw_width = reader.raw_width()
        if declared and raw_width is not None:
            if raw_width < declared:
                padded += 1
            elif raw_width > declared:
                extended += 1

        out.write(json.dumps(row, ensure_ascii=False, default=str))
        out.write("\n")

        if rows % log_every_rows == 0:
            logger.info("Progress: rows=%d padded=%d extended=%d", rows, padded, extended)

    summary: ExportSummary = {
        "rows": rows,
        "padded": padded,
        "extended": extended,
        "duration_s": round(time.time() - t0, 3),
    }
    logger.debug("Export summary: %s", summary)
    return summary
