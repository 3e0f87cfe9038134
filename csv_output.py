"""Append collected rows to the results CSV."""

import csv
import logging
import os

from exceptions import OutputError

logger = logging.getLogger(__name__)

HEADER = ["name", "address", "phone", "url", "nextPageToken"]


def append_rows(path, rows):
    """Append *rows* to the CSV at *path*, returning how many were written.

    The header is written only when the file is new or empty, so repeated
    runs against the same file keep a single header row.
    """
    count = 0
    try:
        is_empty = (not os.path.exists(path)) or os.path.getsize(path) == 0

        with open(path, mode="a", newline="", encoding="utf-8") as file:
            writer = csv.writer(file)

            if is_empty:
                writer.writerow(HEADER)

            for row in rows:
                writer.writerow(row)
                count += 1
    except OSError as e:
        raise OutputError(f"error writing {path}: {e}") from e

    logger.info("Wrote %d rows to %s", count, path)
    return count
