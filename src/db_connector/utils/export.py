"""Writing query results to delimited text files."""

import csv
import logging
from pathlib import Path
from typing import Union

from db_connector.exceptions import ExportError
from db_connector.models.query import QueryResult
from db_connector.utils.serialization import convert_value_to_text

logger = logging.getLogger(__name__)


def write_csv(result: QueryResult, path: Union[str, Path]) -> int:
    """
    Write a result's rows to a CSV file, one line per row.

    Columns keep the result order, values are stringified the same way
    inserted values are, NULL becomes an empty field, and there is no
    header line. Fields containing the delimiter or a newline are quoted.

    Args:
        result: Rows to write
        path: Destination file (created or truncated)

    Returns:
        Number of rows written

    Raises:
        ExportError: If the file cannot be written
    """
    path = Path(path)
    try:
        with path.open("w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, lineterminator="\n")
            for values in result.iter_values():
                writer.writerow(
                    "" if value is None else convert_value_to_text(value)
                    for value in values
                )
    except OSError as e:
        raise ExportError(f"Could not write {path}: {e}") from e

    logger.debug(f"Wrote {result.row_count} rows to {path}")
    return result.row_count
