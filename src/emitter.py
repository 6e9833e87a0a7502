"""
Row Emitter Module

Formats ResultRows as delimited text lines:

    timestamp,median_0,median_1,...,median_{K-1}

No header is written. Rows appear in the order they were produced.
"""

import logging
from typing import IO, Iterable

from models import ResultRow

logger = logging.getLogger(__name__)


def format_row(row: ResultRow, delimiter: str = ",") -> str:
    """
    Format one row as a single text line (without the newline).

    Args:
        row: Reduced frame
        delimiter: Field separator

    Returns:
        Timestamp in %.10g form followed by the integer cell medians
    """
    fields = [f"{row.timestamp:.10g}"]
    fields.extend(str(int(m)) for m in row.medians)
    return delimiter.join(fields)


class RowEmitter:
    """Writes formatted rows to a text stream"""

    def __init__(self, stream: IO[str], delimiter: str = ","):
        self.stream = stream
        self.delimiter = delimiter
        self.rows_written = 0

    def emit(self, row: ResultRow):
        self.stream.write(format_row(row, self.delimiter) + "\n")
        self.rows_written += 1

    def emit_all(self, rows: Iterable[ResultRow]) -> int:
        """
        Write every row of an iterable.

        Returns:
            Number of rows written by this call
        """
        count = 0
        try:
            for row in rows:
                self.emit(row)
                count += 1
        finally:
            self.stream.flush()
        logger.debug(f"Wrote {count} rows")
        return count
