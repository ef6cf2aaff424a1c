"""Row parser for version-1 profiling traces.

A trace is a CSV file; each record is::

    version, connection_id, operation, elapsed_ms, status, key1, value1, ...

Only records tagged with the supported version are handed on. Records of any
other version are skipped without complaint so newer writers can share a log
with older readers.
"""

import csv
import logging
import sys
from pathlib import Path
from typing import Iterator

from pgprof.collector.models import Operation, Row
from pgprof.errors import RowFormatError

logger = logging.getLogger(__name__)

SUPPORTED_VERSION = "1"

# Undecodable bytes are carried through as surrogates and written back unchanged.
TRACE_ENCODING = "utf-8"
TRACE_ERRORS = "surrogateescape"

# Query text has no length bound.
csv.field_size_limit(sys.maxsize)

# version, connection_id, operation, elapsed_ms, status
FIXED_COLUMNS = 5


class RowParser:
    """Streams a trace file and yields supported records keyed by connection."""

    def __init__(self, version: str = SUPPORTED_VERSION):
        """Initialize parser for a given format version tag."""
        self.version = version
        self.rows_read = 0
        self.skipped = 0

    def iter_records(self, path: Path | str) -> Iterator[tuple[str, list[str]]]:
        """
        Stream records from a trace file.

        Args:
            path: Path to the trace file

        Yields:
            (connection_id, fields) for every supported record, in file order
        """
        with open(path, "r", encoding=TRACE_ENCODING, errors=TRACE_ERRORS, newline="") as f:
            yield from self.iter_lines(f)

    def iter_lines(self, lines) -> Iterator[tuple[str, list[str]]]:
        """Same as iter_records, over an iterable of text lines."""
        for fields in csv.reader(lines):
            connection_id = self.accept(fields)
            if connection_id is None:
                self.skipped += 1
                continue
            self.rows_read += 1
            yield connection_id, fields

        logger.debug(
            "Read %d version-%s rows, skipped %d other records",
            self.rows_read, self.version, self.skipped,
        )

    def accept(self, fields: list[str]) -> str | None:
        """Return the connection id of a supported record, else None."""
        if len(fields) < 2 or fields[0] != self.version:
            return None
        return fields[1]


def decode_row(fields: list[str]) -> Row:
    """
    Decode a supported record into a Row.

    Args:
        fields: Raw fields of one record, version tag included

    Returns:
        Decoded row

    Raises:
        RowFormatError: If the record is malformed
    """
    if len(fields) < FIXED_COLUMNS:
        raise RowFormatError(
            f"invalid row: expected at least {FIXED_COLUMNS} fields, got {len(fields)}"
        )

    version, connection_id, op, elapsed, status = fields[:FIXED_COLUMNS]

    try:
        operation = Operation(op)
    except ValueError:
        raise RowFormatError(f"invalid row: unknown operation '{op}'") from None

    try:
        elapsed_ms = int(elapsed)
    except ValueError:
        raise RowFormatError(f"invalid row: elapsed time '{elapsed}' is not an integer") from None
    if elapsed_ms < 0:
        raise RowFormatError(f"invalid row: negative elapsed time {elapsed_ms}")

    return Row(
        format_version=version,
        connection_id=connection_id,
        operation=operation,
        elapsed_ms=elapsed_ms,
        status=status,
        details=_parse_details(fields[FIXED_COLUMNS:]),
    )


def _parse_details(items: list[str]) -> tuple[tuple[str, str], ...]:
    """Pair up a flat key/value list."""
    if len(items) % 2:
        raise RowFormatError("odd number of elements in association list")

    pairs = []
    seen = set()
    for key, value in zip(items[::2], items[1::2]):
        if key in seen:
            raise RowFormatError(f"duplicate key {key} in association list")
        seen.add(key)
        pairs.append((key, value))
    return tuple(pairs)
