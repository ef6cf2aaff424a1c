"""Disk-backed partitioning of trace records by connection id.

Rows are not kept in memory. Each connection gets an append-only bucket file
in a private scratch directory, so traces larger than RAM can be analyzed.
"""

import csv
import logging
import shutil
import tempfile
from pathlib import Path
from typing import IO, Iterable, Iterator

from pgprof.collector.row_parser import TRACE_ENCODING, TRACE_ERRORS
from pgprof.errors import ScratchDirectoryError

logger = logging.getLogger(__name__)


class ConnectionPartitioner:
    """
    Splits a record stream into one bucket file per connection id.

    Use as a context manager; the scratch directory and every bucket file are
    removed on exit, whether or not an exception is propagating.
    """

    BUCKET_SUFFIX = ".csv"

    def __init__(self, scratch_dir: Path | str | None = None):
        """
        Initialize the partitioner.

        Args:
            scratch_dir: Parent directory for the private bucket directory
                (defaults to the system temp dir)
        """
        self.scratch_dir = Path(scratch_dir) if scratch_dir else None
        self.path: Path | None = None
        self.rows_written = 0

        # connection id -> bucket file, in discovery order
        self._buckets: dict[str, Path] = {}

        # Single-slot cache: adjacent rows usually share a connection.
        self._cached_id: str | None = None
        self._cached_handle: IO[str] | None = None
        self._cached_writer = None

    def __enter__(self) -> "ConnectionPartitioner":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> Path:
        """Create the private scratch directory."""
        try:
            self.path = Path(tempfile.mkdtemp(prefix="pgprof-", suffix=".d", dir=self.scratch_dir))
        except OSError as e:
            raise ScratchDirectoryError(
                f"cannot create scratch directory under {self.scratch_dir or tempfile.gettempdir()}: {e}"
            ) from e
        logger.debug("Created scratch directory %s", self.path)
        return self.path

    def add(self, connection_id: str, fields: list[str]) -> None:
        """Append one record to its connection's bucket."""
        writer = self._get_writer(connection_id)
        writer.writerow(fields)
        self.rows_written += 1

    def add_all(self, records: Iterable[tuple[str, list[str]]]) -> int:
        """
        Partition a whole record stream.

        Returns:
            Number of records written by this call
        """
        before = self.rows_written
        for connection_id, fields in records:
            self.add(connection_id, fields)
        self._close_cached()

        written = self.rows_written - before
        logger.info(
            "Partitioned %d rows into %d connection buckets", written, len(self._buckets)
        )
        return written

    def _get_writer(self, connection_id: str):
        """Get a CSV writer for the bucket, reusing the cached handle if possible."""
        if connection_id == self._cached_id and self._cached_writer is not None:
            return self._cached_writer

        self._close_cached()

        bucket = self._buckets.get(connection_id)
        if bucket is None:
            bucket = self._bucket_path(len(self._buckets))
            self._buckets[connection_id] = bucket
            logger.debug("New bucket %s for connection %s", bucket.name, connection_id)

        handle = open(bucket, "a", encoding=TRACE_ENCODING, errors=TRACE_ERRORS, newline="")
        self._cached_id = connection_id
        self._cached_handle = handle
        self._cached_writer = csv.writer(handle)
        return self._cached_writer

    def _bucket_path(self, index: int) -> Path:
        """Bucket files are named by discovery index, never by the raw id."""
        if self.path is None:
            raise RuntimeError("Partitioner is not open")
        return self.path / f"{index:08d}{self.BUCKET_SUFFIX}"

    def _close_cached(self) -> None:
        """Close the cached bucket handle, if any."""
        if self._cached_handle is not None:
            self._cached_handle.close()
        self._cached_id = None
        self._cached_handle = None
        self._cached_writer = None

    @property
    def connection_ids(self) -> list[str]:
        """Connection ids in the order they were first seen."""
        return list(self._buckets)

    def read_bucket(self, connection_id: str) -> list[list[str]]:
        """Read back all records of one connection, in original order."""
        self._close_cached()
        with open(
            self._buckets[connection_id], "r", encoding=TRACE_ENCODING, errors=TRACE_ERRORS, newline=""
        ) as f:
            return list(csv.reader(f))

    def iter_buckets(self) -> Iterator[tuple[str, list[list[str]]]]:
        """Yield (connection_id, records) for every bucket."""
        for connection_id in self.connection_ids:
            yield connection_id, self.read_bucket(connection_id)

    def close(self) -> None:
        """Close the cached handle and remove all bucket files and the directory."""
        self._close_cached()
        if self.path is None:
            return

        for bucket in self._buckets.values():
            bucket.unlink(missing_ok=True)
        shutil.rmtree(self.path, ignore_errors=True)
        logger.debug("Removed scratch directory %s", self.path)

        self.path = None
        self._buckets.clear()
