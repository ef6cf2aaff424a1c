"""Main profile analyzer that runs the full trace pipeline."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from pgprof.collector.partitioner import ConnectionPartitioner
from pgprof.collector.row_parser import RowParser
from pgprof.analyzer.aggregators import ConnectionAggregator, QueryAggregator
from pgprof.analyzer.models import (
    ConnectionParams,
    ConnectionStats,
    QueryStats,
    SessionResult,
)
from pgprof.analyzer.session import SessionReconstructor
from pgprof.errors import RowCountMismatchError

logger = logging.getLogger(__name__)


@dataclass
class ProfileReport:
    """Complete, unranked result of analyzing one trace."""

    # Metadata
    trace_file: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    rows_read: int = 0
    records_skipped: int = 0

    # Aggregates, in discovery order
    queries: list[tuple[str, QueryStats]] = field(default_factory=list)
    connections: list[tuple[ConnectionParams, ConnectionStats]] = field(default_factory=list)
    sessions: list[SessionResult] = field(default_factory=list)

    @property
    def skipped_sessions(self) -> list[SessionResult]:
        """Connections that were abandoned during replay."""
        return [s for s in self.sessions if not s.ok]

    def to_dict(self) -> dict[str, Any]:
        """Convert metadata to dictionary for serialization."""
        return {
            "trace_file": self.trace_file,
            "created_at": self.created_at.isoformat(),
            "rows_read": self.rows_read,
            "records_skipped": self.records_skipped,
            "connections_seen": len(self.sessions),
            "connections_skipped": [s.to_dict() for s in self.skipped_sessions],
        }


class ProfileAnalyzer:
    """
    Orchestrates trace analysis.

    Partitions the trace into per-connection buckets on disk, replays each
    bucket through a SessionReconstructor, and checks that every row written
    to a bucket was read back.
    """

    def __init__(self, scratch_dir: Path | str | None = None):
        """
        Initialize the profile analyzer.

        Args:
            scratch_dir: Parent directory for bucket files (defaults to the system temp dir)
        """
        self.scratch_dir = scratch_dir

    def analyze(self, trace_file: Path | str) -> ProfileReport:
        """
        Analyze a trace file.

        Args:
            trace_file: Path to a version-1 trace

        Returns:
            Aggregated report

        Raises:
            OSError: If the trace cannot be read
            ScratchDirectoryError: If bucket storage cannot be created
            RowCountMismatchError: If buckets lost or gained rows
        """
        # Totals are per call; each analyze() is one report pass.
        queries = QueryAggregator()
        connections = ConnectionAggregator()
        reconstructor = SessionReconstructor(queries, connections)
        parser = RowParser()
        sessions: list[SessionResult] = []
        rows_replayed = 0

        with ConnectionPartitioner(self.scratch_dir) as partitioner:
            partitioner.add_all(parser.iter_records(trace_file))

            for connection_id, records in partitioner.iter_buckets():
                rows_replayed += len(records)
                result = reconstructor.replay(connection_id, records)
                if not result.ok:
                    logger.warning("connection %s skipped: %s", connection_id, result.skipped_reason)
                sessions.append(result)

            rows_written = partitioner.rows_written

        if rows_written != rows_replayed:
            raise RowCountMismatchError(rows_written, rows_replayed)

        skipped = sum(1 for s in sessions if not s.ok)
        logger.info(
            "Replayed %d rows from %d connections (%d skipped)",
            rows_replayed, len(sessions), skipped,
        )

        return ProfileReport(
            trace_file=str(trace_file),
            created_at=datetime.now(),
            rows_read=parser.rows_read,
            records_skipped=parser.skipped,
            queries=queries.items(),
            connections=connections.items(),
            sessions=sessions,
        )
