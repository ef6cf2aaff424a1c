"""Session reconstruction - replays one connection's rows into the aggregators."""

import logging
from dataclasses import dataclass, field

from pgprof.collector.models import Operation, Row
from pgprof.collector.row_parser import decode_row
from pgprof.analyzer.aggregators import ConnectionAggregator, QueryAggregator
from pgprof.analyzer.models import (
    ConnectionParams,
    ConnectionStats,
    QueryStats,
    SessionResult,
)
from pgprof.errors import RowFormatError

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Live state for one connection while its rows are replayed."""

    connection_id: str
    params: ConnectionParams
    program: str
    # prepared statement name -> query text, local to this connection
    prepared: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_connect(cls, row: Row) -> "Session":
        """
        Build a session from the connection's initial connect row.

        Raises:
            RowFormatError: If a required detail is missing or the port is not an integer
        """
        port = row.detail("port")
        try:
            port_number = int(port)
        except ValueError:
            raise RowFormatError(f"invalid port '{port}'") from None

        params = ConnectionParams(
            user=row.detail("user"),
            database=row.detail("database"),
            host=row.detail("host"),
            port=port_number,
        )
        return cls(connection_id=row.connection_id, params=params, program=row.detail("prog"))


class SessionReconstructor:
    """
    Replays per-connection row buckets into query and connection totals.

    A bucket is expected to begin with a connect, followed by any number of
    prepare/execute/ping rows and possibly a close. Problems confined to one
    connection end that connection's replay with a skipped result; whatever
    was already merged stays merged.
    """

    def __init__(
        self,
        queries: QueryAggregator | None = None,
        connections: ConnectionAggregator | None = None,
    ):
        """
        Initialize the reconstructor.

        Args:
            queries: Aggregator receiving per-query totals
            connections: Aggregator receiving per-connection totals
        """
        self.queries = queries if queries is not None else QueryAggregator()
        self.connections = connections if connections is not None else ConnectionAggregator()

    def replay(self, connection_id: str, records: list[list[str]]) -> SessionResult:
        """
        Replay one connection's records in order.

        Args:
            connection_id: Connection the bucket belongs to
            records: Raw records from the bucket, in original order

        Returns:
            Session result; skipped_reason is set if the connection was abandoned
        """
        if not records:
            raise ValueError(f"empty bucket for connection {connection_id}")

        try:
            first = decode_row(records[0])
        except RowFormatError as e:
            return self._skipped(connection_id, records, 0, str(e))

        if first.operation is not Operation.CONNECT:
            return self._skipped(
                connection_id, records, 0,
                f"connection {connection_id} did not start with a 'connect' operation",
            )

        try:
            session = Session.from_connect(first)
        except RowFormatError as e:
            return self._skipped(connection_id, records, 0, str(e))

        self.connections.register_program(session.params, session.program)

        applied = 0
        for fields in records:
            try:
                reason = self._apply(session, decode_row(fields))
            except RowFormatError as e:
                reason = str(e)

            if reason is not None:
                return self._skipped(connection_id, records, applied, reason)
            applied += 1

        logger.debug("Connection %s: replayed %d rows", connection_id, applied)
        return SessionResult(
            connection_id=connection_id,
            rows_read=len(records),
            rows_applied=applied,
        )

    def _apply(self, session: Session, row: Row) -> str | None:
        """Fold one row into the aggregators. Returns a reason to stop, or None."""
        op = row.operation
        params = session.params

        if op is Operation.CONNECT:
            self.connections.merge(params, ConnectionStats(
                params=params,
                nr_connects=1,
                connect_time=row.elapsed_ms,
                nr_failures=row.failures,
            ))

        elif op is Operation.PREPARE:
            query = row.detail("query")
            name = row.detail("name")
            session.prepared[name] = query
            self.queries.merge(query, QueryStats(
                query=query,
                programs={session.program},
                nr_preps=1,
                prep_time=row.elapsed_ms,
                nr_failures=row.failures,
            ))

        elif op is Operation.EXECUTE:
            name = row.detail("name")
            query = session.prepared.get(name)
            if query is None:
                return f"execute on unprepared query name '{name}'"
            self.queries.merge(query, QueryStats(
                query=query,
                nr_execs=1,
                exec_time=row.elapsed_ms,
                nr_failures=row.failures,
            ))

        elif op is Operation.CLOSE:
            self.connections.merge(params, ConnectionStats(
                params=params,
                nr_closes=1,
                close_time=row.elapsed_ms,
                nr_failures=row.failures,
            ))

        elif op is Operation.PING:
            self.connections.merge(params, ConnectionStats(
                params=params,
                nr_pings=1,
                ping_time=row.elapsed_ms,
                nr_failures=row.failures,
            ))

        else:
            return "invalid row"

        return None

    def _skipped(
        self, connection_id: str, records: list[list[str]], applied: int, reason: str
    ) -> SessionResult:
        return SessionResult(
            connection_id=connection_id,
            rows_read=len(records),
            rows_applied=applied,
            skipped_reason=reason,
        )
