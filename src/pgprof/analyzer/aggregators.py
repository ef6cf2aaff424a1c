"""Running totals per query text and per connection configuration."""

from pgprof.analyzer.models import ConnectionParams, ConnectionStats, QueryStats


class QueryAggregator:
    """Accumulates QueryStats keyed by verbatim query text."""

    def __init__(self):
        """Initialize the aggregator."""
        self.stats: dict[str, QueryStats] = {}

    def merge(self, query: str, delta: QueryStats) -> QueryStats:
        """
        Fold a delta into the entry for a query.

        Args:
            query: Query text (exact string match, placeholders included)
            delta: Counts to add; its programs are unioned in

        Returns:
            The updated entry
        """
        entry = self._ensure_entry(query)
        entry.merge(delta)
        return entry

    def register_program(self, query: str, program: str) -> None:
        """Record that a program prepared this query."""
        self.merge(query, QueryStats(query=query, programs={program}))

    def _ensure_entry(self, query: str) -> QueryStats:
        """Ensure a zeroed entry exists for the query."""
        if query not in self.stats:
            self.stats[query] = QueryStats(query=query)
        return self.stats[query]

    def get(self, query: str) -> QueryStats | None:
        return self.stats.get(query)

    def items(self) -> list[tuple[str, QueryStats]]:
        """Export entries in discovery order."""
        return list(self.stats.items())

    def __contains__(self, query: str) -> bool:
        return query in self.stats

    def __len__(self) -> int:
        return len(self.stats)


class ConnectionAggregator:
    """Accumulates ConnectionStats keyed by ConnectionParams."""

    def __init__(self):
        """Initialize the aggregator."""
        self.stats: dict[ConnectionParams, ConnectionStats] = {}

    def merge(self, params: ConnectionParams, delta: ConnectionStats) -> ConnectionStats:
        """
        Fold a delta into the entry for a connection configuration.

        Connections with equal params share one entry regardless of their ids.
        """
        entry = self._ensure_entry(params)
        entry.merge(delta)
        return entry

    def register_program(self, params: ConnectionParams, program: str) -> None:
        """Record that a program connected with these params."""
        self.merge(params, ConnectionStats(params=params, programs={program}))

    def _ensure_entry(self, params: ConnectionParams) -> ConnectionStats:
        """Ensure a zeroed entry exists for the params."""
        if params not in self.stats:
            self.stats[params] = ConnectionStats(params=params)
        return self.stats[params]

    def get(self, params: ConnectionParams) -> ConnectionStats | None:
        return self.stats.get(params)

    def items(self) -> list[tuple[ConnectionParams, ConnectionStats]]:
        """Export entries in discovery order."""
        return list(self.stats.items())

    def __contains__(self, params: ConnectionParams) -> bool:
        return params in self.stats

    def __len__(self) -> int:
        return len(self.stats)
