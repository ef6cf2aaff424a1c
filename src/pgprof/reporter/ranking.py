"""Ranking of aggregated entries by cumulative time."""

from pgprof.analyzer.models import ConnectionParams, ConnectionStats, QueryStats


def rank_queries(
    items: list[tuple[str, QueryStats]], limit: int | None = None
) -> list[tuple[str, QueryStats]]:
    """
    Sort queries by prepare + execute time, most expensive first.

    Ties keep their discovery order.

    Args:
        items: (query, stats) pairs
        limit: Optional maximum number of entries to return
    """
    ranked = sorted(items, key=lambda item: item[1].total_time, reverse=True)
    return ranked[:limit] if limit else ranked


def rank_connections(
    items: list[tuple[ConnectionParams, ConnectionStats]], limit: int | None = None
) -> list[tuple[ConnectionParams, ConnectionStats]]:
    """Sort connections by connect + close + ping time, most expensive first."""
    ranked = sorted(items, key=lambda item: item[1].total_time, reverse=True)
    return ranked[:limit] if limit else ranked
