"""Report rendering for ranked profile results."""

import json

from pgprof.analyzer.models import ConnectionParams, ConnectionStats, QueryStats
from pgprof.analyzer.profile_analyzer import ProfileReport
from pgprof.reporter.ranking import rank_connections, rank_queries

QUERIES_HEADER = "---------------------------------------- QUERIES ---------"
CONNECTIONS_HEADER = "---------------------------------------- CONNECTIONS -----"


def render_text(report: ProfileReport, limit: int | None = None) -> str:
    """
    Render the report as plain text.

    Args:
        report: Aggregated profile report
        limit: Optional maximum entries per section

    Returns:
        Report text with a QUERIES section followed by a CONNECTIONS section
    """
    lines = [QUERIES_HEADER, ""]
    for query, stats in rank_queries(report.queries, limit):
        lines.extend(_query_block(query, stats))

    lines.extend([CONNECTIONS_HEADER, ""])
    for params, stats in rank_connections(report.connections, limit):
        lines.extend(_connection_block(params, stats))

    return "\n".join(lines) + "\n"


def _operation_lines(label: str, short: str, total: int, calls: int, avg: int | None) -> list[str]:
    """Time, call count and (when there were calls) average for one operation."""
    lines = [
        f"{label:>10}: {total} ms",
        f"{'Calls':>20}: {calls}",
    ]
    if avg is not None:
        lines.append(f"{'Avg time/' + short:>20}: {avg} ms")
    return lines


def _query_block(query: str, stats: QueryStats) -> list[str]:
    lines = [
        "Query:",
        query,
        "",
        f"Total time: {stats.total_time} ms",
    ]
    lines += _operation_lines("Prepare", "prep", stats.prep_time, stats.nr_preps, stats.avg_prep_time)
    lines += _operation_lines("Execute", "exec", stats.exec_time, stats.nr_execs, stats.avg_exec_time)
    lines += [
        f"{'Failures':>10}: {stats.nr_failures}",
        f"Called from: {', '.join(sorted(stats.programs))}",
        "",
        "",
    ]
    return lines


def _connection_block(params: ConnectionParams, stats: ConnectionStats) -> list[str]:
    lines = [
        "Connection:",
        f"{'user':>10} = {params.user}",
        f"{'database':>10} = {params.database}",
        f"{'host':>10} = {params.host}",
        f"{'port':>10} = {params.port}",
        "",
        f"Total time: {stats.total_time} ms",
    ]
    lines += _operation_lines("Connect", "conn", stats.connect_time, stats.nr_connects, stats.avg_connect_time)
    lines += _operation_lines("Close", "close", stats.close_time, stats.nr_closes, stats.avg_close_time)
    lines += _operation_lines("Ping", "ping", stats.ping_time, stats.nr_pings, stats.avg_ping_time)
    lines += [
        f"{'Failures':>10}: {stats.nr_failures}",
        f"Called from: {', '.join(sorted(stats.programs))}",
        "",
        "",
    ]
    return lines


def render_json(report: ProfileReport, limit: int | None = None) -> str:
    """Render the ranked report as JSON."""
    output = {
        "analysis": report.to_dict(),
        "queries": [stats.to_dict() for _, stats in rank_queries(report.queries, limit)],
        "connections": [
            stats.to_dict() for _, stats in rank_connections(report.connections, limit)
        ],
    }
    return json.dumps(output, indent=2)


def render(report: ProfileReport, format: str = "text", limit: int | None = None) -> str:
    """Render the report in the requested format (text, json)."""
    renderers = {
        "text": render_text,
        "json": render_json,
    }

    renderer = renderers.get(format.lower())
    if not renderer:
        raise ValueError(f"Unsupported report format: {format}. Supported: {list(renderers.keys())}")

    return renderer(report, limit)
