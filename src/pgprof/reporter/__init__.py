"""Reporter module for ranking and rendering profile results."""

from pgprof.reporter.ranking import rank_connections, rank_queries
from pgprof.reporter.formatter import render, render_json, render_text

__all__ = [
    "rank_connections",
    "rank_queries",
    "render",
    "render_json",
    "render_text",
]
