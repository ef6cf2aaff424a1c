"""Analyzer module for session reconstruction and aggregation."""

from pgprof.analyzer.profile_analyzer import ProfileAnalyzer, ProfileReport
from pgprof.analyzer.session import Session, SessionReconstructor
from pgprof.analyzer.aggregators import ConnectionAggregator, QueryAggregator
from pgprof.analyzer.models import (
    ConnectionParams,
    ConnectionStats,
    QueryStats,
    SessionResult,
)

__all__ = [
    "ProfileAnalyzer",
    "ProfileReport",
    "Session",
    "SessionReconstructor",
    "ConnectionAggregator",
    "QueryAggregator",
    "ConnectionParams",
    "ConnectionStats",
    "QueryStats",
    "SessionResult",
]
