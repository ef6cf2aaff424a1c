"""Data models for the analyzer module."""

from dataclasses import dataclass, field
from typing import Any


def _average(total: int, calls: int) -> int | None:
    """Truncating average; None when there were no calls."""
    if calls <= 0:
        return None
    return total // calls


@dataclass(frozen=True)
class ConnectionParams:
    """Parameters identifying a connection configuration."""

    user: str
    database: str
    host: str
    port: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user": self.user,
            "database": self.database,
            "host": self.host,
            "port": self.port,
        }


@dataclass
class QueryStats:
    """Accumulated timings for one prepared query text."""

    query: str
    programs: set[str] = field(default_factory=set)
    nr_preps: int = 0
    prep_time: int = 0
    nr_execs: int = 0
    exec_time: int = 0
    nr_failures: int = 0

    @property
    def total_time(self) -> int:
        """Prepare plus execute time (ms)."""
        return self.prep_time + self.exec_time

    @property
    def avg_prep_time(self) -> int | None:
        return _average(self.prep_time, self.nr_preps)

    @property
    def avg_exec_time(self) -> int | None:
        return _average(self.exec_time, self.nr_execs)

    def merge(self, other: "QueryStats") -> None:
        """Add another entry's counts into this one."""
        self.programs |= other.programs
        self.nr_preps += other.nr_preps
        self.prep_time += other.prep_time
        self.nr_execs += other.nr_execs
        self.exec_time += other.exec_time
        self.nr_failures += other.nr_failures

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "query": self.query,
            "programs": sorted(self.programs),
            "total_time_ms": self.total_time,
            "nr_preps": self.nr_preps,
            "prep_time_ms": self.prep_time,
            "avg_prep_time_ms": self.avg_prep_time,
            "nr_execs": self.nr_execs,
            "exec_time_ms": self.exec_time,
            "avg_exec_time_ms": self.avg_exec_time,
            "nr_failures": self.nr_failures,
        }


@dataclass
class ConnectionStats:
    """Accumulated timings for one connection configuration."""

    params: ConnectionParams
    programs: set[str] = field(default_factory=set)
    nr_connects: int = 0
    connect_time: int = 0
    nr_closes: int = 0
    close_time: int = 0
    nr_pings: int = 0
    ping_time: int = 0
    nr_failures: int = 0

    @property
    def total_time(self) -> int:
        """Connect plus close plus ping time (ms)."""
        return self.connect_time + self.close_time + self.ping_time

    @property
    def avg_connect_time(self) -> int | None:
        return _average(self.connect_time, self.nr_connects)

    @property
    def avg_close_time(self) -> int | None:
        return _average(self.close_time, self.nr_closes)

    @property
    def avg_ping_time(self) -> int | None:
        return _average(self.ping_time, self.nr_pings)

    def merge(self, other: "ConnectionStats") -> None:
        """Add another entry's counts into this one."""
        self.programs |= other.programs
        self.nr_connects += other.nr_connects
        self.connect_time += other.connect_time
        self.nr_closes += other.nr_closes
        self.close_time += other.close_time
        self.nr_pings += other.nr_pings
        self.ping_time += other.ping_time
        self.nr_failures += other.nr_failures

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "params": self.params.to_dict(),
            "programs": sorted(self.programs),
            "total_time_ms": self.total_time,
            "nr_connects": self.nr_connects,
            "connect_time_ms": self.connect_time,
            "avg_connect_time_ms": self.avg_connect_time,
            "nr_closes": self.nr_closes,
            "close_time_ms": self.close_time,
            "avg_close_time_ms": self.avg_close_time,
            "nr_pings": self.nr_pings,
            "ping_time_ms": self.ping_time,
            "avg_ping_time_ms": self.avg_ping_time,
            "nr_failures": self.nr_failures,
        }


@dataclass(frozen=True)
class SessionResult:
    """Outcome of replaying one connection's bucket."""

    connection_id: str
    rows_read: int
    rows_applied: int
    skipped_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.skipped_reason is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "connection_id": self.connection_id,
            "rows_read": self.rows_read,
            "rows_applied": self.rows_applied,
            "skipped_reason": self.skipped_reason,
        }
