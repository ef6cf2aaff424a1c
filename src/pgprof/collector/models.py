"""Data models for the collector module."""

from dataclasses import dataclass, field
from enum import Enum

from pgprof.errors import MissingDetailError

STATUS_OK = "ok"


class Operation(Enum):
    """Type of traced database operation."""
    CONNECT = "connect"
    PREPARE = "prepare"
    EXECUTE = "execute"
    CLOSE = "close"
    PING = "ping"


@dataclass(frozen=True)
class Row:
    """Represents one decoded version-1 trace record."""

    format_version: str
    connection_id: str
    operation: Operation
    elapsed_ms: int
    status: str
    details: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def failed(self) -> bool:
        """Any status other than ok counts as a failure."""
        return self.status != STATUS_OK

    @property
    def failures(self) -> int:
        """Failure contribution of this row (0 or 1)."""
        return 1 if self.failed else 0

    def detail(self, key: str) -> str:
        """
        Get a required detail value.

        Raises:
            MissingDetailError: If the key is absent
        """
        for k, v in self.details:
            if k == key:
                return v
        raise MissingDetailError(key)
