"""pgprof - Profiling trace analyzer for database access layers.

Ranks queries and connection configurations by cumulative time spent.
"""

__version__ = "1.0.0"

from pgprof.config import get_settings

__all__ = ["__version__", "get_settings"]
