"""Collector module for reading and partitioning profiling traces."""

from pgprof.collector.row_parser import RowParser, decode_row, SUPPORTED_VERSION
from pgprof.collector.partitioner import ConnectionPartitioner
from pgprof.collector.models import Operation, Row

__all__ = [
    "RowParser",
    "decode_row",
    "SUPPORTED_VERSION",
    "ConnectionPartitioner",
    "Operation",
    "Row",
]
