"""Exporters for imported Saleae traces."""

from .summary import print_summary, summarize_i2c_transactions, summarize_trace
from .tables import TABLE_FORMATS, trace_tables, write_tables

__all__ = [
    "TABLE_FORMATS",
    "print_summary",
    "summarize_i2c_transactions",
    "summarize_trace",
    "trace_tables",
    "write_tables",
]
