"""Saleae Import Package.

Decoders for Saleae Logic exports: the versioned binary container (digital
transitions and analog waveforms) and the analyzer CSV export, including
reconstruction of I2C transactions from individual rows.
"""

__version__ = "0.1.0"

from .core import (
    Arg,
    EventSink,
    SaleaeParseError,
    TraceStore,
    TrackKind,
    seconds_to_ns,
)
from .importer import ImportConfig, import_bytes, import_file
from .parsers import (
    SaleaeBinaryReader,
    SaleaeCsvReader,
    guess_trace_type,
)

# Import submodules for easy access
from . import core
from . import parsers
from . import exporters

__all__ = [
    # Core types
    "Arg",
    "EventSink",
    "SaleaeParseError",
    "TraceStore",
    "TrackKind",
    "seconds_to_ns",
    # Readers
    "SaleaeBinaryReader",
    "SaleaeCsvReader",
    "guess_trace_type",
    # Import helpers
    "ImportConfig",
    "import_bytes",
    "import_file",
    # Submodules
    "core",
    "parsers",
    "exporters",
]
