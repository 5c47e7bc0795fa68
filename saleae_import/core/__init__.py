"""Core building blocks shared by the Saleae readers."""

from .byte_cursor import ByteCursor
from .errors import SaleaeParseError
from .event_sink import Arg, EventSink, TraceStore, TrackKind
from .timestamps import seconds_to_ns

__all__ = [
    "Arg",
    "ByteCursor",
    "EventSink",
    "SaleaeParseError",
    "TraceStore",
    "TrackKind",
    "seconds_to_ns",
]
