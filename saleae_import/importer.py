"""
Import driver for Saleae exports.

Picks the binary or CSV reader, feeds it the file in fixed-size chunks and
signals end of input. The resulting events land in an ``EventSink``
(a ``TraceStore`` unless the caller supplies one).
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .core.errors import SaleaeParseError
from .core.event_sink import EventSink, TraceStore
from .parsers import (
    BINARY,
    CSV,
    BinaryReaderConfig,
    CsvReaderConfig,
    SaleaeBinaryReader,
    SaleaeCsvReader,
    guess_trace_type,
)

logger = logging.getLogger(__name__)

SNIFF_BYTES = 512


@dataclass
class ImportConfig:
    """Configuration for importing one export"""

    # "auto", "binary" or "csv"
    trace_format: str = "auto"
    chunk_size: int = 1 << 20
    binary: Optional[BinaryReaderConfig] = None
    csv: Optional[CsvReaderConfig] = None


def create_reader(
    trace_format: str, sink: EventSink, config: Optional[ImportConfig] = None
) -> Union[SaleaeBinaryReader, SaleaeCsvReader]:
    config = config or ImportConfig()
    if trace_format == BINARY:
        return SaleaeBinaryReader(sink, config.binary)
    if trace_format == CSV:
        return SaleaeCsvReader(sink, config.csv)
    raise ValueError(f"Unknown trace format: {trace_format}")


def resolve_format(head: bytes, filename: Optional[str], config: ImportConfig) -> str:
    if config.trace_format != "auto":
        return config.trace_format
    trace_format = guess_trace_type(head, filename)
    if trace_format is None:
        raise SaleaeParseError(
            f"Could not recognise {filename or 'input'} as a Saleae binary or CSV export"
        )
    return trace_format


def import_bytes(
    data: bytes,
    sink: Optional[EventSink] = None,
    config: Optional[ImportConfig] = None,
    filename: Optional[str] = None,
) -> EventSink:
    """
    Import an export that is already in memory.

    Args:
        data: Complete file contents
        sink: Destination for events. If None, a new TraceStore is created.
        config: Import configuration. If None, uses defaults.
        filename: Optional name used for format guessing and messages

    Returns:
        The sink the events were written to
    """
    config = config or ImportConfig()
    sink = sink if sink is not None else TraceStore()
    reader = create_reader(resolve_format(data[:SNIFF_BYTES], filename, config), sink, config)
    for start in range(0, len(data), config.chunk_size):
        reader.push(data[start : start + config.chunk_size])
    reader.end_of_input()
    return sink


def import_file(
    path: Union[str, Path],
    sink: Optional[EventSink] = None,
    config: Optional[ImportConfig] = None,
) -> EventSink:
    """
    Stream a Saleae export from disk into an event sink.

    Args:
        path: Path to a ``.bin`` or ``.csv`` export
        sink: Destination for events. If None, a new TraceStore is created.
        config: Import configuration. If None, uses defaults.

    Returns:
        The sink the events were written to

    Raises:
        FileNotFoundError: If ``path`` does not exist
        SaleaeParseError: If the export cannot be decoded

    Example:
        >>> store = import_file("capture.csv")
        >>> print(store.slices_frame().height)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    config = config or ImportConfig()
    sink = sink if sink is not None else TraceStore()

    with open(path, "rb") as f:
        head = f.read(SNIFF_BYTES)
        trace_format = resolve_format(head, path.name, config)
        logger.debug("Importing %s as Saleae %s export", path, trace_format)
        reader = create_reader(trace_format, sink, config)
        if head:
            reader.push(head)
        while True:
            chunk = f.read(config.chunk_size)
            if not chunk:
                break
            reader.push(chunk)
    reader.end_of_input()
    return sink
