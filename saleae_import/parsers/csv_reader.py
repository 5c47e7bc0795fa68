"""
Saleae CSV Export Reader

Streams a Saleae analyzer CSV export into interval events. Lines are
reassembled across chunk boundaries, the first non-blank line is the
header, and every following row becomes one interval on the track of its
analyzer. Rows of the I2C analyzer are additionally folded into
transaction intervals.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..core.errors import SaleaeParseError
from ..core.event_sink import Arg, ArgValue, EventSink, TrackKind
from ..core.timestamps import seconds_to_ns
from .csv_row import parse_csv_line
from .csv_schema import ColumnRole, CsvSchema, resolve_schema
from .i2c_transactions import (
    I2CRow,
    I2CTransaction,
    I2CTransactionReconstructor,
    TransactionReconstructorConfig,
)
from .line_assembler import LineAssembler

logger = logging.getLogger(__name__)

# Row types whose lowercase value becomes the interval category
CATEGORY_TYPES = ("data", "address")


@dataclass
class CsvReaderConfig:
    """Configuration for the CSV reader"""

    track_name_prefix: str = "Saleae CSV: "
    default_analyzer: str = "Unknown"
    default_type: str = "event"
    # Must encode "\n" as the single byte 0x0a, e.g. UTF-8 or Latin-1
    encoding: str = "utf-8"


def parse_seconds(text: str, column: str, required: bool) -> float:
    """
    Parse a seconds column value.

    Args:
        text: Trimmed field text
        column: Column name used in error messages
        required: Whether an empty value is an error

    Returns:
        Seconds as float; 0.0 for an empty optional value

    Raises:
        SaleaeParseError: If the value is missing (when required) or not a
            finite number
    """
    if not text:
        if required:
            raise SaleaeParseError(f"Saleae CSV row missing {column}")
        return 0.0
    try:
        value = float(text)
    except ValueError:
        raise SaleaeParseError(f"Saleae CSV invalid {column} '{text}'") from None
    if not math.isfinite(value):
        raise SaleaeParseError(f"Saleae CSV invalid {column} '{text}'")
    return value


def classify_arg_value(value: str) -> ArgValue:
    """``"true"``/``"false"`` (any case) become booleans, anything else stays text."""
    lower = value.lower()
    if lower in ("true", "false"):
        return lower == "true"
    return value


class SaleaeCsvReader:
    """
    Chunked reader for Saleae CSV exports.

    ``push`` may be called with arbitrarily split chunks; each complete line
    is handled immediately. ``end_of_input`` flushes a trailing line that
    has no newline.
    """

    def __init__(
        self,
        sink: EventSink,
        config: Optional[CsvReaderConfig] = None,
        transaction_config: Optional[TransactionReconstructorConfig] = None,
    ):
        self.sink = sink
        self.config = config or CsvReaderConfig()
        self.lines = LineAssembler(self.config.encoding)
        self.reconstructor = I2CTransactionReconstructor(transaction_config)
        self.schema: Optional[CsvSchema] = None
        self.track_ids: Dict[str, int] = {}
        self.rows_parsed = 0
        self.transactions_emitted = 0

    def push(self, data: bytes) -> None:
        self.lines.push(data)
        for line in self.lines.lines():
            self.parse_line(line)

    def end_of_input(self) -> None:
        remainder = self.lines.finish()
        if remainder:
            logger.debug("Flushing unterminated trailing line")
            self.parse_line(remainder)
        unfinished = self.reconstructor.open_analyzers()
        if unfinished:
            logger.debug("Transactions left open at end of input: %s", unfinished)

    def parse_line(self, line: str) -> None:
        if line.endswith("\r"):
            line = line[:-1]
        if not line.strip():
            return
        if self.schema is None:
            self.parse_header(line)
        else:
            self.parse_row(line)

    def parse_header(self, line: str) -> None:
        self.schema = resolve_schema(parse_csv_line(line), self.sink)
        logger.debug("Saleae CSV columns: %s", self.schema.columns)

    def track_for(self, analyzer: str) -> int:
        track_id = self.track_ids.get(analyzer)
        if track_id is None:
            track_id = self.sink.create_or_find_track(
                TrackKind.CSV_SLICE, analyzer, self.config.track_name_prefix + analyzer
            )
            self.track_ids[analyzer] = track_id
        return track_id

    def event_name(self, row: List[str], row_type: str) -> str:
        """Prefer the data value, then the address value, then the row type."""
        schema = self.schema
        data_value = schema.value(row, ColumnRole.DATA)
        if data_value:
            return data_value
        address_value = schema.value(row, ColumnRole.ADDRESS)
        if address_value:
            return address_value
        return row_type

    def row_args(self, row: List[str]) -> List[Arg]:
        args = []
        for i in self.schema.extra_columns():
            value = row[i].strip()
            if value:
                args.append(
                    Arg(
                        self.schema.columns[i],
                        classify_arg_value(value),
                        key_id=self.schema.key_id(i),
                    )
                )
        return args

    def parse_row(self, line: str) -> None:
        schema = self.schema
        row = schema.pad(parse_csv_line(line))

        analyzer = schema.value(row, ColumnRole.NAME) or self.config.default_analyzer
        row_type = schema.value(row, ColumnRole.TYPE) or self.config.default_type
        type_lower = row_type.lower()

        start_s = parse_seconds(
            schema.value(row, ColumnRole.START_TIME), "start_time", required=True
        )
        duration_s = parse_seconds(
            schema.value(row, ColumnRole.DURATION), "duration", required=False
        )
        ts_ns = seconds_to_ns(start_s)
        dur_ns = seconds_to_ns(duration_s)

        track_id = self.track_for(analyzer)
        category = type_lower if type_lower in CATEGORY_TYPES else None
        self.sink.emit_interval(
            ts_ns,
            track_id,
            category,
            self.event_name(row, row_type),
            dur_ns,
            self.row_args(row),
        )
        self.rows_parsed += 1

        transaction = self.reconstructor.process_row(
            I2CRow(
                analyzer=analyzer,
                row_type=type_lower,
                ts_ns=ts_ns,
                dur_ns=dur_ns,
                address=schema.value(row, ColumnRole.ADDRESS),
                read=schema.value(row, ColumnRole.READ),
                data=schema.value(row, ColumnRole.DATA),
            )
        )
        if transaction is not None:
            self.emit_transaction(track_id, transaction)

    def emit_transaction(self, track_id: int, transaction: I2CTransaction) -> None:
        self.sink.emit_interval(
            transaction.start_ts_ns,
            track_id,
            self.reconstructor.config.category,
            transaction.name,
            transaction.duration_ns,
            transaction.args(),
        )
        self.transactions_emitted += 1
