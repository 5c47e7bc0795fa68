"""
Saleae Binary Export Reader

Decodes the Saleae Logic binary export into counter events. Three container
variants exist and are dispatched once per import:

- ``LEGACY``: untagged header ``file_id:u32, version:i32, data_kind:i32``
  followed by one v0 chunk
- ``TAGGED_V0``: ``<SALEAE>`` tag, ``version:i32 == 0, data_kind:i32``
  followed by one v0 chunk
- ``TAGGED_V1``: ``<SALEAE>`` tag, ``version:i32 == 1, data_kind:i32,
  chunk_count:i64`` followed by ``chunk_count`` v1 chunks

All fields are little-endian. Digital chunks carry transition timestamps
and produce 0/1 counters; analog chunks carry f32 samples at a fixed rate.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.byte_cursor import ByteCursor
from ..core.errors import SaleaeParseError
from ..core.event_sink import EventSink, TrackKind
from ..core.timestamps import seconds_to_ns

logger = logging.getLogger(__name__)

SALEAE_MAGIC = b"<SALEAE>"
LEGACY_FILE_ID = 0x00002F00
VERSION_0 = 0
VERSION_1 = 1


class DataKind(Enum):
    DIGITAL = 0
    ANALOG = 1


class ContainerFormat(Enum):
    LEGACY = "legacy"
    TAGGED_V0 = "tagged_v0"
    TAGGED_V1 = "tagged_v1"


@dataclass(frozen=True)
class FormatHeader:
    """Decoded container header."""

    container: ContainerFormat
    data_kind: DataKind
    chunk_count: int = 1

    @property
    def version(self) -> int:
        return VERSION_1 if self.container is ContainerFormat.TAGGED_V1 else VERSION_0

    @property
    def tagged(self) -> bool:
        return self.container is not ContainerFormat.LEGACY


@dataclass
class DigitalChunk:
    initial_state: bool
    begin_time_s: float
    transition_times_s: Sequence[float]

    def states(self) -> List[Tuple[float, int]]:
        """(time, state) pairs: the initial state, then one toggle per transition."""
        state = 1 if self.initial_state else 0
        out = [(self.begin_time_s, state)]
        for time_s in self.transition_times_s:
            state = 1 - state
            out.append((time_s, state))
        return out


@dataclass
class AnalogWaveform:
    begin_time_s: float
    sample_rate_hz: float
    downsample: int
    samples: Sequence[float] = field(default_factory=tuple)

    @property
    def step_s(self) -> float:
        return self.downsample / self.sample_rate_hz

    def sample_time_s(self, index: int) -> float:
        return self.begin_time_s + index * self.step_s


@dataclass
class BinaryReaderConfig:
    """Configuration for the binary reader"""

    digital_track_name: str = "Saleae Digital"
    analog_track_name: str = "Saleae Analog"


def parse_data_kind(raw_kind: int) -> DataKind:
    try:
        return DataKind(raw_kind)
    except ValueError:
        raise SaleaeParseError(f"Unsupported Saleae data type {raw_kind}") from None


def parse_format_header(cursor: ByteCursor) -> FormatHeader:
    """
    Read the container header and decide which layout follows.

    The ``<SALEAE>`` tag selects the tagged container; anything else must be
    the legacy header with the fixed file identifier.

    Args:
        cursor: Cursor positioned at the start of the buffer

    Returns:
        FormatHeader describing the container

    Raises:
        SaleaeParseError: On truncation, bad identifier, or unsupported
            version or data type
    """
    if cursor.startswith(SALEAE_MAGIC):
        cursor.skip(len(SALEAE_MAGIC))
        fields = cursor.read_fields("ii")
        if fields is None:
            raise SaleaeParseError("Saleae v1 header truncated")
        version, raw_kind = fields
        data_kind = parse_data_kind(raw_kind)
        if version == VERSION_1:
            chunk_count = cursor.read_i64()
            if chunk_count is None:
                raise SaleaeParseError("Saleae v1 header truncated")
            if chunk_count < 0:
                raise SaleaeParseError(f"Invalid Saleae chunk count {chunk_count}")
            return FormatHeader(ContainerFormat.TAGGED_V1, data_kind, chunk_count)
        if version == VERSION_0:
            return FormatHeader(ContainerFormat.TAGGED_V0, data_kind)
        raise SaleaeParseError(f"Unsupported Saleae version {version}")

    fields = cursor.read_fields("Iii")
    if fields is None:
        raise SaleaeParseError("Saleae v0 header truncated")
    file_id, version, raw_kind = fields
    if file_id != LEGACY_FILE_ID or version != VERSION_0:
        raise SaleaeParseError(
            f"Unsupported Saleae header (file id 0x{file_id:08x}, version {version})"
        )
    return FormatHeader(ContainerFormat.LEGACY, parse_data_kind(raw_kind))


def read_digital_chunk_v1(cursor: ByteCursor) -> DigitalChunk:
    fields = cursor.read_fields("idddq")
    if fields is None:
        raise SaleaeParseError("Saleae digital chunk truncated")
    initial_state, _sample_rate, begin_time, _end_time, num_transitions = fields
    if num_transitions < 0:
        raise SaleaeParseError(
            f"Saleae digital transition count invalid ({num_transitions})"
        )
    transitions = cursor.read_array("d", num_transitions)
    if transitions is None:
        raise SaleaeParseError(
            f"Saleae digital transitions truncated "
            f"({num_transitions} declared, {cursor.remaining} bytes left)"
        )
    return DigitalChunk(bool(initial_state), begin_time, transitions)


def read_digital_chunk_v0(cursor: ByteCursor) -> DigitalChunk:
    fields = cursor.read_fields("IddQ")
    if fields is None:
        raise SaleaeParseError("Saleae digital v0 header truncated")
    initial_state, begin_time, _end_time, num_transitions = fields
    transitions = cursor.read_array("d", num_transitions)
    if transitions is None:
        raise SaleaeParseError(
            f"Saleae digital v0 transitions truncated "
            f"({num_transitions} declared, {cursor.remaining} bytes left)"
        )
    return DigitalChunk(bool(initial_state), begin_time, transitions)


def read_analog_chunk_v1(cursor: ByteCursor) -> List[AnalogWaveform]:
    """
    Read one v1 analog chunk: a waveform count followed by that many waveforms.

    Every waveform is validated before the chunk is returned, so a failure
    anywhere in the chunk emits nothing for it.
    """
    waveform_count = cursor.read_u64()
    if waveform_count is None:
        raise SaleaeParseError("Saleae analog v1 header truncated")

    waveforms = []
    for _ in range(waveform_count):
        fields = cursor.read_fields("dddqQ")
        if fields is None:
            raise SaleaeParseError("Saleae analog v1 waveform truncated")
        begin_time, _trigger_time, sample_rate, downsample, num_samples = fields
        if not sample_rate > 0.0:
            raise SaleaeParseError(f"Saleae analog v1 sample rate invalid ({sample_rate})")
        if downsample <= 0:
            raise SaleaeParseError(f"Saleae analog v1 downsample invalid ({downsample})")
        samples = cursor.read_array("f", num_samples)
        if samples is None:
            raise SaleaeParseError(
                f"Saleae analog v1 samples truncated "
                f"({num_samples} declared, {cursor.remaining} bytes left)"
            )
        waveforms.append(AnalogWaveform(begin_time, sample_rate, downsample, samples))
    return waveforms


def read_analog_chunk_v0(cursor: ByteCursor) -> List[AnalogWaveform]:
    fields = cursor.read_fields("dQQQ")
    if fields is None:
        raise SaleaeParseError("Saleae analog v0 header truncated")
    begin_time, sample_rate, downsample, num_samples = fields
    if sample_rate == 0:
        raise SaleaeParseError("Saleae analog v0 sample rate invalid (0)")
    if downsample == 0:
        raise SaleaeParseError("Saleae analog v0 downsample invalid (0)")
    samples = cursor.read_array("f", num_samples)
    if samples is None:
        raise SaleaeParseError(
            f"Saleae analog v0 samples truncated "
            f"({num_samples} declared, {cursor.remaining} bytes left)"
        )
    return [AnalogWaveform(begin_time, float(sample_rate), downsample, samples)]


# (is v1 layout, data kind) -> chunk reader
_CHUNK_READERS = {
    (False, DataKind.DIGITAL): read_digital_chunk_v0,
    (True, DataKind.DIGITAL): read_digital_chunk_v1,
    (False, DataKind.ANALOG): read_analog_chunk_v0,
    (True, DataKind.ANALOG): read_analog_chunk_v1,
}


class SaleaeBinaryReader:
    """
    Chunked reader for Saleae binary exports.

    Bytes are accumulated by ``push`` and decoded in a single pass by
    ``end_of_input``. Each chunk is fully validated before its events are
    emitted; events of earlier chunks stay emitted if a later chunk fails.
    """

    def __init__(self, sink: EventSink, config: Optional[BinaryReaderConfig] = None):
        self.sink = sink
        self.config = config or BinaryReaderConfig()
        self.buffer = bytearray()
        self.header: Optional[FormatHeader] = None
        self._track_ids: Dict[DataKind, int] = {}

    def push(self, data: bytes) -> None:
        self.buffer += data

    def end_of_input(self) -> None:
        """
        Decode everything pushed so far.

        Raises:
            SaleaeParseError: If the buffer is empty or cannot be decoded
        """
        if not self.buffer:
            raise SaleaeParseError("Empty Saleae binary data")
        self.parse_buffer()

    def parse_buffer(self) -> None:
        cursor = ByteCursor(self.buffer)
        header = parse_format_header(cursor)
        self.header = header
        logger.debug(
            "Saleae %s container, %s data, %d chunk(s)",
            header.container.value,
            header.data_kind.name.lower(),
            header.chunk_count,
        )

        read_chunk = _CHUNK_READERS[
            (header.container is ContainerFormat.TAGGED_V1, header.data_kind)
        ]
        for _ in range(header.chunk_count):
            chunk = read_chunk(cursor)
            if header.data_kind is DataKind.DIGITAL:
                self.emit_digital(chunk)
            else:
                self.emit_analog(chunk)

    def track_id(self, data_kind: DataKind) -> int:
        track_id = self._track_ids.get(data_kind)
        if track_id is None:
            if data_kind is DataKind.DIGITAL:
                kind, name = TrackKind.DIGITAL_COUNTER, self.config.digital_track_name
            else:
                kind, name = TrackKind.ANALOG_COUNTER, self.config.analog_track_name
            track_id = self.sink.create_or_find_track(kind, "saleae", name)
            self._track_ids[data_kind] = track_id
        return track_id

    def emit_digital(self, chunk: DigitalChunk) -> None:
        events = [(seconds_to_ns(time_s), state) for time_s, state in chunk.states()]
        track_id = self.track_id(DataKind.DIGITAL)
        for ts_ns, state in events:
            self.sink.emit_counter(ts_ns, state, track_id)

    def emit_analog(self, waveforms: List[AnalogWaveform]) -> None:
        events = [
            (seconds_to_ns(waveform.sample_time_s(i)), float(sample))
            for waveform in waveforms
            for i, sample in enumerate(waveform.samples)
        ]
        if not events:
            return
        track_id = self.track_id(DataKind.ANALOG)
        for ts_ns, value in events:
            self.sink.emit_counter(ts_ns, value, track_id)
