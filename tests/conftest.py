"""Shared fixtures and synthetic capture builders."""

import struct
import sys
from pathlib import Path
from typing import Sequence

import pytest

# Add project root to path to allow direct import of the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from saleae_import.core.event_sink import TraceStore  # noqa: E402

MAGIC = b"<SALEAE>"
LEGACY_FILE_ID = 0x00002F00


def tagged_header(version: int, data_kind: int) -> bytes:
    return MAGIC + struct.pack("<ii", version, data_kind)


def legacy_header(data_kind: int, file_id: int = LEGACY_FILE_ID, version: int = 0) -> bytes:
    return struct.pack("<Iii", file_id, version, data_kind)


def digital_chunk_v1(
    initial_state: int,
    begin_time: float,
    transitions: Sequence[float],
    sample_rate: float = 1e6,
    end_time: float = 2.0,
    declared: int = None,
) -> bytes:
    count = len(transitions) if declared is None else declared
    body = struct.pack("<idddq", initial_state, sample_rate, begin_time, end_time, count)
    return body + struct.pack(f"<{len(transitions)}d", *transitions)


def digital_chunk_v0(
    initial_state: int,
    begin_time: float,
    transitions: Sequence[float],
    end_time: float = 2.0,
    declared: int = None,
) -> bytes:
    count = len(transitions) if declared is None else declared
    body = struct.pack("<IddQ", initial_state, begin_time, end_time, count)
    return body + struct.pack(f"<{len(transitions)}d", *transitions)


def analog_waveform_v1(
    begin_time: float,
    sample_rate: float,
    downsample: int,
    samples: Sequence[float],
    trigger_time: float = 0.0,
    declared: int = None,
) -> bytes:
    count = len(samples) if declared is None else declared
    body = struct.pack("<dddqQ", begin_time, trigger_time, sample_rate, downsample, count)
    return body + struct.pack(f"<{len(samples)}f", *samples)


def analog_chunk_v1(*waveforms: bytes) -> bytes:
    return struct.pack("<Q", len(waveforms)) + b"".join(waveforms)


def analog_chunk_v0(
    begin_time: float,
    sample_rate: int,
    downsample: int,
    samples: Sequence[float],
    declared: int = None,
) -> bytes:
    count = len(samples) if declared is None else declared
    body = struct.pack("<dQQQ", begin_time, sample_rate, downsample, count)
    return body + struct.pack(f"<{len(samples)}f", *samples)


def tagged_v1(data_kind: int, *chunks: bytes, chunk_count: int = None) -> bytes:
    count = len(chunks) if chunk_count is None else chunk_count
    return tagged_header(1, data_kind) + struct.pack("<q", count) + b"".join(chunks)


I2C_CSV = (
    "name,type,start_time,duration,data,ack,address,read\n"
    '"I2C","start",0,0.000000002,,,,\n'
    '"I2C","address",0.1,0.0000001,,true,0x20,false\n'
    '"I2C","data",0.2,0.0000001,0x01,true,,\n'
    '"I2C","data",0.25,0.0000001,0x02,true,,\n'
    '"I2C","stop",0.3,0.000000002,,,,\n'
    '"Async Serial","data",0.4,0.1,"A",,,\n'
)


@pytest.fixture
def store() -> TraceStore:
    """Empty in-memory event sink."""
    return TraceStore()


@pytest.fixture
def i2c_csv_bytes() -> bytes:
    """Small I2C + async serial export with one write transaction."""
    return I2C_CSV.encode("utf-8")
