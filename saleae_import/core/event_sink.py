"""
Event sink boundary between the Saleae readers and trace storage.

The readers only talk to ``EventSink``. ``TraceStore`` is the in-memory
implementation used by the importer, the exporters and the tests; it keeps
plain Python rows while decoding and exposes them as Polars DataFrames
afterwards.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import polars as pl

logger = logging.getLogger(__name__)

ArgValue = Union[bool, str]


class TrackKind(str, Enum):
    """Kinds of tracks the readers ask for."""

    DIGITAL_COUNTER = "digital_counter"
    ANALOG_COUNTER = "analog_counter"
    CSV_SLICE = "csv_slice"


@dataclass(frozen=True)
class Arg:
    """One key/value argument attached to an interval."""

    key: str
    value: ArgValue
    # Handle from EventSink.intern_string for ``key``, if already interned
    key_id: Optional[int] = None


class EventSink(ABC):
    """Storage interface required by the Saleae readers."""

    @abstractmethod
    def intern_string(self, text: str) -> int:
        """Return a stable handle for ``text``."""

    @abstractmethod
    def create_or_find_track(self, kind: TrackKind, key: str, name: str) -> int:
        """
        Return the track for ``(kind, key)``, creating it on first use.

        Args:
            kind: Track kind
            key: Deduplication key within the kind
            name: Display name used when the track is created

        Returns:
            Track ID
        """

    @abstractmethod
    def emit_counter(self, ts_ns: int, value: float, track_id: int) -> None:
        """Append one counter sample."""

    @abstractmethod
    def emit_interval(
        self,
        ts_ns: int,
        track_id: int,
        category: Optional[str],
        name: str,
        duration_ns: int,
        args: Sequence[Arg] = (),
    ) -> None:
        """Append one named interval with its arguments."""


class TraceStore(EventSink):
    """
    Append-only in-memory trace tables.

    Tracks are deduplicated by ``(kind, key)``. Strings are interned into a
    single pool so that names, categories and argument keys/values share
    handles the way a trace storage engine would.
    """

    def __init__(self):
        self.strings: List[str] = []
        self._string_ids: Dict[str, int] = {}
        self.tracks: List[Dict[str, object]] = []
        self._track_ids: Dict[Tuple[TrackKind, str], int] = {}
        self.counters: List[Dict[str, object]] = []
        self.slices: List[Dict[str, object]] = []
        self.args: List[Dict[str, object]] = []

    def intern_string(self, text: str) -> int:
        string_id = self._string_ids.get(text)
        if string_id is None:
            string_id = len(self.strings)
            self.strings.append(text)
            self._string_ids[text] = string_id
        return string_id

    def get_string(self, string_id: Optional[int]) -> Optional[str]:
        if string_id is None:
            return None
        return self.strings[string_id]

    def create_or_find_track(self, kind: TrackKind, key: str, name: str) -> int:
        track_id = self._track_ids.get((kind, key))
        if track_id is not None:
            return track_id
        track_id = len(self.tracks)
        self.tracks.append(
            {
                "track_id": track_id,
                "kind": kind.value,
                "key": key,
                "name": self.intern_string(name),
            }
        )
        self._track_ids[(kind, key)] = track_id
        logger.debug("Created %s track %d (%s)", kind.value, track_id, name)
        return track_id

    def emit_counter(self, ts_ns: int, value: float, track_id: int) -> None:
        self.counters.append({"ts": ts_ns, "value": float(value), "track_id": track_id})

    def emit_interval(
        self,
        ts_ns: int,
        track_id: int,
        category: Optional[str],
        name: str,
        duration_ns: int,
        args: Sequence[Arg] = (),
    ) -> None:
        slice_id = len(self.slices)
        self.slices.append(
            {
                "slice_id": slice_id,
                "ts": ts_ns,
                "dur": duration_ns,
                "track_id": track_id,
                "category": None if category is None else self.intern_string(category),
                "name": self.intern_string(name),
            }
        )
        for arg in args:
            is_bool = isinstance(arg.value, bool)
            key_id = arg.key_id if arg.key_id is not None else self.intern_string(arg.key)
            self.args.append(
                {
                    "slice_id": slice_id,
                    "key": key_id,
                    "value_type": "bool" if is_bool else "string",
                    "bool_value": arg.value if is_bool else None,
                    "string_value": None if is_bool else self.intern_string(arg.value),
                }
            )

    def args_for_slice(self, slice_id: int) -> Dict[str, ArgValue]:
        """Resolve the arguments of one slice to a plain dict."""
        out: Dict[str, ArgValue] = {}
        for row in self.args:
            if row["slice_id"] != slice_id:
                continue
            key = self.strings[row["key"]]
            if row["value_type"] == "bool":
                out[key] = row["bool_value"]
            else:
                out[key] = self.strings[row["string_value"]]
        return out

    def tracks_frame(self) -> pl.DataFrame:
        """Tracks with resolved names."""
        return pl.DataFrame(
            [
                {
                    "track_id": row["track_id"],
                    "kind": row["kind"],
                    "key": row["key"],
                    "name": self.strings[row["name"]],
                }
                for row in self.tracks
            ],
            schema={"track_id": pl.Int64, "kind": pl.Utf8, "key": pl.Utf8, "name": pl.Utf8},
        )

    def counters_frame(self) -> pl.DataFrame:
        """Counter samples in emission order."""
        return pl.DataFrame(
            self.counters,
            schema={"ts": pl.Int64, "value": pl.Float64, "track_id": pl.Int64},
        )

    def slices_frame(self) -> pl.DataFrame:
        """Intervals in emission order with resolved names and categories."""
        return pl.DataFrame(
            [
                {
                    "slice_id": row["slice_id"],
                    "ts": row["ts"],
                    "dur": row["dur"],
                    "track_id": row["track_id"],
                    "category": self.get_string(row["category"]),
                    "name": self.strings[row["name"]],
                }
                for row in self.slices
            ],
            schema={
                "slice_id": pl.Int64,
                "ts": pl.Int64,
                "dur": pl.Int64,
                "track_id": pl.Int64,
                "category": pl.Utf8,
                "name": pl.Utf8,
            },
        )

    def args_frame(self) -> pl.DataFrame:
        """Interval arguments with resolved keys and values."""
        return pl.DataFrame(
            [
                {
                    "slice_id": row["slice_id"],
                    "key": self.strings[row["key"]],
                    "value_type": row["value_type"],
                    "bool_value": row["bool_value"],
                    "string_value": self.get_string(row["string_value"]),
                }
                for row in self.args
            ],
            schema={
                "slice_id": pl.Int64,
                "key": pl.Utf8,
                "value_type": pl.Utf8,
                "bool_value": pl.Boolean,
                "string_value": pl.Utf8,
            },
        )
