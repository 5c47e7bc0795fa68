"""
I2C Transaction Reconstructor

Folds the flat start/address/data/stop rows of a Saleae I2C analyzer export
back into bus transactions. Each analyzer keeps its own state record in a
map keyed by analyzer name; records are reset and reused across
start/stop cycles for the whole import.

Rows that arrive out of sequence (a start while a transaction is open, or
address/data/stop while none is open) are ignored. The reconstructor never
raises.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core.event_sink import Arg


@dataclass
class TransactionReconstructorConfig:
    """Configuration for I2C transaction reconstruction"""

    # Analyzer name (case-insensitive) whose rows are folded into transactions
    analyzer_name: str = "i2c"
    category: str = "i2c"
    # Name used when no address row was seen
    fallback_name: str = "i2c"

    # Row types, lowercase
    start_type: str = "start"
    address_type: str = "address"
    data_type: str = "data"
    stop_type: str = "stop"


@dataclass
class TransactionState:
    """Mutable state of one analyzer between a start row and a stop row."""

    open: bool = False
    start_ts_ns: int = 0
    address: str = ""
    read: bool = False
    write_bytes: List[str] = field(default_factory=list)
    read_bytes: List[str] = field(default_factory=list)

    def begin(self, ts_ns: int) -> None:
        self.open = True
        self.start_ts_ns = ts_ns
        self.address = ""
        self.read = False
        self.write_bytes.clear()
        self.read_bytes.clear()


@dataclass
class I2CRow:
    """The fields of one CSV row the reconstructor looks at."""

    analyzer: str
    row_type: str
    ts_ns: int
    dur_ns: int = 0
    address: str = ""
    read: str = ""
    data: str = ""


@dataclass(frozen=True)
class I2CTransaction:
    """A completed start..stop transaction."""

    start_ts_ns: int
    duration_ns: int
    address: str
    write_bytes: Tuple[str, ...]
    read_bytes: Tuple[str, ...]
    fallback_name: str = "i2c"

    @property
    def name(self) -> str:
        """
        Display name, e.g. ``"0x20 W: 0x01 0x02 R: 0xff"``.

        Direction groups appear only when they hold bytes.
        """
        parts = [self.address or self.fallback_name]
        if self.write_bytes:
            parts.append("W:")
            parts.extend(self.write_bytes)
        if self.read_bytes:
            parts.append("R:")
            parts.extend(self.read_bytes)
        return " ".join(parts)

    def args(self) -> List[Arg]:
        out = []
        if self.address:
            out.append(Arg("address", self.address))
        if self.write_bytes:
            out.append(Arg("write_bytes", " ".join(self.write_bytes)))
        if self.read_bytes:
            out.append(Arg("read_bytes", " ".join(self.read_bytes)))
        return out


class I2CTransactionReconstructor:
    """
    Per-analyzer state machine over I2C rows.

    States are Closed and Open. Only a stop row received while Open
    produces output.
    """

    def __init__(self, config: Optional[TransactionReconstructorConfig] = None):
        """
        Initialize the reconstructor.

        Args:
            config: Configuration object. If None, uses default configuration.
        """
        self.config = config or TransactionReconstructorConfig()
        self.reset_state()

    def reset_state(self) -> None:
        """Forget all analyzer state, e.g. before a new import"""
        self.states: Dict[str, TransactionState] = {}

    def is_transaction_analyzer(self, analyzer: str) -> bool:
        return analyzer.lower() == self.config.analyzer_name.lower()

    def state_for(self, analyzer: str) -> TransactionState:
        state = self.states.get(analyzer)
        if state is None:
            state = TransactionState()
            self.states[analyzer] = state
        return state

    def process_row(self, row: I2CRow) -> Optional[I2CTransaction]:
        """
        Advance the analyzer's state machine by one row.

        Args:
            row: Row fields; ``row_type`` must already be lowercase

        Returns:
            The completed transaction when ``row`` is a stop that closes
            one, otherwise None
        """
        if not self.is_transaction_analyzer(row.analyzer):
            return None

        state = self.state_for(row.analyzer)
        row_type = row.row_type

        if row_type == self.config.start_type:
            if not state.open:
                state.begin(row.ts_ns)
        elif not state.open:
            return None
        elif row_type == self.config.address_type:
            if row.address:
                state.address = row.address
            read_lower = row.read.lower()
            if read_lower in ("true", "false"):
                state.read = read_lower == "true"
        elif row_type == self.config.data_type:
            if row.data:
                if state.read:
                    state.read_bytes.append(row.data)
                else:
                    state.write_bytes.append(row.data)
        elif row_type == self.config.stop_type:
            return self.close(state, row.ts_ns + row.dur_ns)
        return None

    def close(self, state: TransactionState, end_ts_ns: int) -> I2CTransaction:
        transaction = I2CTransaction(
            start_ts_ns=state.start_ts_ns,
            duration_ns=max(0, end_ts_ns - state.start_ts_ns),
            address=state.address,
            write_bytes=tuple(state.write_bytes),
            read_bytes=tuple(state.read_bytes),
            fallback_name=self.config.fallback_name,
        )
        state.open = False
        return transaction

    def open_analyzers(self) -> List[str]:
        """Analyzers whose last transaction never saw a stop row."""
        return [name for name, state in self.states.items() if state.open]
