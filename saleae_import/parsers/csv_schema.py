"""
Header resolution for Saleae CSV exports.

Maps header column names to the semantic roles the row handler needs.
Matching is case-insensitive on whitespace-trimmed names.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..core.errors import SaleaeParseError
from ..core.event_sink import EventSink
from .csv_row import strip_utf8_bom


class ColumnRole(Enum):
    NAME = "name"
    TYPE = "type"
    START_TIME = "start_time"
    DURATION = "duration"
    DATA = "data"
    ADDRESS = "address"
    READ = "read"


ROLE_SYNONYMS: Dict[str, ColumnRole] = {
    "name": ColumnRole.NAME,
    "type": ColumnRole.TYPE,
    "start_time": ColumnRole.START_TIME,
    "start time": ColumnRole.START_TIME,
    "duration": ColumnRole.DURATION,
    "data": ColumnRole.DATA,
    "address": ColumnRole.ADDRESS,
    "read": ColumnRole.READ,
}

REQUIRED_ROLES = (
    ColumnRole.NAME,
    ColumnRole.TYPE,
    ColumnRole.START_TIME,
    ColumnRole.DURATION,
)

CORE_ROLES = frozenset(REQUIRED_ROLES)


@dataclass
class CsvSchema:
    """Column names and the position of each recognised role."""

    columns: List[str]
    role_index: Dict[ColumnRole, int] = field(default_factory=dict)
    column_key_ids: List[int] = field(default_factory=list)

    def index(self, role: ColumnRole) -> Optional[int]:
        return self.role_index.get(role)

    def has(self, role: ColumnRole) -> bool:
        return role in self.role_index

    def value(self, row: Sequence[str], role: ColumnRole) -> str:
        """Trimmed value of ``role`` in ``row``, or ``""`` if the column is absent."""
        idx = self.role_index.get(role)
        if idx is None or idx >= len(row):
            return ""
        return row[idx].strip()

    def extra_columns(self) -> List[int]:
        """Positions of named columns that are not name/type/start_time/duration."""
        core = {self.role_index[role] for role in CORE_ROLES if role in self.role_index}
        return [i for i, name in enumerate(self.columns) if i not in core and name]

    def key_id(self, index: int) -> Optional[int]:
        """Interned handle of the column name at ``index``, if the header was interned."""
        if index < len(self.column_key_ids):
            return self.column_key_ids[index]
        return None

    def pad(self, row: List[str]) -> List[str]:
        """Extend a short row with empty fields up to the header width."""
        if len(row) < len(self.columns):
            row = row + [""] * (len(self.columns) - len(row))
        return row


def resolve_schema(fields: Sequence[str], sink: Optional[EventSink] = None) -> CsvSchema:
    """
    Build the schema from the parsed header line.

    Args:
        fields: Header fields as returned by ``parse_csv_line``
        sink: Optional sink used to intern the column names

    Returns:
        CsvSchema for the export

    Raises:
        SaleaeParseError: If the header is empty or a required column is missing
    """
    if not fields:
        raise SaleaeParseError("Saleae CSV header is empty")

    columns = []
    role_index: Dict[ColumnRole, int] = {}
    for i, raw in enumerate(fields):
        name = raw.strip()
        if i == 0:
            name = strip_utf8_bom(name).strip()
        columns.append(name)
        role = ROLE_SYNONYMS.get(name.lower())
        if role is not None:
            role_index[role] = i

    missing = [role.value for role in REQUIRED_ROLES if role not in role_index]
    if missing:
        raise SaleaeParseError(
            "Saleae CSV header missing required columns "
            f"(name, type, start_time, duration): missing {', '.join(missing)}"
        )

    key_ids = [sink.intern_string(name) for name in columns] if sink is not None else []
    return CsvSchema(columns=columns, role_index=role_index, column_key_ids=key_ids)
