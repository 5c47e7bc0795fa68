"""Readers for Saleae binary and CSV exports."""

import struct
from pathlib import Path
from typing import Optional

from .binary_reader import (
    LEGACY_FILE_ID,
    SALEAE_MAGIC,
    BinaryReaderConfig,
    SaleaeBinaryReader,
)
from .csv_reader import CsvReaderConfig, SaleaeCsvReader
from .i2c_transactions import I2CTransactionReconstructor, TransactionReconstructorConfig
from .line_assembler import LineAssembler

BINARY = "binary"
CSV = "csv"


def first_text_line(head: bytes) -> Optional[str]:
    """First non-blank line of ``head`` decoded as text, or None."""
    for raw in head.split(b"\n"):
        text = raw.decode("utf-8", errors="ignore").rstrip("\r").lstrip("\ufeff")
        if text.strip():
            return text
    return None


def guess_trace_type(head: bytes, filename: Optional[str] = None) -> Optional[str]:
    """
    Guess whether an export is the binary or the CSV flavour.

    Args:
        head: First bytes of the file (a few hundred are plenty)
        filename: Optional file name used as a last resort

    Returns:
        ``"binary"``, ``"csv"`` or None if nothing matched
    """
    if head.startswith(SALEAE_MAGIC):
        return BINARY
    if len(head) >= 4 and struct.unpack_from("<I", head)[0] == LEGACY_FILE_ID:
        return BINARY

    header = first_text_line(head)
    if header is not None and "," in header and header.isprintable():
        return CSV

    if filename:
        suffix = Path(filename).suffix.lower()
        if suffix == ".bin":
            return BINARY
        if suffix == ".csv":
            return CSV
    return None


__all__ = [
    "BINARY",
    "CSV",
    "BinaryReaderConfig",
    "CsvReaderConfig",
    "I2CTransactionReconstructor",
    "LineAssembler",
    "SaleaeBinaryReader",
    "SaleaeCsvReader",
    "TransactionReconstructorConfig",
    "guess_trace_type",
]
