"""Write the tables of an imported trace to disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Union

import polars as pl

from ..core.event_sink import TraceStore

TABLE_FORMATS = ("parquet", "csv", "jsonl")


def trace_tables(store: TraceStore) -> Dict[str, pl.DataFrame]:
    return {
        "tracks": store.tracks_frame(),
        "counters": store.counters_frame(),
        "slices": store.slices_frame(),
        "args": store.args_frame(),
    }


def save_dataframe_to_jsonl(df: pl.DataFrame, output_file: Path) -> None:
    """
    Save Polars DataFrame to JSONL format.

    Args:
        df: DataFrame to save
        output_file: Path for the output file
    """
    with open(output_file, "w") as f:
        for row in df.to_dicts():
            f.write(json.dumps(row) + "\n")


def write_tables(
    store: TraceStore, output_dir: Union[str, Path], table_format: str = "parquet"
) -> Dict[str, Path]:
    """
    Write tracks, counters, slices and args tables.

    Args:
        store: Store filled by an import
        output_dir: Directory to write into; created if missing
        table_format: One of ``parquet``, ``csv`` or ``jsonl``

    Returns:
        Mapping of table name to written file

    Raises:
        ValueError: If ``table_format`` is not supported
    """
    if table_format not in TABLE_FORMATS:
        raise ValueError(f"Unsupported table format: {table_format}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = {}
    for name, df in trace_tables(store).items():
        path = output_dir / f"{name}.{table_format}"
        if table_format == "parquet":
            df.write_parquet(path)
        elif table_format == "csv":
            df.write_csv(path)
        else:
            save_dataframe_to_jsonl(df, path)
        written[name] = path
    return written
