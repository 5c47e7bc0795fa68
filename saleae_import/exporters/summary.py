"""
Summaries of an imported Saleae trace.

Per-track statistics and the list of reconstructed I2C transactions, both
as Polars DataFrames so they can be printed, filtered or written out.
"""

from __future__ import annotations

import polars as pl

from ..core.event_sink import TraceStore

TRACK_SUMMARY_SCHEMA = {
    "track_id": pl.Int64,
    "name": pl.Utf8,
    "kind": pl.Utf8,
    "events": pl.UInt32,
    "first_ts": pl.Int64,
    "last_ts": pl.Int64,
    "min_value": pl.Float64,
    "max_value": pl.Float64,
}


def _counter_stats(store: TraceStore) -> pl.DataFrame:
    return store.counters_frame().group_by("track_id").agg(
        pl.len().alias("events"),
        pl.col("ts").min().alias("first_ts"),
        pl.col("ts").max().alias("last_ts"),
        pl.col("value").min().alias("min_value"),
        pl.col("value").max().alias("max_value"),
    )


def _slice_stats(store: TraceStore) -> pl.DataFrame:
    return store.slices_frame().group_by("track_id").agg(
        pl.len().alias("events"),
        pl.col("ts").min().alias("first_ts"),
        (pl.col("ts") + pl.col("dur")).max().alias("last_ts"),
    ).with_columns(
        pl.lit(None, dtype=pl.Float64).alias("min_value"),
        pl.lit(None, dtype=pl.Float64).alias("max_value"),
    )


def summarize_trace(store: TraceStore) -> pl.DataFrame:
    """
    One row per track with event counts and time range.

    Counter tracks also report their min/max value; slice tracks report the
    end of their last interval as ``last_ts``.

    Args:
        store: Store filled by an import

    Returns:
        DataFrame sorted by track_id
    """
    tracks = store.tracks_frame()
    if tracks.height == 0:
        return pl.DataFrame(schema=TRACK_SUMMARY_SCHEMA)

    stats = pl.concat(
        [
            _counter_stats(store).cast(
                {k: v for k, v in TRACK_SUMMARY_SCHEMA.items() if k not in ("name", "kind")}
            ),
            _slice_stats(store).cast(
                {k: v for k, v in TRACK_SUMMARY_SCHEMA.items() if k not in ("name", "kind")}
            ),
        ]
    )
    return (
        tracks.select("track_id", "name", "kind")
        .join(stats, on="track_id", how="left")
        .with_columns(pl.col("events").fill_null(0))
        .select(list(TRACK_SUMMARY_SCHEMA))
        .sort("track_id")
    )


def summarize_i2c_transactions(store: TraceStore, category: str = "i2c") -> pl.DataFrame:
    """
    Reconstructed I2C transactions with their address and payload bytes.

    Args:
        store: Store filled by a CSV import
        category: Category the transactions were emitted with

    Returns:
        DataFrame with ts, dur, track, name, address, write_bytes, read_bytes
    """
    slices = store.slices_frame().filter(pl.col("category") == category)
    args = store.args_frame()
    for key in ("address", "write_bytes", "read_bytes"):
        values = args.filter(pl.col("key") == key).select(
            "slice_id", pl.col("string_value").alias(key)
        )
        slices = slices.join(values, on="slice_id", how="left")

    tracks = store.tracks_frame().select("track_id", pl.col("name").alias("track"))
    return (
        slices.join(tracks, on="track_id", how="left")
        .select("ts", "dur", "track", "name", "address", "write_bytes", "read_bytes")
        .sort("ts")
    )


def print_summary(store: TraceStore) -> None:
    """Print per-track statistics and any I2C transactions"""
    summary = summarize_trace(store)
    print("\n=== Tracks ===")
    if summary.height == 0:
        print("No tracks were created")
        return
    for row in summary.iter_rows(named=True):
        line = f"  [{row['track_id']}] {row['name']} ({row['kind']}): {row['events']:,} events"
        if row["first_ts"] is not None:
            line += f", {row['first_ts']} .. {row['last_ts']} ns"
        if row["min_value"] is not None:
            line += f", value {row['min_value']:g} .. {row['max_value']:g}"
        print(line)

    transactions = summarize_i2c_transactions(store)
    if transactions.height:
        print(f"\n=== I2C Transactions ({transactions.height}) ===")
        for row in transactions.iter_rows(named=True):
            print(f"  {row['ts']:>15} +{row['dur']:<10} {row['name']}")
