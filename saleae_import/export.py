#!/usr/bin/env python3
"""
Command-line import of Saleae exports.
Part of the saleae_import module.
"""

import argparse
import logging
import sys

from .core.errors import SaleaeParseError
from .exporters import TABLE_FORMATS, print_summary, write_tables
from .importer import ImportConfig, import_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="saleae-import",
        description="Decode a Saleae binary or CSV export into trace tables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print per-track statistics and I2C transactions
  saleae-import digital.bin --summary

  # Write tracks/counters/slices/args as parquet
  saleae-import i2c_export.csv --output-dir out/

  # Force the CSV reader and write JSONL
  saleae-import capture.txt --format csv --output-dir out/ --table-format jsonl
        """,
    )

    parser.add_argument("input", help="Path to a Saleae .bin or .csv export")

    parser.add_argument(
        "--format",
        choices=["auto", "binary", "csv"],
        default="auto",
        help="Export flavour (default: auto-detect)",
    )

    parser.add_argument(
        "--output-dir",
        help="Directory for the decoded tables (default: do not write tables)",
    )

    parser.add_argument(
        "--table-format",
        choices=TABLE_FORMATS,
        default="parquet",
        help="File format for the decoded tables (default: parquet)",
    )

    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print per-track statistics and reconstructed I2C transactions",
    )

    parser.add_argument(
        "--chunk-size",
        type=int,
        default=1 << 20,
        help="Bytes read per chunk (default: 1048576)",
    )

    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )

    return parser


def main(argv=None):
    """CLI entry point for importing Saleae exports."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.chunk_size <= 0:
        print("Error: --chunk-size must be positive")
        return 1

    config = ImportConfig(trace_format=args.format, chunk_size=args.chunk_size)
    try:
        store = import_file(args.input, config=config)
    except (FileNotFoundError, SaleaeParseError) as e:
        print(f"Error: {e}")
        return 1

    print(
        f"Imported {args.input}: {len(store.tracks)} tracks, "
        f"{len(store.counters):,} counters, {len(store.slices):,} slices"
    )

    if args.summary:
        print_summary(store)

    if args.output_dir:
        written = write_tables(store, args.output_dir, args.table_format)
        for name, path in written.items():
            print(f"  wrote {name}: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
