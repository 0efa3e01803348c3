#!/usr/bin/env python3
"""Convert ECU logs (or Parquet output) into CSV for spreadsheet tools."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent))

import pandas as pd

from ecu_logs.errors import DecodeError  # type: ignore  # noqa: E402
from ecu_logs.ingest import IngestConfig, ingest  # type: ignore  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("source", type=Path, help="ECU log file or Parquet file")
    parser.add_argument("--out", type=Path, required=True, help="Destination CSV path")
    parser.add_argument("--parquet", action="store_true", help="Treat input as already-ingested Parquet")
    parser.add_argument("--verbose", action="store_true", help="Log decoder details")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    if args.parquet:
        frame = pd.read_parquet(args.source)
        frame.to_csv(args.out, index=False)
    else:
        config = IngestConfig(log_path=args.source, output_path=args.out)
        try:
            ingest(config)
        except DecodeError as exc:
            raise SystemExit(f"Failed to decode {args.source}: {exc}") from exc

    print(f"Wrote CSV to {args.out}")


if __name__ == "__main__":
    main()
