#!/usr/bin/env python3
"""Decode an ECU log (Haltech, ECUMaster or MegaLogViewer) and print what it contains."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure the sibling ecu_logs package is importable when running from the repo root
sys.path.append(str(Path(__file__).parent))

from ecu_logs.detect import read_log  # type: ignore  # noqa: E402
from ecu_logs.errors import DecodeError  # type: ignore  # noqa: E402
from ecu_logs.model import Log  # type: ignore  # noqa: E402


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _with_unit(value: float, unit: str) -> str:
    return f"{value:.2f} {unit}" if unit else f"{value:.2f}"


def summarize(log: Log) -> None:
    """Print a quick summary for a decoded log."""
    print(f"ecu type     : {log.ecu_type.display_name}")
    print(f"channels     : {len(log.channels)}")
    print(f"records      : {len(log)}")
    if log.time_range is None:
        print("[empty log]")
        return
    start, end = log.time_range
    print(f"time range   : {start:.3f} to {end:.3f} s")


def print_channels(log: Log) -> None:
    for index, channel in enumerate(log.channels, start=1):
        unit = f" [{channel.unit}]" if channel.unit else ""
        print(f"  {index:3d}. {channel.name} ({channel.type_name}){unit}")


def print_rows(log: Log, limit: int | None) -> None:
    rows = zip(log.times, log.data)
    for count, (time, row) in enumerate(rows):
        if limit is not None and count >= limit:
            break
        cells = [_with_unit(value, channel.unit) for value, channel in zip(row, log.channels)]
        print(f"{time:10.3f}s | " + " | ".join(cells))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("path", type=Path, help="log file to decode")
    parser.add_argument("--summary", action="store_true", help="only display aggregate statistics")
    parser.add_argument("--limit", type=int, default=0, help="print at most N records")
    parser.add_argument("--verbose", action="store_true", help="log decoder details")
    args = parser.parse_args()

    configure_logging(args.verbose)
    try:
        log = read_log(args.path)
    except DecodeError as exc:
        raise SystemExit(f"Failed to decode {args.path}: {exc}") from exc

    summarize(log)
    if args.summary:
        return

    print("\nchannels:")
    print_channels(log)
    print("\nrecords:")
    print_rows(log, args.limit if args.limit else None)


if __name__ == "__main__":
    main()
