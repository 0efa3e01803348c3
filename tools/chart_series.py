#!/usr/bin/env python3
"""Decode an ECU log and write chart-ready, LTTB-downsampled channel series."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

sys.path.append(str(Path(__file__).parent))

from ecu_logs.detect import read_log  # type: ignore  # noqa: E402
from ecu_logs.downsample import MAX_CHART_POINTS, chart_series  # type: ignore  # noqa: E402
from ecu_logs.errors import DecodeError  # type: ignore  # noqa: E402
from ecu_logs.model import Log  # type: ignore  # noqa: E402


def resolve_channels(log: Log, names: list[str]) -> list[int]:
    indices = []
    for name in names:
        index = log.find_channel_index(name)
        if index is None:
            raise SystemExit(f"Channel not found: {name}")
        indices.append(index)
    return indices


def series_frame(log: Log, indices: list[int], points: int, normalize: bool) -> pd.DataFrame:
    """Long-format frame (channel, time_s, value) for the requested channels."""
    frames = []
    for index in indices:
        series = chart_series(log, index, max_points=points, normalize=normalize)
        frame = pd.DataFrame(series, columns=["time_s", "value"])
        frame.insert(0, "channel", log.channels[index].name)
        frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=["channel", "time_s", "value"])
    return pd.concat(frames, ignore_index=True)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("log", type=Path, help="ECU log file")
    parser.add_argument("--channel", action="append", default=[], help="Channel name to export (repeatable)")
    parser.add_argument("--all", action="store_true", help="Export every channel")
    parser.add_argument("--points", type=int, default=MAX_CHART_POINTS, help="Maximum points per channel")
    parser.add_argument("--normalize", action="store_true", help="Rescale each channel into [0, 1]")
    parser.add_argument("--out", type=Path, default=Path("runs/series.csv"), help="Output CSV path")
    parser.add_argument("--verbose", action="store_true", help="Log decoder details")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    try:
        log = read_log(args.log)
    except DecodeError as exc:
        raise SystemExit(f"Failed to decode {args.log}: {exc}") from exc
    print(f"[decode] {log.ecu_type.display_name}: {len(log.channels)} channels, {len(log)} records")

    if args.all:
        indices = list(range(len(log.channels)))
    elif args.channel:
        indices = resolve_channels(log, args.channel)
    else:
        raise SystemExit("--channel or --all required")

    frame = series_frame(log, indices, args.points, args.normalize)
    args.out.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(args.out, index=False)
    print(f"[series] wrote {len(frame)} points to {args.out}")


if __name__ == "__main__":
    main()
