"""Reduce channel series to a bounded number of points for charting."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .model import Log

MAX_CHART_POINTS = 2000

Point = tuple[float, float]


def downsample_lttb(
    times: Sequence[float], values: Sequence[float], target_points: int
) -> list[Point]:
    """Largest-Triangle-Three-Buckets downsampling.

    Keeps the first and last sample and, for each of ``target_points - 2``
    equal-width buckets in between, the sample forming the largest triangle
    with the previously kept sample and the mean of the next bucket. Series
    that already fit, or budgets below 3, are returned as they are.
    """
    t = np.asarray(times, dtype=np.float64)
    v = np.asarray(values, dtype=np.float64)
    if t.shape != v.shape:
        raise ValueError(f"times and values differ in length: {t.size} != {v.size}")

    n = t.size
    if n <= target_points or target_points < 3:
        return list(zip(t.tolist(), v.tolist()))

    buckets = target_points - 2
    interior = n - 2
    selected = [0]
    anchor = 0

    for i in range(buckets):
        start = i * interior // buckets + 1
        end = (i + 1) * interior // buckets + 1
        next_end = min((i + 2) * interior // buckets + 1, n)
        if end < next_end:
            avg_t = t[end:next_end].mean()
            avg_v = v[end:next_end].mean()
        else:
            avg_t, avg_v = t[-1], v[-1]

        area = np.abs(
            (t[anchor] - avg_t) * (v[start:end] - v[anchor])
            - (t[anchor] - t[start:end]) * (avg_v - v[anchor])
        )
        # a NaN sample never wins its bucket
        area = np.where(np.isnan(area), -1.0, area)
        anchor = start + int(np.argmax(area))
        selected.append(anchor)

    selected.append(n - 1)
    return list(zip(t[selected].tolist(), v[selected].tolist()))


def normalize_unit_interval(points: Sequence[Point]) -> list[Point]:
    """Rescale values into [0, 1]; a flat series is drawn at 0.5.

    NaN samples are ignored when finding the range and stay NaN.
    """
    if not points:
        return []
    values = np.fromiter((value for _, value in points), dtype=np.float64, count=len(points))
    if np.isnan(values).all():
        return list(points)
    low = np.nanmin(values)
    span = np.nanmax(values) - low
    if abs(span) < np.finfo(np.float64).eps:
        scaled = np.where(np.isnan(values), np.nan, 0.5)
    else:
        scaled = (values - low) / span
    return [(time, value) for (time, _), value in zip(points, scaled.tolist())]


def chart_series(
    log: Log, channel_index: int, max_points: int = MAX_CHART_POINTS, normalize: bool = False
) -> list[Point]:
    """Downsampled ``(time, value)`` pairs for one channel of ``log``."""
    points = downsample_lttb(log.times, log.channel_data(channel_index), max_points)
    if normalize:
        points = normalize_unit_interval(points)
    return points
