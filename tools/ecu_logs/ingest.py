"""Ingestion pipeline converting ECU logs into tabular datasets."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

from .detect import read_log
from .model import Log

logger = logging.getLogger(__name__)

TIME_COLUMN = "time_s"


@dataclasses.dataclass
class IngestConfig:
    """Configuration for a single ingestion run."""

    log_path: Path
    output_path: Path


def column_labels(log: Log) -> list[str]:
    """Unique column labels for the channels of ``log``, with units when known."""
    labels = []
    seen = {TIME_COLUMN}
    for index, channel in enumerate(log.channels):
        label = f"{channel.name} [{channel.unit}]" if channel.unit else channel.name
        if label in seen:
            label = f"{label} #{index}"
        seen.add(label)
        labels.append(label)
    return labels


def to_dataframe(log: Log) -> pd.DataFrame:
    """Convert a decoded :class:`Log` into a DataFrame with one column per channel."""
    frame = pd.DataFrame.from_records(log.data, columns=column_labels(log))
    frame.insert(0, TIME_COLUMN, pd.Series(log.times, dtype="float64"))
    return frame


def channel_table(log: Log) -> pd.DataFrame:
    """Describe the channels of ``log``: name, unit, type and display bounds."""
    rows = []
    for channel in log.channels:
        rows.append(
            {
                "name": channel.name,
                "unit": channel.unit,
                "type": channel.type_name,
                "display_min": channel.display_min,
                "display_max": channel.display_max,
            }
        )
    return pd.DataFrame(rows, columns=["name", "unit", "type", "display_min", "display_max"])


def write_frame(frame: pd.DataFrame, path: Path) -> Path:
    """Write ``frame`` as Parquet when ``path`` ends in ``.parquet``, CSV otherwise."""
    if path.suffix.lower() == ".parquet":
        frame.to_parquet(path, index=False)
    else:
        frame.to_csv(path, index=False)
    return path


def ingest(config: IngestConfig) -> Path:
    """Run the ingestion process and return the output path."""
    log = read_log(config.log_path)
    frame = to_dataframe(log)
    write_frame(frame, config.output_path)
    logger.info("wrote %d rows from %s to %s", len(frame), config.log_path, config.output_path)
    return config.output_path


def batch_ingest(configs: Iterable[IngestConfig]) -> list[Path]:
    """Ingest multiple logs in sequence."""
    outputs = []
    for config in configs:
        outputs.append(ingest(config))
    return outputs
