"""Decoder for ECUMaster EMU Pro CSV exports.

Columns are separated by semicolons (older exports use tabs). The header row
starts with ``TIME`` followed by slash separated channel paths such as
``engine/rpm``. Rows are sparse: a channel only has a cell when it was
sampled, so blank cells repeat the last value seen in that column.
"""

from __future__ import annotations

import logging

from .errors import MalformedHeaderError
from .model import EcuMasterChannel, EcuMasterMeta, EcuType, Log

logger = logging.getLogger(__name__)


def detect(text: str) -> bool:
    """Return ``True`` when the first line looks like an ECUMaster header."""
    first_line = text.partition("\n")[0].rstrip("\r")
    return first_line.startswith(("TIME;", "TIME\t"))


def _header_delimiter(header: str) -> str:
    return ";" if ";" in header else "\t"


def decode_ecumaster(text: str) -> Log:
    """Decode the contents of an ECUMaster CSV export into a :class:`Log`."""
    lines = iter(text.splitlines())
    header = next(lines, None)
    if header is None:
        raise MalformedHeaderError("empty file: no header found")

    delimiter = _header_delimiter(header)
    columns = header.split(delimiter)
    if columns[0].strip().upper() != "TIME":
        raise MalformedHeaderError("invalid ECUMaster log: first column must be TIME")

    channels = [EcuMasterChannel.from_path(column) for column in columns[1:]]
    channel_count = len(channels)

    # last successfully parsed value per column
    last_values = [0.0] * channel_count
    times: list[float] = []
    data: list[tuple[float, ...]] = []

    for line in lines:
        line = line.strip()
        if not line:
            continue
        cells = line.split(delimiter)
        try:
            time = float(cells[0].strip())
        except ValueError:
            logger.debug("skipping row with unreadable time %r", cells[0])
            continue

        for index, cell in enumerate(cells[1 : channel_count + 1]):
            cell = cell.strip()
            if not cell:
                continue
            try:
                last_values[index] = float(cell)
            except ValueError:
                continue

        times.append(time)
        data.append(tuple(last_values))

    log = Log(
        ecu_type=EcuType.ECUMASTER,
        meta=EcuMasterMeta(channel_count=channel_count, data_points=len(data)),
        channels=channels,
        times=times,
        data=data,
    )
    log.validate()

    logger.info("parsed ECUMaster log: %d channels, %d data points", channel_count, len(log))
    return log
