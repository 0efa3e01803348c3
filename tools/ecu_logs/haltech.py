"""Decoder for Haltech NSP/ESP CSV exports.

The export starts with ``Key : Value`` metadata lines, including one block of
``Channel``/``ID``/``Type``/``DisplayMaxMin`` lines per logged channel, and
then switches to comma separated rows led by an ``HH:MM:SS.fff`` timestamp.
Cells hold raw integers that are scaled according to the channel type.
"""

from __future__ import annotations

import logging
import re

from .model import EcuType, HaltechChannel, HaltechMeta, Log
from .units import HaltechType

logger = logging.getLogger(__name__)

HEADER_MARKER = "%DataLog%"

_KEY_VALUE = re.compile(r"^(?P<name>[^:]+?)\s*:\s*(?P<value>.+)$")
_DATA_ROW = re.compile(r"^\d{1,2}:\d{2}:\d{2}")

_META_KEYS = {
    "DataLogVersion": "data_log_version",
    "Software": "software",
    "SoftwareVersion": "software_version",
    "DownloadDateTime": "download_date_time",
    "DownloadDate/Time": "download_date_time",
    "Log Source": "log_source",
    "Log Number": "log_number",
    "Log": "log_date_time",
}


def _parse_float(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None


def parse_timestamp(text: str) -> float | None:
    """Convert ``HH:MM:SS(.fff)`` to seconds, or ``None`` if it does not parse."""
    parts = text.split(":")
    if len(parts) != 3:
        return None
    hours, minutes, seconds = (_parse_float(part) for part in parts)
    if hours is None or minutes is None or seconds is None:
        return None
    return hours * 3600.0 + minutes * 60.0 + seconds


def is_data_row(line: str) -> bool:
    return _DATA_ROW.match(line) is not None


def _apply_channel_key(channel: HaltechChannel, name: str, value: str) -> None:
    if name == "ID":
        channel.id = value
    elif name == "Type":
        channel_type = HaltechType.lookup(value)
        if channel_type is None:
            logger.warning("unknown channel type %r for %r, keeping raw values", value, channel.name)
            channel_type = HaltechType.RAW
        channel.type = channel_type
    elif name == "DisplayMaxMin":
        bounds = value.split(",")
        if len(bounds) >= 2:
            channel.display_max = _parse_float(bounds[0].strip())
            channel.display_min = _parse_float(bounds[1].strip())


def decode_haltech(text: str) -> Log:
    """Decode the contents of a Haltech CSV export into a :class:`Log`."""
    meta = HaltechMeta()
    channels: list[HaltechChannel] = []
    pending = HaltechChannel()
    in_data = False
    rows: list[tuple[float, tuple[float, ...]]] = []

    for line in text.splitlines():
        line = line.strip()
        if not line or line == HEADER_MARKER:
            continue

        if is_data_row(line):
            in_data = True
            if pending.name:
                channels.append(pending)
                pending = HaltechChannel()

            columns = line.split(",")
            timestamp = parse_timestamp(columns[0].strip())
            if timestamp is None:
                logger.debug("skipping row with unreadable timestamp %r", columns[0])
                continue

            values = []
            for channel, cell in zip(channels, columns[1:]):
                raw = _parse_float(cell.strip())
                if raw is not None:
                    values.append(channel.type.convert(raw))
            if values:
                rows.append((timestamp, tuple(values)))
            continue

        if in_data:
            continue

        match = _KEY_VALUE.match(line)
        if match is None:
            continue
        name = match.group("name").strip()
        value = match.group("value").strip()

        if name in _META_KEYS:
            setattr(meta, _META_KEYS[name], value)
        elif name == "Channel":
            if pending.name:
                channels.append(pending)
            pending = HaltechChannel(name=value)
        else:
            _apply_channel_key(pending, name, value)

    if not in_data and pending.name:
        channels.append(pending)

    channel_count = len(channels)
    complete = [(timestamp, values) for timestamp, values in rows if len(values) == channel_count]
    if len(complete) != len(rows):
        logger.info("dropped %d incomplete rows", len(rows) - len(complete))

    first = complete[0][0] if complete else 0.0
    log = Log(
        ecu_type=EcuType.HALTECH,
        meta=meta,
        channels=channels,
        times=[timestamp - first for timestamp, _ in complete],
        data=[values for _, values in complete],
    )
    log.validate()

    logger.info("parsed Haltech log: %d channels, %d data points", channel_count, len(log))
    return log
