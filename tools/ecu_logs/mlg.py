"""Decoder for MegaLogViewer ``.mlg`` binary logs written by Speeduino and rusEFI.

Layout (all integers big-endian)::

    "MLVLG" + 1 reserved byte
    format version          int16   (1 or 2)
    capture timestamp       int32   (ignored)
    info data start         int16 in v1, int32 in v2
    data begin index        int32
    record length           int16   (ignored)
    field count             int16
    field definitions       55 bytes each in v1, 89 bytes in v2
    info text               up to the data begin index
    blocks                  type, counter, uint16 timestamp in ms, payload

Every reader takes the buffer and an offset and returns the decoded value with
the offset just past it, so bounds are checked before each read.
"""

from __future__ import annotations

import dataclasses
import logging
import struct

from .errors import MalformedHeaderError, TruncatedRecordError, UnknownBlockTypeError
from .model import EcuType, FieldType, Log, MlgChannel, MlgMeta

logger = logging.getLogger(__name__)

MAGIC = b"MLVLG"
MAX_FIELD_COUNT = 1000
WRAP_THRESHOLD_MS = 30000
WRAP_PERIOD_S = 65.536
MARKER_LENGTH = 50

NAME_LENGTH = 34
UNIT_LENGTH = 10
CATEGORY_LENGTH = 34
FIELD_LENGTH_V1 = 55
FIELD_LENGTH_V2 = 89

BLOCK_DATA = 0
BLOCK_MARKER = 1

_VERSION = struct.Struct(">6xh")
_HEADER_V1 = struct.Struct(">4xHI2xH")
_HEADER_V2 = struct.Struct(">4xII2xH")
_SCALAR = struct.Struct(">ffx")
_BLOCK = struct.Struct(">BxH")

_RAW_FORMATS = {
    FieldType.U08: struct.Struct(">B"),
    FieldType.S08: struct.Struct(">b"),
    FieldType.U16: struct.Struct(">H"),
    FieldType.S16: struct.Struct(">h"),
    FieldType.U32: struct.Struct(">I"),
    FieldType.S32: struct.Struct(">i"),
    FieldType.S64: struct.Struct(">q"),
    FieldType.F32: struct.Struct(">f"),
}


@dataclasses.dataclass
class MlgHeader:
    format_version: int
    info_start: int
    data_start: int
    field_count: int

    @property
    def field_length(self) -> int:
        return FIELD_LENGTH_V2 if self.format_version == 2 else FIELD_LENGTH_V1


@dataclasses.dataclass
class Block:
    """One entry of the record stream; ``values`` is ``None`` for markers."""

    block_type: int
    raw_timestamp: int
    values: tuple[float, ...] | None = None


def detect(data: bytes) -> bool:
    return data[: len(MAGIC)] == MAGIC


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\0").strip()


def read_header(data: bytes) -> tuple[MlgHeader, int]:
    """Parse and sanity check the fixed header; return it with the first field offset."""
    if len(data) < _VERSION.size or not detect(data):
        raise MalformedHeaderError("invalid MLG file header")
    (format_version,) = _VERSION.unpack_from(data, 0)
    offset = _VERSION.size

    layout = _HEADER_V2 if format_version == 2 else _HEADER_V1
    if offset + layout.size > len(data):
        raise MalformedHeaderError(
            f"header needs {offset + layout.size} bytes, file has {len(data)}"
        )
    info_start, data_start, field_count = layout.unpack_from(data, offset)
    offset += layout.size

    if field_count > MAX_FIELD_COUNT:
        raise MalformedHeaderError(f"unreasonable field count: {field_count}")
    if data_start > len(data):
        raise MalformedHeaderError(
            f"data begin index {data_start} exceeds file size {len(data)}"
        )

    header = MlgHeader(format_version, info_start, data_start, field_count)
    logger.debug(
        "MLG format version %d, %d fields, data at %d",
        format_version,
        field_count,
        data_start,
    )
    return header, offset


def read_field(data: bytes, offset: int, header: MlgHeader) -> tuple[MlgChannel, int]:
    """Parse one field definition starting at ``offset``."""
    field_length = header.field_length
    if offset + field_length > len(data):
        raise MalformedHeaderError(
            f"not enough data for field definition at offset {offset} "
            f"(need {field_length}, have {len(data) - offset})"
        )
    start = offset
    tag = data[offset]
    try:
        field_type = FieldType(tag)
    except ValueError:
        raise MalformedHeaderError(f"unknown field type {tag} at offset {offset}") from None
    offset += 1

    name = _text(data[offset : offset + NAME_LENGTH])
    offset += NAME_LENGTH
    unit = _text(data[offset : offset + UNIT_LENGTH])
    offset += UNIT_LENGTH
    # display style
    offset += 1

    if field_type.is_bitfield:
        scale, transform = 1.0, 0.0
        offset = start + field_length
    else:
        scale, transform = _SCALAR.unpack_from(data, offset)
        offset += _SCALAR.size
        if header.format_version == 2:
            offset += CATEGORY_LENGTH

    channel = MlgChannel(
        name=name,
        unit=unit,
        scale=scale,
        transform=transform,
        field_type=field_type,
    )
    return channel, offset


def read_info(data: bytes, header: MlgHeader) -> tuple[str, str]:
    """Best-effort lookup of the firmware version and capture date in the info text."""
    if not header.info_start < header.data_start < len(data):
        return "", ""
    info = data[header.info_start : header.data_start].decode("utf-8", errors="replace")
    return _quoted_token(info, "speeduino"), _quoted_token(info, "Capture Date:")


def _quoted_token(text: str, prefix: str) -> str:
    start = text.find(prefix)
    if start < 0:
        return ""
    end = text.find('"', start)
    if end < 0:
        return ""
    return text[start:end]


def record_size(channels: list[MlgChannel]) -> int:
    """Bytes taken by one data record payload, including its trailing checksum."""
    return sum(channel.field_type.byte_size for channel in channels) + 1


def read_value(data: bytes, offset: int, channel: MlgChannel) -> tuple[float, int]:
    """Decode one channel value; bitfields are skipped and reported as 0.0."""
    field_type = channel.field_type
    if field_type.is_bitfield:
        return 0.0, offset + field_type.byte_size
    fmt = _RAW_FORMATS[field_type]
    (raw,) = fmt.unpack_from(data, offset)
    return channel.convert(float(raw)), offset + fmt.size


def read_block(
    data: bytes, offset: int, channels: list[MlgChannel], size: int
) -> tuple[Block, int]:
    """Decode the block at ``offset``.

    Raises :class:`TruncatedRecordError` when the payload does not fit in the
    remaining bytes and :class:`UnknownBlockTypeError` for unexpected tags.
    """
    if offset + _BLOCK.size > len(data):
        raise TruncatedRecordError(f"incomplete block header at offset {offset}")
    block_type, raw_timestamp = _BLOCK.unpack_from(data, offset)
    start = offset
    offset += _BLOCK.size

    if block_type == BLOCK_DATA:
        if offset + size > len(data):
            raise TruncatedRecordError(
                f"not enough data for record at offset {offset} "
                f"(need {size}, have {len(data) - offset})"
            )
        values = []
        for channel in channels:
            value, offset = read_value(data, offset, channel)
            values.append(value)
        # checksum
        offset += 1
        return Block(block_type, raw_timestamp, tuple(values)), offset

    if block_type == BLOCK_MARKER:
        if offset + MARKER_LENGTH > len(data):
            raise TruncatedRecordError(
                f"not enough data for marker at offset {offset} "
                f"(need {MARKER_LENGTH}, have {len(data) - offset})"
            )
        return Block(block_type, raw_timestamp), offset + MARKER_LENGTH

    raise UnknownBlockTypeError(block_type, start)


class WrapTracker:
    """Rebuilds elapsed seconds from a 16-bit millisecond counter."""

    def __init__(self) -> None:
        self.previous = 0
        self.wraps = 0

    def seconds(self, raw_timestamp: int) -> float:
        if raw_timestamp < self.previous and self.previous - raw_timestamp > WRAP_THRESHOLD_MS:
            self.wraps += 1
        self.previous = raw_timestamp
        return raw_timestamp / 1000.0 + self.wraps * WRAP_PERIOD_S


def decode_mlg(data: bytes) -> Log:
    """Decode a MegaLogViewer binary log into a :class:`Log`.

    Header problems are fatal. A truncated or unrecognised tail ends the record
    stream and everything decoded before it is returned.
    """
    header, offset = read_header(data)

    channels = []
    for _ in range(header.field_count):
        channel, offset = read_field(data, offset, header)
        channels.append(channel)
        logger.debug(
            "field %s (%s) type=%s scale=%s transform=%s",
            channel.name,
            channel.unit,
            channel.field_type.name,
            channel.scale,
            channel.transform,
        )

    version, capture_date = read_info(data, header)

    size = record_size(channels)
    clock = WrapTracker()
    times: list[float] = []
    records: list[tuple[float, ...]] = []

    offset = header.data_start
    while offset + _BLOCK.size <= len(data):
        try:
            block, offset = read_block(data, offset, channels, size)
        except (TruncatedRecordError, UnknownBlockTypeError) as exc:
            logger.warning("stopped reading records: %s", exc)
            break
        timestamp = clock.seconds(block.raw_timestamp)
        if block.values is not None:
            times.append(timestamp)
            records.append(block.values)

    meta = MlgMeta(
        format_version=header.format_version,
        version=version,
        capture_date=capture_date,
        channel_count=len(channels),
        data_points=len(records),
    )
    log = Log(
        ecu_type=EcuType.SPEEDUINO,
        meta=meta,
        channels=channels,
        times=times,
        data=records,
    )
    log.validate()

    if clock.wraps:
        logger.debug("timestamp counter wrapped %d times", clock.wraps)
    logger.info("parsed MLG log: %d channels, %d data points", len(channels), len(log))
    return log


