"""Shared fixtures: sample exports for each supported ECU format."""

from __future__ import annotations

import struct

import pytest

HALTECH_SAMPLE = """%DataLog%
DataLogVersion : 1.1
Software : Haltech NSP
SoftwareVersion : 999.999.999.999
DownloadDateTime : 20250718 04:09:48
Channel : RPM
ID : 384
Type : EngineSpeed
DisplayMaxMin : 20000,0
Channel : Manifold Pressure
ID : 224
Type : Pressure
DisplayMaxMin : 4013,13
Log Source : 20
Log Number : 1118
Log : 20250718 02:15:46
14:15:46.000,5000,1013
14:15:46.020,5100,1020
14:15:46.040,5200,1030
"""

ECUMASTER_SAMPLE = (
    "TIME;engine/rpm;sensors/tps1;ignition/angle\n"
    "0.000;1000;10.5;15.0\n"
    "0.020;1050;;15.5\n"
    "0.040;1100;12.0;\n"
)


def _padded(text: str, length: int) -> bytes:
    return text.encode("utf-8").ljust(length, b"\0")


def _field(version: int, field_type: int, name: str, unit: str, scale: float, transform: float) -> bytes:
    length = 89 if version == 2 else 55
    head = bytes([field_type]) + _padded(name, 34) + _padded(unit, 10) + b"\0"
    if field_type >= 10:
        return head.ljust(length, b"\0")
    body = struct.pack(">ff", scale, transform) + b"\0"
    if version == 2:
        body += _padded("Engine", 34)
    return head + body


def build_mlg(
    fields,
    blocks=b"",
    version=1,
    info=b"",
    field_count=None,
    data_start=None,
) -> bytes:
    """Assemble a MegaLogViewer buffer.

    ``fields`` holds ``(type, name, unit, scale, transform)`` tuples and
    ``blocks`` the already encoded record stream.
    """
    field_bytes = b"".join(_field(version, *field) for field in fields)
    header_length = 24 if version == 2 else 22
    info_start = header_length + len(field_bytes)
    if data_start is None:
        data_start = info_start + len(info)
    if field_count is None:
        field_count = len(fields)

    header = b"MLVLG\0" + struct.pack(">h", version) + struct.pack(">I", 0)
    header += struct.pack(">I" if version == 2 else ">H", info_start)
    header += struct.pack(">I", data_start) + struct.pack(">H", 0) + struct.pack(">H", field_count)
    return header + field_bytes + info + blocks


def data_block(raw_timestamp: int, payload: bytes, counter: int = 0) -> bytes:
    return struct.pack(">BBH", 0, counter, raw_timestamp) + payload + b"\0"


def marker_block(raw_timestamp: int) -> bytes:
    return struct.pack(">BBH", 1, 0, raw_timestamp) + b"\0" * 50


@pytest.fixture
def haltech_text() -> str:
    return HALTECH_SAMPLE


@pytest.fixture
def ecumaster_text() -> str:
    return ECUMASTER_SAMPLE


@pytest.fixture
def mlg():
    """Builders for MegaLogViewer test buffers."""

    class Builders:
        build = staticmethod(build_mlg)
        data = staticmethod(data_block)
        marker = staticmethod(marker_block)

    return Builders
