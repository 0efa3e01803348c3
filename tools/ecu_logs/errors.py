"""Exceptions raised while detecting and decoding ECU logs."""

from __future__ import annotations


class DecodeError(ValueError):
    """Base class for every decoding failure."""


class UnsupportedFormatError(DecodeError):
    """A recognised proprietary format that must be exported as CSV first."""

    def __init__(self, vendor: str, guidance: str):
        super().__init__(guidance)
        self.vendor = vendor
        self.guidance = guidance


class MalformedHeaderError(DecodeError):
    """The file header is structurally invalid; nothing can be decoded."""


class TruncatedRecordError(DecodeError):
    """Not enough bytes remain for one more complete record."""


class UnknownBlockTypeError(DecodeError):
    """An unrecognised block tag was found in the record stream."""

    def __init__(self, block_type: int, offset: int):
        super().__init__(f"unknown block type {block_type} at offset {offset}")
        self.block_type = block_type
        self.offset = offset


class IntegrityError(DecodeError):
    """Decoded times and records are not aligned with the channel list."""
