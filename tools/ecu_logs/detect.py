"""Pick the decoder for a log buffer, rejecting formats that cannot be parsed."""

from __future__ import annotations

import logging
from pathlib import Path

from . import ecumaster, haltech, mlg
from .errors import UnsupportedFormatError
from .model import EcuType, Log

logger = logging.getLogger(__name__)

# bytes inspected when sniffing the header line of a text export
FIRST_LINE_LIMIT = 4096


def _export_guidance(description: str, software: str, extension: str) -> str:
    return (
        f"This is {description} which uses a proprietary format.\n\n"
        f"To use this log, export it as CSV from {software}:\n"
        f"1. Open the {extension} file in {software}\n"
        "2. Go to File → Export → CSV\n"
        "3. Load the exported .csv file instead"
    )


# extension -> (vendor, guidance)
_PROPRIETARY_EXTENSIONS = {
    ".llg": ("Link", _export_guidance("a Link .llg file", "PCLink or G4+ software", ".llg")),
    ".hlgzip": (
        "Haltech",
        _export_guidance("a Haltech .hlgzip file", "Haltech ESP or NSP", ".hlgzip"),
    ),
}

# magic prefix -> (vendor, guidance)
_PROPRIETARY_MAGIC = {
    b"HEPS": _PROPRIETARY_EXTENSIONS[".hlgzip"],
    b"EMERALD": ("AEM", _export_guidance("an AEM .daq file", "AEMdata or AEM Pro", ".daq")),
}


def check_supported(data: bytes, path_hint: str | Path | None = None) -> None:
    """Raise :class:`UnsupportedFormatError` for known proprietary formats."""
    if path_hint is not None:
        suffix = Path(path_hint).suffix.lower()
        if suffix in _PROPRIETARY_EXTENSIONS:
            raise UnsupportedFormatError(*_PROPRIETARY_EXTENSIONS[suffix])
    for magic, (vendor, guidance) in _PROPRIETARY_MAGIC.items():
        if data.startswith(magic):
            raise UnsupportedFormatError(vendor, guidance)


def decode_text(data: bytes) -> str:
    """Decode a text export as UTF-8, replacing invalid sequences if needed."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("invalid UTF-8 at byte %d, decoding with replacement characters", exc.start)
        return data.decode("utf-8", errors="replace")


def _first_line(data: bytes) -> str:
    head = data[:FIRST_LINE_LIMIT]
    end = head.find(b"\n")
    if end >= 0:
        head = head[:end]
    return head.decode("utf-8", errors="replace")


def detect_format(data: bytes, path_hint: str | Path | None = None) -> EcuType:
    """Identify the vendor of ``data`` from its magic bytes or first line."""
    check_supported(data, path_hint)
    if mlg.detect(data):
        return EcuType.SPEEDUINO
    if ecumaster.detect(_first_line(data)):
        return EcuType.ECUMASTER
    return EcuType.HALTECH


def detect_and_decode(data: bytes, path_hint: str | Path | None = None) -> Log:
    """Detect the format of ``data`` and decode it into a :class:`Log`."""
    ecu_type = detect_format(data, path_hint)
    logger.info("detected %s log", ecu_type.display_name)
    if ecu_type is EcuType.SPEEDUINO:
        return mlg.decode_mlg(data)
    text = decode_text(data)
    if ecu_type is EcuType.ECUMASTER:
        return ecumaster.decode_ecumaster(text)
    return haltech.decode_haltech(text)


def read_log(path: str | Path) -> Log:
    """Read ``path`` from disk and decode it, using its name as the format hint."""
    path = Path(path)
    return detect_and_decode(path.read_bytes(), path_hint=path)
