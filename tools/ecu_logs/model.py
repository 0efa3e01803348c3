"""Unified in-memory representation shared by every ECU log decoder."""

from __future__ import annotations

import bisect
import dataclasses
import enum
from typing import Union

from .errors import IntegrityError
from .units import HaltechType, infer_ecumaster_unit


class EcuType(enum.Enum):
    """Vendor that produced a log."""

    HALTECH = "Haltech"
    ECUMASTER = "ECUMaster"
    SPEEDUINO = "Speeduino/rusEFI"

    @property
    def display_name(self) -> str:
        return self.value


class FieldType(enum.IntEnum):
    """Field type tags of the MegaLogViewer binary format."""

    U08 = 0
    S08 = 1
    U16 = 2
    S16 = 3
    U32 = 4
    S32 = 5
    S64 = 6
    F32 = 7
    U08_BITFIELD = 10
    U16_BITFIELD = 11
    U32_BITFIELD = 12

    @property
    def byte_size(self) -> int:
        return _FIELD_SIZES[self]

    @property
    def is_bitfield(self) -> bool:
        return self >= 10


_FIELD_SIZES = {
    FieldType.U08: 1,
    FieldType.S08: 1,
    FieldType.U08_BITFIELD: 1,
    FieldType.U16: 2,
    FieldType.S16: 2,
    FieldType.U16_BITFIELD: 2,
    FieldType.U32: 4,
    FieldType.S32: 4,
    FieldType.F32: 4,
    FieldType.U32_BITFIELD: 4,
    FieldType.S64: 8,
}


@dataclasses.dataclass
class HaltechChannel:
    """Channel declared in the metadata block of a Haltech CSV export."""

    name: str = ""
    id: str = ""
    type: HaltechType = HaltechType.RAW
    display_min: float | None = None
    display_max: float | None = None

    @property
    def unit(self) -> str:
        return self.type.unit

    @property
    def type_name(self) -> str:
        return self.type.value


@dataclasses.dataclass
class EcuMasterChannel:
    """Column of an ECUMaster EMU Pro export, identified by its slash path."""

    path: str
    name: str
    unit: str

    display_min = None
    display_max = None

    @classmethod
    def from_path(cls, path: str) -> EcuMasterChannel:
        path = path.strip()
        name = path.rsplit("/", 1)[-1]
        return cls(path=path, name=name, unit=infer_ecumaster_unit(path, name))

    @property
    def id(self) -> str:
        return self.path

    @property
    def type_name(self) -> str:
        return self.path


@dataclasses.dataclass
class MlgChannel:
    """Field definition of a MegaLogViewer log."""

    name: str
    unit: str
    scale: float
    transform: float
    field_type: FieldType

    display_min = None
    display_max = None

    @property
    def id(self) -> str:
        return self.name

    @property
    def type_name(self) -> str:
        return self.field_type.name

    def convert(self, raw: float) -> float:
        return (raw + self.transform) * self.scale


Channel = Union[HaltechChannel, EcuMasterChannel, MlgChannel]


@dataclasses.dataclass
class HaltechMeta:
    data_log_version: str = ""
    software: str = ""
    software_version: str = ""
    download_date_time: str = ""
    log_source: str = ""
    log_number: str = ""
    log_date_time: str = ""


@dataclasses.dataclass
class EcuMasterMeta:
    channel_count: int = 0
    data_points: int = 0


@dataclasses.dataclass
class MlgMeta:
    format_version: int = 0
    version: str = ""
    capture_date: str = ""
    channel_count: int = 0
    data_points: int = 0


Meta = Union[HaltechMeta, EcuMasterMeta, MlgMeta]


@dataclasses.dataclass
class Log:
    """Decoded log: channels, record times in seconds and one row per record."""

    ecu_type: EcuType
    meta: Meta
    channels: list[Channel] = dataclasses.field(default_factory=list)
    times: list[float] = dataclasses.field(default_factory=list)
    data: list[tuple[float, ...]] = dataclasses.field(default_factory=list)

    def __len__(self) -> int:
        return len(self.data)

    def validate(self) -> None:
        """Raise :class:`IntegrityError` unless times, rows and channels line up."""
        if len(self.times) != len(self.data):
            raise IntegrityError(
                f"{len(self.times)} timestamps but {len(self.data)} data records"
            )
        channel_count = len(self.channels)
        for index, row in enumerate(self.data):
            if len(row) != channel_count:
                raise IntegrityError(
                    f"record {index} has {len(row)} values but {channel_count} channels expected"
                )

    @property
    def time_range(self) -> tuple[float, float] | None:
        if not self.times:
            return None
        return self.times[0], self.times[-1]

    def channel_data(self, channel_index: int) -> list[float]:
        """Return the column of values recorded for one channel."""
        return [row[channel_index] for row in self.data]

    def find_channel_index(self, name: str) -> int | None:
        for index, channel in enumerate(self.channels):
            if channel.name == name:
                return index
        return None

    def find_record_at_time(self, time: float) -> int | None:
        """Index of the record closest to ``time``; ties resolve to the later one."""
        if not self.times:
            return None
        index = bisect.bisect_left(self.times, time)
        if index >= len(self.times):
            return len(self.times) - 1
        if index > 0 and abs(self.times[index] - time) > abs(self.times[index - 1] - time):
            return index - 1
        return index

    def channel_min_max(self, channel_index: int) -> tuple[float, float] | None:
        values = self.channel_data(channel_index)
        if not values:
            return None
        return min(values), max(values)
