"""Tests for the ECUMaster sparse CSV decoder."""

import pytest

from ecu_logs.ecumaster import decode_ecumaster, detect
from ecu_logs.errors import MalformedHeaderError
from ecu_logs.model import EcuMasterChannel, EcuMasterMeta, EcuType


class TestChannelFromPath:
    def test_name_is_last_path_segment(self) -> None:
        channel = EcuMasterChannel.from_path("engine/rpm")

        assert channel.path == "engine/rpm"
        assert channel.name == "rpm"
        assert channel.unit == "RPM"
        assert channel.type_name == "engine/rpm"
        assert channel.display_min is None
        assert channel.display_max is None

    def test_path_without_slash(self) -> None:
        channel = EcuMasterChannel.from_path(" gear ")

        assert channel.path == "gear"
        assert channel.name == "gear"


class TestDetect:
    def test_semicolon_and_tab_headers(self) -> None:
        assert detect("TIME;engine/rpm;sensors/tps1\n0.000;1000;50")
        assert detect("TIME\tengine/rpm\tsensors/tps1\n0.000\t1000\t50")

    def test_other_formats(self) -> None:
        assert not detect("%DataLog%\nSomething else")
        assert not detect("timestamp,rpm,tps")


class TestDecodeEcuMaster:
    """Decoding of sparse ECUMaster exports."""

    def test_channels(self, ecumaster_text: str) -> None:
        log = decode_ecumaster(ecumaster_text)

        assert log.ecu_type is EcuType.ECUMASTER
        assert [channel.name for channel in log.channels] == ["rpm", "tps1", "angle"]
        assert [channel.unit for channel in log.channels] == ["RPM", "%", "°"]

    def test_carry_forward(self, ecumaster_text: str) -> None:
        log = decode_ecumaster(ecumaster_text)

        assert log.times == [0.0, 0.02, 0.04]
        assert log.data[0] == (1000.0, 10.5, 15.0)
        assert log.data[1] == (1050.0, 10.5, 15.5)
        assert log.data[2] == (1100.0, 12.0, 15.5)

    def test_meta_counts(self, ecumaster_text: str) -> None:
        log = decode_ecumaster(ecumaster_text)

        assert log.meta == EcuMasterMeta(channel_count=3, data_points=3)

    def test_leading_gaps_default_to_zero(self) -> None:
        log = decode_ecumaster("TIME;a/x;a/y\n0.0;;5\n0.1;2;\n")

        assert log.data == [(0.0, 5.0), (2.0, 5.0)]

    def test_unparseable_cell_carries_forward(self) -> None:
        log = decode_ecumaster("TIME;a/x\n0.0;3\n0.1;n/a\n")

        assert log.data == [(3.0,), (3.0,)]

    def test_short_rows_are_padded(self) -> None:
        log = decode_ecumaster("TIME;a/x;a/y;a/z\n0.0;1;2;3\n0.1;4\n")

        assert log.data[1] == (4.0, 2.0, 3.0)

    def test_long_rows_are_truncated(self) -> None:
        log = decode_ecumaster("TIME;a/x\n0.0;1;99\n")

        assert log.data == [(1.0,)]

    def test_tab_delimited(self) -> None:
        log = decode_ecumaster("TIME\tengine/rpm\n0.5\t900\n")

        assert log.times == [0.5]
        assert log.data == [(900.0,)]

    def test_rows_with_bad_time_are_skipped(self) -> None:
        log = decode_ecumaster("TIME;a/x\nabc;1\n0.1;2\n")

        assert log.times == [0.1]
        assert log.data == [(2.0,)]

    def test_lowercase_time_header(self) -> None:
        log = decode_ecumaster("time;a/x\n0.0;1\n")

        assert len(log) == 1

    def test_rejects_missing_time_column(self) -> None:
        with pytest.raises(MalformedHeaderError):
            decode_ecumaster("rpm;tps\n1;2\n")

    def test_rejects_empty_input(self) -> None:
        with pytest.raises(MalformedHeaderError):
            decode_ecumaster("")
