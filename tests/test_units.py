"""Tests for channel type conversions and unit inference."""

import pytest

from ecu_logs.units import HaltechType, infer_ecumaster_unit


class TestHaltechConversions:
    """Raw Haltech CSV values are scaled per channel type."""

    def test_engine_speed_is_identity(self) -> None:
        assert HaltechType.ENGINE_SPEED.convert(5000.0) == 5000.0

    def test_absolute_pressure(self) -> None:
        assert HaltechType.ABS_PRESSURE.convert(1013.0) == 101.3

    @pytest.mark.parametrize(("raw", "expected"), [(1013.0, 0.0), (2013.0, 100.0)])
    def test_gauge_pressure_subtracts_atmosphere(self, raw: float, expected: float) -> None:
        assert HaltechType.PRESSURE.convert(raw) == pytest.approx(expected, abs=0.01)

    def test_percentage_and_angle(self) -> None:
        assert HaltechType.PERCENTAGE.convert(500.0) == 50.0
        assert HaltechType.PERCENT_PER_RPM.convert(1000.0) == 100.0
        assert HaltechType.ANGLE.convert(-300.0) == -30.0

    def test_battery_voltage_from_millivolts(self) -> None:
        assert HaltechType.BATTERY_VOLTAGE.convert(14000.0) == 14.0

    def test_temperature_in_kelvin(self) -> None:
        assert HaltechType.TEMPERATURE.convert(2931.0) == pytest.approx(293.1)
        assert HaltechType.TEMPERATURE.unit == "K"

    def test_lambda_knock_and_injection_time(self) -> None:
        assert HaltechType.AFR.convert(850.0) == pytest.approx(0.85)
        assert HaltechType.DECIBEL.convert(2500.0) == 25.0
        assert HaltechType.TIME_US.convert(5000.0) == 5.0
        assert HaltechType.TIME_US.unit == "ms"

    def test_ratio_family_divides_by_hundred(self) -> None:
        for channel_type in (HaltechType.GEAR_RATIO, HaltechType.RATIO, HaltechType.STOICHIOMETRY):
            assert channel_type.convert(350.0) == 3.5

    def test_counts_and_flows_are_identity(self) -> None:
        for channel_type in (HaltechType.FLOW, HaltechType.FREQUENCY, HaltechType.RESISTANCE, HaltechType.RAW):
            assert channel_type.convert(123.0) == 123.0

    def test_units(self) -> None:
        assert HaltechType.ENGINE_SPEED.unit == "RPM"
        assert HaltechType.PRESSURE.unit == "kPa"
        assert HaltechType.AFR.unit == "λ"
        assert HaltechType.RESISTANCE.unit == "Ω"
        assert HaltechType.GEAR.unit == ""
        assert HaltechType.RAW.unit == ""


class TestHaltechLookup:
    """Type strings are matched exactly as Haltech writes them."""

    def test_known_spellings(self) -> None:
        assert HaltechType.lookup("EngineSpeed") is HaltechType.ENGINE_SPEED
        assert HaltechType.lookup("Current_uA_as_mA") is HaltechType.CURRENT_UA_AS_MA
        assert HaltechType.lookup("FuelEcomony") is HaltechType.FUEL_ECONOMY
        assert HaltechType.lookup("MassPerCyl") is HaltechType.MASS_PER_CYLINDER

    def test_unknown_returns_none(self) -> None:
        assert HaltechType.lookup("Warp Factor") is None


class TestEcuMasterUnits:
    """Units are inferred from the channel path and name."""

    @pytest.mark.parametrize(
        ("path", "unit"),
        [
            ("sensors/coolantTemp", "°C"),
            ("sensors/map", "kPa"),
            ("boost/target", "kPa"),
            ("engine/rpm", "RPM"),
            ("idle/rpmTarget", "RPM"),
            ("sensors/tps1", "%"),
            ("dbw/target", "%"),
            ("fuel/injectorDuty", "%"),
            ("ignition/angle", "°"),
            ("vvt/cam1Position", "°"),
            ("sensors/batteryVoltage", "V"),
            ("sensors/lambda1", "λ"),
            ("sensors/vehicleSpeed", "km/h"),
            ("gearbox/gear", ""),
            ("torque/requestedTorque", "Nm"),
            ("torqueReduction/torqueCut", "%"),
            ("launch/stateTimer", "s"),
            ("fuel/flow", "cc/min"),
            ("misc/flags", ""),
        ],
    )
    def test_infer_unit(self, path: str, unit: str) -> None:
        name = path.rsplit("/", 1)[-1]
        assert infer_ecumaster_unit(path, name) == unit

    def test_temperature_checked_before_pressure(self) -> None:
        assert infer_ecumaster_unit("oil/temperaturePressureSensor", "temperaturePressureSensor") == "°C"
