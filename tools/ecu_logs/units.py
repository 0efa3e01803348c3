"""Per-vendor channel type tables: raw value conversions and display units."""

from __future__ import annotations

import enum


class HaltechType(str, enum.Enum):
    """Channel types declared in Haltech CSV exports.

    Values are the exact strings written after ``Type :`` in the export, which
    is why a few of them keep Haltech's own spelling.
    """

    AFR = "AFR"
    ABS_PRESSURE = "AbsPressure"
    ACCELERATION = "Acceleration"
    ANGLE = "Angle"
    ANGULAR_VELOCITY = "AngularVelocity"
    BATTERY_VOLTAGE = "BatteryVoltage"
    BOOST_TO_FUEL_FLOW_RATE = "BoostToFuelFlowRate"
    BYTE_COUNT = "ByteCount"
    CURRENT = "Current"
    CURRENT_UA_AS_MA = "Current_uA_as_mA"
    CURRENT_MA_AS_A = "Current_mA_as_A"
    DECIBEL = "Decibel"
    DENSITY = "Density"
    DRIVEN_DISTANCE = "DrivenDistance"
    ENGINE_SPEED = "EngineSpeed"
    ENGINE_VOLUME = "EngineVolume"
    FLOW = "Flow"
    FREQUENCY = "Frequency"
    FUEL_ECONOMY = "FuelEcomony"
    FUEL_VOLUME = "FuelVolume"
    GEAR = "Gear"
    GEAR_RATIO = "GearRatio"
    INJ_FUEL_VOLUME = "InjFuelVolume"
    MASS_OVER_TIME = "MassOverTime"
    MASS_PER_CYLINDER = "MassPerCyl"
    MILEAGE = "Mileage"
    PERCENT_PER_ENGINE_CYCLE = "PercentPerEngineCycle"
    PERCENT_PER_LAMBDA = "PercentPerLambda"
    PERCENT_PER_RPM = "PercentPerRpm"
    PERCENTAGE = "Percentage"
    PRESSURE = "Pressure"
    PULSES_PER_LONG_DISTANCE = "PulsesPerLongDistance"
    RATIO = "Ratio"
    RAW = "Raw"
    RESISTANCE = "Resistance"
    SPEED = "Speed"
    STOICHIOMETRY = "Stoichiometry"
    TEMPERATURE = "Temperature"
    TIME_US = "Time_us"
    TIME_US_AS_US = "TimeUsAsUs"
    TIME_MS_AS_S = "Time_ms_as_s"
    TIME_MS = "Time_ms"
    TIME_S = "Time_s"

    @classmethod
    def lookup(cls, text: str) -> HaltechType | None:
        """Return the type named ``text`` or ``None`` when it is not known."""
        try:
            return cls(text.strip())
        except ValueError:
            return None

    def convert(self, raw: float) -> float:
        """Apply the Haltech CSV formula for this type to ``raw``."""
        divisor, offset = _HALTECH_FORMULAS.get(self, (1.0, 0.0))
        return raw / divisor - offset

    @property
    def unit(self) -> str:
        return _HALTECH_UNITS.get(self, "")


# (divisor, offset) pairs for y = x / divisor - offset; missing types are identity.
_HALTECH_FORMULAS = {
    HaltechType.ABS_PRESSURE: (10.0, 0.0),
    # gauge pressure, atmospheric subtracted
    HaltechType.PRESSURE: (10.0, 101.3),
    HaltechType.PERCENTAGE: (10.0, 0.0),
    HaltechType.PERCENT_PER_ENGINE_CYCLE: (10.0, 0.0),
    HaltechType.PERCENT_PER_LAMBDA: (10.0, 0.0),
    HaltechType.PERCENT_PER_RPM: (10.0, 0.0),
    HaltechType.ANGLE: (10.0, 0.0),
    # CSV exports carry millivolts
    HaltechType.BATTERY_VOLTAGE: (1000.0, 0.0),
    # Kelvin
    HaltechType.TEMPERATURE: (10.0, 0.0),
    HaltechType.SPEED: (10.0, 0.0),
    HaltechType.AFR: (1000.0, 0.0),
    HaltechType.DECIBEL: (100.0, 0.0),
    HaltechType.TIME_US: (1000.0, 0.0),
    HaltechType.TIME_MS_AS_S: (1000.0, 0.0),
    HaltechType.ACCELERATION: (10.0, 0.0),
    HaltechType.ANGULAR_VELOCITY: (10.0, 0.0),
    HaltechType.CURRENT: (1000.0, 0.0),
    HaltechType.CURRENT_UA_AS_MA: (1000.0, 0.0),
    HaltechType.CURRENT_MA_AS_A: (1000.0, 0.0),
    HaltechType.DENSITY: (10.0, 0.0),
    HaltechType.FUEL_ECONOMY: (10.0, 0.0),
    HaltechType.FUEL_VOLUME: (10.0, 0.0),
    HaltechType.GEAR_RATIO: (100.0, 0.0),
    HaltechType.RATIO: (100.0, 0.0),
    HaltechType.STOICHIOMETRY: (100.0, 0.0),
}

_HALTECH_UNITS = {
    HaltechType.ENGINE_SPEED: "RPM",
    HaltechType.ABS_PRESSURE: "kPa",
    HaltechType.PRESSURE: "kPa",
    HaltechType.PERCENTAGE: "%",
    HaltechType.PERCENT_PER_ENGINE_CYCLE: "%",
    HaltechType.PERCENT_PER_LAMBDA: "%",
    HaltechType.PERCENT_PER_RPM: "%",
    HaltechType.ANGLE: "°",
    HaltechType.BATTERY_VOLTAGE: "V",
    HaltechType.TEMPERATURE: "K",
    HaltechType.SPEED: "km/h",
    HaltechType.AFR: "λ",
    HaltechType.DECIBEL: "dB",
    HaltechType.TIME_US: "ms",
    HaltechType.TIME_US_AS_US: "μs",
    HaltechType.TIME_MS: "ms",
    HaltechType.TIME_MS_AS_S: "s",
    HaltechType.TIME_S: "s",
    HaltechType.ACCELERATION: "m/s²",
    HaltechType.ANGULAR_VELOCITY: "°/s",
    HaltechType.CURRENT: "A",
    HaltechType.CURRENT_MA_AS_A: "A",
    HaltechType.CURRENT_UA_AS_MA: "mA",
    HaltechType.DENSITY: "g/m³",
    HaltechType.FLOW: "cc/min",
    HaltechType.FREQUENCY: "Hz",
    HaltechType.FUEL_ECONOMY: "L/100km",
    HaltechType.FUEL_VOLUME: "L",
    HaltechType.RESISTANCE: "Ω",
    HaltechType.DRIVEN_DISTANCE: "km",
    HaltechType.MILEAGE: "km",
    HaltechType.ENGINE_VOLUME: "cc",
    HaltechType.INJ_FUEL_VOLUME: "cc",
    HaltechType.MASS_OVER_TIME: "g/s",
    HaltechType.MASS_PER_CYLINDER: "mg",
}


def infer_ecumaster_unit(path: str, name: str) -> str:
    """Guess the display unit of an ECUMaster channel from its path and name.

    The checks run in order and the first match wins, so broad keywords such
    as ``speed`` only apply once the RPM rules have had their chance.
    """
    path = path.lower()
    name = name.lower()

    if "temp" in path:
        return "°C"

    if "pressure" in path or name == "map" or "/map" in path or "baro" in path or "boost" in path:
        return "kPa"

    if name.endswith("rpm") or "rpmtarget" in name or "rpmmatch" in name:
        return "RPM"

    if "tps" in name or "throttle" in path or ("dbw" in path and name == "target"):
        return "%"

    if (
        "percent" in path
        or "duty" in name
        or "correction" in name
        or ("torqueestimation" in path and "torque" not in name)
    ):
        return "%"

    if name == "angle" or ("ignition" in path and "angle" in name):
        return "°"

    if ("vvt" in path or "cam" in path) and ("angle" in name or "position" in name):
        return "°"

    if "volt" in name or name == "battery" or "vbat" in name:
        return "V"

    if "lambda" in name or "afr" in name or name == "o2":
        return "λ"

    if "speed" in name and "rpm" not in name:
        return "km/h"

    if "gear" in name and "ratio" not in name:
        return ""

    if "torque" in name:
        if "reduction" in path or "percent" in path:
            return "%"
        return "Nm"

    if "timer" in name:
        return "s"

    if "flow" in name:
        return "cc/min"

    return ""
