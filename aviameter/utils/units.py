#!/usr/bin/env python3
"""
Canonical-unit measurement values.

Length is stored in meters and Speed in meters/second. The stored value
never changes; every other unit is a pure derived view rounded to the
requested number of decimal digits.

Usage:
    from aviameter.utils.units import Length, Speed, SpeedUnit

    Speed(100.0).to(SpeedUnit.KNOTS)   # 194.38
    Speed(100.0).to("kt", 1)           # 194.4
    Length(1852.0).nm()                # 1.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Union

from aviameter.errors import UnsupportedUnit
from aviameter.utils.constants import (
    M_TO_FT,
    M_TO_KM,
    M_TO_NM,
    MPS_TO_FPM,
    MPS_TO_KMH,
    MPS_TO_KTS,
    SPEED_OF_SOUND_MPS,
)


# =============================================================================
# Conversions
# =============================================================================

def m_to_ft(x: float) -> float:
    return x * M_TO_FT


def m_to_nm(x: float) -> float:
    return x * M_TO_NM


def m_to_km(x: float) -> float:
    return x * M_TO_KM


def mps_to_kts(x: float) -> float:
    return x * MPS_TO_KTS


def mps_to_fpm(x: float) -> float:
    return x * MPS_TO_FPM


def mps_to_mach(x: float) -> float:
    return x / SPEED_OF_SOUND_MPS


def mps_to_kmh(x: float) -> float:
    return x * MPS_TO_KMH


def _identity(x: float) -> float:
    return x


class LengthUnit(str, Enum):
    METERS = "m"
    FEET = "ft"
    NAUTICAL_MILES = "nm"
    KILOMETERS = "km"


class SpeedUnit(str, Enum):
    METERS_PER_SECOND = "m/s"
    KNOTS = "kt"
    FEET_PER_MINUTE = "fpm"
    MACH = "mach"
    KILOMETERS_PER_HOUR = "km/h"


_LENGTH_CONVERSIONS: Dict[LengthUnit, Callable[[float], float]] = {
    LengthUnit.METERS: _identity,
    LengthUnit.FEET: m_to_ft,
    LengthUnit.NAUTICAL_MILES: m_to_nm,
    LengthUnit.KILOMETERS: m_to_km,
}

_SPEED_CONVERSIONS: Dict[SpeedUnit, Callable[[float], float]] = {
    SpeedUnit.METERS_PER_SECOND: _identity,
    SpeedUnit.KNOTS: mps_to_kts,
    SpeedUnit.FEET_PER_MINUTE: mps_to_fpm,
    SpeedUnit.MACH: mps_to_mach,
    SpeedUnit.KILOMETERS_PER_HOUR: mps_to_kmh,
}


def _round(value: float, precision: int) -> float:
    return float(round(value, precision))


# =============================================================================
# Measurements
# =============================================================================

@dataclass(frozen=True)
class Length:
    """A distance in meters."""
    value: float

    SI_UNIT = "m"

    def si(self, precision: int = 2) -> float:
        return _round(self.value, precision)

    def ft(self, precision: int = 2) -> float:
        return _round(m_to_ft(self.value), precision)

    def nm(self, precision: int = 2) -> float:
        return _round(m_to_nm(self.value), precision)

    def km(self, precision: int = 2) -> float:
        return _round(m_to_km(self.value), precision)

    def to(self, unit: Union[LengthUnit, str], precision: int = 2) -> float:
        """
        Convert to another length unit.

        Args:
            unit: LengthUnit member or its tag ("m", "ft", "nm", "km")
            precision: Number of decimal digits to round to

        Raises:
            UnsupportedUnit: unit is not a length unit
        """
        try:
            convert = _LENGTH_CONVERSIONS[LengthUnit(unit)]
        except ValueError:
            raise UnsupportedUnit("length", unit) from None
        return _round(convert(self.value), precision)

    def __str__(self) -> str:
        return f"{self.si(4)} {self.SI_UNIT}"


@dataclass(frozen=True)
class Speed:
    """A speed in meters/second. Negative values are descents for vertical speed."""
    value: float

    SI_UNIT = "m/s"

    def si(self, precision: int = 2) -> float:
        return _round(self.value, precision)

    def kts(self, precision: int = 2) -> float:
        return _round(mps_to_kts(self.value), precision)

    def fpm(self, precision: int = 2) -> float:
        return _round(mps_to_fpm(self.value), precision)

    def mach(self, precision: int = 2) -> float:
        return _round(mps_to_mach(self.value), precision)

    def kmh(self, precision: int = 2) -> float:
        return _round(mps_to_kmh(self.value), precision)

    def to(self, unit: Union[SpeedUnit, str], precision: int = 2) -> float:
        """
        Convert to another speed unit.

        Args:
            unit: SpeedUnit member or its tag ("m/s", "kt", "fpm", "mach", "km/h")
            precision: Number of decimal digits to round to

        Raises:
            UnsupportedUnit: unit is not a speed unit
        """
        try:
            convert = _SPEED_CONVERSIONS[SpeedUnit(unit)]
        except ValueError:
            raise UnsupportedUnit("speed", unit) from None
        return _round(convert(self.value), precision)

    def __str__(self) -> str:
        return f"{self.si(4)} {self.SI_UNIT}"
