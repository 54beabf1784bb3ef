#!/usr/bin/env python3
"""
Unit tests for the Length and Speed measurement values.

Tests cover:
- Conversion constants for every supported unit
- Precision rounding
- Enum and string unit tags
- Unsupported units
- Immutability
"""

import dataclasses

import pytest

from aviameter.errors import AviameterError, UnsupportedUnit
from aviameter.utils.units import Length, LengthUnit, Speed, SpeedUnit


# =============================================================================
# Length Tests
# =============================================================================


class TestLength:
    """Tests for Length conversions."""

    def test_feet(self):
        assert Length(1000).to(LengthUnit.FEET) == 3280.84
        assert Length(1000).ft(0) == 3281.0

    def test_nautical_miles(self):
        """1852 m is one nautical mile."""
        assert Length(1852).nm() == pytest.approx(1.0)
        assert Length(1852).to("nm", 4) == pytest.approx(1.0, abs=1e-4)

    def test_kilometers(self):
        assert Length(1500).to("km") == 1.5
        assert Length(2600).km(0) == 3.0

    def test_identity_round_trip(self):
        """Converting to meters returns the stored value at the precision asked."""
        assert Length(123.456789).to(LengthUnit.METERS, 3) == 123.457
        assert Length(123.456789).to("m", 6) == 123.456789
        assert Length(42.0).si() == 42.0

    def test_str(self):
        assert str(Length(1.23456)) == "1.2346 m"

    def test_unsupported_unit(self):
        with pytest.raises(UnsupportedUnit):
            Length(1).to("furlong")

    def test_speed_unit_rejected(self):
        """A speed unit is not a length unit, even though both are str enums."""
        with pytest.raises(UnsupportedUnit):
            Length(1).to(SpeedUnit.KNOTS)

    def test_unsupported_unit_is_value_error(self):
        with pytest.raises(ValueError):
            Length(1).to("parsec")
        with pytest.raises(AviameterError):
            Length(1).to("parsec")

    def test_immutable(self):
        length = Length(10.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            length.value = 20.0

    def test_conversion_does_not_mutate(self):
        length = Length(1000.0)
        length.to("ft")
        length.to("nm", 5)
        assert length.value == 1000.0


# =============================================================================
# Speed Tests
# =============================================================================


class TestSpeed:
    """Tests for Speed conversions."""

    def test_knots(self):
        assert Speed(100).to(SpeedUnit.KNOTS) == 194.38
        assert Speed(100).to("kt", 1) == 194.4
        assert Speed(100).kts() == 194.38

    def test_feet_per_minute(self):
        assert Speed(1).to("fpm") == 196.85
        assert Speed(-5).fpm() == -984.25

    def test_mach(self):
        assert Speed(340.29).to("mach") == 1.0
        assert Speed(170.145).mach(1) == 0.5

    def test_kilometers_per_hour(self):
        assert Speed(10).to("km/h") == 36.0
        assert Speed(10).kmh() == 36.0

    def test_identity(self):
        assert Speed(12.3456).to(SpeedUnit.METERS_PER_SECOND) == 12.35
        assert Speed(12.3456).si(4) == 12.3456

    def test_str(self):
        assert str(Speed(3)) == "3.0 m/s"

    def test_unsupported_unit(self):
        with pytest.raises(UnsupportedUnit) as exc_info:
            Speed(1).to("ft")
        assert exc_info.value.kind == "speed"
        assert exc_info.value.unit == "ft"

    def test_zero(self):
        for unit in SpeedUnit:
            assert Speed(0).to(unit) == 0.0
