#!/usr/bin/env python3
"""
Unit tests for windowed kinematics.

Tests cover:
- Mean ground speed over consecutive pairs
- Mean vertical speed, including missing altitudes
- Stale, duplicate and out-of-order timestamps
- PositionWindow eviction and bookkeeping
"""

import math
from collections import deque

import pytest

from aviameter.kinematics import (
    PositionWindow,
    TimedPosition,
    mean_speed,
    mean_vertical_speed,
)
from aviameter.utils.constants import EARTH_RADIUS_M
from aviameter.utils.units import Speed

# Latitude offset that is exactly 1000 m along a meridian
KM_DEG = math.degrees(1000 / EARTH_RADIUS_M)


def sample(km_north: float, t_sec: float, alt=None) -> TimedPosition:
    return TimedPosition(lat=45.0 + km_north * KM_DEG, lon=7.0, alt=alt,
                         timestamp=int(t_sec * 1000))


# =============================================================================
# Ground Speed Tests
# =============================================================================


class TestMeanSpeed:
    """Tests for mean_speed."""

    def test_empty_window(self):
        assert mean_speed([]) == Speed(0)

    def test_single_sample(self):
        assert mean_speed([sample(0, 0)]) == Speed(0)

    def test_two_samples(self):
        """1000 m in 10 s is 100 m/s, about 194.4 kt."""
        speed = mean_speed([sample(0, 0), sample(1, 10)])
        assert speed.value == pytest.approx(100.0, rel=1e-6)
        assert speed.to("kt", 1) == pytest.approx(194.4, abs=0.1)

    def test_mean_of_pairs(self):
        """Pairs at 100 m/s and 50 m/s average to 75 m/s."""
        speed = mean_speed([sample(0, 0), sample(1, 10), sample(2, 30)])
        assert speed.value == pytest.approx(75.0, rel=1e-6)

    def test_duplicate_timestamp_contributes_zero(self):
        speed = mean_speed([sample(0, 0), sample(1, 10), sample(2, 10)])
        assert speed.value == pytest.approx(50.0, rel=1e-6)

    def test_out_of_order_is_not_negative(self):
        speed = mean_speed([sample(0, 10), sample(1, 0)])
        assert speed == Speed(0)
        assert math.isfinite(speed.value)

    def test_stationary(self):
        speed = mean_speed([sample(0, 0), sample(0, 5), sample(0, 10)])
        assert speed.value == pytest.approx(0.0, abs=1e-9)

    def test_accepts_deque(self):
        window = deque([sample(0, 0), sample(1, 10)], maxlen=10)
        assert mean_speed(window).value == pytest.approx(100.0, rel=1e-6)


# =============================================================================
# Vertical Speed Tests
# =============================================================================


class TestMeanVerticalSpeed:
    """Tests for mean_vertical_speed."""

    def test_empty_and_single(self):
        assert mean_vertical_speed([]) == Speed(0)
        assert mean_vertical_speed([sample(0, 0, alt=100.0)]) == Speed(0)

    def test_climb(self):
        """100 m in 10 s is 10 m/s."""
        vs = mean_vertical_speed([sample(0, 0, alt=1000.0), sample(1, 10, alt=1100.0)])
        assert vs.value == pytest.approx(10.0)
        assert vs.to("fpm", 0) == 1969.0

    def test_descent_is_negative(self):
        vs = mean_vertical_speed([sample(0, 0, alt=1000.0), sample(1, 10, alt=950.0)])
        assert vs.value == pytest.approx(-5.0)

    def test_missing_altitude_pair_is_skipped(self):
        """Pairs with a missing altitude do not pull the average towards zero."""
        window = [
            sample(0, 0, alt=1000.0),
            sample(1, 10, alt=1100.0),
            sample(2, 20, alt=None),
        ]
        assert mean_vertical_speed(window).value == pytest.approx(10.0)

    def test_all_altitudes_missing(self):
        window = [sample(0, 0), sample(1, 10), sample(2, 20)]
        assert mean_vertical_speed(window) == Speed(0)

    def test_zero_altitude_is_present(self):
        """Sea level is a real altitude, not a missing one."""
        vs = mean_vertical_speed([sample(0, 0, alt=0.0), sample(1, 10, alt=100.0)])
        assert vs.value == pytest.approx(10.0)

    def test_duplicate_timestamp_contributes_zero(self):
        window = [
            sample(0, 0, alt=1000.0),
            sample(1, 10, alt=1100.0),
            sample(2, 10, alt=1200.0),
        ]
        assert mean_vertical_speed(window).value == pytest.approx(5.0)


# =============================================================================
# PositionWindow Tests
# =============================================================================


class TestPositionWindow:
    """Tests for the bounded sample window."""

    def test_initialization(self):
        window = PositionWindow()
        assert window.size == 10
        assert len(window.samples()) == 0
        assert window.mean_speed() == Speed(0)

    def test_evicts_oldest(self):
        window = PositionWindow(size=3)
        for i in range(5):
            window.add_sample(sample(i, i * 10))
        assert len(window.samples()) == 3
        assert [s.timestamp for s in window.samples()] == [20000, 30000, 40000]

    def test_window_means(self):
        window = PositionWindow(size=10)
        window.add_sample(sample(0, 0, alt=1000.0))
        window.add_sample(sample(1, 10, alt=1100.0))
        assert window.mean_speed().value == pytest.approx(100.0, rel=1e-6)
        assert window.mean_vertical_speed().value == pytest.approx(10.0)

    def test_out_of_order_sample_is_kept(self):
        window = PositionWindow(size=10)
        window.add_sample(sample(0, 10))
        window.add_sample(sample(1, 5))
        assert len(window.samples()) == 2
        assert window.mean_speed() == Speed(0)

    def test_clear(self):
        window = PositionWindow(size=10)
        window.add_sample(sample(0, 0))
        window.clear()
        assert len(window.samples()) == 0

    def test_samples_is_a_copy(self):
        window = PositionWindow(size=10)
        window.add_sample(sample(0, 0))
        snapshot = window.samples()
        window.add_sample(sample(1, 10))
        assert len(snapshot) == 1

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            PositionWindow(size=0)
