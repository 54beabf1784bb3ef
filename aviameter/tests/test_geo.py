#!/usr/bin/env python3
"""
Unit tests for geographic primitives.

Tests cover:
- Haversine distance properties (identity, symmetry, known distances)
- TrackPoint serialization
"""

import math

import pytest

from aviameter.utils.constants import EARTH_RADIUS_M
from aviameter.utils.geo import GeoPoint, TrackPoint, distance, haversine_distance
from aviameter.utils.units import Length


class TestDistance:
    """Tests for distance / haversine_distance."""

    def test_returns_length(self):
        assert isinstance(distance(GeoPoint(0, 0), GeoPoint(0, 1)), Length)

    def test_same_point(self):
        for lat, lon in [(0, 0), (47.5, -122.3), (-89.9, 179.9), (50.1, 14.26)]:
            p = GeoPoint(lat, lon)
            assert distance(p, p).value == pytest.approx(0.0, abs=1e-6)

    def test_symmetry(self):
        a = GeoPoint(47.6062, -122.3321)
        b = GeoPoint(45.5152, -122.6784)
        assert distance(a, b).value == pytest.approx(distance(b, a).value, rel=1e-12)

    def test_one_degree_latitude_at_equator(self):
        d = distance(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0))
        assert d.value == pytest.approx(111_195, abs=50)

    def test_one_degree_longitude_at_equator(self):
        d = haversine_distance(0.0, 0.0, 0.0, 1.0)
        assert d == pytest.approx(111_195, abs=50)

    def test_known_distance_seattle_portland(self):
        """Seattle to Portland is roughly 233 km."""
        d = haversine_distance(47.6062, -122.3321, 45.5152, -122.6784)
        assert d == pytest.approx(233_000, rel=0.05)

    def test_antipodal(self):
        d = haversine_distance(0.0, 0.0, 0.0, 180.0)
        assert math.isfinite(d)
        assert d == pytest.approx(math.pi * EARTH_RADIUS_M, rel=1e-9)

    def test_non_negative(self):
        assert haversine_distance(10, 10, -10, -10) > 0

    def test_track_point_is_a_geo_point(self):
        a = TrackPoint(lat=50.0, lon=14.0, alt=3000.0, timestamp=1)
        b = GeoPoint(50.0, 14.0)
        assert distance(a, b).value == pytest.approx(0.0, abs=1e-6)


class TestTrackPoint:
    """Tests for TrackPoint records."""

    def test_to_dict(self):
        p = TrackPoint(lat=50.1, lon=14.2, alt=1200.5, timestamp=1700000000000)
        assert p.to_dict() == {
            "lat": 50.1,
            "lon": 14.2,
            "alt": 1200.5,
            "timestamp": 1700000000000,
        }

    def test_from_dict_coerces_types(self):
        p = TrackPoint.from_dict({"lat": "50.1", "lon": 14, "alt": 3000, "timestamp": 5.0})
        assert p == TrackPoint(lat=50.1, lon=14.0, alt=3000.0, timestamp=5)
        assert isinstance(p.timestamp, int)

    def test_from_dict_missing_field(self):
        with pytest.raises(KeyError):
            TrackPoint.from_dict({"lat": 1, "lon": 2, "alt": 3})

    def test_from_dict_bad_value(self):
        with pytest.raises(ValueError):
            TrackPoint.from_dict({"lat": "north", "lon": 2, "alt": 3, "timestamp": 4})
