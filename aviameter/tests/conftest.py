"""Shared fixtures: synthetic flights along a meridian."""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from aviameter.utils.geo import TrackPoint

# A route of 21 points, 0.01 deg of latitude apart, one minute apart.
# The first two and last two points are on the ground.
ROUTE_POINTS = 21
ROUTE_LAT0 = 50.0
ROUTE_LON = 14.0
ROUTE_STEP_DEG = 0.01
ROUTE_INTERVAL_MS = 60_000
GROUND_ALT = 100.0
CRUISE_ALT = 3000.0

REF_T0 = 1_700_000_000_000
LIVE_T0 = REF_T0 + 86_400_000


def route_altitude(i: int) -> float:
    if i < 2 or i > ROUTE_POINTS - 3:
        return GROUND_ALT
    return CRUISE_ALT


def make_route(t0: int, interval_ms: int = ROUTE_INTERVAL_MS,
               indices=range(ROUTE_POINTS)):
    return [
        TrackPoint(
            lat=ROUTE_LAT0 + i * ROUTE_STEP_DEG,
            lon=ROUTE_LON,
            alt=route_altitude(i),
            timestamp=t0 + i * interval_ms,
        )
        for i in indices
    ]


@pytest.fixture
def reference_track():
    """Complete recorded flight, ground to ground."""
    return make_route(REF_T0)


@pytest.fixture
def live_track():
    """Same route flown at the same pace, halfway through (points 0-10)."""
    return make_route(LIVE_T0, indices=range(11))
