#!/usr/bin/env python3
"""
Geographic primitives: points, track points and great-circle distance.

The Earth is treated as a sphere of radius EARTH_RADIUS_M.
"""

import math
from dataclasses import dataclass

from aviameter.utils.constants import EARTH_RADIUS_M
from aviameter.utils.units import Length


@dataclass(frozen=True)
class GeoPoint:
    """A position in degrees."""
    lat: float
    lon: float


@dataclass(frozen=True)
class TrackPoint(GeoPoint):
    """
    A recorded position of a flight.

    Attributes:
        lat: Latitude in degrees
        lon: Longitude in degrees
        alt: Altitude in meters
        timestamp: Milliseconds since the epoch
    """
    alt: float = 0.0
    timestamp: int = 0

    def to_dict(self) -> dict:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "alt": self.alt,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrackPoint":
        """
        Build a TrackPoint from a {lat, lon, alt, timestamp} record.

        Raises:
            KeyError, TypeError, ValueError: the record is malformed
        """
        return cls(
            lat=float(data["lat"]),
            lon=float(data["lon"]),
            alt=float(data["alt"]),
            timestamp=int(data["timestamp"]),
        )


def haversine_distance(lat1: float, lon1: float,
                       lat2: float, lon2: float) -> float:
    """
    Calculate great-circle distance between two points in meters.

    Args:
        lat1, lon1: First point coordinates in degrees
        lat2, lon2: Second point coordinates in degrees

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    # Rounding can push a just past 1 for antipodal points
    a = min(a, 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def distance(a: GeoPoint, b: GeoPoint) -> Length:
    """Great-circle distance between two points."""
    return Length(haversine_distance(a.lat, a.lon, b.lat, b.lon))
