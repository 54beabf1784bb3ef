#!/usr/bin/env python3
"""
Airport reference data and nearest-airport search.

Airport lists come as JSON records whose coordinates may be strings:

    {"iata": "PRG", "name": "Vaclav Havel Airport Prague",
     "lat": "50.1008", "lon": "14.26", "status": 1, "size": "large",
     "iso": "CZ", "continent": "EU", "type": "airport"}

Only records with a positive status and finite coordinates are
considered valid. The list is small (hundreds to a few thousand
entries), so the nearest airport is found by a linear scan on every
sample without any spatial index.
"""

import json
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from aviameter.utils.geo import GeoPoint, haversine_distance
from aviameter.utils.units import Length

import logging
log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Airport:
    """
    A static airport record.

    Attributes:
        iata: IATA code (e.g., "PRG")
        name: Display name
        lat: Latitude in degrees (may be a string in raw records)
        lon: Longitude in degrees (may be a string in raw records)
        status: Positive for operating airports
        size: Size class ("large", "medium", "small", ...)
    """
    iata: str
    name: str
    lat: Union[float, str]
    lon: Union[float, str]
    status: int = 1
    size: str = ""
    iso: str = ""
    continent: str = ""
    type: str = ""

    @property
    def key(self) -> str:
        return f"{self.iata} {self.name}".replace(" ", "_")

    @property
    def label(self) -> str:
        return f"{self.iata} - {self.name}"

    @property
    def position(self) -> GeoPoint:
        return GeoPoint(float(self.lat), float(self.lon))

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "iata": self.iata,
            "name": self.name,
            "lat": self.lat,
            "lon": self.lon,
            "status": self.status,
            "size": self.size,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Airport":
        return cls(
            iata=str(data.get("iata", "")),
            name=str(data.get("name", "")),
            lat=data.get("lat"),
            lon=data.get("lon"),
            status=data.get("status", 0),
            size=str(data.get("size") or ""),
            iso=str(data.get("iso") or ""),
            continent=str(data.get("continent") or ""),
            type=str(data.get("type") or ""),
        )


@dataclass(frozen=True)
class NearestAirportResult:
    airport: Airport
    distance: Length


# =============================================================================
# Filters
# =============================================================================

def _finite(value) -> bool:
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def airport_is_valid(airport: Airport) -> bool:
    """True for operating airports whose coordinates parse as finite numbers."""
    try:
        operating = float(airport.status) > 0
    except (TypeError, ValueError):
        return False
    return operating and _finite(airport.lat) and _finite(airport.lon)


def airport_is_sized(airport: Airport) -> bool:
    """True for airports significant enough to show on an overview map."""
    return airport.size == "large"


def standardize_airports(airports: Iterable[Airport]) -> List[Airport]:
    """
    Drop invalid airports, coerce coordinates to float and de-duplicate.

    Duplicates share the same key (IATA code and name); the first one wins.
    """
    seen = set()
    standardized = []
    for airport in airports:
        if not airport_is_valid(airport):
            continue
        if airport.key in seen:
            continue
        seen.add(airport.key)
        standardized.append(Airport(
            iata=airport.iata,
            name=airport.name,
            lat=float(airport.lat),
            lon=float(airport.lon),
            status=airport.status,
            size=airport.size,
            iso=airport.iso,
            continent=airport.continent,
            type=airport.type,
        ))
    return standardized


def load_airports(path: str) -> List[Airport]:
    """
    Load and standardize an airport list from a JSON file.

    Args:
        path: JSON file holding a list of airport records

    Returns:
        Valid, de-duplicated airports
    """
    with open(path, "r", encoding="utf-8") as h:
        records = json.load(h)

    if not isinstance(records, list):
        raise ValueError(f"Airport file {path} does not hold a list")

    airports = standardize_airports(
        Airport.from_dict(r) for r in records if isinstance(r, dict)
    )
    log.info(f"Loaded {len(airports)} airports from {path} "
             f"({len(records)} records)")
    return airports


def find_airport(airports: Iterable[Airport], key: str) -> Optional[Airport]:
    """Look up an airport by its key."""
    for airport in airports:
        if airport.key == key:
            return airport
    return None


# =============================================================================
# Nearest Airport
# =============================================================================

def nearest_airport(position: GeoPoint,
                    airports: Optional[Iterable[Airport]]) -> Optional[NearestAirportResult]:
    """
    Find the valid airport closest to a position.

    Ties keep the airport that comes first in the list.

    Args:
        position: Current position
        airports: Candidate airports

    Returns:
        NearestAirportResult, or None if no valid airport exists
    """
    if not airports:
        return None

    closest = None
    closest_distance = float("inf")

    for airport in airports:
        if not airport_is_valid(airport):
            continue
        d = haversine_distance(float(airport.lat), float(airport.lon),
                               position.lat, position.lon)
        if d < closest_distance:
            closest_distance = d
            closest = airport

    if closest is None:
        return None
    return NearestAirportResult(airport=closest, distance=Length(closest_distance))
