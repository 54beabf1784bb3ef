"""
aviameter - live flight statistics from a GPS sample stream.

Derives windowed ground speed and vertical speed, the nearest airport,
distance to the arrival airport and an ETA projected from a previously
recorded reference track of the same route.

Usage:
    from aviameter.statistics import FlightStatistics
    from aviameter.flightpath import MemoryStore

    stats = FlightStatistics(store=MemoryStore(), airports=airports)
    snapshot = stats.ingest({"lat": 50.1, "lon": 14.2,
                             "altitude": 3200.0, "timestamp": 1700000000000})
"""

from aviameter.version import __version__

__all__ = ["__version__"]
