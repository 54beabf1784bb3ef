#!/usr/bin/env python3
"""
Per-sample flight statistics.

FlightStatistics is the entry point the host calls for every GPS sample.
Each call runs one synchronous pass:

    live path append -> window update -> mean speed / vertical speed
    -> nearest airport -> ETA (if a reference track is set)
    -> distance to the arrival airport -> StatisticsSnapshot

The snapshot is immutable and replaces the previous one wholesale.

Thread Safety:
    ingest() and the setters serialize on one lock, so samples delivered
    from several host threads are applied one at a time in arrival order.
"""

import threading
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Iterable, List, Optional, Tuple, Union

from aviameter.airports import Airport, NearestAirportResult, find_airport, nearest_airport
from aviameter.flightpath import FlightPath, FlightPathStore, KeyValueStore
from aviameter.kinematics import PositionWindow, TimedPosition
from aviameter.route_match import estimate_arrival
from aviameter.utils.constants import EPOCH, ETA_MIN_ALTITUDE, RECENT_WINDOW_SIZE
from aviameter.utils.geo import TrackPoint, distance
from aviameter.utils.units import Length, Speed

import logging
log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatisticsSnapshot:
    """
    Statistics derived from the most recent sample.

    Attributes:
        position: The sample that produced this snapshot
        recent_positions: Current sample window, oldest first
        speed: Mean ground speed over the window
        vertical_speed: Mean vertical speed over the window
        nearest_airport: Closest valid airport, None if there is none
        eta: Estimated arrival in ms since the epoch, None if unavailable
        distance_to_destination: Distance to the arrival airport, None if
            no arrival airport is configured or it is unknown
        gps_errored: The GPS source reported an error after this sample
    """
    position: Optional[TimedPosition] = None
    recent_positions: Tuple[TimedPosition, ...] = ()
    speed: Speed = field(default_factory=lambda: Speed(0))
    vertical_speed: Speed = field(default_factory=lambda: Speed(0))
    nearest_airport: Optional[NearestAirportResult] = None
    eta: Optional[int] = None
    distance_to_destination: Optional[Length] = None
    gps_errored: bool = False

    def to_dict(self) -> dict:
        nearest = None
        if self.nearest_airport is not None:
            nearest = {
                "airport": self.nearest_airport.airport.to_dict(),
                "distance_m": self.nearest_airport.distance.value,
            }
        eta_iso = None
        if self.eta is not None:
            eta_iso = (EPOCH + timedelta(milliseconds=self.eta)).isoformat()
        return {
            "position": self.position.to_dict() if self.position else None,
            "recent_positions": [p.to_dict() for p in self.recent_positions],
            "speed_mps": self.speed.value,
            "vertical_speed_mps": self.vertical_speed.value,
            "nearest_airport": nearest,
            "eta": self.eta,
            "eta_iso": eta_iso,
            "distance_to_destination_m": (
                self.distance_to_destination.value
                if self.distance_to_destination is not None else None
            ),
            "gps_errored": self.gps_errored,
        }


def parse_sample(data: Union[dict, TimedPosition]) -> TimedPosition:
    """
    Build a TimedPosition from a {lat, lon, altitude, timestamp} record.

    altitude may be missing or None.

    Raises:
        ValueError: the record is malformed
    """
    if isinstance(data, TimedPosition):
        return data
    if not isinstance(data, dict):
        raise ValueError("Sample must be an object")
    try:
        altitude = data.get("altitude", data.get("alt"))
        return TimedPosition(
            lat=float(data["lat"]),
            lon=float(data["lon"]),
            alt=float(altitude) if altitude is not None else None,
            timestamp=int(data["timestamp"]),
        )
    except KeyError as e:
        raise ValueError(f"Sample is missing {e}") from e
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid sample: {e}") from e


class FlightStatistics:
    """
    Turns a stream of GPS samples into StatisticsSnapshots.

    Usage:
        stats = FlightStatistics(store=FileStore(data_dir), airports=airports,
                                 reference_track=reference.flight_path,
                                 arrival_airport="PRG_Vaclav_Havel_Airport_Prague")
        snapshot = stats.ingest(sample)
    """

    def __init__(self,
                 store: KeyValueStore,
                 airports: Iterable[Airport] = (),
                 reference_track: Optional[FlightPath] = None,
                 arrival_airport: Optional[str] = None,
                 window_size: int = RECENT_WINDOW_SIZE,
                 eta_min_altitude: float = ETA_MIN_ALTITUDE):
        self._lock = threading.Lock()
        self._window = PositionWindow(window_size)
        self._path_store = FlightPathStore(store)
        self._airports: List[Airport] = list(airports)
        self._reference_track = reference_track
        self._arrival_airport = arrival_airport or None
        self._eta_min_altitude = eta_min_altitude
        self._latest: Optional[StatisticsSnapshot] = None

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_airports(self, airports: Iterable[Airport]) -> None:
        with self._lock:
            self._airports = list(airports)

    def set_reference_track(self, reference_track: Optional[FlightPath]) -> None:
        with self._lock:
            self._reference_track = reference_track

    def set_arrival_airport(self, key: Optional[str]) -> None:
        with self._lock:
            self._arrival_airport = key or None

    @property
    def has_reference_track(self) -> bool:
        return bool(self._reference_track)

    @property
    def latest(self) -> Optional[StatisticsSnapshot]:
        return self._latest

    @property
    def flight_path_store(self) -> FlightPathStore:
        return self._path_store

    def flight_path(self) -> FlightPath:
        with self._lock:
            return self._path_store.get_flight_path()

    # -------------------------------------------------------------------------
    # Samples
    # -------------------------------------------------------------------------

    def ingest(self, sample: Union[dict, TimedPosition]) -> StatisticsSnapshot:
        """
        Apply one GPS sample and compute fresh statistics.

        Args:
            sample: TimedPosition or {lat, lon, altitude, timestamp} record

        Returns:
            The new StatisticsSnapshot

        Raises:
            ValueError: the sample record is malformed
            OSError: the live path could not be written; the window is
                left unchanged
        """
        position = parse_sample(sample)

        with self._lock:
            # The window only takes samples the live path has stored
            flight_path = self._path_store.add_track_point(TrackPoint(
                lat=position.lat,
                lon=position.lon,
                alt=position.alt if position.alt is not None else 0.0,
                timestamp=position.timestamp,
            ))
            self._window.add_sample(position)

            recent = self._window.samples()
            snapshot = StatisticsSnapshot(
                position=position,
                recent_positions=tuple(recent),
                speed=self._window.mean_speed(),
                vertical_speed=self._window.mean_vertical_speed(),
                nearest_airport=nearest_airport(position, self._airports),
                eta=self._estimate_arrival(flight_path),
                distance_to_destination=self._distance_to_destination(position),
                gps_errored=False,
            )
            self._latest = snapshot

        log.debug(f"Sample {position.timestamp}: speed={snapshot.speed.kts()} kt "
                  f"vs={snapshot.vertical_speed.fpm()} fpm eta={snapshot.eta}")
        return snapshot

    def report_gps_error(self, reason: str = "") -> StatisticsSnapshot:
        """Mark the latest statistics as coming from a failed GPS source."""
        log.error(f"GPS error: {reason}" if reason else "GPS error")
        with self._lock:
            self._latest = replace(self._latest or StatisticsSnapshot(), gps_errored=True)
            return self._latest

    def reset(self) -> None:
        """Forget the live path and the sample window."""
        with self._lock:
            self._window.clear()
            self._path_store.clear_flight_path()
            self._latest = None

    def _estimate_arrival(self, flight_path: FlightPath) -> Optional[int]:
        if not self._reference_track:
            return None
        return estimate_arrival(flight_path, self._reference_track,
                                self._eta_min_altitude)

    def _distance_to_destination(self, position: TimedPosition) -> Optional[Length]:
        if not self._arrival_airport:
            return None
        airport = find_airport(self._airports, self._arrival_airport)
        if airport is None:
            log.debug(f"Arrival airport {self._arrival_airport} is not in the airport list")
            return None
        return distance(position, airport.position)
