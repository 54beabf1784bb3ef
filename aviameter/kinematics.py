#!/usr/bin/env python3
"""
Windowed kinematics from recent GPS samples.

Maintains a bounded window of the most recent samples and derives the
mean ground speed and mean vertical speed over consecutive pairs. This
smooths out the jitter of single GPS fixes without keeping the whole
flight history in memory.

Noisy input is tolerated: duplicate, stale or out-of-order timestamps
never produce a negative or infinite speed, and missing altitudes only
drop the affected pairs from the vertical average.
"""

import threading
from collections import deque
from dataclasses import dataclass
from typing import List, Optional, Sequence

from aviameter.utils.constants import RECENT_WINDOW_SIZE
from aviameter.utils.geo import GeoPoint, haversine_distance
from aviameter.utils.units import Speed

import logging
log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimedPosition(GeoPoint):
    """
    A single GPS sample.

    Attributes:
        lat: Latitude in degrees
        lon: Longitude in degrees
        alt: Altitude in meters, None when the fix has no altitude
        timestamp: Milliseconds since the epoch
    """
    alt: Optional[float] = None
    timestamp: int = 0

    def to_dict(self) -> dict:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "altitude": self.alt,
            "timestamp": self.timestamp,
        }


def _time_delta_sec(prev: TimedPosition, curr: TimedPosition) -> float:
    return (curr.timestamp - prev.timestamp) / 1000


def _mean(values: List[float]) -> Speed:
    if not values:
        return Speed(0)
    return Speed(sum(values) / len(values))


def mean_speed(window: Sequence[TimedPosition]) -> Speed:
    """
    Mean ground speed over consecutive sample pairs.

    A pair whose time delta is zero or negative contributes 0.

    Args:
        window: Samples in chronological order

    Returns:
        Mean speed, Speed(0) with fewer than 2 samples
    """
    if not window or len(window) < 2:
        return Speed(0)

    speeds = []
    samples = list(window)
    for prev, curr in zip(samples, samples[1:]):
        dt = _time_delta_sec(prev, curr)
        if dt > 0:
            speeds.append(haversine_distance(prev.lat, prev.lon,
                                             curr.lat, curr.lon) / dt)
        else:
            speeds.append(0.0)

    return _mean(speeds)


def mean_vertical_speed(window: Sequence[TimedPosition]) -> Speed:
    """
    Mean vertical speed over consecutive sample pairs.

    Pairs missing an altitude on either side are skipped. A pair whose
    time delta is zero or negative contributes 0.

    Args:
        window: Samples in chronological order

    Returns:
        Mean vertical speed (positive = climbing), Speed(0) when no pair
        contributed
    """
    if not window or len(window) < 2:
        return Speed(0)

    vert_speeds = []
    samples = list(window)
    for prev, curr in zip(samples, samples[1:]):
        if prev.alt is None or curr.alt is None:
            continue
        dt = _time_delta_sec(prev, curr)
        if dt > 0:
            vert_speeds.append((curr.alt - prev.alt) / dt)
        else:
            vert_speeds.append(0.0)

    return _mean(vert_speeds)


class PositionWindow:
    """
    Keeps the most recent samples, oldest evicted first.

    Thread Safety:
        All public methods are thread-safe.

    Usage:
        window = PositionWindow(size=10)
        window.add_sample(TimedPosition(lat, lon, alt, timestamp))
        speed = window.mean_speed()
    """

    def __init__(self, size: int = RECENT_WINDOW_SIZE):
        if size < 1:
            raise ValueError(f"Window size must be positive, got {size}")
        self.size = size
        self._samples: deque = deque(maxlen=size)
        self._lock = threading.Lock()

    def add_sample(self, sample: TimedPosition) -> None:
        with self._lock:
            if self._samples and sample.timestamp <= self._samples[-1].timestamp:
                log.debug(f"Sample at {sample.timestamp} is not newer than "
                          f"{self._samples[-1].timestamp}")
            self._samples.append(sample)

    def samples(self) -> List[TimedPosition]:
        """Snapshot of the window, oldest first."""
        with self._lock:
            return list(self._samples)

    def mean_speed(self) -> Speed:
        return mean_speed(self.samples())

    def mean_vertical_speed(self) -> Speed:
        return mean_vertical_speed(self.samples())

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()
