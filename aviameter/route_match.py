#!/usr/bin/env python3
"""
ETA estimation by matching a live track against a reference track.

A reference track is a previously recorded flight of the same route.
The estimate works in two stages:

1. Match the current position to a place along the reference track.
   The reference point closest to the current position is bracketed by
   its neighbours, and the current position is projected onto the
   segment between them to get the progress through that segment.

2. Rescale the reference's remaining time by a pace factor. The pace
   factor is the ratio of the time the live flight took to reach the
   matched segment to the time the reference flight took for the same
   stretch (> 1 means slower than the reference).

Only points above ETA_MIN_ALTITUDE take part in the matching. This
drops taxi, take-off and landing samples near the airports where the
two tracks diverge the most.

Approximations:
    The projection onto the bracketing segment treats lat/lon as planar
    coordinates. This holds over the short distance between two
    consecutive recorded points.

Degraded results:
    Whenever the inputs do not allow an estimate (no points above the
    altitude threshold, closest reference point at either end of the
    filtered reference, non-positive reference base time, non-finite
    result, or a result outside the datetime range) the estimator
    returns None instead of raising.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from aviameter.utils.constants import ETA_MIN_ALTITUDE, MAX_TIMESTAMP_MS, MIN_TIMESTAMP_MS
from aviameter.utils.geo import GeoPoint, TrackPoint, haversine_distance

import logging
log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteMatch:
    """
    Result of matching a live track against a reference track.

    Attributes:
        start: First live point above the altitude threshold
        current: Last live point above the altitude threshold
        ref_start: Reference point closest to start
        ref_closest: Reference point closest to current
        ref_prev: Reference point before ref_closest
        ref_next: Reference point after ref_closest
        projection: current projected onto ref_prev -> ref_next
        progress: Fraction of ref_prev -> ref_next covered (0-1)
        segment_remaining_ms: Reference time left in the bracketing segment
        pace_factor: Live time over reference time for the matched stretch
        eta: Estimated arrival, ms since the epoch
    """
    start: TrackPoint
    current: TrackPoint
    ref_start: TrackPoint
    ref_closest: TrackPoint
    ref_prev: TrackPoint
    ref_next: TrackPoint
    projection: GeoPoint
    progress: float
    segment_remaining_ms: float
    pace_factor: float
    eta: int


def filter_airborne(track: Sequence[TrackPoint],
                    min_altitude: float = ETA_MIN_ALTITUDE) -> List[TrackPoint]:
    """Points strictly above min_altitude, in their original order."""
    return [p for p in track if p.alt > min_altitude]


def nearest_point(track: Sequence[TrackPoint],
                  point: GeoPoint) -> Optional[Tuple[int, TrackPoint]]:
    """
    Find the track point closest to a position.

    Ties keep the earliest point.

    Returns:
        Tuple of (index, TrackPoint), or None if the track is empty
    """
    best_index = -1
    best_distance = float("inf")

    for i, candidate in enumerate(track):
        d = haversine_distance(point.lat, point.lon, candidate.lat, candidate.lon)
        if d < best_distance:
            best_distance = d
            best_index = i

    if best_index < 0:
        return None
    return (best_index, track[best_index])


def project_point_on_segment(point: GeoPoint,
                             segment_start: GeoPoint,
                             segment_end: GeoPoint) -> GeoPoint:
    """
    Project a point onto a line segment, treating lat/lon as planar.

    The projection is clamped to the segment ends. A zero-length segment
    projects onto its start.
    """
    dx = segment_end.lon - segment_start.lon
    dy = segment_end.lat - segment_start.lat
    length_sq = dx * dx + dy * dy

    if length_sq == 0:
        return GeoPoint(segment_start.lat, segment_start.lon)

    t = ((point.lon - segment_start.lon) * dx +
         (point.lat - segment_start.lat) * dy) / length_sq

    if t < 0:
        return GeoPoint(segment_start.lat, segment_start.lon)
    if t > 1:
        return GeoPoint(segment_end.lat, segment_end.lon)

    return GeoPoint(segment_start.lat + t * dy, segment_start.lon + t * dx)


def _segment_progress(projection: GeoPoint,
                      ref_prev: TrackPoint,
                      ref_next: TrackPoint) -> float:
    segment_distance = haversine_distance(ref_prev.lat, ref_prev.lon,
                                          ref_next.lat, ref_next.lon)
    if segment_distance == 0:
        return 0.0
    progress = haversine_distance(projection.lat, projection.lon,
                                  ref_prev.lat, ref_prev.lon) / segment_distance
    return min(1.0, progress)


def match_reference(track: Sequence[TrackPoint],
                    reference_track: Sequence[TrackPoint],
                    min_altitude: float = ETA_MIN_ALTITUDE) -> Optional[RouteMatch]:
    """
    Match the live track against the reference track and estimate arrival.

    Args:
        track: Live track points, chronological
        reference_track: Reference track points, chronological; its last
            point is the recorded arrival
        min_altitude: Altitude threshold for the points used in matching

    Returns:
        RouteMatch with the intermediate values and the ETA, or None when
        no estimate is possible
    """
    if not track or not reference_track:
        log.debug("ETA: track or reference track is empty")
        return None

    mid_track = filter_airborne(track, min_altitude)
    mid_ref = filter_airborne(reference_track, min_altitude)

    if not mid_track or not mid_ref:
        log.debug("ETA: no track or reference points above "
                  f"{min_altitude}")
        return None

    start = mid_track[0]
    current = mid_track[-1]

    ref_start_match = nearest_point(mid_ref, start)
    ref_closest_match = nearest_point(mid_ref, current)
    if ref_start_match is None or ref_closest_match is None:
        log.debug("ETA: could not find reference points for estimation")
        return None

    _, ref_start = ref_start_match
    closest_index, ref_closest = ref_closest_match

    if closest_index == 0 or closest_index == len(mid_ref) - 1:
        log.debug("ETA: closest reference point has no previous or next point")
        return None

    ref_prev = mid_ref[closest_index - 1]
    ref_next = mid_ref[closest_index + 1]

    # Bracketing segment is PREV -> CLOSEST -> NEXT
    projection = project_point_on_segment(current, ref_prev, ref_next)
    segment_time = ref_next.timestamp - ref_prev.timestamp
    progress = _segment_progress(projection, ref_prev, ref_next)
    segment_remaining = segment_time * (1 - progress)

    actual_elapsed = current.timestamp - start.timestamp
    est_start_to_prev = actual_elapsed - segment_time * progress
    ref_start_to_prev = ref_prev.timestamp - ref_start.timestamp
    if ref_start_to_prev <= 0:
        log.debug(f"ETA: reference base time is {ref_start_to_prev} ms")
        return None

    pace_factor = est_start_to_prev / ref_start_to_prev

    ref_remaining = reference_track[-1].timestamp - ref_closest.timestamp
    eta = current.timestamp + (ref_remaining + segment_remaining) * pace_factor

    if not math.isfinite(eta):
        log.debug(f"ETA: estimated time {eta} is invalid")
        return None
    eta_ms = int(round(eta))
    if not MIN_TIMESTAMP_MS <= eta_ms <= MAX_TIMESTAMP_MS:
        log.debug(f"ETA: estimated time {eta_ms} is out of range")
        return None

    return RouteMatch(
        start=start,
        current=current,
        ref_start=ref_start,
        ref_closest=ref_closest,
        ref_prev=ref_prev,
        ref_next=ref_next,
        projection=projection,
        progress=progress,
        segment_remaining_ms=segment_remaining,
        pace_factor=pace_factor,
        eta=eta_ms,
    )


def estimate_arrival(track: Sequence[TrackPoint],
                     reference_track: Sequence[TrackPoint],
                     min_altitude: float = ETA_MIN_ALTITUDE) -> Optional[int]:
    """
    Estimate the arrival time of the live flight.

    Returns:
        Arrival time in ms since the epoch, or None when unavailable
    """
    match = match_reference(track, reference_track, min_altitude)
    if match is None:
        return None
    return match.eta
