#!/usr/bin/env python3
"""
Flight paths and their persistence.

A FlightPath is an immutable, chronologically ordered sequence of
TrackPoints. The live path grows by one point per GPS sample; each
append produces a new FlightPath and is written through to a key-value
store so the path survives restarts. The reference path is loaded once
and only read afterwards.

Stored format (UTF-8 JSON):

    {"trackPoints": [{"lat": 50.1, "lon": 14.2, "alt": 3000.0,
                      "timestamp": 1700000000000}, ...]}

Key-value stores are injected. MemoryStore keeps everything in a dict,
FileStore keeps one file per key in a directory.
"""

import json
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional, Sequence, Tuple

from aviameter.errors import StorageError
from aviameter.utils.constants import FLIGHT_PATH_KEY, REFERENCE_TRACK_KEY
from aviameter.utils.geo import TrackPoint

import logging
log = logging.getLogger(__name__)


# =============================================================================
# FlightPath
# =============================================================================

@dataclass(frozen=True)
class FlightPath:
    """An ordered, immutable sequence of track points."""
    track_points: Tuple[TrackPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.track_points)

    def __iter__(self) -> Iterator[TrackPoint]:
        return iter(self.track_points)

    def __getitem__(self, index):
        return self.track_points[index]

    @property
    def last(self) -> Optional[TrackPoint]:
        return self.track_points[-1] if self.track_points else None

    def appended(self, point: TrackPoint) -> "FlightPath":
        return FlightPath(self.track_points + (point,))

    def to_dict(self) -> dict:
        return {"trackPoints": [p.to_dict() for p in self.track_points]}

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def from_points(cls, points: Sequence[TrackPoint]) -> "FlightPath":
        return cls(tuple(points))

    @classmethod
    def from_dict(cls, data: dict) -> "FlightPath":
        """
        Build a FlightPath from its stored form.

        Raises:
            ValueError: the data is not a {"trackPoints": [...]} record
        """
        if not isinstance(data, dict) or not isinstance(data.get("trackPoints"), list):
            raise ValueError("Flight path must be an object with a trackPoints list")
        try:
            return cls(tuple(TrackPoint.from_dict(p) for p in data["trackPoints"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid track point: {e}") from e

    @classmethod
    def from_json(cls, raw: bytes) -> "FlightPath":
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Flight path is not valid JSON: {e}") from e
        return cls.from_dict(data)


@dataclass(frozen=True)
class ReferenceTrack:
    """A named, previously recorded flight used for ETA estimation."""
    name: str
    flight_path: FlightPath

    def to_dict(self) -> dict:
        return {"name": self.name, "flightPath": self.flight_path.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "ReferenceTrack":
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise ValueError("Reference track must be an object with a name")
        return cls(name=data["name"],
                   flight_path=FlightPath.from_dict(data.get("flightPath")))


# =============================================================================
# Key-value stores
# =============================================================================

class KeyValueStore(object):
    """Minimal byte-oriented key-value storage interface."""

    def get(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def set(self, key: str, value: bytes) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):

    def __init__(self):
        self._data: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class FileStore(KeyValueStore):
    """
    Stores each key as a file in a directory.

    Writes go to a temporary file first and are moved into place, so a
    crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: str):
        self.directory = directory
        if not os.path.isdir(directory):
            log.info(f"Creating dir {directory}")
            os.makedirs(directory)

    def _path(self, key: str) -> str:
        if not key or os.sep in key or (os.altsep and os.altsep in key) or key.startswith("."):
            raise ValueError(f"Invalid store key: {key!r}")
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not os.path.isfile(path):
            return None
        with open(path, "rb") as h:
            return h.read()

    def set(self, key: str, value: bytes) -> None:
        path = self._path(key)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.")
        try:
            with os.fdopen(fd, "wb") as h:
                h.write(value)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def delete(self, key: str) -> None:
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)


# =============================================================================
# Stores
# =============================================================================

class _StoreBacked(object):

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.storage = store

    def _check_storage(self) -> KeyValueStore:
        if self.storage is None:
            raise StorageError("Storage not set. Pass a KeyValueStore when creating the store.")
        return self.storage


class FlightPathStore(_StoreBacked):
    """
    Persists the live flight path.

    The path is read from the store once and cached; every append writes
    the whole path back.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        super().__init__(store)
        self._cached: Optional[FlightPath] = None

    def get_flight_path(self) -> FlightPath:
        store = self._check_storage()
        if self._cached is not None:
            return self._cached

        raw = store.get(FLIGHT_PATH_KEY)
        flight_path = FlightPath()
        if raw:
            try:
                flight_path = FlightPath.from_json(raw)
            except ValueError as e:
                log.warning(f"Invalid stored flight path, resetting: {e}")
                store.delete(FLIGHT_PATH_KEY)
        self._cached = flight_path
        return flight_path

    def add_track_point(self, point: TrackPoint) -> FlightPath:
        store = self._check_storage()
        flight_path = self.get_flight_path().appended(point)
        store.set(FLIGHT_PATH_KEY, flight_path.to_json())
        self._cached = flight_path
        return flight_path

    def clear_flight_path(self) -> None:
        store = self._check_storage()
        store.delete(FLIGHT_PATH_KEY)
        self._cached = FlightPath()
        log.info("Cleared flight path")

    def export_json(self) -> bytes:
        return self.get_flight_path().to_json()

    @staticmethod
    def export_filename(now: Optional[datetime] = None) -> str:
        """File name for an exported path, e.g. flightPath_20240501T1342Z.json"""
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return f"flightPath_{now:%Y%m%dT%H%M}Z.json"


class RouteStore(_StoreBacked):
    """Persists the reference track used for ETA estimation."""

    def get_reference_track(self) -> Optional[ReferenceTrack]:
        store = self._check_storage()
        raw = store.get(REFERENCE_TRACK_KEY)
        if not raw:
            return None
        try:
            return ReferenceTrack.from_dict(json.loads(raw))
        except ValueError as e:
            log.warning(f"Invalid stored reference track, resetting: {e}")
            store.delete(REFERENCE_TRACK_KEY)
            return None

    def set_reference_track(self, name: str, flight_path: FlightPath) -> ReferenceTrack:
        store = self._check_storage()
        reference = ReferenceTrack(name=name, flight_path=flight_path)
        store.set(REFERENCE_TRACK_KEY, json.dumps(reference.to_dict()).encode("utf-8"))
        log.info(f"Stored reference track {name!r} with {len(flight_path)} points")
        return reference

    def clear_reference_track(self) -> None:
        store = self._check_storage()
        store.delete(REFERENCE_TRACK_KEY)
