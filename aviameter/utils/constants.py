"""module to hold constants used throughout the project"""
from datetime import datetime, timedelta, timezone

EARTH_RADIUS_M = 6371000

# Length conversions, per meter
M_TO_FT = 3.28084
M_TO_NM = 0.000539957
M_TO_KM = 0.001

# Speed conversions, per meter/second
MPS_TO_KTS = 1.94384449
MPS_TO_FPM = 196.8503937
SPEED_OF_SOUND_MPS = 340.29
MPS_TO_KMH = 3.6

# Number of recent samples used for speed averaging
RECENT_WINDOW_SIZE = 10

# Track points at or below this altitude are ignored for route matching
ETA_MIN_ALTITUDE = 1500

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Range of instants a datetime can represent, in ms since the epoch
MIN_TIMESTAMP_MS = (datetime.min.replace(tzinfo=timezone.utc) - EPOCH) // timedelta(milliseconds=1)
MAX_TIMESTAMP_MS = (datetime.max.replace(tzinfo=timezone.utc) - EPOCH) // timedelta(milliseconds=1)

# Storage keys
FLIGHT_PATH_KEY = "flightPath"
REFERENCE_TRACK_KEY = "referenceTrack"
