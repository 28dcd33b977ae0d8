"""Shared application constants.

Centralizes repeat values used across import/processing logic so we can
document and adjust them in one place.
"""

# Mean Earth radius used by the haversine formula (meters)
EARTH_RADIUS_M = 6371000.0

# m/s -> km/h
MPS_TO_KMH = 3.6

# An activity needs at least this many timed points to be accepted
MIN_TRACK_POINTS = 2

# Spatial reference for stored geography values (WGS84 lon/lat)
SRID_WGS84 = 4326

# Pagination for GET /api/activities
DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 200

# Garmin TrackPointExtension namespaces carrying <hr>
GARMIN_TPX_NAMESPACES = (
    "http://www.garmin.com/xmlschemas/TrackPointExtension/v1",
    "http://www.garmin.com/xmlschemas/TrackPointExtension/v2",
)
