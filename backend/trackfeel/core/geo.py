import math
from typing import NamedTuple, Optional

from trackfeel.core.constants import EARTH_RADIUS_M


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Meters between two consecutive trackpoints (degrees in, spherical Earth).

    Feeds both the per-point speed and the activity distance, so the
    stored total is exactly the sum of the segment lengths.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    h = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


class BoundingBox(NamedTuple):
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def extend(self, lat: float, lon: float) -> "BoundingBox":
        return BoundingBox(
            min(self.min_lat, lat),
            min(self.min_lon, lon),
            max(self.max_lat, lat),
            max(self.max_lon, lon),
        )

    @classmethod
    def around(cls, lat: float, lon: float) -> "BoundingBox":
        return cls(lat, lon, lat, lon)

    def to_wkt(self) -> str:
        return bbox_to_wkt(self.min_lat, self.min_lon, self.max_lat, self.max_lon)

    def as_dict(self) -> dict:
        return {
            "minLat": self.min_lat,
            "minLon": self.min_lon,
            "maxLat": self.max_lat,
            "maxLon": self.max_lon,
        }


def bbox_to_wkt(min_lat: float, min_lon: float, max_lat: float, max_lon: float) -> str:
    # POLYGON in lon/lat order, closed ring
    ring = [
        (min_lon, min_lat),
        (max_lon, min_lat),
        (max_lon, max_lat),
        (min_lon, max_lat),
        (min_lon, min_lat),
    ]
    return "POLYGON((" + ",".join(f"{x:f} {y:f}" for x, y in ring) + "))"


def point_wkt(lat: float, lon: float) -> str:
    return f"POINT({lon!r} {lat!r})"


def bounds_of(coords: list[list[float]]) -> Optional[BoundingBox]:
    """Bounding box of [lon, lat] pairs, or None for an empty list."""
    if not coords:
        return None
    lons = [c[0] for c in coords]
    lats = [c[1] for c in coords]
    return BoundingBox(min(lats), min(lons), max(lats), max(lons))
