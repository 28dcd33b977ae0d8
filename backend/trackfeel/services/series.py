"""
Chart series for a stored activity.

Builds the GeoJSON line and the index-aligned arrays the activity page plots
(time, elapsed, elevation, heart rate, speed, pace). Missing values stay in
place as None so every array lines up with the coordinates.
"""

import math
from typing import Optional, Sequence

from trackfeel.core.constants import MPS_TO_KMH
from trackfeel.core.errors import ActivityNotFound
from trackfeel.core.geo import bounds_of
from trackfeel.core.time_utils import elapsed_seconds, format_instant
from trackfeel.services.kinematics import round_half_up
from trackfeel.services.store import StoredPoint


def pace_min_per_km(speed: Optional[float]) -> Optional[float]:
    """Convert speed (m/s) to pace per km in "minutes.seconds" form.

    The fractional part holds *seconds*, not a fraction of a minute:
    5'33"/km is 5.33, not 5.55. Missing or non-positive speed -> None.
    """
    if speed is None or speed <= 0:
        return None
    sec_per_km = 1000.0 / speed
    minutes = math.floor(sec_per_km / 60)
    seconds = round_half_up(math.fmod(sec_per_km, 60))
    return minutes + seconds / 100


def speed_to_kmh(speed: Optional[float]) -> Optional[float]:
    if speed is None:
        return None
    return speed * MPS_TO_KMH


def assemble_track(activity, points: Sequence[StoredPoint]) -> dict:
    """Build the track response for one activity.

    `activity` is a summary row (see store.SUMMARY_COLUMNS) and `points`
    its trackpoints, already in ascending time order.

    Raises:
        ActivityNotFound: if there are no points
    """
    if not points:
        raise ActivityNotFound(f"no trackpoints for activity {activity.id}")

    coords: list[list[float]] = []
    time_iso: list[str] = []
    elapsed_sec: list[float] = []
    elevation: list[Optional[float]] = []
    hr: list[Optional[int]] = []
    speed_mps: list[Optional[float]] = []
    speed_kmh: list[Optional[float]] = []
    pace: list[Optional[float]] = []

    baseline = points[0].t
    for p in points:
        coords.append([p.lon, p.lat])
        time_iso.append(format_instant(p.t))
        elapsed_sec.append(elapsed_seconds(baseline, p.t))
        elevation.append(p.ele_m)
        hr.append(p.hr)
        speed_mps.append(p.speed_mps)
        speed_kmh.append(speed_to_kmh(p.speed_mps))
        pace.append(pace_min_per_km(p.speed_mps))

    return {
        "id": str(activity.id),
        "summary": {
            "started_at": format_instant(activity.started_at),
            "sport": activity.sport,
            "duration_sec": activity.duration_sec,
            "distance_m": activity.distance_m,
            "avg_hr": activity.avg_hr,
            "max_hr": activity.max_hr,
            "bounds": bounds_of(coords).as_dict(),
            "points_count": len(points),
        },
        "geojson": {
            "type": "Feature",
            "geometry": {"type": "LineString", "coordinates": coords},
            "properties": {},
        },
        "series": {
            "time_iso": time_iso,
            "elapsed_sec": elapsed_sec,
            "elevation": elevation,
            "hr": hr,
            "speed_mps": speed_mps,
            "speed_kmh": speed_kmh,
            "pace_min_per_km": pace,
        },
    }
