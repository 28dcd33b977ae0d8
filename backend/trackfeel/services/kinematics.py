"""
Kinematics pass over a flattened GPX track.

One left-to-right walk that validates timestamps, derives per-point speed
and accumulates the activity summary (distance, duration, bounds, heart
rate).
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from trackfeel.core.constants import MIN_TRACK_POINTS
from trackfeel.core.errors import InsufficientData
from trackfeel.core.geo import BoundingBox, haversine_m
from trackfeel.core.time_utils import elapsed_seconds, parse_timestamp
from trackfeel.services.gpx_reader import RawPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrichedPoint:
    time: datetime
    lat: float
    lon: float
    ele: Optional[float] = None
    hr: Optional[int] = None
    # None on the first point and wherever the interval was not positive
    speed_mps: Optional[float] = None


@dataclass(frozen=True)
class ActivitySummary:
    started_at: datetime
    duration_sec: int
    distance_m: float
    bounds: BoundingBox
    avg_hr: Optional[int] = None
    max_hr: Optional[int] = None


@dataclass(frozen=True)
class KinematicsResult:
    summary: ActivitySummary
    points: tuple[EnrichedPoint, ...]


def round_half_up(value: float) -> int:
    """Round to nearest int, halves away from zero (Python's round() is banker's)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def compute_kinematics(raw_points: Iterable[RawPoint]) -> KinematicsResult:
    """Derive speeds and the activity summary from raw samples.

    Points whose timestamp does not parse are skipped entirely: they add
    nothing to distance, bounds or heart rate and are not emitted. Distance
    and speed are always measured against the previous *surviving* point.

    Raises:
        InsufficientData: if fewer than two points have a valid timestamp
    """
    series: list[EnrichedPoint] = []
    prev_idx: Optional[int] = None

    total_dist_m = 0.0
    bounds: Optional[BoundingBox] = None
    hr_sum = 0
    hr_count = 0
    hr_max = 0
    dropped = 0

    for p in raw_points:
        t = parse_timestamp(p.time_text)
        if t is None:
            dropped += 1
            continue

        bounds = BoundingBox.around(p.lat, p.lon) if bounds is None else bounds.extend(p.lat, p.lon)

        if p.hr is not None:
            hr_sum += p.hr
            hr_count += 1
            if hr_count == 1 or p.hr > hr_max:
                hr_max = p.hr

        speed = None
        if prev_idx is not None:
            prev = series[prev_idx]
            d = haversine_m(prev.lat, prev.lon, p.lat, p.lon)
            dt = elapsed_seconds(prev.time, t)
            # duplicate or out-of-order timestamps: keep the point, no speed
            if dt > 0:
                speed = d / dt
                total_dist_m += d

        series.append(EnrichedPoint(time=t, lat=p.lat, lon=p.lon, ele=p.ele, hr=p.hr, speed_mps=speed))
        prev_idx = len(series) - 1

    if dropped:
        logger.debug("dropped %d points with unparsable timestamps", dropped)
    if len(series) < MIN_TRACK_POINTS:
        raise InsufficientData(f"only {len(series)} points with a valid timestamp")

    start = series[0].time
    end = series[-1].time
    duration_sec = max(int(elapsed_seconds(start, end)), 0)

    summary = ActivitySummary(
        started_at=start,
        duration_sec=duration_sec,
        distance_m=total_dist_m,
        bounds=bounds,
        avg_hr=round_half_up(hr_sum / hr_count) if hr_count else None,
        max_hr=hr_max if hr_count else None,
    )
    return KinematicsResult(summary=summary, points=tuple(series))
