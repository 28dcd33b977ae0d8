"""Import a synthetic GPX loop through the normal import pipeline.

Usage (from backend/, with DATABASE_URL pointing at a migrated database):
    python -m scripts.seed_demo_activity --minutes 45
"""

import argparse
import math
import random
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone

import gpxpy
import gpxpy.gpx

from trackfeel.core.config import settings
from trackfeel.db import SessionLocal
from trackfeel.services.importer import import_gpx
from trackfeel.services.store import ActivityStore

TPX_NS = "http://www.garmin.com/xmlschemas/TrackPointExtension/v1"


def build_demo_gpx(minutes: int, start: datetime, center=(37.7694, -122.4862)) -> str:
    """A ~1 km radius loop sampled every second, with elevation and HR."""
    gpx = gpxpy.gpx.GPX()
    gpx.nsmap["gpxtpx"] = TPX_NS
    track = gpxpy.gpx.GPXTrack(name="Demo loop")
    segment = gpxpy.gpx.GPXTrackSegment()
    track.segments.append(segment)
    gpx.tracks.append(track)

    total = minutes * 60
    radius_deg = 0.009
    for i in range(total):
        angle = 2 * math.pi * i / total
        lat = center[0] + radius_deg * math.sin(angle)
        lon = center[1] + radius_deg * math.cos(angle) / math.cos(math.radians(center[0]))
        point = gpxpy.gpx.GPXTrackPoint(
            latitude=round(lat, 7),
            longitude=round(lon, 7),
            elevation=round(20 + 8 * math.sin(3 * angle), 1),
            time=start + timedelta(seconds=i),
        )
        ext = ET.Element(f"{{{TPX_NS}}}TrackPointExtension")
        hr = ET.SubElement(ext, f"{{{TPX_NS}}}hr")
        hr.text = str(int(140 + 15 * math.sin(angle) + random.randint(-3, 3)))
        point.extensions.append(ext)
        segment.points.append(point)

    return gpx.to_xml()


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--minutes", type=int, default=30)
    parser.add_argument("--sport", default="running")
    args = parser.parse_args()

    start = datetime.now(timezone.utc).replace(microsecond=0) - timedelta(minutes=args.minutes)
    payload = build_demo_gpx(args.minutes, start).encode("utf-8")

    db = SessionLocal()
    try:
        activity_id = import_gpx(
            ActivityStore(db, timeout_ms=settings.store_timeout_ms), payload, sport=args.sport
        )
    finally:
        db.close()

    print(f"Seeded demo activity {activity_id}")


if __name__ == "__main__":
    main()
