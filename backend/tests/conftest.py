import os
import uuid
from types import SimpleNamespace

import pytest

# Use in-memory sqlite for tests; import app modules only after this is set
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from trackfeel.services.store import StoredPoint  # noqa: E402


def trkpt(lat, lon, time=None, ele=None, hr=None) -> str:
    parts = [f'<trkpt lat="{lat}" lon="{lon}">']
    if ele is not None:
        parts.append(f"<ele>{ele}</ele>")
    if time is not None:
        parts.append(f"<time>{time}</time>")
    if hr is not None:
        parts.append(
            "<extensions><gpxtpx:TrackPointExtension>"
            f"<gpxtpx:hr>{hr}</gpxtpx:hr>"
            "</gpxtpx:TrackPointExtension></extensions>"
        )
    parts.append("</trkpt>")
    return "".join(parts)


def gpx_doc(*segments) -> bytes:
    """GPX 1.1 document with one track; each argument is a list of trkpt strings."""
    segs = "".join("<trkseg>" + "".join(seg) + "</trkseg>" for seg in segments)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1" '
        'xmlns:gpxtpx="http://www.garmin.com/xmlschemas/TrackPointExtension/v1">'
        f"<trk><name>t</name>{segs}</trk></gpx>"
    ).encode("utf-8")


class InMemoryStore:
    """Stands in for ActivityStore in API tests."""

    def __init__(self):
        self.activities = {}
        self.points = {}
        self.fail_on_save = False

    def save(self, result, sport=None):
        from trackfeel.core.errors import StoreError

        if self.fail_on_save:
            raise StoreError("boom")
        activity_id = uuid.uuid4()
        s = result.summary
        self.activities[activity_id] = SimpleNamespace(
            id=activity_id,
            started_at=s.started_at,
            sport=sport,
            duration_sec=s.duration_sec,
            distance_m=int(s.distance_m),
            avg_hr=s.avg_hr,
            max_hr=s.max_hr,
        )
        self.points[activity_id] = [
            StoredPoint(p.time, p.ele, p.hr, p.speed_mps, p.lon, p.lat)
            for p in sorted(result.points, key=lambda p: p.time)
        ]
        return activity_id

    def list_activities(self, limit, offset):
        rows = sorted(self.activities.values(), key=lambda a: a.started_at, reverse=True)
        return rows[offset:offset + limit]

    def get_activity(self, activity_id):
        return self.activities.get(activity_id)

    def get_points(self, activity_id):
        return list(self.points.get(activity_id, []))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def client(store):
    from fastapi.testclient import TestClient
    from trackfeel.api.activities import get_store
    from trackfeel.main import app

    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
