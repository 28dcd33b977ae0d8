"""
Activity persistence.

Writes an imported activity (summary row + every trackpoint) as one unit
of work and reads it back for the track endpoint. All statements run on the
caller's Session; the request dependency closes it on every exit path.
"""

import uuid
from typing import NamedTuple, Optional, Sequence

from geoalchemy2 import Geometry, WKTElement
from sqlalchemy import cast, func, insert, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from trackfeel.core.constants import SRID_WGS84
from trackfeel.core.errors import StoreError
from trackfeel.core.geo import point_wkt
from trackfeel.models.activity import Activity
from trackfeel.models.trackpoint import Trackpoint
from trackfeel.services.kinematics import EnrichedPoint, KinematicsResult

# Columns exposed by list/detail reads (bounds geography is not needed there)
SUMMARY_COLUMNS = (
    Activity.id,
    Activity.started_at,
    Activity.sport,
    Activity.duration_sec,
    Activity.distance_m,
    Activity.avg_hr,
    Activity.max_hr,
)


class StoredPoint(NamedTuple):
    t: object  # datetime
    ele_m: Optional[float]
    hr: Optional[int]
    speed_mps: Optional[float]
    lon: float
    lat: float


def trackpoint_rows(activity_id: uuid.UUID, points: Sequence[EnrichedPoint]) -> list[dict]:
    """Parameter sets for the batched trackpoint insert, one per point."""
    return [
        {
            "activity_id": activity_id,
            "t": p.time,
            "ele_m": p.ele,
            "hr": p.hr,
            "speed_mps": p.speed_mps,
            "geom": WKTElement(point_wkt(p.lat, p.lon), srid=SRID_WGS84),
        }
        for p in points
    ]


class ActivityStore:
    """PostGIS-backed store for imported activities."""

    def __init__(self, db: Session, timeout_ms: int = 0):
        self.db = db
        self.timeout_ms = timeout_ms

    def save(self, result: KinematicsResult, sport: Optional[str] = None) -> uuid.UUID:
        """Persist summary and points atomically, returning the new activity id.

        Raises:
            StoreError: on any database failure; nothing is committed
        """
        activity_id = uuid.uuid4()
        summary = result.summary
        try:
            self._apply_deadline()
            self.db.add(Activity(
                id=activity_id,
                started_at=summary.started_at,
                sport=sport,
                duration_sec=summary.duration_sec,
                distance_m=int(summary.distance_m),
                avg_hr=summary.avg_hr,
                max_hr=summary.max_hr,
                bounds=WKTElement(summary.bounds.to_wkt(), srid=SRID_WGS84),
            ))
            self.db.flush()
            # single executemany for all points
            self.db.execute(insert(Trackpoint), trackpoint_rows(activity_id, result.points))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"insert activity: {e}") from e
        return activity_id

    def list_activities(self, limit: int, offset: int) -> list:
        try:
            self._apply_deadline()
            return (
                self.db.query(*SUMMARY_COLUMNS)
                .order_by(Activity.started_at.desc())
                .limit(limit)
                .offset(offset)
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"list activities: {e}") from e

    def get_activity(self, activity_id: uuid.UUID):
        """Summary row for `activity_id`, or None if it was never imported."""
        try:
            self._apply_deadline()
            return (
                self.db.query(*SUMMARY_COLUMNS)
                .filter(Activity.id == activity_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"select activity: {e}") from e

    def get_points(self, activity_id: uuid.UUID) -> list[StoredPoint]:
        """Trackpoints of an activity in ascending time order."""
        geom = cast(Trackpoint.geom, Geometry(geometry_type="POINT", srid=SRID_WGS84))
        try:
            self._apply_deadline()
            rows = (
                self.db.query(
                    Trackpoint.t,
                    Trackpoint.ele_m,
                    Trackpoint.hr,
                    Trackpoint.speed_mps,
                    func.ST_X(geom).label("lon"),
                    func.ST_Y(geom).label("lat"),
                )
                .filter(Trackpoint.activity_id == activity_id)
                .order_by(Trackpoint.t, Trackpoint.id)
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"select trackpoints: {e}") from e
        return [StoredPoint(*row) for row in rows]

    def _apply_deadline(self) -> None:
        # SET LOCAL lasts until the current transaction ends
        if not self.timeout_ms:
            return
        if self.db.get_bind().dialect.name != "postgresql":
            return
        self.db.execute(text(f"SET LOCAL statement_timeout = {int(self.timeout_ms)}"))
