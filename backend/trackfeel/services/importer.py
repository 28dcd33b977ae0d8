import logging
import uuid
from typing import Optional

from trackfeel.core.constants import MIN_TRACK_POINTS
from trackfeel.core.errors import InsufficientData, TrackImportError
from trackfeel.services.gpx_reader import read_points
from trackfeel.services.kinematics import compute_kinematics

logger = logging.getLogger(__name__)


def import_gpx(store, payload: bytes, sport: Optional[str] = None) -> uuid.UUID:
    """Parse, measure and persist one GPX upload.

    Either the whole activity is stored or nothing is.

    Raises:
        MalformedInput, InsufficientData: the upload is not importable
        StoreError: the database write failed
    """
    try:
        raw = read_points(payload)
        if len(raw) < MIN_TRACK_POINTS:
            raise InsufficientData(f"not enough points ({len(raw)})")
        result = compute_kinematics(raw)
    except TrackImportError as e:
        logger.warning("gpx import rejected (%s): %s", type(e).__name__, e)
        raise

    activity_id = store.save(result, sport=sport)
    logger.info(
        "imported activity %s: %d of %d points, %.0f m, %d s",
        activity_id,
        len(result.points),
        len(raw),
        result.summary.distance_m,
        result.summary.duration_sec,
    )
    return activity_id
