import logging
import os
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from trackfeel.core.config import settings
from trackfeel.core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from trackfeel.core.errors import ActivityNotFound, StoreError, TrackImportError
from trackfeel.db import get_db
from trackfeel.schemas.activity import ActivityPage, ActivityRead, UploadResult
from trackfeel.services.importer import import_gpx
from trackfeel.services.series import assemble_track
from trackfeel.services.store import ActivityStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["activities"])


def get_store(db: Session = Depends(get_db)) -> ActivityStore:
    return ActivityStore(db, timeout_ms=settings.store_timeout_ms)


@router.post("/upload", response_model=UploadResult)
def upload_activity(
    file: Optional[UploadFile] = File(None),
    sport: Optional[str] = Form(None),
    store: ActivityStore = Depends(get_store),
):
    if file is None:
        raise HTTPException(status_code=400, detail="missing form field 'file'")

    ext = os.path.splitext(file.filename or "")[1]
    if ext not in ("", ".gpx", ".GPX"):
        raise HTTPException(status_code=400, detail="only .gpx supported")

    # Read the whole upload (bounded) before parsing
    data = file.file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="file too large")

    try:
        activity_id = import_gpx(store, data, sport=sport or None)
    except TrackImportError:
        raise HTTPException(status_code=422, detail="failed to import gpx")
    except StoreError:
        logger.exception("upload error for %s", file.filename)
        raise HTTPException(status_code=500, detail="failed to store activity")

    return UploadResult(id=activity_id)


@router.get("/activities", response_model=ActivityPage)
def list_activities(
    limit: int = Query(DEFAULT_PAGE_LIMIT),
    offset: int = Query(0),
    store: ActivityStore = Depends(get_store),
):
    """
    List imported activities, newest first.

    Out-of-range paging values fall back to the defaults instead of failing:
      GET /api/activities?limit=20&offset=40
    """
    if not 0 < limit <= MAX_PAGE_LIMIT:
        limit = DEFAULT_PAGE_LIMIT
    if offset < 0:
        offset = 0

    try:
        rows = store.list_activities(limit, offset)
    except StoreError:
        logger.exception("list activities failed")
        raise HTTPException(status_code=500, detail="db error")

    return ActivityPage(
        limit=limit,
        offset=offset,
        items=[ActivityRead.model_validate(r) for r in rows],
    )


@router.get("/activities/{activity_id}/track")
def get_activity_track(activity_id: str, store: ActivityStore = Depends(get_store)):
    try:
        act_id = uuid.UUID(activity_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="bad id")

    try:
        activity = store.get_activity(act_id)
        if activity is None:
            raise ActivityNotFound(f"activity {act_id}")
        return assemble_track(activity, store.get_points(act_id))
    except ActivityNotFound:
        raise HTTPException(status_code=404, detail="Activity not found")
    except StoreError:
        logger.exception("track read failed for %s", act_id)
        raise HTTPException(status_code=500, detail="db error")
