from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ActivityRead(BaseModel):
    """One row of the activity list."""

    id: UUID
    started_at: datetime
    sport: Optional[str] = None
    duration_sec: Optional[int] = None
    distance_m: Optional[int] = None
    avg_hr: Optional[int] = None
    max_hr: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ActivityPage(BaseModel):
    limit: int
    offset: int
    items: list[ActivityRead]


class UploadResult(BaseModel):
    id: UUID
