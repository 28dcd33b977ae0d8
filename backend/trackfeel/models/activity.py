from sqlalchemy import Column, Integer, String, DateTime, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from geoalchemy2 import Geography
from trackfeel.db import Base

class Activity(Base):
    __tablename__ = "activities"
    __table_args__ = (
        Index("ix_activities_started_at", "started_at"),
        Index("ix_activities_bounds", "bounds", postgresql_using="gist"),
    )

    # Generated by the importer (uuid4), never by the database
    id = Column(UUID(as_uuid=True), primary_key=True)

    started_at = Column(DateTime(timezone=True), nullable=False)

    # Not detected from GPX; left for the client to set
    sport = Column(String, nullable=True)

    # Whole seconds between first and last timed point
    duration_sec = Column(Integer, nullable=True)

    # Sum of inter-point distances, truncated to whole meters
    distance_m = Column(Integer, nullable=True)

    avg_hr = Column(Integer, nullable=True)
    max_hr = Column(Integer, nullable=True)

    # Rectangle around all timed points, written from WKT via ST_GeogFromText
    bounds = Column(
        Geography(geometry_type="POLYGON", srid=4326, spatial_index=False),
        nullable=True,
    )

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
