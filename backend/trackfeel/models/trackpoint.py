from sqlalchemy import Column, BigInteger, Integer, Float, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from geoalchemy2 import Geography
from trackfeel.db import Base


class Trackpoint(Base):
    __tablename__ = "trackpoints"
    __table_args__ = (
        Index("ix_trackpoints_activity_id_t", "activity_id", "t"),
    )

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    activity_id = Column(
        UUID(as_uuid=True),
        ForeignKey("activities.id", ondelete="CASCADE"),
        nullable=False,
    )

    t = Column(DateTime(timezone=True), nullable=False)
    ele_m = Column(Float, nullable=True)
    hr = Column(Integer, nullable=True)
    speed_mps = Column(Float, nullable=True)

    # lon/lat point
    geom = Column(
        Geography(geometry_type="POINT", srid=4326, spatial_index=False),
        nullable=False,
    )
