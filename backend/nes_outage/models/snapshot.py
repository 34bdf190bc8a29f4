from sqlalchemy import Column, DateTime, Float, Integer, String

from nes_outage.database import Base


class OutageSnapshot(Base):
    """Append-only historical record: one row per outage per poll cycle."""
    __tablename__ = "outage_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    snapshot_time = Column(DateTime(timezone=True), nullable=False, index=True)
    outage_id = Column(String(100), nullable=False, index=True)
    status = Column(String(50))
    num_people = Column(Integer, nullable=False)
    lat = Column(Float)
    lng = Column(Float)
