"""Snapshot persistence: append-only outage captures and the reads trends need."""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import distinct, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nes_outage.database import init_db, make_engine, make_session_factory
from nes_outage.errors import StorageError
from nes_outage.models.snapshot import OutageSnapshot
from nes_outage.schemas.outage import OutageEvent
from nes_outage.schemas.trend import TrendDataPoint

logger = logging.getLogger(__name__)


class SnapshotReader:
    """Snapshot queries that all run on one session."""

    def __init__(self, db: Session):
        self.db = db

    def query_distinct_snapshot_times(self, since: datetime,
                                      until: datetime | None = None) -> list[datetime]:
        stmt = select(distinct(OutageSnapshot.snapshot_time)).where(
            OutageSnapshot.snapshot_time >= _to_utc(since)
        )
        if until is not None:
            stmt = stmt.where(OutageSnapshot.snapshot_time <= _to_utc(until))
        stmt = stmt.order_by(OutageSnapshot.snapshot_time)
        return [_to_utc(t) for t in self.db.scalars(stmt)]

    def query_outage_ids_at(self, time: datetime) -> set[str]:
        stmt = select(distinct(OutageSnapshot.outage_id)).where(
            OutageSnapshot.snapshot_time == _to_utc(time)
        )
        return set(self.db.scalars(stmt))

    def query_aggregates_since(self, since: datetime,
                               until: datetime | None = None) -> list[TrendDataPoint]:
        stmt = select(
            OutageSnapshot.snapshot_time,
            func.count(distinct(OutageSnapshot.outage_id)),
            func.coalesce(func.sum(OutageSnapshot.num_people), 0),
        ).where(OutageSnapshot.snapshot_time >= _to_utc(since))
        if until is not None:
            stmt = stmt.where(OutageSnapshot.snapshot_time <= _to_utc(until))
        stmt = stmt.group_by(OutageSnapshot.snapshot_time).order_by(OutageSnapshot.snapshot_time)
        return [
            TrendDataPoint(
                time=_to_utc(time),
                total_outages=int(outages),
                total_people_affected=int(people),
            )
            for time, outages, people in self.db.execute(stmt)
        ]


class SnapshotStore:
    """Owns the engine for the snapshot table. Close it on shutdown."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine = make_engine(database_url)
        self.session_factory = make_session_factory(self.engine)

    def init_schema(self):
        """Create the table and its indexes if they do not exist yet."""
        try:
            init_db(self.engine)
        except SQLAlchemyError as e:
            logger.error("Database initialization failed: %s", e)
            raise StorageError(f"Database initialization failed: {e}") from e
        logger.info("Database initialized")

    def save(self, events: Iterable[OutageEvent], timestamp: datetime) -> int:
        """Append one row per event under a shared snapshot time. Returns rows written."""
        events = list(events)
        if not events:
            return 0

        snapshot_time = _to_utc(timestamp)
        db = self.session_factory()
        try:
            db.add_all([
                OutageSnapshot(
                    snapshot_time=snapshot_time,
                    outage_id=e.id,
                    status=e.status,
                    num_people=e.num_people,
                    lat=e.lat,
                    lng=e.lng,
                )
                for e in events
            ])
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to persist outage snapshot: %s", e)
            raise StorageError(f"Failed to persist outage snapshot: {e}") from e
        finally:
            db.close()
        logger.debug("Saved snapshot of %d outages at %s", len(events), snapshot_time.isoformat())
        return len(events)

    @contextmanager
    def reading(self) -> Iterator[SnapshotReader]:
        db = self.session_factory()
        try:
            with db.begin():
                yield SnapshotReader(db)
        except SQLAlchemyError as e:
            logger.error("Snapshot query failed: %s", e)
            raise StorageError(f"Snapshot query failed: {e}") from e
        finally:
            db.close()

    def query_distinct_snapshot_times(self, since: datetime,
                                      until: datetime | None = None) -> list[datetime]:
        with self.reading() as reader:
            return reader.query_distinct_snapshot_times(since, until)

    def query_outage_ids_at(self, time: datetime) -> set[str]:
        with self.reading() as reader:
            return reader.query_outage_ids_at(time)

    def query_aggregates_since(self, since: datetime,
                               until: datetime | None = None) -> list[TrendDataPoint]:
        with self.reading() as reader:
            return reader.query_aggregates_since(since, until)

    def close(self):
        self.engine.dispose()


def _to_utc(val: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored here is UTC
    if val.tzinfo is None:
        return val.replace(tzinfo=timezone.utc)
    return val.astimezone(timezone.utc)
