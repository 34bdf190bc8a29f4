"""APScheduler setup for periodic outage snapshots."""

import asyncio
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi.concurrency import run_in_threadpool

from nes_outage.errors import OutageTrackerError
from nes_outage.services.nes_client import NesClient
from nes_outage.services.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


async def run_snapshot_cycle(client: NesClient, store: SnapshotStore,
                             now: datetime | None = None) -> int:
    """Fetch every reported outage and store them as one snapshot batch."""
    outages = await client.fetch_outages()
    timestamp = now or datetime.now(timezone.utc)
    saved = await run_in_threadpool(store.save, outages, timestamp)
    logger.info("Snapshot saved: %d outages", saved)
    return saved


class SnapshotScheduler:
    def __init__(self, client: NesClient, store: SnapshotStore, interval_minutes: float):
        self.client = client
        self.store = store
        self.interval_minutes = interval_minutes
        self._scheduler: BackgroundScheduler | None = None

    def run_once(self):
        loop = asyncio.new_event_loop()
        try:
            loop.run_until_complete(run_snapshot_cycle(self.client, self.store))
        except OutageTrackerError as e:
            logger.error("Snapshot job failed: %s", e)
        finally:
            loop.close()

    def start(self):
        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self.run_once,
            "interval",
            minutes=self.interval_minutes,
            id="outage_snapshot",
            name="Outage snapshot",
            max_instances=1,
        )
        self._scheduler.start()
        logger.info("Scheduler started: snapshots every %s min", self.interval_minutes)

    def stop(self):
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
            self._scheduler = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running
