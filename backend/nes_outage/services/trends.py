"""Trend aggregation over stored outage snapshots.

Compares the earliest and latest snapshot inside a lookback window:
  - resolution rate: outages present at the start but gone at the end, per hour
  - net people change: people affected at the end minus at the start
"""

import logging
import math
from datetime import datetime, timedelta, timezone

from nes_outage.schemas.trend import TimeRange, TrendData
from nes_outage.services.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


def compute_trends(store: SnapshotStore, hours_back: float = 6,
                   now: datetime | None = None) -> TrendData | None:
    """Return trends for the last hours_back hours, or None with fewer than 2 snapshots."""
    now = now or datetime.now(timezone.utc)
    if math.isnan(hours_back) or hours_back <= 0:
        return None
    try:
        since = now - timedelta(hours=hours_back)
    except OverflowError:
        # window reaches past the earliest representable time
        since = datetime.min.replace(tzinfo=timezone.utc)

    with store.reading() as reader:
        snapshot_times = reader.query_distinct_snapshot_times(since, now)
        if len(snapshot_times) < 2:
            logger.debug("Trends: %d snapshots in the last %s hours, need 2",
                         len(snapshot_times), hours_back)
            return None

        first_time = snapshot_times[0]
        last_time = snapshot_times[-1]

        first_ids = reader.query_outage_ids_at(first_time)
        last_ids = reader.query_outage_ids_at(last_time)

        # Aggregates are read for exactly [first, last] so both ends line up
        # with the id sets even if a batch lands mid-read.
        data_points = reader.query_aggregates_since(first_time, last_time)

    resolved_count = len(first_ids - last_ids)
    hours_elapsed = (last_time - first_time).total_seconds() / 3600
    resolution_rate = resolved_count / hours_elapsed if hours_elapsed > 0 else 0.0

    people_at = {p.time: p.total_people_affected for p in data_points}
    net_people_change = people_at.get(last_time, 0) - people_at.get(first_time, 0)

    return TrendData(
        time_range=TimeRange(start=first_time, end=last_time),
        resolution_rate=resolution_rate,
        net_people_change=net_people_change,
        data_points=data_points,
    )
