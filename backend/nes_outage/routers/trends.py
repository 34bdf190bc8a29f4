import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from nes_outage.deps import get_client, get_store, get_trend_hours
from nes_outage.errors import FetchError, StorageError
from nes_outage.schemas.trend import TrendData, TrendUnavailable
from nes_outage.services.nes_client import NesClient
from nes_outage.services.snapshot_store import SnapshotStore
from nes_outage.services.trends import compute_trends
from nes_outage.tasks.scheduler import run_snapshot_cycle

logger = logging.getLogger(__name__)

router = APIRouter(tags=["trends"])


@router.get("/trends", response_model=TrendData | TrendUnavailable)
def get_trends(
    hours: float | None = None,
    store: SnapshotStore | None = Depends(get_store),
    default_hours: float = Depends(get_trend_hours),
):
    """Resolution rate and people-affected change over the last `hours` hours."""
    if store is None:
        return TrendUnavailable(message="Trend tracking is not enabled (DATABASE_URL not set)")

    try:
        trends = compute_trends(store, hours if hours is not None else default_hours)
    except StorageError as e:
        logger.error("Error computing trends: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch trends"})

    if trends is None:
        return TrendUnavailable(message="Not enough data yet. Trends need at least 2 snapshots.")
    return trends


@router.post("/admin/snapshot")
async def trigger_snapshot(
    client: NesClient = Depends(get_client),
    store: SnapshotStore | None = Depends(get_store),
):
    """Manually take one outage snapshot."""
    if store is None:
        return JSONResponse(status_code=503, content={"error": "Trend tracking is not enabled"})
    try:
        saved = await run_snapshot_cycle(client, store)
    except (FetchError, StorageError) as e:
        logger.error("Manual snapshot failed: %s", e)
        return JSONResponse(status_code=500, content={"error": "Snapshot failed"})
    return {"status": "snapshot_complete", "saved": saved}
