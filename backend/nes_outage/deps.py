from fastapi import Request

from nes_outage.config import ServerDefaults
from nes_outage.services.nes_client import NesClient
from nes_outage.services.snapshot_store import SnapshotStore


def get_client(request: Request) -> NesClient:
    return request.app.state.client


def get_store(request: Request) -> SnapshotStore | None:
    """Snapshot store, or None when trend tracking is disabled."""
    return request.app.state.store


def get_defaults(request: Request) -> ServerDefaults:
    return request.app.state.defaults


def get_trend_hours(request: Request) -> float:
    return request.app.state.trend_hours
