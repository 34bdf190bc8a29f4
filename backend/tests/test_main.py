"""Server startup and shutdown: snapshot store, scheduler and degraded mode."""

from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from nes_outage.config import Settings
from nes_outage.main import create_app
from nes_outage.services.snapshot_store import SnapshotStore

from support import HOME_LAT, HOME_LNG, make_client


def _settings(**kwargs) -> Settings:
    values = {"home_lat": str(HOME_LAT), "home_lng": str(HOME_LNG)}
    values.update(kwargs)
    return Settings(_env_file=None, **values)


@pytest.mark.asyncio
async def test_startup_without_reachable_database(tmp_path):
    url = f"sqlite:///{tmp_path / 'missing' / 'dir' / 'outages.db'}"
    app = create_app(_settings(database_url=url), client=make_client())

    async with app.router.lifespan_context(app):
        assert app.state.store is None
        assert app.state.scheduler is None

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            health = await c.get("/health")
            assert health.json() == {"status": "ok", "trends": False}

            trends = await c.get("/api/trends")
            assert trends.status_code == 200
            assert "message" in trends.json()
            assert trends.json()["dataPoints"] == []

            outages = await c.get("/api/outages", params={"lat": HOME_LAT, "lng": HOME_LNG})
            assert outages.status_code == 200


@pytest.mark.asyncio
async def test_startup_without_database_url():
    app = create_app(_settings(database_url=None), client=make_client())

    async with app.router.lifespan_context(app):
        assert app.state.store is None
        assert app.state.scheduler is None


@pytest.mark.asyncio
async def test_startup_opens_store_and_runs_scheduler(tmp_path):
    url = f"sqlite:///{tmp_path / 'outages.db'}"
    app = create_app(_settings(database_url=url), client=make_client())

    with patch.object(SnapshotStore, "close", autospec=True) as close:
        async with app.router.lifespan_context(app):
            store = app.state.store
            scheduler = app.state.scheduler
            assert isinstance(store, SnapshotStore)
            assert scheduler is not None and scheduler.running

            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as c:
                health = await c.get("/health")
                assert health.json() == {"status": "ok", "trends": True}

        close.assert_called_once_with(store)

    assert not scheduler.running
    assert app.state.store is None
    assert app.state.scheduler is None
    store.engine.dispose()


@pytest.mark.asyncio
async def test_injected_store_is_not_closed(store):
    app = create_app(_settings(), client=make_client(), store=store)

    with patch.object(SnapshotStore, "close", autospec=True) as close:
        async with app.router.lifespan_context(app):
            assert app.state.store is store
            assert app.state.scheduler.running

    close.assert_not_called()
    assert app.state.store is store
