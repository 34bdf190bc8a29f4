import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from nes_outage.config import ServerDefaults, Settings, configure_logging, load_settings
from nes_outage.errors import OutageTrackerError
from nes_outage.services.nes_client import NesClient
from nes_outage.services.snapshot_store import SnapshotStore
from nes_outage.tasks.scheduler import SnapshotScheduler

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "public"


def _open_store(settings: Settings) -> SnapshotStore | None:
    """Connect the snapshot store, or return None to run without trends."""
    url = settings.sqlalchemy_database_url
    if not url:
        logger.info("DATABASE_URL not set, trend tracking disabled")
        return None
    try:
        store = SnapshotStore(url)
        store.init_schema()
    except (OutageTrackerError, SQLAlchemyError, ImportError) as e:
        logger.warning("Failed to initialize database, trend tracking disabled: %s", e)
        return None
    return store


def create_app(settings: Settings | None = None, client: NesClient | None = None,
               store: SnapshotStore | None = None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_store = app.state.store is None
        if owns_store:
            app.state.store = _open_store(settings)

        scheduler = None
        if app.state.store is not None:
            scheduler = SnapshotScheduler(app.state.client, app.state.store, settings.poll_interval)
            scheduler.start()
        app.state.scheduler = scheduler
        yield
        if scheduler:
            scheduler.stop()
        app.state.scheduler = None
        if owns_store and app.state.store is not None:
            app.state.store.close()
            app.state.store = None

    app = FastAPI(
        title="NES Outage Tracker",
        description="Nearby NES power outages and outage trends",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.defaults = ServerDefaults.from_settings(settings)
    app.state.client = client or NesClient(settings.nes_api_url, timeout=settings.request_timeout)
    app.state.store = store
    app.state.scheduler = None
    app.state.trend_hours = settings.trend_hours

    from nes_outage.routers import outage, trends

    app.include_router(outage.router, prefix="/api")
    app.include_router(trends.router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok", "trends": app.state.store is not None}

    if STATIC_DIR.exists():
        app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")

    return app


def run():
    """Console entry point: serve the dashboard on PORT."""
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info("NES Outage Dashboard running at http://localhost:%d", settings.port)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
