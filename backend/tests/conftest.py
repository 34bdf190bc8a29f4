import pytest

from nes_outage.config import TrackerConfig
from nes_outage.services.snapshot_store import SnapshotStore

from support import HOME_LAT, HOME_LNG


@pytest.fixture
def config() -> TrackerConfig:
    return TrackerConfig(home_lat=HOME_LAT, home_lng=HOME_LNG, radius_miles=1)


@pytest.fixture
def store():
    s = SnapshotStore("sqlite://")
    s.init_schema()
    yield s
    s.close()
