"""Shared NES feed data and a fake upstream client for the test suites."""

from datetime import datetime, timezone

import httpx

from nes_outage.services.nes_client import NesClient

# Downtown Nashville
HOME_LAT = 36.1627
HOME_LNG = -86.7816

UPDATED_MS = int(datetime(2026, 10, 17, 11, 30, tzinfo=timezone.utc).timestamp() * 1000)

# One event ~0.51 mi from home, two well outside a 1 mile radius
NES_PAYLOAD = [
    {
        "id": 101,
        "identifier": "2001",
        "latitude": 36.1700,
        "longitude": -86.7800,
        "numPeople": 120,
        "status": "Assigned",
        "lastUpdatedTime": UPDATED_MS,
        "cause": "Tree on line",
        "etrTime": UPDATED_MS + 2 * 3600 * 1000,
    },
    {
        "id": 102,
        "identifier": "2002",
        "latitude": 36.2000,
        "longitude": -86.7816,
        "numPeople": 45,
        "status": "Unassigned",
        "lastUpdatedTime": UPDATED_MS,
        "etrTime": 0,
    },
    {
        "id": 103,
        "identifier": "2003",
        "latitude": 36.1627,
        "longitude": -86.8500,
        "numPeople": 7,
        "status": "Assigned",
        "lastUpdatedTime": UPDATED_MS,
    },
]

# haversine((36.1627, -86.7816), (36.1700, -86.7800)) in miles
NEAR_EVENT_DISTANCE = 0.5122


def make_client(payload=None, status_code: int = 200) -> NesClient:
    body = NES_PAYLOAD if payload is None else payload

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body)

    return NesClient("https://nes.test/events", transport=httpx.MockTransport(handler))
