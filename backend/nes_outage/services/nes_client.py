"""NES outage map client.

Fetches every currently reported outage event from the public NES map feed.
No authentication required. A failed call raises FetchError; there is no retry.
"""

import logging
from datetime import datetime, timezone

import httpx
from pydantic import ValidationError

from nes_outage.config import NES_EVENTS_URL
from nes_outage.errors import FetchError
from nes_outage.schemas.outage import OutageEvent

logger = logging.getLogger(__name__)


class NesClient:
    def __init__(self, url: str = NES_EVENTS_URL, timeout: float = 15,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def fetch_outages(self) -> list[OutageEvent]:
        """Fetch and normalize the current outage events."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(self.url)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning("NES fetch failed: %s", e)
            raise FetchError(
                f"API request failed: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            logger.warning("NES fetch failed: %s", e)
            raise FetchError(f"API request failed: {e}") from e
        except ValueError as e:
            logger.warning("NES response was not JSON: %s", e)
            raise FetchError("API response was not valid JSON") from e

        events = parse_events(data)
        logger.info("NES: fetched %d outage events", len(events))
        return events


def parse_events(data) -> list[OutageEvent]:
    """Normalize the raw feed payload into OutageEvent objects."""
    if not isinstance(data, list):
        raise FetchError(f"Unexpected API response shape: {type(data).__name__}")
    try:
        return [_parse_event(item) for item in data]
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise FetchError(f"Malformed outage event: {e}") from e


def _parse_event(item: dict) -> OutageEvent:
    identifier = item["identifier"]
    if identifier is None or identifier == "":
        raise ValueError(f"event {item.get('id')} has no identifier")
    etr = item.get("etrTime")
    return OutageEvent(
        id=str(identifier),
        lat=item["latitude"],
        lng=item["longitude"],
        num_people=item["numPeople"],
        status=item.get("status") or "",
        last_updated=_from_epoch_ms(item["lastUpdatedTime"]),
        cause=item.get("cause"),
        estimated_restoration=_from_epoch_ms(etr) if etr else None,
    )


def _from_epoch_ms(val) -> datetime:
    return datetime.fromtimestamp(float(val) / 1000, tz=timezone.utc)
