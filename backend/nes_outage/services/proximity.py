"""Distance filtering of outage events around the configured home location."""

from collections.abc import Iterable

from nes_outage.config import TrackerConfig
from nes_outage.geo import haversine_miles
from nes_outage.schemas.outage import NearbyOutage, OutageEvent, OutageTotals


def filter_nearby(events: Iterable[OutageEvent], config: TrackerConfig) -> list[NearbyOutage]:
    """Keep events within radius_miles of home (inclusive), nearest first.

    sorted() is stable, so events at the same distance keep their feed order.
    """
    nearby = []
    for event in events:
        distance = haversine_miles(config.home_lat, config.home_lng, event.lat, event.lng)
        if distance <= config.radius_miles:
            nearby.append(NearbyOutage(**event.model_dump(), distance=distance))
    return sorted(nearby, key=lambda o: o.distance)


def summarize(events: Iterable[OutageEvent]) -> OutageTotals:
    events = list(events)
    return OutageTotals(
        events=len(events),
        people_affected=sum(e.num_people for e in events),
    )
