import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from nes_outage.config import ServerDefaults, TrackerConfig, parse_coordinate
from nes_outage.deps import get_client, get_defaults
from nes_outage.errors import FetchError
from nes_outage.schemas.outage import AreaTotals, HomeConfig, NearbyOutagesResponse
from nes_outage.services.nes_client import NesClient
from nes_outage.services.proximity import filter_nearby, summarize

logger = logging.getLogger(__name__)

router = APIRouter(tags=["outages"])


@router.get("/config", response_model=HomeConfig)
async def get_config(defaults: ServerDefaults = Depends(get_defaults)):
    """Default home location for the dashboard."""
    return HomeConfig(
        home_lat=defaults.home_lat,
        home_lng=defaults.home_lng,
        radius_miles=defaults.radius_miles,
    )


@router.get("/outages", response_model=NearbyOutagesResponse)
async def get_outages(
    lat: str | None = None,
    lng: str | None = None,
    radius: str | None = None,
    client: NesClient = Depends(get_client),
    defaults: ServerDefaults = Depends(get_defaults),
):
    """Outages within radius miles of (lat, lng), nearest first, plus area totals."""
    home_lat = parse_coordinate(lat)
    home_lng = parse_coordinate(lng)
    if home_lat is None or home_lng is None:
        return JSONResponse(
            status_code=400,
            content={"error": "lat and lng query parameters are required"},
        )

    radius_miles = parse_coordinate(radius)
    if radius_miles is None or radius_miles <= 0:
        radius_miles = defaults.radius_miles

    config = TrackerConfig(home_lat=home_lat, home_lng=home_lng, radius_miles=radius_miles)

    try:
        outages = await client.fetch_outages()
    except FetchError as e:
        logger.error("Error fetching outages: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch outages"})

    nearby = filter_nearby(outages, config)

    return NearbyOutagesResponse(
        outages=nearby,
        totals=AreaTotals(nashville=summarize(outages), nearby=summarize(nearby)),
        config=HomeConfig(home_lat=home_lat, home_lng=home_lng, radius_miles=radius_miles),
    )
