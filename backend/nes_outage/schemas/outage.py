from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OutageEvent(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    lat: float
    lng: float
    num_people: int = Field(default=0, ge=0)
    status: str = ""
    last_updated: datetime
    cause: str | None = None
    estimated_restoration: datetime | None = None


class NearbyOutage(OutageEvent):
    distance: float  # miles from home


class OutageTotals(CamelModel):
    events: int = 0
    people_affected: int = 0


class AreaTotals(CamelModel):
    nashville: OutageTotals
    nearby: OutageTotals


class HomeConfig(CamelModel):
    home_lat: float | None = None
    home_lng: float | None = None
    radius_miles: float = 1.0


class NearbyOutagesResponse(CamelModel):
    outages: list[NearbyOutage] = []
    totals: AreaTotals
    config: HomeConfig
