from datetime import datetime

from nes_outage.schemas.outage import CamelModel


class TimeRange(CamelModel):
    start: datetime
    end: datetime


class TrendDataPoint(CamelModel):
    time: datetime
    total_outages: int = 0
    total_people_affected: int = 0


class TrendData(CamelModel):
    time_range: TimeRange
    resolution_rate: float = 0.0  # outages resolved per hour
    net_people_change: int = 0
    data_points: list[TrendDataPoint] = []


class TrendUnavailable(CamelModel):
    message: str
    data_points: list[TrendDataPoint] = []
