import logging
import math

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings

from nes_outage.errors import ConfigError

NES_EVENTS_URL = "https://utilisocial.io/datacapable/v2/p/NES/map/events"


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Home location. Kept as raw strings so a bad value becomes a ConfigError
    # for the CLI and a null default for the server.
    home_lat: str = Field(default="")
    home_lng: str = Field(default="")
    radius_miles: float = Field(default=1.0, gt=0)

    # Minutes between polls (CLI watch mode and snapshot job)
    poll_interval: float = Field(default=5.0, gt=0)

    # Trend tracking is disabled entirely when unset
    database_url: str | None = Field(default=None)

    port: int = Field(default=3000)

    nes_api_url: str = Field(default=NES_EVENTS_URL)
    request_timeout: float = Field(default=15.0)
    trend_hours: float = Field(default=6.0)
    log_level: str = Field(default="INFO")

    @property
    def sqlalchemy_database_url(self) -> str | None:
        if not self.database_url:
            return None
        # SQLAlchemy no longer accepts the postgres:// scheme some hosts hand out
        if self.database_url.startswith("postgres://"):
            return self.database_url.replace("postgres://", "postgresql://", 1)
        return self.database_url


def load_settings() -> Settings:
    """Read Settings from the environment and .env, as a ConfigError on bad values."""
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


class TrackerConfig(BaseModel):
    """Home location and polling parameters, built once per process."""
    model_config = ConfigDict(frozen=True)

    home_lat: float = Field(allow_inf_nan=False)
    home_lng: float = Field(allow_inf_nan=False)
    radius_miles: float = Field(default=1.0, gt=0, allow_inf_nan=False)
    poll_interval_minutes: float = Field(default=5.0, gt=0, allow_inf_nan=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TrackerConfig":
        home_lat = parse_coordinate(settings.home_lat)
        home_lng = parse_coordinate(settings.home_lng)
        if home_lat is None or home_lng is None:
            raise ConfigError("HOME_LAT and HOME_LNG must be set in .env file")
        try:
            return cls(
                home_lat=home_lat,
                home_lng=home_lng,
                radius_miles=settings.radius_miles,
                poll_interval_minutes=settings.poll_interval,
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


class ServerDefaults(BaseModel):
    """Defaults handed to the dashboard; coordinates are optional here."""
    home_lat: float | None = None
    home_lng: float | None = None
    radius_miles: float = 1.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServerDefaults":
        return cls(
            home_lat=parse_coordinate(settings.home_lat),
            home_lng=parse_coordinate(settings.home_lng),
            radius_miles=settings.radius_miles,
        )


def parse_coordinate(val) -> float | None:
    """Parse a degree value, returning None for anything missing or non-finite."""
    if val is None:
        return None
    try:
        num = float(val)
    except (ValueError, TypeError):
        return None
    if not math.isfinite(num):
        return None
    return num


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
