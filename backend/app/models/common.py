"""Common types and enums shared across all models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Geo(BaseModel):
    """Geographic coordinates (WGS84)."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)

    def as_param(self) -> str:
        """Render as the "lat,lon" pair used by map APIs."""
        return f"{self.lat},{self.lon}"


class TransportMode(str, Enum):
    """Transport mode requested from the directions provider."""

    driving = "driving"
    transit = "transit"
    walking = "walking"

    @property
    def title(self) -> str:
        """Korean display title."""
        return _MODE_TITLES[self]


_MODE_TITLES = {
    TransportMode.driving: "차량",
    TransportMode.transit: "대중교통",
    TransportMode.walking: "도보",
}


class RoutingErrorKind(str, Enum):
    """Routing failure type."""

    insufficient_stops = "insufficient_stops"
    leg_fetch_failed = "leg_fetch_failed"
    no_route_data = "no_route_data"
    malformed_provider_response = "malformed_provider_response"


class Provenance(BaseModel):
    """Provenance metadata for provider results."""

    source: str  # Provider-specific identifier (e.g., "provider.directions.google")
    ref_id: str | None = None
    source_url: str | None = None
    fetched_at: datetime
    response_digest: str | None = None
