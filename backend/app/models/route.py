"""Route models - parsed directions data."""

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.common import Geo, RoutingErrorKind, TransportMode


class RouteSegment(BaseModel):
    """One renderable polyline piece of a leg."""

    model_config = ConfigDict(frozen=True)

    encoded_path: str
    color: str
    is_walking: bool  # rendered dashed


class RouteStep(BaseModel):
    """One narrated instruction within a leg."""

    model_config = ConfigDict(frozen=True)

    instruction: str
    detail: str
    duration_text: str
    travel_mode: str
    line_name: str | None = None
    line_color: str | None = None

    @property
    def is_transit(self) -> bool:
        return self.travel_mode == "TRANSIT"


class RouteLeg(BaseModel):
    """Directions result for one consecutive (origin, destination) pair."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0)
    origin: Geo
    destination: Geo
    segments: tuple[RouteSegment, ...] = ()
    steps: tuple[RouteStep, ...] = ()
    duration_seconds: int = Field(0, ge=0)
    distance_meters: int = Field(0, ge=0)


class Itinerary(BaseModel):
    """All legs of a trip under one transport mode, merged in leg order."""

    model_config = ConfigDict(frozen=True)

    mode: TransportMode
    legs: tuple[RouteLeg, ...]
    segments: tuple[RouteSegment, ...]
    steps: tuple[RouteStep, ...]
    total_duration_seconds: int
    total_distance_meters: int
    duration_text: str
    distance_text: str


class RoutingFailure(BaseModel):
    """User-facing description of a failed itinerary fetch."""

    kind: RoutingErrorKind
    message: str
    hint: str | None = None
    leg_index: int | None = None
    provider_status: str | None = None
    fallback_url: str | None = None
