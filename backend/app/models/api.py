"""Request/response envelopes for the routing API."""

from pydantic import BaseModel

from backend.app.models.common import TransportMode
from backend.app.models.places import Place, TripRequest
from backend.app.models.route import Itinerary


class OptimizeResponse(BaseModel):
    """Trip with destinations in visiting order."""

    start: Place
    destinations: list[Place]
    straight_line_meters: float


class ItineraryRequest(BaseModel):
    """Body of POST /routes/itinerary."""

    trip: TripRequest
    mode: TransportMode = TransportMode.driving
    optimize: bool = False


class ItineraryResponse(BaseModel):
    """Itinerary plus the stop order it was built for."""

    itinerary: Itinerary
    ordered_stops: list[Place]
    fallback_url: str
