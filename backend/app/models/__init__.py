"""Models package - re-exports for convenience."""

from backend.app.models.api import ItineraryRequest, ItineraryResponse, OptimizeResponse
from backend.app.models.common import Geo, Provenance, RoutingErrorKind, TransportMode
from backend.app.models.places import Place, TripRequest
from backend.app.models.route import (
    Itinerary,
    RouteLeg,
    RouteSegment,
    RouteStep,
    RoutingFailure,
)

__all__ = [
    # Common
    "Geo",
    "TransportMode",
    "RoutingErrorKind",
    "Provenance",
    # Places
    "Place",
    "TripRequest",
    # Route
    "RouteSegment",
    "RouteStep",
    "RouteLeg",
    "Itinerary",
    "RoutingFailure",
    # API
    "OptimizeResponse",
    "ItineraryRequest",
    "ItineraryResponse",
]
