"""Route planning endpoints - POST /routes/optimize, POST /routes/itinerary."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from backend.app.api.deps import get_aggregator
from backend.app.models.api import ItineraryRequest, ItineraryResponse, OptimizeResponse
from backend.app.models.places import TripRequest
from backend.app.routing.aggregator import DirectionsAggregator
from backend.app.routing.errors import InsufficientStopsError, RoutingError
from backend.app.routing.fallback import build_external_maps_url, describe_failure
from backend.app.routing.geo import path_length_m
from backend.app.routing.optimizer import optimize_trip

router = APIRouter(prefix="/routes", tags=["routes"])
logger = logging.getLogger(__name__)


@router.post("/optimize", response_model=OptimizeResponse)
async def optimize(trip: TripRequest) -> OptimizeResponse:
    """Order the trip's destinations with the nearest-neighbor heuristic."""
    optimized = optimize_trip(trip)
    points = [optimized.start.location] + [p.location for p in optimized.destinations]
    return OptimizeResponse(
        start=optimized.start,
        destinations=list(optimized.destinations),
        straight_line_meters=round(path_length_m(points), 1),
    )


@router.post(
    "/itinerary",
    response_model=ItineraryResponse,
    responses={
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"description": "Not enough stops"},
        status.HTTP_502_BAD_GATEWAY: {"description": "Directions provider failed"},
    },
)
async def itinerary(
    body: ItineraryRequest,
    aggregator: Annotated[DirectionsAggregator, Depends(get_aggregator)],
) -> ItineraryResponse | JSONResponse:
    """Resolve the trip into a multi-leg itinerary.

    Args:
        body: Trip, transport mode, and whether to optimize the order first
        aggregator: Directions aggregator

    Returns:
        ItineraryResponse on success; on failure a RoutingFailure body with
        422 (not enough stops) or 502 (provider failure)
    """
    trip = optimize_trip(body.trip) if body.optimize else body.trip
    stops = list(trip.destinations)

    try:
        result = await aggregator.fetch_itinerary(trip.start, stops, body.mode)
    except RoutingError as e:
        failure = describe_failure(e, trip.start, stops, body.mode, aggregator.language)
        status_code = (
            status.HTTP_422_UNPROCESSABLE_ENTITY
            if isinstance(e, InsufficientStopsError)
            else status.HTTP_502_BAD_GATEWAY
        )
        return JSONResponse(status_code=status_code, content=failure.model_dump(mode="json"))

    return ItineraryResponse(
        itinerary=result.value,
        ordered_stops=stops,
        fallback_url=build_external_maps_url(trip.start, stops, body.mode),
    )
