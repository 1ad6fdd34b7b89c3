"""Greedy nearest-neighbor tour construction.

Deliberately a heuristic, not an exact TSP solver: callers see the same order the
mobile client always produced, and the order is reproducible for identical input.
"""

import logging
from collections.abc import Sequence

from backend.app.models.places import Place, TripRequest
from backend.app.routing.geo import haversine_m, path_length_m

logger = logging.getLogger(__name__)


def optimize_route(start: Place, destinations: Sequence[Place]) -> list[Place]:
    """Order destinations by repeatedly visiting the nearest unvisited one.

    Ties go to the candidate encountered first in the remaining pool, so the
    result depends only on coordinates and input order. O(n^2).

    Args:
        start: Fixed starting place (never part of the output)
        destinations: Places to visit, any order

    Returns:
        A permutation of destinations
    """
    if not destinations:
        return []

    unvisited = list(destinations)
    current = start.location
    ordered: list[Place] = []

    while unvisited:
        nearest_index = 0
        nearest_distance = haversine_m(current, unvisited[0].location)
        for i in range(1, len(unvisited)):
            distance = haversine_m(current, unvisited[i].location)
            # Strictly smaller only: first encountered wins ties
            if distance < nearest_distance:
                nearest_index = i
                nearest_distance = distance

        next_place = unvisited.pop(nearest_index)
        ordered.append(next_place)
        current = next_place.location

    return ordered


def optimize_trip(request: TripRequest) -> TripRequest:
    """Return a copy of the trip with destinations in visiting order."""
    ordered = optimize_route(request.start, request.destinations)

    if logger.isEnabledFor(logging.DEBUG):
        before = path_length_m([request.start.location] + [p.location for p in request.destinations])
        after = path_length_m([request.start.location] + [p.location for p in ordered])
        logger.debug(
            "Optimized %d stops: %.0fm -> %.0fm straight-line",
            len(ordered),
            before,
            after,
        )

    return request.with_destinations(ordered)
