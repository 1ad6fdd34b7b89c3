"""Tests for the nearest-neighbor tour optimizer."""

import random

from backend.app.models.places import Place, TripRequest
from backend.app.routing.geo import haversine_m
from backend.app.routing.optimizer import optimize_route, optimize_trip


def _random_places(make_place, n: int, seed: int) -> list[Place]:
    rng = random.Random(seed)
    return [
        make_place(
            round(37.4 + rng.random() * 0.3, 6),
            round(126.8 + rng.random() * 0.4, 6),
            place_id=f"p{i}",
        )
        for i in range(n)
    ]


def test_empty_destinations_returns_empty_without_touching_start() -> None:
    assert optimize_route(None, []) == []  # type: ignore[arg-type]


def test_single_destination(make_place) -> None:
    start = make_place(0, 0)
    only = make_place(10, 10)
    assert optimize_route(start, [only]) == [only]


def test_straight_line_visits_nearest_first(make_place) -> None:
    """Start (0,0), destinations (0,1), (0,3), (0,2) -> (0,1), (0,2), (0,3)."""
    start = make_place(0, 0)
    d1, d3, d2 = make_place(0, 1), make_place(0, 3), make_place(0, 2)

    ordered = optimize_route(start, [d1, d3, d2])

    assert [p.location.lon for p in ordered] == [1, 2, 3]


def test_ties_go_to_first_encountered(make_place) -> None:
    """(0,1) and (1,0) are equidistant from the origin."""
    start = make_place(0, 0)
    east = make_place(0, 1, place_id="east")
    north = make_place(1, 0, place_id="north")

    assert haversine_m(start.location, east.location) == haversine_m(
        start.location, north.location
    )
    assert optimize_route(start, [east, north])[0].place_id == "east"
    assert optimize_route(start, [north, east])[0].place_id == "north"


def test_is_deterministic(make_place) -> None:
    start = make_place(37.5665, 126.978, place_id="start")
    destinations = _random_places(make_place, 12, seed=7)

    first = optimize_route(start, destinations)
    for _ in range(5):
        assert optimize_route(start, destinations) == first
        assert [p.place_id for p in optimize_route(start, destinations)] == [
            p.place_id for p in first
        ]


def test_output_is_permutation_of_input(make_place) -> None:
    start = make_place(37.5665, 126.978, place_id="start")
    for seed in range(10):
        destinations = _random_places(make_place, seed + 1, seed=seed)

        ordered = optimize_route(start, destinations)

        assert len(ordered) == len(destinations)
        assert sorted(p.place_id for p in ordered) == sorted(p.place_id for p in destinations)
        assert start not in ordered


def test_each_hop_is_nearest_remaining_candidate(make_place) -> None:
    start = make_place(37.5665, 126.978, place_id="start")
    destinations = _random_places(make_place, 15, seed=42)

    ordered = optimize_route(start, destinations)

    current = start
    remaining = list(destinations)
    for chosen in ordered:
        chosen_distance = haversine_m(current.location, chosen.location)
        for candidate in remaining:
            assert chosen_distance <= haversine_m(current.location, candidate.location)
        remaining.remove(chosen)
        current = chosen


def test_input_sequence_is_not_mutated(make_place) -> None:
    start = make_place(0, 0)
    destinations = [make_place(0, 3), make_place(0, 1)]
    snapshot = list(destinations)

    optimize_route(start, destinations)

    assert destinations == snapshot


def test_optimize_trip_returns_reordered_copy(make_place) -> None:
    start = make_place(0, 0, place_id="start")
    trip = TripRequest(start=start, destinations=[make_place(0, 3), make_place(0, 1)])

    optimized = optimize_trip(trip)

    assert [p.location.lon for p in optimized.destinations] == [1, 3]
    assert [p.location.lon for p in trip.destinations] == [3, 1]
    assert optimized.start == start
