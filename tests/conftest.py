"""Shared pytest fixtures for all test suites."""

import asyncio
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from backend.app.adapters.directions import LegRequest, extract_first_route
from backend.app.config import Settings
from backend.app.models.common import Geo
from backend.app.models.places import Place
from backend.app.providers.executor import get_breaker_registry

RouteFactory = Callable[..., dict[str, Any]]
PlaceFactory = Callable[..., Place]


@pytest.fixture(autouse=True)
def reset_breakers() -> Iterator[None]:
    """Breaker state is process-global; isolate each test."""
    get_breaker_registry().clear()
    yield
    get_breaker_registry().clear()


@pytest.fixture
def settings() -> Settings:
    """Deterministic settings for aggregator tests."""
    return Settings(
        google_maps_api_key="test-key",
        directions_language="ko",
        fanout_cap=8,
        routing_timeout_ms=2000,
        circuit_breaker_failures=50,
    )


@pytest.fixture
def make_place() -> PlaceFactory:
    """Build a Place from coordinates; place_id defaults to the coordinate pair."""

    def _make(
        lat: float,
        lon: float,
        place_id: str | None = None,
        name: str | None = None,
        address: str = "",
    ) -> Place:
        return Place(
            place_id=place_id or f"{lat},{lon}",
            name=name or f"Place {lat},{lon}",
            location=Geo(lat=lat, lon=lon),
            address=address,
        )

    return _make


def _step(kind: str, tag: str, seconds: int, meters: int) -> dict[str, Any]:
    step: dict[str, Any] = {
        "travel_mode": kind,
        "html_instructions": f"<b>{tag}</b> step",
        "distance": {"text": f"{meters / 1000:.1f} km", "value": meters},
        "duration": {"text": f"{seconds // 60}분", "value": seconds},
        "polyline": {"points": f"path-{tag}"},
    }
    if kind == "TRANSIT":
        step["transit_details"] = {
            "departure_stop": {"name": f"{tag}-from"},
            "arrival_stop": {"name": f"{tag}-to"},
            "num_stops": 2,
            "line": {"short_name": f"line-{tag}", "color": "#00a84d"},
        }
    return step


@pytest.fixture
def make_route() -> RouteFactory:
    """Build a raw Directions route whose steps are tagged for order checks."""

    def _make(
        tag: str,
        *,
        seconds: int = 600,
        meters: int = 1500,
        kinds: tuple[str, ...] = ("WALKING", "TRANSIT"),
    ) -> dict[str, Any]:
        steps = [
            _step(kind, f"{tag}.{i}", seconds // len(kinds), meters // len(kinds))
            for i, kind in enumerate(kinds)
        ]
        return {
            "legs": [
                {
                    "duration": {"text": f"{seconds // 60}분", "value": seconds},
                    "distance": {"text": f"{meters / 1000:.1f} km", "value": meters},
                    "steps": steps,
                }
            ]
        }

    return _make


class FakeDirectionsProvider:
    """In-memory directions provider keyed by leg origin.

    Each leg can be given a latency (seconds), a raw payload override, or an
    exception to raise. Completion order is driven entirely by the latencies.
    """

    name = "directions.fake"

    def __init__(
        self,
        points: list[Place],
        make_route: RouteFactory,
        *,
        delays: dict[int, float] | None = None,
        payloads: dict[int, dict[str, Any]] | None = None,
        errors: dict[int, Exception] | None = None,
    ) -> None:
        self._index_by_origin = {
            p.location.as_param(): i for i, p in enumerate(points[:-1])
        }
        self._make_route = make_route
        self.delays = delays or {}
        self.payloads = payloads or {}
        self.errors = errors or {}
        self.requests: list[LegRequest] = []
        self.completed: list[int] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_route(self, request: LegRequest) -> dict[str, Any]:
        index = self._index_by_origin[request.origin.as_param()]
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(index, 0))
            if index in self.errors:
                raise self.errors[index]
            if index in self.payloads:
                return extract_first_route(self.payloads[index])
            return self._make_route(f"leg{index}", seconds=600 * (index + 1), meters=1000 * (index + 1))
        finally:
            self.in_flight -= 1
            self.completed.append(index)


@pytest.fixture
def fake_provider(make_route: RouteFactory) -> Callable[..., FakeDirectionsProvider]:
    """Factory for FakeDirectionsProvider over a list of trip points."""

    def _make(points: list[Place], **kwargs: Any) -> FakeDirectionsProvider:
        return FakeDirectionsProvider(points, make_route, **kwargs)

    return _make
