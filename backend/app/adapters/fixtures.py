"""Fixture-based directions provider for local development and tests."""

import json
from pathlib import Path
from typing import Any

from backend.app.adapters.directions import LegRequest, extract_first_route
from backend.app.models.common import Geo, TransportMode
from backend.app.routing.errors import LegFetchFailedError

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
DEFAULT_FIXTURES_FILE = FIXTURES_DIR / "directions.json"

# Coordinates are matched at ~1m precision
_KEY_PRECISION = 5

FixtureKey = tuple[float, float, float, float, str]


def fixture_key(origin: Geo, destination: Geo, mode: TransportMode | str) -> FixtureKey:
    """Lookup key for a recorded leg."""
    mode_value = mode.value if isinstance(mode, TransportMode) else mode
    return (
        round(origin.lat, _KEY_PRECISION),
        round(origin.lon, _KEY_PRECISION),
        round(destination.lat, _KEY_PRECISION),
        round(destination.lon, _KEY_PRECISION),
        mode_value,
    )


class StaticDirectionsProvider:
    """Serves recorded Directions API responses.

    Each recorded response goes through the same status/route validation as a
    live response, so recorded failures (e.g. ZERO_RESULTS) behave like real ones.
    """

    name = "directions.fixtures"

    def __init__(
        self,
        responses: dict[FixtureKey, dict[str, Any]] | None = None,
        *,
        record_requests: bool = False,
    ) -> None:
        """Initialize provider.

        Args:
            responses: Recorded payloads keyed by fixture_key
            record_requests: Keep every LegRequest in self.requests (tests only;
                the list is unbounded)
        """
        self._responses: dict[FixtureKey, dict[str, Any]] = dict(responses or {})
        self._record_requests = record_requests
        self.requests: list[LegRequest] = []

    def add(
        self,
        origin: Geo,
        destination: Geo,
        mode: TransportMode | str,
        response: dict[str, Any],
    ) -> None:
        """Record a response for one leg."""
        self._responses[fixture_key(origin, destination, mode)] = response

    @classmethod
    def from_file(
        cls,
        path: Path | str = DEFAULT_FIXTURES_FILE,
        *,
        record_requests: bool = False,
    ) -> "StaticDirectionsProvider":
        """Load recorded legs from a JSON file.

        Format: a list of {"origin": {"lat", "lon"}, "destination": {...},
        "mode": "driving", "response": <Directions API payload>}.
        """
        with open(path, encoding="utf-8") as f:
            entries = json.load(f)

        provider = cls(record_requests=record_requests)
        for entry in entries:
            provider.add(
                Geo.model_validate(entry["origin"]),
                Geo.model_validate(entry["destination"]),
                entry.get("mode", TransportMode.driving.value),
                entry["response"],
            )
        return provider

    async def fetch_route(self, request: LegRequest) -> dict[str, Any]:
        """Return the recorded route for this leg."""
        if self._record_requests:
            self.requests.append(request)
        response = self._responses.get(
            fixture_key(request.origin, request.destination, request.mode)
        )
        if response is None:
            raise LegFetchFailedError(
                f"no recorded directions for {request.origin.as_param()} -> "
                f"{request.destination.as_param()} ({request.mode.value})",
                provider_status="NOT_FOUND",
            )
        return extract_first_route(response)
