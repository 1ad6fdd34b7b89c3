"""Directions adapter using the Google Directions API."""

import logging
from typing import Any, Protocol

import httpx
from pydantic import BaseModel

from backend.app.models.common import Geo, TransportMode
from backend.app.routing.errors import (
    LegFetchFailedError,
    MalformedProviderResponseError,
    NoRouteDataError,
)

logger = logging.getLogger(__name__)

DEFAULT_DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"


class LegRequest(BaseModel):
    """One origin/destination routing request."""

    origin: Geo
    destination: Geo
    mode: TransportMode
    language: str = "ko"


class DirectionsProvider(Protocol):
    """Protocol for directions provider implementations."""

    name: str

    async def fetch_route(self, request: LegRequest) -> dict[str, Any]:
        """Fetch the best route for one leg.

        Args:
            request: Origin, destination, mode and language

        Returns:
            The provider's raw route object (first route of the response)

        Raises:
            LegFetchFailedError: Network error or non-OK provider status
            NoRouteDataError: OK status but no routes
            MalformedProviderResponseError: Unexpected response shape
        """
        ...


def extract_first_route(data: Any) -> dict[str, Any]:
    """Validate a Directions API payload and return its first route."""
    if not isinstance(data, dict):
        raise MalformedProviderResponseError("directions response is not an object")

    status = data.get("status")
    if status != "OK":
        # ZERO_RESULTS, NOT_FOUND, REQUEST_DENIED, OVER_QUERY_LIMIT, ...
        detail = data.get("error_message") or "no detail"
        raise LegFetchFailedError(
            f"directions status {status}: {detail}",
            provider_status=str(status),
        )

    routes = data.get("routes")
    if routes is None or routes == []:
        raise NoRouteDataError("directions response has no routes", provider_status=status)
    if not isinstance(routes, list) or not isinstance(routes[0], dict):
        raise MalformedProviderResponseError("directions routes is not a list of objects")
    return routes[0]


class GoogleDirectionsProvider:
    """Google Directions API client (one request per leg)."""

    name = "directions.google"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_DIRECTIONS_URL,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 8.0,
    ):
        """Initialize provider.

        Args:
            api_key: Google Maps API key (read from settings, never hardcoded)
            base_url: Directions endpoint
            client: Optional shared httpx client (for testing with mocks)
            timeout_s: Per-request timeout when creating our own client
        """
        self.api_key = api_key
        self.base_url = base_url
        self._client = client
        self._timeout_s = timeout_s

    def build_params(self, request: LegRequest) -> dict[str, str]:
        """Query parameters for one leg."""
        return {
            "origin": request.origin.as_param(),
            "destination": request.destination.as_param(),
            "mode": request.mode.value,
            "language": request.language,
            "key": self.api_key,
        }

    async def fetch_route(self, request: LegRequest) -> dict[str, Any]:
        """Fetch the first route for a leg from the Directions API."""
        params = self.build_params(request)

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout_s)
            close_client = True

        try:
            try:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise LegFetchFailedError(f"directions request failed: {type(e).__name__}") from e

            try:
                data = response.json()
            except ValueError as e:
                logger.error("Directions response is not JSON (%d bytes)", len(response.content))
                raise MalformedProviderResponseError("directions response is not JSON") from e

            return extract_first_route(data)
        finally:
            if close_client:
                await client.aclose()
