"""Place search adapter using the Google Places "Find Place From Text" API."""

import logging
from typing import Any, Protocol

import httpx

from backend.app.models.common import Geo
from backend.app.models.places import Place

logger = logging.getLogger(__name__)

DEFAULT_PLACES_URL = "https://maps.googleapis.com/maps/api/place/findplacefromtext/json"

PLACE_FIELDS = "place_id,name,geometry/location,formatted_address"


class PlaceSearch(Protocol):
    """Protocol for place search implementations."""

    async def search(self, query: str, region: str | None = None) -> Place | None:
        """Return the best match for a free-text query, or None."""
        ...


def place_from_candidate(candidate: dict[str, Any]) -> Place | None:
    """Build a Place from a Places API candidate (None if incomplete)."""
    location = (candidate.get("geometry") or {}).get("location") or {}
    place_id = candidate.get("place_id")
    name = candidate.get("name")
    if not place_id or not name or "lat" not in location or "lng" not in location:
        return None
    return Place(
        place_id=place_id,
        name=name,
        location=Geo(lat=location["lat"], lon=location["lng"]),
        address=candidate.get("formatted_address") or "",
    )


class GooglePlaceSearch:
    """Google Places text search returning the first candidate."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_PLACES_URL,
        language: str = "ko",
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 8.0,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.language = language
        self._client = client
        self._timeout_s = timeout_s

    async def search(self, query: str, region: str | None = None) -> Place | None:
        """Find the best-matching place.

        Args:
            query: Free-text query (name or address)
            region: Optional region bias, e.g. "circle:2000@37.57,126.98"

        Returns:
            Place, or None when nothing matched

        Raises:
            httpx.HTTPError: On network or HTTP errors
        """
        params = {
            "input": query,
            "inputtype": "textquery",
            "fields": PLACE_FIELDS,
            "language": self.language,
            "key": self.api_key,
        }
        if region:
            params["locationbias"] = region

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout_s)
            close_client = True

        try:
            response = await client.get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        finally:
            if close_client:
                await client.aclose()

        status = data.get("status")
        if status != "OK":
            if status != "ZERO_RESULTS":
                logger.warning("Place search for %r returned %s", query, status)
            return None

        for candidate in data.get("candidates") or []:
            place = place_from_candidate(candidate)
            if place is not None:
                return place
        return None
