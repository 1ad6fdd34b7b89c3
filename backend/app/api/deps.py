"""FastAPI dependencies for external collaborators.

Each provider is built from settings once per process; tests replace them with
app.dependency_overrides.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends

from backend.app.adapters.directions import DirectionsProvider, GoogleDirectionsProvider
from backend.app.adapters.fixtures import DEFAULT_FIXTURES_FILE, StaticDirectionsProvider
from backend.app.adapters.places import GooglePlaceSearch, PlaceSearch
from backend.app.config import get_settings
from backend.app.db.inmemory import InMemoryFavoritesStore
from backend.app.db.repositories import FavoritesStore
from backend.app.routing.aggregator import DirectionsAggregator


@lru_cache
def get_directions_provider() -> DirectionsProvider:
    """Directions provider selected by settings.routing_provider."""
    settings = get_settings()
    if settings.routing_provider == "fixtures":
        path = Path(settings.routing_fixtures_path or DEFAULT_FIXTURES_FILE)
        return StaticDirectionsProvider.from_file(path)
    return GoogleDirectionsProvider(
        api_key=settings.google_maps_api_key,
        base_url=settings.directions_base_url,
        timeout_s=settings.routing_timeout_ms / 1000,
    )


def get_aggregator(
    provider: Annotated[DirectionsProvider, Depends(get_directions_provider)],
) -> DirectionsAggregator:
    """Aggregator over the configured provider."""
    return DirectionsAggregator(provider)


@lru_cache
def get_place_search() -> PlaceSearch:
    settings = get_settings()
    return GooglePlaceSearch(
        api_key=settings.google_maps_api_key,
        base_url=settings.places_base_url,
        language=settings.directions_language,
    )


@lru_cache
def get_favorites_store() -> FavoritesStore:
    return InMemoryFavoritesStore()
