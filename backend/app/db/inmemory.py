"""In-memory implementations of repository interfaces."""

from collections.abc import Iterable, Mapping
from typing import Any

from backend.app.db.context import RequestContext
from backend.app.db.repositories import place_from_document
from backend.app.models.places import Place


class InMemoryFavoritesStore:
    """In-memory implementation of FavoritesStore."""

    def __init__(self) -> None:
        self._by_user: dict[str, dict[str, Place]] = {}

    def seed(self, user_id: str, places: Iterable[Place]) -> None:
        """Save places for a user (same place_id replaces the earlier entry)."""
        favorites = self._by_user.setdefault(user_id, {})
        for place in places:
            favorites.pop(place.place_id, None)
            favorites[place.place_id] = place

    def seed_documents(self, user_id: str, documents: Iterable[Mapping[str, Any]]) -> None:
        """Save favorites given as stored documents."""
        self.seed(user_id, (place_from_document(d) for d in documents))

    def list_favorites(self, ctx: RequestContext) -> list[Place]:
        """List favorites for the context's user."""
        return list(self._by_user.get(ctx.user_id, {}).values())
