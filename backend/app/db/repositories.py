"""Repository protocol interfaces for data access."""

from collections.abc import Mapping
from typing import Any, Protocol

from backend.app.db.context import RequestContext
from backend.app.models.common import Geo
from backend.app.models.places import Place


class FavoritesStore(Protocol):
    """Read-only view of a user's saved places."""

    def list_favorites(self, ctx: RequestContext) -> list[Place]:
        """List the user's favorite places.

        Args:
            ctx: Request context with user ID

        Returns:
            Saved places, most recently saved last
        """
        ...


def place_from_document(document: Mapping[str, Any]) -> Place:
    """Convert a stored favorite document into a Place.

    Documents use the mobile client's field names:
    placeID, name, address, latitude, longitude.

    Raises:
        ValueError: If a required field is missing
    """
    try:
        return Place(
            place_id=document["placeID"],
            name=document["name"],
            location=Geo(lat=document["latitude"], lon=document["longitude"]),
            address=document.get("address") or "",
        )
    except KeyError as e:
        raise ValueError(f"favorite document missing field {e}") from e
