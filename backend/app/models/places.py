"""Place and trip request models."""

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backend.app.models.common import Geo


class Place(BaseModel):
    """A named, geo-located place.

    Identity is the external place identifier alone: two places with the same
    place_id are the same place regardless of the other fields.
    """

    model_config = ConfigDict(frozen=True)

    place_id: str = Field(..., min_length=1)
    name: str
    location: Geo
    address: str = ""

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Place):
            return self.place_id == other.place_id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.place_id)


def _place_id_of(value: Any) -> str | None:
    if isinstance(value, Place):
        return value.place_id
    if isinstance(value, Mapping):
        place_id = value.get("place_id")
        return place_id if isinstance(place_id, str) else None
    return None


class TripRequest(BaseModel):
    """Start place plus the destinations to visit.

    Destinations are deduplicated by place_id (first occurrence wins) and never
    contain the start place. Order is insertion order until optimized.
    """

    model_config = ConfigDict(frozen=True)

    start: Place
    destinations: tuple[Place, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _normalize_destinations(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        raw = data.get("destinations")
        if not raw:
            return data

        start_id = _place_id_of(data.get("start"))
        seen: set[str] = set()
        kept: list[Any] = []
        for item in raw:
            place_id = _place_id_of(item)
            if place_id is None:
                # Let field validation report the bad entry
                kept.append(item)
                continue
            if place_id == start_id or place_id in seen:
                continue
            seen.add(place_id)
            kept.append(item)
        return {**data, "destinations": kept}

    @property
    def point_count(self) -> int:
        """Number of routable points including the start."""
        return 1 + len(self.destinations)

    def with_start(self, place: Place) -> "TripRequest":
        """Replace the start place (drops it from destinations if present)."""
        return TripRequest(start=place, destinations=self.destinations)

    def with_destinations(self, places: Sequence[Place]) -> "TripRequest":
        """Replace the destination list wholesale."""
        return TripRequest(start=self.start, destinations=tuple(places))

    def add_stop(self, place: Place) -> "TripRequest":
        """Append a destination. Re-adding a known place_id replaces it in place."""
        destinations = [place if d == place else d for d in self.destinations]
        if place not in self.destinations:
            destinations.append(place)
        return self.with_destinations(destinations)

    def remove_stop(self, index: int) -> "TripRequest":
        """Remove the destination at index."""
        destinations = list(self.destinations)
        del destinations[index]
        return self.with_destinations(destinations)

    def move_stop(self, from_index: int, to_index: int) -> "TripRequest":
        """Move a destination to a new position."""
        destinations = list(self.destinations)
        place = destinations.pop(from_index)
        destinations.insert(to_index, place)
        return self.with_destinations(destinations)
