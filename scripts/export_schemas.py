"""Export JSON schemas for the route planning API contract."""

import json
from pathlib import Path

from backend.app.models import Itinerary, ItineraryRequest, RoutingFailure, TripRequest

SCHEMAS = {
    "TripRequest": TripRequest,
    "ItineraryRequest": ItineraryRequest,
    "Itinerary": Itinerary,
    "RoutingFailure": RoutingFailure,
}


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for name, model in SCHEMAS.items():
        path = schemas_dir / f"{name}.schema.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(model.model_json_schema(), f, indent=2, ensure_ascii=False)
        print(f"Exported {name} schema to {path}")


if __name__ == "__main__":
    main()
