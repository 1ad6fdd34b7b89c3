"""Itinerary totals and display formatting."""

from collections.abc import Sequence

from backend.app.models.common import TransportMode
from backend.app.models.route import Itinerary, RouteLeg, RouteSegment, RouteStep


def format_duration(seconds: int, language: str = "ko") -> str:
    """Format a duration as hours and minutes ("1시간 5분" / "5분")."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if language.startswith("ko"):
        return f"{hours}시간 {minutes}분" if hours > 0 else f"{minutes}분"
    return f"{hours} h {minutes} min" if hours > 0 else f"{minutes} min"


def format_distance(meters: int) -> str:
    """Format a distance as one-decimal kilometers."""
    return f"{meters / 1000.0:.1f} km"


def summarize(legs: Sequence[RouteLeg], mode: TransportMode, language: str = "ko") -> Itinerary:
    """Merge per-leg results into one Itinerary.

    Legs must already be in leg-index order 0..N-1.
    """
    indices = [leg.index for leg in legs]
    if indices != list(range(len(legs))):
        raise ValueError(f"legs out of order: {indices}")

    segments: list[RouteSegment] = []
    steps: list[RouteStep] = []
    total_duration = 0
    total_distance = 0
    for leg in legs:
        segments.extend(leg.segments)
        steps.extend(leg.steps)
        total_duration += leg.duration_seconds
        total_distance += leg.distance_meters

    return Itinerary(
        mode=mode,
        legs=tuple(legs),
        segments=tuple(segments),
        steps=tuple(steps),
        total_duration_seconds=total_duration,
        total_distance_meters=total_distance,
        duration_text=format_duration(total_duration, language),
        distance_text=format_distance(total_distance),
    )
