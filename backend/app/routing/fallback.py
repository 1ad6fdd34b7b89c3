"""Failure presentation and the external maps deep link.

When an itinerary cannot be built the user still gets a human-readable reason
and a link that hands the same trip to the Google Maps app.
"""

from collections.abc import Sequence
from urllib.parse import urlencode

from backend.app.config import get_settings
from backend.app.models.common import TransportMode
from backend.app.models.places import Place
from backend.app.models.route import RoutingFailure
from backend.app.routing.errors import InsufficientStopsError, RoutingError

_MESSAGES = {
    "ko": {
        "insufficient_stops": "경유지를 한 곳 이상 추가해 주세요.",
        "route_failed": "경로 데이터를 불러오지 못했습니다. 다른 이동 수단을 선택하거나 구글 지도에서 확인해 주세요.",
        "korea_restricted": "한국 내 도보/차량 데이터는 구글 정책상 제한됩니다.",
        "japan_transit_restricted": "일본 대중교통 데이터는 구글 정책상 API 반출이 제한됩니다.",
    },
    "en": {
        "insufficient_stops": "Add at least one stop.",
        "route_failed": "Could not load the route. Try a different mode or open it in Google Maps.",
        "korea_restricted": "Google does not provide driving/walking directions in South Korea.",
        "japan_transit_restricted": "Google does not expose Japanese transit data through its API.",
    },
}

_KOREA_MARKERS = ("대한민국", "Korea")
_JAPAN_MARKERS = ("Japan", "일본")


def _messages(language: str) -> dict[str, str]:
    return _MESSAGES["ko"] if language.startswith("ko") else _MESSAGES["en"]


def build_external_maps_url(
    start: Place,
    ordered_stops: Sequence[Place],
    mode: TransportMode,
    base_url: str | None = None,
) -> str:
    """Google Maps directions URL for the whole trip.

    The last stop is the destination; the stops before it become waypoints.

    Raises:
        InsufficientStopsError: No stops to route to
    """
    if not ordered_stops:
        raise InsufficientStopsError("a maps link needs at least one stop")

    params = {
        "api": "1",
        "origin": start.location.as_param(),
        "destination": ordered_stops[-1].location.as_param(),
    }
    if len(ordered_stops) > 1:
        params["waypoints"] = "|".join(p.location.as_param() for p in ordered_stops[:-1])
    params["travelmode"] = mode.value

    base = base_url or get_settings().maps_deeplink_base_url
    return f"{base}?{urlencode(params)}"


def region_hint(start: Place, mode: TransportMode, language: str = "ko") -> str | None:
    """Explain known provider policy gaps for the start region, if any."""
    messages = _messages(language)
    address = start.address
    if mode != TransportMode.transit and any(m in address for m in _KOREA_MARKERS):
        return messages["korea_restricted"]
    if mode == TransportMode.transit and any(m in address for m in _JAPAN_MARKERS):
        return messages["japan_transit_restricted"]
    return None


def describe_failure(
    error: RoutingError,
    start: Place,
    ordered_stops: Sequence[Place],
    mode: TransportMode,
    language: str = "ko",
) -> RoutingFailure:
    """Build the user-facing failure for a routing error."""
    messages = _messages(language)

    if isinstance(error, InsufficientStopsError):
        message = messages["insufficient_stops"]
        hint = None
    else:
        hint = region_hint(start, mode, language)
        message = hint or messages["route_failed"]

    fallback_url = (
        build_external_maps_url(start, ordered_stops, mode) if ordered_stops else None
    )

    return RoutingFailure(
        kind=error.kind,
        message=message,
        hint=hint,
        leg_index=error.leg_index,
        provider_status=error.provider_status,
        fallback_url=fallback_url,
    )
