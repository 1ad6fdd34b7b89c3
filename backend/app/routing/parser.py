"""Parse Google Directions route JSON into segments and narration steps.

Response structure (only the parts we read):
    route.legs[].duration.value / distance.value
    route.legs[].steps[].{html_instructions, travel_mode, polyline.points,
        distance.text, duration.text, transit_details}
    transit_details.{line.{short_name, name, color}, departure_stop.name,
        arrival_stop.name, num_stops}
"""

import html
import re
from typing import Any

from backend.app.models.common import Geo, TransportMode
from backend.app.models.route import RouteLeg, RouteSegment, RouteStep
from backend.app.routing.errors import MalformedProviderResponseError, NoRouteDataError

# Segment colors
DRIVING_COLOR = "#007AFF"
WALKING_COLOR = "#FF9500"
NEUTRAL_COLOR = "#D3D3D3"
FALLBACK_HEX = "#000000"

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
_HEX_RE = re.compile(r"^[0-9A-Fa-f]+$")


def strip_html(markup: str) -> str:
    """Turn provider instruction markup into plain narration."""
    text = _TAG_RE.sub(" ", markup)
    text = html.unescape(text)
    return _WS_RE.sub(" ", text).strip()


def normalize_hex_color(value: str) -> str:
    """Normalize a 3/6/8 digit hex color to #RRGGBB (or #AARRGGBB).

    Unparseable values map to black, as transit line colors are best-effort.
    """
    digits = value.strip().lstrip("#")
    if not _HEX_RE.match(digits):
        return FALLBACK_HEX
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    elif len(digits) not in (6, 8):
        return FALLBACK_HEX
    return f"#{digits.upper()}"


def _text_of(obj: Any, key: str) -> str:
    value = obj.get(key) if isinstance(obj, dict) else None
    if isinstance(value, dict):
        text = value.get("text")
        return text if isinstance(text, str) else ""
    return ""


def _optional_str(obj: dict[str, Any], key: str, where: str) -> str | None:
    value = obj.get(key)
    if value is None or isinstance(value, str):
        return value
    raise MalformedProviderResponseError(f"{where}.{key} is not a string")


def _optional_dict(obj: dict[str, Any], key: str, where: str) -> dict[str, Any] | None:
    value = obj.get(key)
    if value is None or isinstance(value, dict):
        return value
    raise MalformedProviderResponseError(f"{where}.{key} is not an object")


def _transit_line(step: dict[str, Any]) -> dict[str, Any] | None:
    details = step.get("transit_details")
    if not isinstance(details, dict):
        return None
    line = details.get("line")
    return line if isinstance(line, dict) else None


def _stop_name(details: dict[str, Any], key: str) -> str:
    stop = _optional_dict(details, key, "transit_details")
    if stop is None:
        return ""
    return _optional_str(stop, "name", key) or ""


def _transit_detail(details: dict[str, Any], language: str) -> str:
    departure = _stop_name(details, "departure_stop")
    arrival = _stop_name(details, "arrival_stop")
    num_stops = details.get("num_stops")
    if not isinstance(num_stops, int):
        num_stops = 0
    if language.startswith("ko"):
        return f"{departure} → {arrival} ({num_stops}개 역)"
    return f"{departure} → {arrival} ({num_stops} stops)"


def parse_step(step: dict[str, Any], language: str = "ko") -> RouteStep:
    """Build the narration entry for one provider step.

    Missing fields fall back to empty values; present fields of the wrong type
    raise MalformedProviderResponseError.
    """
    instruction = strip_html(_optional_str(step, "html_instructions", "step") or "")
    travel_mode = _optional_str(step, "travel_mode", "step") or "WALKING"

    line_name: str | None = None
    line_color: str | None = None
    details = _optional_dict(step, "transit_details", "step")

    if travel_mode == "TRANSIT" and details is not None:
        line = _optional_dict(details, "line", "transit_details")
        if line is not None:
            line_name = _optional_str(line, "short_name", "line") or _optional_str(
                line, "name", "line"
            )
            if isinstance(line.get("color"), str):
                line_color = normalize_hex_color(line["color"])
        detail = _transit_detail(details, language)
    else:
        detail = _text_of(step, "distance")

    return RouteStep(
        instruction=instruction,
        detail=detail,
        duration_text=_text_of(step, "duration"),
        travel_mode=travel_mode,
        line_name=line_name,
        line_color=line_color,
    )


def segment_for_step(step: dict[str, Any], mode: TransportMode) -> RouteSegment | None:
    """Build the colored polyline for one provider step (None without a path)."""
    polyline = step.get("polyline")
    encoded_path = polyline.get("points") if isinstance(polyline, dict) else None
    if not isinstance(encoded_path, str) or not encoded_path:
        return None

    line = _transit_line(step)
    if line is not None and isinstance(line.get("color"), str):
        color = normalize_hex_color(line["color"])
        is_walking = False
    else:
        color = NEUTRAL_COLOR
        is_walking = True

    # Requested mode overrides per-step styling
    if mode == TransportMode.driving:
        color, is_walking = DRIVING_COLOR, False
    elif mode == TransportMode.walking:
        color, is_walking = WALKING_COLOR, True

    return RouteSegment(encoded_path=encoded_path, color=color, is_walking=is_walking)


def _value_of(obj: dict[str, Any], key: str) -> int:
    field = obj.get(key)
    if field is None:
        return 0
    if not isinstance(field, dict):
        raise MalformedProviderResponseError(f"leg.{key} is not an object")
    value = field.get("value")
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedProviderResponseError(f"leg.{key}.value is not a number")
    if value < 0:
        raise MalformedProviderResponseError(f"leg.{key}.value is negative")
    return int(value)


def parse_route(
    route: dict[str, Any],
    mode: TransportMode,
    *,
    index: int,
    origin: Geo,
    destination: Geo,
    language: str = "ko",
) -> RouteLeg:
    """Parse one provider route into a RouteLeg.

    Steps and segments keep the provider's order. Duration and distance are
    summed over every provider leg of the route.

    Raises:
        NoRouteDataError: Route has no legs
        MalformedProviderResponseError: legs/steps are not lists of objects, or a
            field has the wrong type or a negative value
    """
    if not isinstance(route, dict):
        raise MalformedProviderResponseError("route is not an object")

    legs = route.get("legs")
    if legs is None or legs == []:
        raise NoRouteDataError("route has no legs")
    if not isinstance(legs, list):
        raise MalformedProviderResponseError("route.legs is not a list")

    segments: list[RouteSegment] = []
    steps: list[RouteStep] = []
    duration_seconds = 0
    distance_meters = 0

    for leg in legs:
        if not isinstance(leg, dict):
            raise MalformedProviderResponseError("route leg is not an object")
        duration_seconds += _value_of(leg, "duration")
        distance_meters += _value_of(leg, "distance")

        raw_steps = leg.get("steps") or []
        if not isinstance(raw_steps, list):
            raise MalformedProviderResponseError("leg.steps is not a list")

        for raw_step in raw_steps:
            if not isinstance(raw_step, dict):
                raise MalformedProviderResponseError("step is not an object")
            steps.append(parse_step(raw_step, language))
            segment = segment_for_step(raw_step, mode)
            if segment is not None:
                segments.append(segment)

    return RouteLeg(
        index=index,
        origin=origin,
        destination=destination,
        segments=tuple(segments),
        steps=tuple(steps),
        duration_seconds=duration_seconds,
        distance_meters=distance_meters,
    )
