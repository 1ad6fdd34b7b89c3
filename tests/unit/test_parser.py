"""Tests for the step/segment parser."""

import pytest

from backend.app.models.common import Geo, TransportMode
from backend.app.routing.errors import MalformedProviderResponseError, NoRouteDataError
from backend.app.routing.parser import (
    DRIVING_COLOR,
    NEUTRAL_COLOR,
    WALKING_COLOR,
    normalize_hex_color,
    parse_route,
    parse_step,
    segment_for_step,
    strip_html,
)

ORIGIN = Geo(lat=37.5796, lon=126.977)
DESTINATION = Geo(lat=37.5637, lon=126.9838)

TRANSIT_STEP = {
    "travel_mode": "TRANSIT",
    "html_instructions": "지하철 <b>오금행</b>",
    "distance": {"text": "1.9 km", "value": 1900},
    "duration": {"text": "9분", "value": 540},
    "polyline": {"points": "transit-path"},
    "transit_details": {
        "departure_stop": {"name": "경복궁"},
        "arrival_stop": {"name": "을지로3가"},
        "num_stops": 3,
        "line": {"short_name": "3호선", "name": "수도권 전철 3호선", "color": "#ef7c1c"},
    },
}

WALKING_STEP = {
    "travel_mode": "WALKING",
    "html_instructions": "Walk to <div style=\"font-size:0.9em\">Myeong-dong</div>",
    "distance": {"text": "0.4 km", "value": 420},
    "duration": {"text": "6분", "value": 360},
    "polyline": {"points": "walk-path"},
}


class TestStripHtml:
    def test_removes_tags_and_collapses_whitespace(self) -> None:
        assert strip_html("<b>Turn</b> <i>left</i><div>onto Main St</div>") == (
            "Turn left onto Main St"
        )

    def test_unescapes_entities(self) -> None:
        assert strip_html("Head &amp; turn &lt;here&gt;") == "Head & turn <here>"

    def test_plain_text_unchanged(self) -> None:
        assert strip_html("직진") == "직진"


class TestNormalizeHexColor:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("#ef7c1c", "#EF7C1C"),
            ("00a84d", "#00A84D"),
            ("#abc", "#AABBCC"),
            ("#80ff0000", "#80FF0000"),
            ("not-a-color", "#000000"),
            ("#12345", "#000000"),
        ],
    )
    def test_normalizes(self, raw: str, expected: str) -> None:
        assert normalize_hex_color(raw) == expected


class TestParseStep:
    def test_transit_step_detail_uses_stops(self) -> None:
        step = parse_step(TRANSIT_STEP, "ko")

        assert step.instruction == "지하철 오금행"
        assert step.detail == "경복궁 → 을지로3가 (3개 역)"
        assert step.duration_text == "9분"
        assert step.travel_mode == "TRANSIT"
        assert step.is_transit
        assert step.line_name == "3호선"
        assert step.line_color == "#EF7C1C"

    def test_transit_detail_in_english(self) -> None:
        step = parse_step(TRANSIT_STEP, "en")
        assert step.detail == "경복궁 → 을지로3가 (3 stops)"

    def test_line_name_falls_back_to_long_name(self) -> None:
        raw = {
            **TRANSIT_STEP,
            "transit_details": {
                **TRANSIT_STEP["transit_details"],
                "line": {"name": "Airport Railroad"},
            },
        }
        step = parse_step(raw)
        assert step.line_name == "Airport Railroad"
        assert step.line_color is None

    def test_walking_step_detail_is_distance(self) -> None:
        step = parse_step(WALKING_STEP)

        assert step.instruction == "Walk to Myeong-dong"
        assert step.detail == "0.4 km"
        assert not step.is_transit
        assert step.line_name is None

    def test_missing_fields_default(self) -> None:
        step = parse_step({})
        assert step.travel_mode == "WALKING"
        assert step.instruction == ""
        assert step.detail == ""
        assert step.duration_text == ""


class TestSegmentForStep:
    def test_transit_uses_line_color(self) -> None:
        segment = segment_for_step(TRANSIT_STEP, TransportMode.transit)
        assert segment is not None
        assert segment.color == "#EF7C1C"
        assert segment.is_walking is False
        assert segment.encoded_path == "transit-path"

    def test_walking_leg_of_transit_trip_is_neutral_dashed(self) -> None:
        segment = segment_for_step(WALKING_STEP, TransportMode.transit)
        assert segment is not None
        assert segment.color == NEUTRAL_COLOR
        assert segment.is_walking is True

    def test_driving_forces_single_solid_color(self) -> None:
        for raw in (TRANSIT_STEP, WALKING_STEP):
            segment = segment_for_step(raw, TransportMode.driving)
            assert segment is not None
            assert segment.color == DRIVING_COLOR
            assert segment.is_walking is False

    def test_walking_forces_single_dashed_color(self) -> None:
        for raw in (TRANSIT_STEP, WALKING_STEP):
            segment = segment_for_step(raw, TransportMode.walking)
            assert segment is not None
            assert segment.color == WALKING_COLOR
            assert segment.is_walking is True

    def test_step_without_polyline_has_no_segment(self) -> None:
        raw = {k: v for k, v in WALKING_STEP.items() if k != "polyline"}
        assert segment_for_step(raw, TransportMode.transit) is None


class TestParseRoute:
    def test_preserves_provider_order_and_sums_legs(self) -> None:
        route = {
            "legs": [
                {
                    "duration": {"value": 900},
                    "distance": {"value": 2320},
                    "steps": [WALKING_STEP, TRANSIT_STEP],
                },
                {
                    "duration": {"value": 120},
                    "distance": {"value": 110},
                    "steps": [WALKING_STEP],
                },
            ]
        }

        leg = parse_route(
            route, TransportMode.transit, index=2, origin=ORIGIN, destination=DESTINATION
        )

        assert leg.index == 2
        assert leg.origin == ORIGIN
        assert leg.duration_seconds == 1020
        assert leg.distance_meters == 2430
        assert [s.encoded_path for s in leg.segments] == ["walk-path", "transit-path", "walk-path"]
        assert [s.travel_mode for s in leg.steps] == ["WALKING", "TRANSIT", "WALKING"]

    def test_steps_without_polyline_still_narrated(self) -> None:
        bare = {k: v for k, v in WALKING_STEP.items() if k != "polyline"}
        route = {"legs": [{"steps": [bare, TRANSIT_STEP]}]}

        leg = parse_route(
            route, TransportMode.transit, index=0, origin=ORIGIN, destination=DESTINATION
        )

        assert len(leg.steps) == 2
        assert len(leg.segments) == 1

    def test_route_without_legs_is_no_route_data(self) -> None:
        with pytest.raises(NoRouteDataError):
            parse_route(
                {"legs": []}, TransportMode.driving, index=0, origin=ORIGIN, destination=DESTINATION
            )

    @pytest.mark.parametrize(
        "route",
        [
            {"legs": "nope"},
            {"legs": ["not-an-object"]},
            {"legs": [{"steps": {"not": "a list"}}]},
            {"legs": [{"steps": ["not-an-object"]}]},
        ],
    )
    def test_unexpected_shapes_are_malformed(self, route: dict) -> None:
        with pytest.raises(MalformedProviderResponseError):
            parse_route(
                route, TransportMode.driving, index=0, origin=ORIGIN, destination=DESTINATION
            )


def _transit_with(**details) -> dict:
    return {**TRANSIT_STEP, "transit_details": {**TRANSIT_STEP["transit_details"], **details}}


class TestMalformedStepContents:
    @pytest.mark.parametrize(
        "raw",
        [
            {"travel_mode": "TRANSIT", "transit_details": {"departure_stop": "Gangnam"}},
            _transit_with(arrival_stop=["Myeong-dong"]),
            _transit_with(departure_stop={"name": 7}),
            _transit_with(line={"short_name": 402}),
            _transit_with(line="3호선"),
            {**TRANSIT_STEP, "transit_details": "bus"},
            {**WALKING_STEP, "html_instructions": 5},
            {**WALKING_STEP, "travel_mode": 3},
        ],
    )
    def test_wrong_field_types_are_malformed(self, raw: dict) -> None:
        with pytest.raises(MalformedProviderResponseError):
            parse_step(raw)

    @pytest.mark.parametrize(
        "leg",
        [
            {"duration": {"value": -60}, "steps": []},
            {"distance": {"value": "1.2 km"}, "steps": []},
            {"distance": 1200, "steps": []},
        ],
    )
    def test_bad_leg_totals_are_malformed(self, leg: dict) -> None:
        with pytest.raises(MalformedProviderResponseError):
            parse_route(
                {"legs": [leg]}, TransportMode.transit, index=0, origin=ORIGIN, destination=DESTINATION
            )

    def test_null_fields_still_default(self) -> None:
        raw = {
            "travel_mode": None,
            "html_instructions": None,
            "transit_details": None,
        }
        step = parse_step(raw)
        assert step.travel_mode == "WALKING"
        assert step.instruction == ""
