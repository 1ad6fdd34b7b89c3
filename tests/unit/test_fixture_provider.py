"""Tests for the recorded-response directions provider."""

import pytest

from backend.app.adapters.fixtures import DEFAULT_FIXTURES_FILE, StaticDirectionsProvider
from backend.app.adapters.directions import LegRequest
from backend.app.models.common import Geo, TransportMode
from backend.app.routing.errors import LegFetchFailedError

GYEONGBOKGUNG = Geo(lat=37.5796, lon=126.977)
MYEONGDONG = Geo(lat=37.5637, lon=126.9838)


@pytest.mark.asyncio
async def test_bundled_fixture_serves_recorded_leg() -> None:
    provider = StaticDirectionsProvider.from_file(DEFAULT_FIXTURES_FILE, record_requests=True)

    route = await provider.fetch_route(
        LegRequest(origin=GYEONGBOKGUNG, destination=MYEONGDONG, mode=TransportMode.transit)
    )

    assert route["legs"][0]["duration"]["value"] == 1140
    assert len(provider.requests) == 1


@pytest.mark.asyncio
async def test_recorded_failure_behaves_like_live_failure() -> None:
    provider = StaticDirectionsProvider.from_file()

    with pytest.raises(LegFetchFailedError) as exc_info:
        await provider.fetch_route(
            LegRequest(origin=GYEONGBOKGUNG, destination=MYEONGDONG, mode=TransportMode.driving)
        )

    assert exc_info.value.provider_status == "ZERO_RESULTS"


@pytest.mark.asyncio
async def test_unrecorded_leg_is_not_found(make_route) -> None:
    provider = StaticDirectionsProvider()
    provider.add(
        Geo(lat=1.000001, lon=2.0),
        Geo(lat=3.0, lon=4.0),
        TransportMode.walking,
        {"status": "OK", "routes": [make_route("x")]},
    )

    # Matched at 5 decimal places
    route = await provider.fetch_route(
        LegRequest(origin=Geo(lat=1.0, lon=2.0), destination=Geo(lat=3.0, lon=4.0), mode=TransportMode.walking)
    )
    assert route == make_route("x")

    with pytest.raises(LegFetchFailedError) as exc_info:
        await provider.fetch_route(
            LegRequest(origin=Geo(lat=1.0, lon=2.0), destination=Geo(lat=3.0, lon=4.0), mode=TransportMode.driving)
        )
    assert exc_info.value.provider_status == "NOT_FOUND"


@pytest.mark.asyncio
async def test_requests_are_not_kept_by_default() -> None:
    provider = StaticDirectionsProvider.from_file()

    for _ in range(3):
        await provider.fetch_route(
            LegRequest(origin=GYEONGBOKGUNG, destination=MYEONGDONG, mode=TransportMode.transit)
        )

    assert provider.requests == []
