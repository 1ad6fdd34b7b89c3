"""Directions aggregator - concurrent per-leg fetch merged into one Itinerary.

One provider request per consecutive stop pair, dispatched concurrently and
joined with a barrier. The result is all-or-nothing: any failed leg fails the
whole itinerary, and successful legs are merged by leg index, never by
completion order.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from backend.app.adapters.directions import DirectionsProvider, LegRequest
from backend.app.config import Settings, get_settings
from backend.app.models.common import Provenance, TransportMode
from backend.app.models.places import Place
from backend.app.models.route import Itinerary, RouteLeg
from backend.app.providers.executor import (
    CallCancelledError,
    CallCircuitOpenError,
    CallConfig,
    CallContext,
    CallExecutionError,
    CallExecutor,
    CallResult,
    CallTimeoutError,
    CancelToken,
)
from backend.app.routing.errors import (
    InsufficientStopsError,
    LegFetchFailedError,
    MalformedProviderResponseError,
    NoRouteDataError,
    RoutingError,
)
from backend.app.routing.parser import parse_route
from backend.app.routing.summary import summarize
from backend.app.utils.logging import StructuredCallLogger
from backend.app.utils.metrics import PrometheusCallMetrics, record_itinerary_outcome

logger = logging.getLogger(__name__)


def default_executor() -> CallExecutor:
    """Executor wired to Prometheus and structured logging.

    Empty/malformed responses count as leg failures but not as provider outages.
    """
    return CallExecutor(
        metrics=PrometheusCallMetrics(),
        logger=StructuredCallLogger(),
        non_breaking=(NoRouteDataError, MalformedProviderResponseError),
    )


def _as_routing_error(error: BaseException, leg_index: int) -> BaseException:
    """Map an executor failure for one leg onto the routing taxonomy."""
    if isinstance(error, CallExecutionError) and isinstance(error.__cause__, RoutingError):
        return error.__cause__.for_leg(leg_index)
    if isinstance(error, RoutingError):
        return error.for_leg(leg_index)
    if isinstance(error, CallTimeoutError):
        return LegFetchFailedError("directions request timed out", leg_index=leg_index)
    if isinstance(error, CallCircuitOpenError):
        return LegFetchFailedError(
            "directions provider temporarily unavailable", leg_index=leg_index
        )
    if isinstance(error, CallExecutionError):
        return LegFetchFailedError(str(error), leg_index=leg_index)
    # Cancellation and programming errors propagate unchanged
    return error


class DirectionsAggregator:
    """Resolves an ordered stop list into a multi-leg Itinerary."""

    def __init__(
        self,
        provider: DirectionsProvider,
        *,
        executor: CallExecutor | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize aggregator.

        Args:
            provider: Directions capability (injected; fakes in tests)
            executor: Call executor (defaults to metrics + structured logging)
            settings: Settings override (defaults to cached environment settings)
        """
        self._provider = provider
        self._executor = executor or default_executor()
        self._settings = settings or get_settings()
        self._call_config = CallConfig(
            hard_timeout_ms=self._settings.routing_timeout_ms,
            breaker_failure_threshold=self._settings.circuit_breaker_failures,
            breaker_window_seconds=self._settings.circuit_breaker_window_sec,
            breaker_half_open_seconds=self._settings.circuit_breaker_half_open_sec,
        )

    @property
    def language(self) -> str:
        return self._settings.directions_language

    async def fetch_itinerary(
        self,
        start: Place,
        ordered_stops: Sequence[Place],
        mode: TransportMode,
        *,
        cancel_token: CancelToken | None = None,
    ) -> CallResult[Itinerary]:
        """Fetch every leg concurrently and merge them in stop order.

        Args:
            start: Trip start
            ordered_stops: Destinations in visiting order
            mode: Transport mode for every leg
            cancel_token: Token flipped by the caller when the request is superseded

        Returns:
            CallResult wrapping the Itinerary with provenance

        Raises:
            InsufficientStopsError: Fewer than two points
            LegFetchFailedError: A leg hit a network error, timeout or non-OK status
            NoRouteDataError: A leg came back OK but without a route
            MalformedProviderResponseError: A leg response had an unexpected shape
            CallCancelledError: The token was cancelled before the legs were dispatched
        """
        points = [start, *ordered_stops]
        if len(points) < 2:
            record_itinerary_outcome(mode.value, InsufficientStopsError.kind.value)
            raise InsufficientStopsError("at least one stop besides the start is required")

        if cancel_token is None:
            cancel_token = CancelToken()
        trace_id = f"itinerary-{uuid.uuid4()}"
        leg_count = len(points) - 1
        started = time.monotonic()
        logger.info(
            "Fetching itinerary %s: %d legs, mode=%s", trace_id, leg_count, mode.value
        )

        semaphore = asyncio.Semaphore(max(1, self._settings.fanout_cap))

        async def fetch_leg(index: int) -> RouteLeg:
            request = LegRequest(
                origin=points[index].location,
                destination=points[index + 1].location,
                mode=mode,
                language=self.language,
            )
            ctx = CallContext(trace_id=trace_id, provider=self._provider.name, leg_index=index)
            async with semaphore:
                result: CallResult[dict[str, Any]] = await self._executor.execute(
                    ctx, self._call_config, self._provider.fetch_route, request, cancel_token
                )
            try:
                return parse_route(
                    result.value,
                    mode,
                    index=index,
                    origin=request.origin,
                    destination=request.destination,
                    language=self.language,
                )
            except (TypeError, ValueError) as e:
                # pydantic.ValidationError is a ValueError
                raise MalformedProviderResponseError(
                    f"unparseable route: {type(e).__name__}", leg_index=index
                ) from e

        # Fan-out, then barrier: every leg settles before we decide
        outcomes = await asyncio.gather(
            *(fetch_leg(i) for i in range(leg_count)), return_exceptions=True
        )

        legs: list[RouteLeg] = []
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, BaseException):
                error = _as_routing_error(outcome, index)
                self._record_failure(trace_id, mode, error)
                raise error
            legs.append(outcome)

        itinerary = summarize(legs, mode, self.language)
        elapsed_ms = (time.monotonic() - started) * 1000
        record_itinerary_outcome(mode.value, "success")
        logger.info(
            "Itinerary %s ready: %d legs, %ds, %dm in %.0fms",
            trace_id,
            leg_count,
            itinerary.total_duration_seconds,
            itinerary.total_distance_meters,
            elapsed_ms,
        )

        return CallResult(
            value=itinerary,
            provenance=Provenance(
                source=f"provider.{self._provider.name}",
                ref_id=trace_id,
                fetched_at=datetime.now(UTC),
            ),
        )

    def _record_failure(self, trace_id: str, mode: TransportMode, error: BaseException) -> None:
        if isinstance(error, RoutingError):
            record_itinerary_outcome(mode.value, error.kind.value)
            if isinstance(error, MalformedProviderResponseError):
                logger.error("Itinerary %s failed: %s", trace_id, error)
            else:
                logger.warning("Itinerary %s failed: %s", trace_id, error)
        elif isinstance(error, CallCancelledError):
            record_itinerary_outcome(mode.value, "cancelled")
            logger.info("Itinerary %s cancelled", trace_id)
