"""Planning session: owns the trip snapshot and the route state machine.

Idle -> OptimizingOrder -> FetchingRoute(mode) -> Ready | Failed. Any edit to the
trip or the mode invalidates the in-flight fetch; a fetch that resolves after
being superseded is discarded rather than shown.
"""

import logging
from enum import Enum

from backend.app.models.common import TransportMode
from backend.app.models.places import Place, TripRequest
from backend.app.models.route import Itinerary, RoutingFailure
from backend.app.providers.executor import CallCancelledError, CancelToken
from backend.app.routing.aggregator import DirectionsAggregator
from backend.app.routing.errors import RoutingError
from backend.app.routing.fallback import describe_failure
from backend.app.routing.optimizer import optimize_trip

logger = logging.getLogger(__name__)


class PlanningState(str, Enum):
    """Planning screen state."""

    IDLE = "idle"
    OPTIMIZING_ORDER = "optimizing_order"
    FETCHING_ROUTE = "fetching_route"
    READY = "ready"
    FAILED = "failed"


# Allowed transitions: from_state -> {to_state, ...}
ALLOWED: dict[PlanningState, set[PlanningState]] = {
    PlanningState.IDLE: {PlanningState.OPTIMIZING_ORDER, PlanningState.FETCHING_ROUTE},
    PlanningState.OPTIMIZING_ORDER: {PlanningState.FETCHING_ROUTE, PlanningState.IDLE},
    PlanningState.FETCHING_ROUTE: {
        PlanningState.READY,
        PlanningState.FAILED,
        PlanningState.FETCHING_ROUTE,
        PlanningState.IDLE,
    },
    PlanningState.READY: {
        PlanningState.OPTIMIZING_ORDER,
        PlanningState.FETCHING_ROUTE,
        PlanningState.IDLE,
    },
    PlanningState.FAILED: {
        PlanningState.OPTIMIZING_ORDER,
        PlanningState.FETCHING_ROUTE,
        PlanningState.IDLE,
    },
}


class PlanningSession:
    """Single-user trip planning state.

    Not safe for concurrent edits: mutate from one task and re-run refresh()
    after each change.
    """

    def __init__(
        self,
        aggregator: DirectionsAggregator,
        request: TripRequest | None = None,
        mode: TransportMode = TransportMode.driving,
    ) -> None:
        self._aggregator = aggregator
        self.request = request
        self.mode = mode
        self.state = PlanningState.IDLE
        self.itinerary: Itinerary | None = None
        self.failure: RoutingFailure | None = None
        self._generation = 0
        self._token: CancelToken | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def _transition(self, to_state: PlanningState) -> None:
        if to_state == self.state and to_state != PlanningState.FETCHING_ROUTE:
            return
        if to_state not in ALLOWED[self.state]:
            raise ValueError(f"Transition {self.state.value} -> {to_state.value} not allowed")
        self.state = to_state

    def _invalidate(self) -> None:
        """Drop derived state and supersede any in-flight fetch."""
        self._generation += 1
        if self._token is not None:
            self._token.cancel()
            self._token = None
        self.itinerary = None
        self.failure = None
        self._transition(PlanningState.IDLE)

    def _require_request(self) -> TripRequest:
        if self.request is None:
            raise ValueError("set a start place first")
        return self.request

    # Edits

    def set_start(self, place: Place) -> None:
        if self.request is None:
            self.request = TripRequest(start=place)
        else:
            self.request = self.request.with_start(place)
        self._invalidate()

    def add_stop(self, place: Place) -> None:
        self.request = self._require_request().add_stop(place)
        self._invalidate()

    def remove_stop(self, index: int) -> None:
        self.request = self._require_request().remove_stop(index)
        self._invalidate()

    def move_stop(self, from_index: int, to_index: int) -> None:
        self.request = self._require_request().move_stop(from_index, to_index)
        self._invalidate()

    def set_mode(self, mode: TransportMode) -> None:
        if mode == self.mode:
            return
        self.mode = mode
        self._invalidate()

    # Planning

    async def optimize(self) -> None:
        """Reorder destinations with the nearest-neighbor heuristic."""
        request = self._require_request()
        self._invalidate()
        self._transition(PlanningState.OPTIMIZING_ORDER)
        self.request = optimize_trip(request)

    async def refresh(self) -> Itinerary | None:
        """Fetch the itinerary for the current snapshot.

        Returns:
            The itinerary when it is ready and still current, else None
            (failed, superseded, or not enough stops)
        """
        request = self.request
        if request is None or request.point_count < 2:
            self._invalidate()
            return None

        if self._token is not None:
            self._token.cancel()
        generation = self._generation
        mode = self.mode
        token = CancelToken()
        self._token = token
        self._transition(PlanningState.FETCHING_ROUTE)

        try:
            result = await self._aggregator.fetch_itinerary(
                request.start, request.destinations, mode, cancel_token=token
            )
        except CallCancelledError:
            logger.debug("Fetch for generation %d cancelled before dispatch", generation)
            return None
        except RoutingError as e:
            if self._is_stale(generation, token):
                logger.info("Discarding stale failure for generation %d: %s", generation, e)
                return None
            self._token = None
            self.failure = describe_failure(
                e, request.start, request.destinations, mode, self._aggregator.language
            )
            self._transition(PlanningState.FAILED)
            return None
        except Exception:
            if not self._is_stale(generation, token):
                self._token = None
                self._transition(PlanningState.IDLE)
            raise

        if self._is_stale(generation, token):
            logger.info("Discarding stale itinerary for generation %d", generation)
            return None

        self._token = None
        self.itinerary = result.value
        self._transition(PlanningState.READY)
        return result.value

    async def plan(self) -> Itinerary | None:
        """Optimize the stop order, then fetch the itinerary."""
        await self.optimize()
        return await self.refresh()

    def _is_stale(self, generation: int, token: CancelToken) -> bool:
        return generation != self._generation or token.cancelled
