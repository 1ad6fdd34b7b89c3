"""Routing error taxonomy.

Every failure of the directions pipeline is surfaced as a RoutingError subclass
carrying a RoutingErrorKind. The optimizer never fails and has no entry here.
"""

from backend.app.models.common import RoutingErrorKind


class RoutingError(Exception):
    """Base class for itinerary fetch failures."""

    kind: RoutingErrorKind = RoutingErrorKind.leg_fetch_failed

    def __init__(
        self,
        message: str,
        *,
        leg_index: int | None = None,
        provider_status: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.leg_index = leg_index
        self.provider_status = provider_status

    def for_leg(self, leg_index: int) -> "RoutingError":
        """Attach the leg index once the aggregator knows it."""
        self.leg_index = leg_index
        return self

    def __str__(self) -> str:
        if self.leg_index is None:
            return self.message
        return f"leg {self.leg_index}: {self.message}"


class InsufficientStopsError(RoutingError):
    """Fewer than two routable points."""

    kind = RoutingErrorKind.insufficient_stops


class LegFetchFailedError(RoutingError):
    """Network error, timeout, or non-OK provider status for a leg."""

    kind = RoutingErrorKind.leg_fetch_failed


class NoRouteDataError(RoutingError):
    """Provider answered OK but returned no usable route."""

    kind = RoutingErrorKind.no_route_data


class MalformedProviderResponseError(RoutingError):
    """Provider response had an unexpected shape."""

    kind = RoutingErrorKind.malformed_provider_response
