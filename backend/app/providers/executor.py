"""Async executor for external provider calls.

Implements provider call execution with:
- Hard timeout per call
- Single attempt (no automatic retry; callers retry on user action)
- Per-provider circuit breaker (shared state via registry)
- Cancellation support
- Metrics and structured logging
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from backend.app.models.common import Provenance

T = TypeVar("T")


# Exception types
class CallTimeoutError(Exception):
    """Provider call exceeded timeout."""

    pass


class CallCircuitOpenError(Exception):
    """Circuit breaker is open for this provider."""

    pass


class CallExecutionError(Exception):
    """Provider call failed."""

    pass


class CallCancelledError(Exception):
    """Provider call was cancelled."""

    pass


@dataclass
class CallResult(Generic[T]):
    """Wrapper for provider results with provenance metadata."""

    value: T
    provenance: Provenance


# Context and config types
@dataclass(frozen=True)
class CallContext:
    """Context for provider call with tracing."""

    trace_id: str
    provider: str
    leg_index: int | None = None


@dataclass
class CancelToken:
    """Token for cancellation signaling."""

    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def throw_if_cancelled(self) -> None:
        """Raise CallCancelledError if cancelled."""
        if self.cancelled:
            raise CallCancelledError("request superseded")


@dataclass
class CallConfig:
    """Configuration for provider call execution."""

    hard_timeout_ms: int
    breaker_failure_threshold: int = 5
    breaker_window_seconds: int = 60
    breaker_half_open_seconds: int = 30


class BreakerState(str, Enum):
    """Circuit breaker state."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """Per-provider circuit breaker.

    Tracks failures within a time window and opens after threshold.
    """

    provider: str
    failure_threshold: int
    window_seconds: int
    half_open_seconds: int
    state: BreakerState = BreakerState.CLOSED
    failure_times: list[datetime] = field(default_factory=list)
    opened_at: datetime | None = None

    def record_success(self) -> None:
        """Record successful execution."""
        if self.state == BreakerState.HALF_OPEN:
            # Success in half-open -> reset to closed
            self.state = BreakerState.CLOSED
            self.failure_times.clear()
            self.opened_at = None

    def record_failure(self, now: datetime) -> None:
        """Record failed execution (transport-level failures only)."""
        cutoff = now - timedelta(seconds=self.window_seconds)
        self.failure_times = [t for t in self.failure_times if t > cutoff]
        self.failure_times.append(now)

        if self.state == BreakerState.HALF_OPEN or len(self.failure_times) >= self.failure_threshold:
            self.state = BreakerState.OPEN
            self.opened_at = now

    def check_and_update_state(self, now: datetime) -> BreakerState:
        """Check if breaker should transition states."""
        if self.state == BreakerState.OPEN:
            if self.opened_at and (now - self.opened_at).total_seconds() >= self.half_open_seconds:
                self.state = BreakerState.HALF_OPEN

        return self.state

    def is_open(self, now: datetime) -> bool:
        """Check if breaker is currently open (rejecting calls)."""
        return self.check_and_update_state(now) == BreakerState.OPEN


class BreakerRegistry:
    """Registry of per-provider circuit breakers with shared state."""

    def __init__(self) -> None:
        self._by_provider: dict[str, CircuitBreaker] = {}

    def get_or_create(
        self,
        provider: str,
        failure_threshold: int,
        window_seconds: int,
        half_open_seconds: int,
    ) -> CircuitBreaker:
        """Get existing breaker for provider or create new one with given config."""
        if provider not in self._by_provider:
            self._by_provider[provider] = CircuitBreaker(
                provider=provider,
                failure_threshold=failure_threshold,
                window_seconds=window_seconds,
                half_open_seconds=half_open_seconds,
            )
        return self._by_provider[provider]

    def clear(self) -> None:
        """Clear all breakers (useful for testing)."""
        self._by_provider.clear()


# Global registry instance for shared breaker state
_global_breaker_registry = BreakerRegistry()


def get_breaker_registry() -> BreakerRegistry:
    """Get the global breaker registry instance."""
    return _global_breaker_registry


# Metrics interface (to be implemented by actual metrics system)
class CallMetrics:
    """Interface for provider call metrics."""

    def record_latency(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        pass

    def inc_error(self, provider: str, reason: str) -> None:
        """Increment error counter."""
        pass


# Logging interface
class CallLogger:
    """Interface for structured logging."""

    def log_attempt(
        self,
        ctx: CallContext,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log provider call attempt."""
        pass


# Errors that say something about the request rather than provider health
NonBreakingErrors = tuple[type[BaseException], ...]


class CallExecutor:
    """Async provider call executor with timeout, breaker and cancellation."""

    def __init__(
        self,
        metrics: CallMetrics | None = None,
        logger: CallLogger | None = None,
        registry: BreakerRegistry | None = None,
        non_breaking: NonBreakingErrors = (),
    ) -> None:
        """Initialize executor.

        Args:
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured logger (optional, defaults to no-op)
            registry: Breaker registry (optional, defaults to the global one)
            non_breaking: Exception types that fail the call without counting
                against the provider's breaker
        """
        self._metrics = metrics or CallMetrics()
        self._logger = logger or CallLogger()
        self._registry = registry or get_breaker_registry()
        self._non_breaking = non_breaking

    async def execute(
        self,
        ctx: CallContext,
        config: CallConfig,
        fn: Callable[[Any], Awaitable[T]],
        payload: BaseModel,
        cancel_token: CancelToken | None = None,
    ) -> CallResult[T]:
        """Execute a provider call.

        Args:
            ctx: Call context with trace_id/provider
            config: Execution configuration
            fn: Async function to execute
            payload: Call input payload
            cancel_token: Cancellation token (optional, defaults to not cancelled)

        Returns:
            CallResult[T] wrapping the result with Provenance metadata

        Raises:
            CallTimeoutError: Execution exceeded hard timeout
            CallCircuitOpenError: Circuit breaker is open
            CallCancelledError: Execution was cancelled
            CallExecutionError: Other execution failures (chained)
        """
        if cancel_token is None:
            cancel_token = CancelToken()
        breaker = self._registry.get_or_create(
            provider=ctx.provider,
            failure_threshold=config.breaker_failure_threshold,
            window_seconds=config.breaker_window_seconds,
            half_open_seconds=config.breaker_half_open_seconds,
        )

        cancel_token.throw_if_cancelled()

        start_time = time.monotonic()
        if breaker.is_open(datetime.now(UTC)):
            self._metrics.record_latency(ctx.provider, "breaker_open", 0.0)
            self._metrics.inc_error(ctx.provider, "breaker_open")
            self._logger.log_attempt(ctx, "breaker_open", 0.0, error_reason="breaker_open")
            raise CallCircuitOpenError(f"Circuit breaker open for {ctx.provider}")

        try:
            result = await asyncio.wait_for(fn(payload), timeout=config.hard_timeout_ms / 1000)
        except TimeoutError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._metrics.record_latency(ctx.provider, "timeout", elapsed_ms)
            self._metrics.inc_error(ctx.provider, "timeout")
            self._logger.log_attempt(ctx, "timeout", elapsed_ms, error_reason="timeout")
            breaker.record_failure(datetime.now(UTC))
            raise CallTimeoutError(
                f"{ctx.provider} timed out after {config.hard_timeout_ms}ms"
            ) from e
        except asyncio.CancelledError:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._metrics.record_latency(ctx.provider, "cancelled", elapsed_ms)
            self._logger.log_attempt(ctx, "cancelled", elapsed_ms, error_reason="cancelled")
            raise
        except Exception as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._metrics.record_latency(ctx.provider, "error", elapsed_ms)
            self._metrics.inc_error(ctx.provider, type(e).__name__)
            self._logger.log_attempt(ctx, "error", elapsed_ms, error_reason=type(e).__name__)
            if not isinstance(e, self._non_breaking):
                breaker.record_failure(datetime.now(UTC))
            raise CallExecutionError(f"{ctx.provider} call failed: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000
        breaker.record_success()
        self._metrics.record_latency(ctx.provider, "success", elapsed_ms)
        self._logger.log_attempt(ctx, "success", elapsed_ms)

        provenance = Provenance(
            source=f"provider.{ctx.provider}",
            ref_id=ctx.trace_id,
            fetched_at=datetime.now(UTC),
        )
        return CallResult(value=result, provenance=provenance)
