"""Prometheus metrics for provider calls and itinerary requests."""

from prometheus_client import Counter, Histogram

# Provider call metrics
provider_call_latency_ms = Histogram(
    "provider_call_latency_ms",
    "Provider call latency in milliseconds",
    ["provider", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

provider_call_errors_total = Counter(
    "provider_call_errors_total",
    "Total provider call errors",
    ["provider", "reason"],
)

# Aggregate outcomes
itinerary_requests_total = Counter(
    "itinerary_requests_total",
    "Total itinerary fetches by mode and outcome",
    ["mode", "outcome"],
)


class PrometheusCallMetrics:
    """Prometheus-based provider call metrics implementation."""

    def record_latency(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record provider call latency."""
        provider_call_latency_ms.labels(provider=provider, outcome=outcome).observe(latency_ms)

    def inc_error(self, provider: str, reason: str) -> None:
        """Increment error counter."""
        provider_call_errors_total.labels(provider=provider, reason=reason).inc()


def record_itinerary_outcome(mode: str, outcome: str) -> None:
    """Count one aggregate fetch ("success" or an error kind)."""
    itinerary_requests_total.labels(mode=mode, outcome=outcome).inc()
