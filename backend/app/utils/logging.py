"""Structured logging for provider calls."""

import logging
from typing import Any

from backend.app.providers.executor import CallContext

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a basic root handler once (no-op if one exists)."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


class StructuredCallLogger:
    """Structured logger for provider call execution."""

    def log_attempt(
        self,
        ctx: CallContext,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log provider call attempt with structured data."""
        log_data: dict[str, Any] = {
            "trace_id": ctx.trace_id,
            "provider": ctx.provider,
            "leg_index": ctx.leg_index,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Provider call: {ctx.provider} leg={ctx.leg_index} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
