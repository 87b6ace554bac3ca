"""Structured logging for boundary-call settlements."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class CallLogger:
    """Interface for structured call logging (no-op default)."""

    def log_settle(
        self,
        operation: str,
        sequence: int,
        outcome: str,
        latency_ms: float,
        stale: bool = False,
        error_reason: str | None = None,
    ) -> None:
        """Log a settled boundary call."""
        pass


class StructuredCallLogger(CallLogger):
    """Structured logger for boundary-call settlements."""

    def log_settle(
        self,
        operation: str,
        sequence: int,
        outcome: str,
        latency_ms: float,
        stale: bool = False,
        error_reason: str | None = None,
    ) -> None:
        """Log a settled call with structured data."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "sequence": sequence,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "stale": stale,
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Boundary call: {operation} #{sequence} - {outcome}"
        if stale:
            log_msg += " (stale, discarded)"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for interactive runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
