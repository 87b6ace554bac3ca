"""Request lifecycle tracking for boundary calls (list, upload, delete, ask).

Lifecycle: idle -> pending -> settled (success | error). There is no cancelled
state. Overlapping calls of the same kind all run to completion; each is tagged
with a sequence number and only the most recently issued call may update the
rendered state. Older settlements are reported back as stale so callers skip
reconciliation.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from client.app.api.errors import NETWORK_ERROR_MESSAGE, RemoteError, SyncError, TransportError
from client.app.utils.logging import CallLogger
from client.app.utils.metrics import SyncMetrics

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LifecyclePhase(str, Enum):
    """Phase of a request lifecycle."""

    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class LifecycleSnapshot:
    """Read-only view of a lifecycle for rendering."""

    operation: str
    phase: LifecyclePhase
    error: str | None
    last_sequence: int
    result: Any = None

    @property
    def is_pending(self) -> bool:
        return self.phase == LifecyclePhase.PENDING

    @property
    def is_error(self) -> bool:
        return self.phase == LifecyclePhase.ERROR

    @property
    def is_settled(self) -> bool:
        return self.phase in (LifecyclePhase.SUCCESS, LifecyclePhase.ERROR)


@dataclass(frozen=True)
class Settlement(Generic[T]):
    """Outcome of one boundary call.

    ``current`` is False when a newer call of the same kind was issued before
    this one settled; such settlements must not be reconciled into state.
    """

    operation: str
    sequence: int
    value: T | None = None
    error: SyncError | None = None
    current: bool = True

    @property
    def ok(self) -> bool:
        return self.error is None


class RequestLifecycle:
    """Three-phase lifecycle for one kind of boundary call."""

    def __init__(
        self,
        operation: str,
        metrics: SyncMetrics | None = None,
        call_logger: CallLogger | None = None,
    ) -> None:
        """Initialize lifecycle.

        Args:
            operation: Operation name used in logs and metrics (e.g. "list")
            metrics: Metrics recorder (optional, defaults to no-op)
            call_logger: Structured logger (optional, defaults to no-op)
        """
        self.operation = operation
        self._metrics = metrics or SyncMetrics()
        self._call_logger = call_logger or CallLogger()
        self._phase = LifecyclePhase.IDLE
        self._error: str | None = None
        self._result: Any = None
        self._sequence = 0

    @property
    def phase(self) -> LifecyclePhase:
        return self._phase

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def result(self) -> Any:
        return self._result

    @property
    def last_sequence(self) -> int:
        return self._sequence

    def snapshot(self) -> LifecycleSnapshot:
        return LifecycleSnapshot(
            operation=self.operation,
            phase=self._phase,
            error=self._error,
            last_sequence=self._sequence,
            result=self._result,
        )

    def is_current(self, sequence: int) -> bool:
        return sequence == self._sequence

    def begin(self) -> int:
        """Enter pending for a newly issued call and clear the previous outcome.

        Returns:
            Sequence number tagging the call
        """
        self._sequence += 1
        self._phase = LifecyclePhase.PENDING
        self._error = None
        self._result = None
        return self._sequence

    def settle_success(self, sequence: int, value: Any, latency_ms: float = 0.0) -> bool:
        """Record a successful settlement; returns whether it was current."""
        current = self.is_current(sequence)
        self._metrics.record_latency(self.operation, "success", latency_ms)
        self._call_logger.log_settle(
            self.operation, sequence, "success", latency_ms, stale=not current
        )
        if current:
            self._phase = LifecyclePhase.SUCCESS
            self._error = None
            self._result = value
        return current

    def settle_error(
        self,
        sequence: int,
        error: SyncError,
        latency_ms: float = 0.0,
        reason: str | None = None,
    ) -> bool:
        """Record a failed settlement; returns whether it was current."""
        current = self.is_current(sequence)
        reason = reason or _error_reason(error)
        self._metrics.record_latency(self.operation, "error", latency_ms)
        self._metrics.inc_error(self.operation, reason)
        self._call_logger.log_settle(
            self.operation,
            sequence,
            "error",
            latency_ms,
            stale=not current,
            error_reason=error.message,
        )
        if current:
            self._phase = LifecyclePhase.ERROR
            self._error = error.message
            self._result = None
        return current

    async def run(self, call: Callable[[], Awaitable[T]]) -> Settlement[T]:
        """Issue a boundary call under this lifecycle.

        SyncError failures settle the lifecycle to error and are returned in
        the Settlement rather than raised. Any other exception also settles
        to error (with the generic network message) and then propagates.
        """
        sequence = self.begin()
        start_time = time.monotonic()

        try:
            value = await call()
        except SyncError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            current = self.settle_error(sequence, e, elapsed_ms)
            return Settlement(
                operation=self.operation, sequence=sequence, error=e, current=current
            )
        except Exception as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error(f"{self.operation} call #{sequence} raised unexpectedly: {e!r}")
            self.settle_error(
                sequence, TransportError(NETWORK_ERROR_MESSAGE), elapsed_ms, reason="unexpected"
            )
            raise

        elapsed_ms = (time.monotonic() - start_time) * 1000
        current = self.settle_success(sequence, value, elapsed_ms)
        return Settlement(operation=self.operation, sequence=sequence, value=value, current=current)


def _error_reason(error: SyncError) -> str:
    if isinstance(error, TransportError):
        return "transport"
    if isinstance(error, RemoteError):
        return "remote"
    return "error"
