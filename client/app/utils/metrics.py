"""Prometheus metrics for boundary calls and write-behind field updates."""

from prometheus_client import Counter, Histogram

boundary_call_latency_ms = Histogram(
    "boundary_call_latency_ms",
    "PDF API boundary call latency in milliseconds",
    ["operation", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

boundary_call_errors_total = Counter(
    "boundary_call_errors_total",
    "Total failed PDF API boundary calls",
    ["operation", "reason"],
)

debounced_writes_total = Counter(
    "debounced_writes_total",
    "Total debounced field writes issued",
    ["field", "outcome"],
)

debounced_writes_superseded_total = Counter(
    "debounced_writes_superseded_total",
    "Total field values discarded because a newer value arrived",
    ["field"],
)


class SyncMetrics:
    """Interface for sync metrics (no-op default)."""

    def record_latency(self, operation: str, outcome: str, latency_ms: float) -> None:
        """Record boundary call latency."""
        pass

    def inc_error(self, operation: str, reason: str) -> None:
        """Increment boundary call error counter."""
        pass

    def inc_write(self, field: str, outcome: str) -> None:
        """Increment debounced write counter."""
        pass

    def inc_superseded(self, field: str) -> None:
        """Increment superseded value counter."""
        pass


class PrometheusSyncMetrics(SyncMetrics):
    """Prometheus-based sync metrics implementation."""

    def record_latency(self, operation: str, outcome: str, latency_ms: float) -> None:
        """Record boundary call latency."""
        boundary_call_latency_ms.labels(operation=operation, outcome=outcome).observe(latency_ms)

    def inc_error(self, operation: str, reason: str) -> None:
        """Increment boundary call error counter."""
        boundary_call_errors_total.labels(operation=operation, reason=reason).inc()

    def inc_write(self, field: str, outcome: str) -> None:
        """Increment debounced write counter."""
        debounced_writes_total.labels(field=field, outcome=outcome).inc()

    def inc_superseded(self, field: str) -> None:
        """Increment superseded value counter."""
        debounced_writes_superseded_total.labels(field=field).inc()
