"""Debounced write-behind channel for document field edits.

Each (document id, field) key has at most one pending timer. A new value for
the same key cancels the pending timer and starts a fresh one, so only the last
value of a burst is written. Keys are independent of each other.

Writes are fire-and-forget: failures are logged and counted, never raised.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from client.app.api.errors import SyncError
from client.app.config import get_settings
from client.app.models.documents import DocumentId
from client.app.utils.metrics import SyncMetrics

logger = logging.getLogger(__name__)

FieldKey = tuple[DocumentId, str]
FieldWriter = Callable[[DocumentId, str, Any], Awaitable[None]]


class ChannelClosedError(RuntimeError):
    """Enqueue attempted after the channel was torn down."""

    pass


@dataclass
class _PendingWrite:
    task: asyncio.Task[None]
    payload: Any


class DebouncedMutationChannel:
    """Coalesces rapid field edits into one remote write per key."""

    def __init__(
        self,
        write: FieldWriter,
        delay_ms: int | None = None,
        metrics: SyncMetrics | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize channel.

        Args:
            write: Coroutine issuing the remote field update
            delay_ms: Quiet period per key (default: settings.update_debounce_ms)
            metrics: Metrics recorder (optional, defaults to no-op)
            sleep_fn: Injectable sleep function (default: asyncio.sleep)
        """
        if delay_ms is None:
            delay_ms = get_settings().update_debounce_ms
        self._delay_seconds = max(0, delay_ms) / 1000
        self._write = write
        self._metrics = metrics or SyncMetrics()
        self._sleep = sleep_fn or asyncio.sleep
        self._pending: dict[FieldKey, _PendingWrite] = {}
        self._in_flight: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    @property
    def pending_keys(self) -> list[FieldKey]:
        """Keys with a value waiting for its timer."""
        return list(self._pending)

    def pending_payload(self, key: FieldKey) -> Any | None:
        entry = self._pending.get(key)
        return entry.payload if entry else None

    @property
    def is_idle(self) -> bool:
        return not self._pending and not self._in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    def enqueue(self, key: FieldKey, payload: Any) -> None:
        """Schedule a write of payload for key, replacing any pending value.

        Must be called from within a running event loop.

        Raises:
            ChannelClosedError: If the channel has been closed
        """
        if self._closed:
            raise ChannelClosedError("mutation channel is closed")

        previous = self._pending.pop(key, None)
        if previous is not None:
            previous.task.cancel()
            self._metrics.inc_superseded(key[1])

        task = asyncio.get_running_loop().create_task(self._fire_after_delay(key, payload))
        self._pending[key] = _PendingWrite(task=task, payload=payload)

    async def _fire_after_delay(self, key: FieldKey, payload: Any) -> None:
        await self._sleep(self._delay_seconds)

        # Timer fired: detach from pending so a later enqueue cannot cancel the write
        entry = self._pending.get(key)
        if entry is not None and entry.task is asyncio.current_task():
            del self._pending[key]

        task = asyncio.current_task()
        if task is not None:
            self._in_flight.add(task)
        try:
            await self._write_once(key, payload)
        finally:
            if task is not None:
                self._in_flight.discard(task)

    async def _write_once(self, key: FieldKey, payload: Any) -> None:
        doc_id, field = key
        try:
            await self._write(doc_id, field, payload)
        except SyncError as e:
            logger.warning(
                f"Background write of '{field}' for document {doc_id} failed: {e.message}"
            )
            self._metrics.inc_write(field, "error")
            return
        except Exception:
            logger.exception(f"Unexpected failure writing '{field}' for document {doc_id}")
            self._metrics.inc_write(field, "error")
            return

        logger.debug(f"Persisted '{field}' for document {doc_id}")
        self._metrics.inc_write(field, "success")

    def discard(self, doc_id: DocumentId) -> int:
        """Drop every pending (not yet fired) write for one document.

        Returns:
            Number of writes dropped
        """
        keys = [key for key in self._pending if key[0] == doc_id]
        for key in keys:
            self._pending.pop(key).task.cancel()
        if keys:
            logger.debug(f"Dropped {len(keys)} pending write(s) for document {doc_id}")
        return len(keys)

    async def flush(self) -> None:
        """Write every pending value now instead of waiting for its timer."""
        entries = list(self._pending.items())
        self._pending.clear()
        for _, entry in entries:
            entry.task.cancel()

        if entries:
            logger.debug(f"Flushing {len(entries)} pending field write(s)")
        await asyncio.gather(*(self._write_once(key, entry.payload) for key, entry in entries))

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and no write is in flight."""
        while self._pending or self._in_flight:
            tasks = [entry.task for entry in self._pending.values()] + list(self._in_flight)
            await asyncio.gather(*tasks, return_exceptions=True)

    async def aclose(self) -> None:
        """Tear down the channel; pending (not yet fired) writes are dropped."""
        self._closed = True
        dropped = list(self._pending.values())
        self._pending.clear()
        for entry in dropped:
            entry.task.cancel()
        if dropped:
            logger.info(f"Dropped {len(dropped)} pending field write(s) on close")

        # Writes already issued are allowed to finish
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
