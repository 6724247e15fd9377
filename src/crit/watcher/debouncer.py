"""Change debouncing for rapid edits."""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Set

from ..models import WatchEvent

logger = logging.getLogger(__name__)

BatchHandler = Callable[[List[WatchEvent]], Any]

DEFAULT_DEBOUNCE_SECONDS = 0.1


class ChangeBatcher:
    """
    Debounce rapid file changes into batches.

    PATTERN: Batch rapid changes with a fixed window, last write wins per path
    CRITICAL: Must run on the event loop thread; no locking is done
    GOTCHA: Coroutine handlers are scheduled as tasks, not awaited inline
    """

    def __init__(
        self,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        handler: Optional[BatchHandler] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Initialize batcher.

        Args:
            debounce_seconds: Quiet period before a batch is flushed
            handler: Function to call with each flushed batch
            loop: Event loop used for the timer (default: the running loop)
        """
        self.debounce_seconds = debounce_seconds
        self._handler = handler
        self._loop = loop

        self._pending: Dict[str, WatchEvent] = {}
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Future] = set()
        self._closed = False

    @property
    def pending_count(self) -> int:
        """Number of distinct paths waiting to be flushed."""
        return len(self._pending)

    @property
    def has_timer(self) -> bool:
        return self._timer is not None

    def set_handler(self, handler: Optional[BatchHandler]) -> None:
        """Register the batch handler. The last registration wins."""
        self._handler = handler

    def enqueue(self, event: WatchEvent) -> None:
        """
        Queue an event, replacing any queued event for the same path.

        Args:
            event: Classified watch event
        """
        if self._closed:
            return

        self._pending[event.path] = event

        # Reset timer
        if self._timer:
            self._timer.cancel()

        loop = self._loop or asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_seconds, self.flush)

    def flush(self) -> List[WatchEvent]:
        """
        Remove all queued events and deliver them as one batch.

        Returns:
            The events that were flushed
        """
        events = list(self._pending.values())
        self._pending.clear()

        if self._timer:
            self._timer.cancel()
            self._timer = None

        if events and self._handler and not self._closed:
            self._deliver(events)

        return events

    def _deliver(self, events: List[WatchEvent]) -> None:
        try:
            result = self._handler(events)
        except Exception as e:
            logger.error(f"Error in batch handler: {e}", exc_info=True)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result, loop=self._loop)
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Error in batch handler: {error}", exc_info=error)

    def clear(self) -> None:
        """Cancel the pending timer and discard queued events undelivered."""
        if self._timer:
            self._timer.cancel()
            self._timer = None
        self._pending.clear()

    def close(self) -> None:
        """Clear and refuse any further events."""
        self._closed = True
        self.clear()
        for task in list(self._tasks):
            task.cancel()

    async def drain(self) -> None:
        """Wait for handler tasks already started by earlier flushes."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
