"""Priority queue that plays speech requests one at a time."""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .tts.models import Priority

logger = logging.getLogger(__name__)


@dataclass
class SpeechRequest:
    """Queued speech request with metadata."""

    text: str
    priority: Priority = Priority.NORMAL
    interrupt: bool = False
    silent: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    future: asyncio.Future | None = field(default=None, repr=False, compare=False)


class SpeechQueue:
    """Serializes speech requests so audio never overlaps.

    High priority requests jump to the front of the queue; everything else is
    first come, first served. Draining starts on the next event loop turn, so
    requests submitted together are ordered by priority before the first one
    is taken.
    """

    def __init__(self, processor: Callable[[SpeechRequest], Awaitable[Any]]) -> None:
        """Initialize the queue.

        Args:
            processor: Coroutine function that fully handles one request
        """
        self._processor = processor
        self._items: list[SpeechRequest] = []
        self._drain_task: asyncio.Task[None] | None = None
        self.current: SpeechRequest | None = None
        self.is_playing = False

    def __len__(self) -> int:
        return len(self._items)

    def submit(self, request: SpeechRequest) -> asyncio.Future:
        """Add a request and make sure the queue is being drained.

        Args:
            request: Request to enqueue

        Returns:
            Future resolved with the processor's result or exception
        """
        loop = asyncio.get_running_loop()
        request.future = loop.create_future()

        if request.priority == Priority.HIGH:
            self._items.insert(0, request)
        else:
            self._items.append(request)
        logger.debug(
            f"Queued {request.priority.value} request {request.id} "
            f"({len(self._items)} waiting)"
        )

        if not self.is_playing and (self._drain_task is None or self._drain_task.done()):
            self._drain_task = asyncio.create_task(self._drain())
        return request.future

    async def _drain(self) -> None:
        if self.is_playing:
            return
        self.is_playing = True
        try:
            while self._items:
                request = self._items.pop(0)
                self.current = request
                try:
                    result = await self._processor(request)
                except asyncio.CancelledError:
                    if request.future is not None and not request.future.done():
                        request.future.cancel()
                    self.clear()
                    raise
                except Exception as e:
                    logger.error(f"Error processing speech request {request.id}: {e}")
                    if not request.future.done():
                        request.future.set_exception(e)
                else:
                    if not request.future.done():
                        request.future.set_result(result)
                finally:
                    self.current = None
        finally:
            self.is_playing = False

    def clear(self) -> int:
        """Drop every waiting request, cancelling their futures.

        Returns:
            Number of requests dropped
        """
        dropped = len(self._items)
        for request in self._items:
            if request.future is not None and not request.future.done():
                request.future.cancel()
        self._items.clear()
        if dropped:
            logger.debug(f"Cleared {dropped} queued requests")
        return dropped

    def status(self) -> dict[str, Any]:
        """Return current queue status information."""
        return {
            "queue_size": len(self._items),
            "is_playing": self.is_playing,
            "current": self._format_item(self.current) if self.current else None,
            "waiting": [self._format_item(item) for item in self._items],
        }

    def _format_item(self, item: SpeechRequest) -> dict[str, Any]:
        truncated = item.text[:50] + "..." if len(item.text) > 50 else item.text
        return {
            "id": item.id,
            "text": truncated,
            "priority": item.priority.value,
            "timestamp": item.timestamp.isoformat(),
        }
