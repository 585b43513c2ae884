"""Per-connection outbound queues so a slow socket only delays itself."""

import asyncio
import logging
from typing import Any

from app.services.connection_registry import ConnectionHandle

logger = logging.getLogger(__name__)


async def safe_send(handle: ConnectionHandle, event: str, data: Any) -> bool:
    """Send one event, treating a failed delivery as best-effort loss."""
    try:
        await handle.send(event, data)
    except Exception as exc:
        logger.debug("Dropped %s event for closed connection: %s", event, exc)
        return False
    return True


class Outbox:
    """Queue outbound events per connection, each queue drained by its own task.

    ``post`` never waits on the transport. Frames for one connection keep
    their order; a connection whose queue is full loses the new frame.
    """

    def __init__(self, max_pending: int = 256) -> None:
        self.max_pending = max_pending
        self._queues: dict[ConnectionHandle, asyncio.Queue] = {}
        self._writers: dict[ConnectionHandle, asyncio.Task] = {}

    def post(self, handle: ConnectionHandle, event: str, data: Any) -> bool:
        """Queue one event for a connection. Returns False if it was dropped."""
        queue = self._queues.get(handle)
        if queue is None:
            queue = asyncio.Queue(maxsize=self.max_pending)
            self._queues[handle] = queue
            self._writers[handle] = asyncio.create_task(
                self._drain(handle, queue),
                name=f"outbox-{id(handle):x}",
            )
        try:
            queue.put_nowait((event, data))
        except asyncio.QueueFull:
            logger.warning("Outbound queue full; dropping %s event for %r", event, handle)
            return False
        return True

    def pending(self, handle: ConnectionHandle) -> int:
        queue = self._queues.get(handle)
        return queue.qsize() if queue is not None else 0

    def discard(self, handle: ConnectionHandle) -> None:
        """Stop writing to a closed connection and drop its queued frames."""
        writer = self._writers.pop(handle, None)
        queue = self._queues.pop(handle, None)
        if writer is not None:
            writer.cancel()
        if queue is not None:
            while not queue.empty():
                queue.get_nowait()
                queue.task_done()

    async def flush(self) -> None:
        """Wait until every queued frame has been handed to its transport."""
        await asyncio.gather(*(queue.join() for queue in list(self._queues.values())))

    def close(self) -> None:
        for handle in list(self._queues):
            self.discard(handle)

    async def _drain(self, handle: ConnectionHandle, queue: asyncio.Queue) -> None:
        while True:
            event, data = await queue.get()
            try:
                await safe_send(handle, event, data)
            finally:
                queue.task_done()
