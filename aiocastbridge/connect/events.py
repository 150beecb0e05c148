"""Event stream implementation for playback engines."""

from __future__ import annotations

import asyncio
import logging

from aiocastbridge.models.types import PlaybackEvent

logger = logging.getLogger(__name__)


class PlaybackEventChannel:
    """
    Unbounded, ordered channel of playback events.

    Backends send events from the event loop with :meth:`send` or from their
    own threads with :meth:`send_threadsafe`. :meth:`recv` returns None once the
    channel has been closed and every queued event was received.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Initialize the channel, bound to the running loop unless one is given."""
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
        self._loop = loop
        self._queue: asyncio.Queue[PlaybackEvent | None] = asyncio.Queue()
        self._closed = False
        self._drained = False

    @property
    def closed(self) -> bool:
        """Whether close() was called."""
        return self._closed

    def send(self, event: PlaybackEvent) -> bool:
        """Queue an event, returning False if the channel is closed."""
        if self._closed:
            logger.debug("Dropping %s sent on closed channel", type(event).__name__)
            return False
        self._queue.put_nowait(event)
        return True

    def send_threadsafe(self, event: PlaybackEvent) -> None:
        """Queue an event from a thread other than the event loop's."""
        if self._loop is None:
            raise RuntimeError("Channel is not bound to an event loop")
        self._loop.call_soon_threadsafe(self.send, event)

    def close(self) -> None:
        """End the stream after the events already queued."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def recv(self) -> PlaybackEvent | None:
        """Wait for the next event, None once the channel is closed and drained."""
        if self._drained:
            return None
        event = await self._queue.get()
        if event is None:
            self._drained = True
        return event

    def __aiter__(self) -> PlaybackEventChannel:
        return self

    async def __anext__(self) -> PlaybackEvent:
        event = await self.recv()
        if event is None:
            raise StopAsyncIteration
        return event
