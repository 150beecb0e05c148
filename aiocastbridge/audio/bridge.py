"""Bounded byte hand-off between the playback engine and the voice player."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from functools import partial

from aiocastbridge.errors import BridgeClosedError

logger = logging.getLogger(__name__)

# One 20 ms frame of 48 kHz float32 stereo
DEFAULT_CAPACITY = 7680


class ByteBridge:
    """
    Bounded, ordered FIFO of bytes with blocking push and blocking pull.

    The producer (the playback engine's sink) and the consumer (the voice
    player's read loop) run on independent threads; this bridge is the only
    point where they synchronize. At most ``capacity`` bytes are buffered at
    any time: ``push`` blocks while the buffer is full and ``pull`` blocks
    until it has collected the requested number of bytes. Bytes are never
    dropped, duplicated or reordered.

    Exactly one producer and one consumer may use a bridge at a time.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """
        Initialize the bridge.

        Args:
            capacity: Maximum number of buffered bytes.
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._buffer = bytearray()
        self._cond = threading.Condition()
        self._closed = False
        self._total_pushed = 0
        self._total_pulled = 0

    @property
    def capacity(self) -> int:
        """Maximum number of buffered bytes."""
        return self._capacity

    @property
    def buffered(self) -> int:
        """Bytes currently buffered and not yet pulled."""
        with self._cond:
            return len(self._buffer)

    @property
    def closed(self) -> bool:
        """Whether close() was called."""
        return self._closed

    @property
    def total_pushed(self) -> int:
        """Bytes accepted by push() since creation."""
        return self._total_pushed

    @property
    def total_pulled(self) -> int:
        """Bytes returned by pull() since creation."""
        return self._total_pulled

    def push(self, data: bytes | bytearray | memoryview, timeout: float | None = None) -> None:
        """
        Append bytes in order, blocking while the bridge is full.

        Args:
            data: Bytes to append.
            timeout: Seconds to wait for free space before giving up, None waits forever.

        Raises:
            BridgeClosedError: If the bridge is or becomes closed before all bytes
                were appended.
            TimeoutError: If no space freed up within ``timeout``. The bytes
                appended before the timeout stay in the bridge.
        """
        view = memoryview(data).cast("B")
        deadline = None if timeout is None else time.monotonic() + timeout
        offset = 0
        with self._cond:
            while offset < len(view):
                if self._closed:
                    raise BridgeClosedError(
                        f"Bridge closed after {offset} of {len(view)} bytes were pushed"
                    )
                space = self._capacity - len(self._buffer)
                if space == 0:
                    remaining = None if deadline is None else deadline - time.monotonic()
                    if remaining is not None and remaining <= 0:
                        raise TimeoutError(
                            f"Bridge full, {offset} of {len(view)} bytes were pushed"
                        )
                    self._cond.wait(remaining)
                    continue
                chunk = view[offset : offset + space]
                self._buffer.extend(chunk)
                offset += len(chunk)
                self._total_pushed += len(chunk)
                self._cond.notify_all()

    def pull(self, count: int, timeout: float | None = None) -> bytes:
        """
        Remove and return exactly ``count`` bytes in push order.

        ``count`` may exceed the capacity; bytes are collected as the producer
        supplies them. The result is shorter than ``count`` only when the bridge
        is closed, in which case the remaining buffered bytes are drained.

        Args:
            count: Number of bytes to return.
            timeout: Seconds to wait for the first byte, None waits forever.
                Once a byte has been taken the pull completes regardless.

        Raises:
            TimeoutError: If no byte arrived within ``timeout``. No bytes are consumed.
        """
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        deadline = None if timeout is None else time.monotonic() + timeout
        out = bytearray()
        with self._cond:
            while len(out) < count:
                if self._buffer:
                    take = min(count - len(out), len(self._buffer))
                    out += self._buffer[:take]
                    del self._buffer[:take]
                    self._total_pulled += take
                    self._cond.notify_all()
                    continue
                if self._closed:
                    break
                remaining = None
                if deadline is not None and not out:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise TimeoutError(f"No audio available within {timeout}s")
                self._cond.wait(remaining)
        return bytes(out)

    def close(self) -> None:
        """Close the bridge and wake up any blocked producer or consumer."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()
        logger.debug(
            "Bridge closed: %d bytes pushed, %d pulled, %d left",
            self._total_pushed,
            self._total_pulled,
            len(self._buffer),
        )

    async def push_async(self, data: bytes, timeout: float | None = None) -> None:
        """Run push() in the default executor."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, partial(self.push, data, timeout))

    async def pull_async(self, count: int, timeout: float | None = None) -> bytes:
        """Run pull() in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self.pull, count, timeout))
