"""Lifecycle of the connect session and its audio pipeline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress
from dataclasses import dataclass
from typing import Any

from aiocastbridge.audio.bridge import ByteBridge
from aiocastbridge.audio.encoder import SampleEncoder
from aiocastbridge.audio.sink import BridgeSink
from aiocastbridge.config import AudioConfig, PlayerConfig
from aiocastbridge.models.types import DeviceType, VolumeCurve, VolumePolicyType

from .backend import (
    ConnectConfig,
    ConnectHandle,
    PlaybackEventStream,
    StreamingBackend,
    StreamingSession,
)
from .volume import VolumeChangeCallback, VolumePolicy, create_volume_policy

logger = logging.getLogger(__name__)


class SessionEvent:
    """Base event type used by SessionController.add_event_listener()."""


@dataclass
class SessionEnabledEvent(SessionEvent):
    """A connect session was opened."""

    generation: int
    device_name: str


@dataclass
class SessionDisabledEvent(SessionEvent):
    """Shutdown of a connect session was requested."""

    generation: int


@dataclass
class SessionEndedEvent(SessionEvent):
    """The protocol loop of a connect session returned."""

    generation: int
    error: BaseException | None = None
    """Exception raised by the protocol loop, None when it exited cleanly."""


@dataclass
class _ActiveSession:
    """Everything created by one enable() call."""

    generation: int
    handle: ConnectHandle
    task: asyncio.Task[None]
    bridge: ByteBridge
    sink: BridgeSink
    events: PlaybackEventStream
    volume: VolumePolicy
    engine: Any


class SessionController:
    """
    Owns the connect session and the audio pipeline behind it.

    Every enable() builds a fresh byte bridge, sink and playback engine, opens a
    connect session and runs its protocol loop in a background task. The event
    stream of the newest engine replaces the previous one; consumers wait on
    :meth:`wait_for_stream` instead of polling for it.

    Only one session is live at a time: enabling while a session is live first
    disables it and waits for its protocol loop to exit.
    """

    _active: _ActiveSession | None = None
    """Session created by the last enable(), None when disabled."""
    _bridge: ByteBridge | None = None
    """Bridge of the newest session, kept after disable so buffered audio drains."""
    _event_stream: PlaybackEventStream | None = None
    """Event stream of the newest playback engine, replaced on every enable()."""
    _generation: int = 0
    """Incremented on every enable()."""
    _event_cbs: list[Callable[[SessionController, SessionEvent], None]]

    def __init__(
        self,
        backend: StreamingBackend,
        session: StreamingSession,
        *,
        player_config: PlayerConfig | None = None,
        audio_config: AudioConfig | None = None,
        volume_policy: VolumePolicyType = VolumePolicyType.FIXED,
        volume_range_db: float = 60.0,
        on_external_volume: VolumeChangeCallback | None = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            backend: Factories for playback engines and connect sessions.
            session: Authenticated streaming session shared by all connect sessions.
            player_config: Settings for new playback engines.
            audio_config: Sample conversion and bridge settings.
            volume_policy: Volume control handed to new connect sessions.
            volume_range_db: Range of the logarithmic volume curve.
            on_external_volume: Callback for the external volume policy.
        """
        self._backend = backend
        self._session = session
        self._player_config = player_config or PlayerConfig()
        self._audio_config = audio_config or AudioConfig()
        self._volume_policy = volume_policy
        self._volume_range_db = volume_range_db
        self._on_external_volume = on_external_volume
        self._lock = asyncio.Lock()
        self._stream_cond = asyncio.Condition()
        self._event_cbs = []

    @property
    def session(self) -> StreamingSession:
        """The authenticated streaming session."""
        return self._session

    @property
    def enabled(self) -> bool:
        """Whether a connect session is live."""
        return self._active is not None

    @property
    def bridge(self) -> ByteBridge | None:
        """Byte bridge of the newest session."""
        return self._bridge

    @property
    def event_stream(self) -> PlaybackEventStream | None:
        """Event stream of the newest playback engine."""
        return self._event_stream

    @property
    def generation(self) -> int:
        """Number of enable() calls so far."""
        return self._generation

    @property
    def volume(self) -> VolumePolicy | None:
        """Volume policy of the live session."""
        return self._active.volume if self._active is not None else None

    async def enable(
        self,
        device_name: str,
        device_type: DeviceType,
        initial_volume: int,
        volume_curve: VolumeCurve,
        *,
        autoplay: bool = True,
    ) -> None:
        """
        Open a new connect session and start its protocol loop.

        Args:
            device_name: Name shown to remote controllers.
            device_type: Device type shown to remote controllers.
            initial_volume: Initial volume, range 0-65535.
            volume_curve: Curve mapping volume to gain.
            autoplay: Keep playing similar tracks when the queue ends.
        """
        config = ConnectConfig(
            name=device_name,
            device_type=device_type,
            initial_volume=initial_volume,
            volume_curve=volume_curve,
            autoplay=autoplay,
        )
        async with self._lock:
            if self._active is not None:
                logger.info("Replacing live connect session %d", self._active.generation)
                previous = self._disable_locked()
                if previous is not None:
                    self._signal_event(SessionDisabledEvent(previous.generation))
                    await asyncio.wait({previous.task})

            volume = create_volume_policy(
                self._volume_policy,
                initial_volume=initial_volume,
                curve=volume_curve,
                range_db=self._volume_range_db,
                on_change=self._on_external_volume,
            )
            bridge = ByteBridge(self._audio_config.bridge_capacity)
            sink = BridgeSink(
                bridge,
                SampleEncoder.from_config(self._audio_config),
                audio_filter=volume.audio_filter(),
            )
            engine, events = self._backend.new_playback_engine(
                self._player_config, self._session, lambda: sink
            )
            handle, protocol_loop = self._backend.open_connect(
                config, self._session, engine, volume
            )

            self._generation += 1
            generation = self._generation
            task = asyncio.create_task(
                self._run_session(generation, protocol_loop),
                name=f"connect-session-{generation}",
            )
            self._active = _ActiveSession(
                generation=generation,
                handle=handle,
                task=task,
                bridge=bridge,
                sink=sink,
                events=events,
                volume=volume,
                engine=engine,
            )
            self._bridge = bridge
            self._event_stream = events
            logger.info(
                "Enabled connect session %d as %r (%s)",
                generation,
                device_name,
                device_type.value,
            )

        async with self._stream_cond:
            self._stream_cond.notify_all()
        self._signal_event(SessionEnabledEvent(generation, device_name))

    async def disable(self) -> None:
        """
        Request shutdown of the live connect session.

        Does nothing when no session is live. Shutdown is cooperative: the
        protocol loop observes the request and exits on its own; it is not
        cancelled. The bridge is closed so that a producer blocked on a full
        bridge can unwind.
        """
        async with self._lock:
            previous = self._disable_locked()
        if previous is not None:
            self._signal_event(SessionDisabledEvent(previous.generation))

    def _disable_locked(self) -> _ActiveSession | None:
        active = self._active
        if active is None:
            logger.debug("No connect session to disable")
            return None
        logger.info("Disabling connect session %d", active.generation)
        self._active = None
        active.handle.shutdown()
        active.bridge.close()
        return active

    async def _run_session(self, generation: int, protocol_loop: Awaitable[None]) -> None:
        """Run a protocol loop and invalidate its session once it returns."""
        error: BaseException | None = None
        try:
            await protocol_loop
        except asyncio.CancelledError:
            raise
        except Exception as err:
            error = err
            logger.exception("Connect session %d failed", generation)
        finally:
            active = self._active
            if active is not None and active.generation == generation:
                logger.info("Connect session %d ended on its own", generation)
                self._active = None
                active.bridge.close()
            else:
                logger.debug("Connect session %d exited", generation)
        self._signal_event(SessionEndedEvent(generation, error))

    async def wait_for_stream(self, known_generation: int = 0) -> tuple[int, PlaybackEventStream]:
        """
        Wait until an event stream newer than ``known_generation`` exists.

        Returns:
            The generation and the event stream of the newest playback engine.
        """
        async with self._stream_cond:
            await self._stream_cond.wait_for(
                lambda: self._event_stream is not None and self._generation > known_generation
            )
            assert self._event_stream is not None
            return self._generation, self._event_stream

    async def close(self) -> None:
        """Disable the live session and wait for its protocol loop to exit."""
        active = self._active
        await self.disable()
        if active is not None:
            await asyncio.wait({active.task})

    def add_event_listener(
        self, callback: Callable[[SessionController, SessionEvent], None]
    ) -> Callable[[], None]:
        """
        Register a callback to listen for session lifecycle changes.

        Returns a function to remove the listener.
        """
        self._event_cbs.append(callback)

        def _remove() -> None:
            with suppress(ValueError):
                self._event_cbs.remove(callback)

        return _remove

    def _signal_event(self, event: SessionEvent) -> None:
        """Signal an event to all registered listeners."""
        for cb in self._event_cbs:
            try:
                cb(self, event)
            except Exception:
                logger.exception("Error in session event listener")
