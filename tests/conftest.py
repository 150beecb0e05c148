from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import pytest

from aiocastbridge.audio.bridge import ByteBridge
from aiocastbridge.connect.backend import ConnectConfig, Credentials
from aiocastbridge.connect.controller import SessionController
from aiocastbridge.connect.events import PlaybackEventChannel
from aiocastbridge.connect.volume import VolumePolicy
from aiocastbridge.errors import MetadataLookupError
from aiocastbridge.models.events import StoppedEvent
from aiocastbridge.models.metadata import Artist, Track


class FakeSession:
    def __init__(self) -> None:
        self.tracks: dict[str, Track] = {
            "track-1": Track(track_id="track-1", name="Song", artist_ids=["artist-1"]),
            "track-2": Track(track_id="track-2", name="Other Song", artist_ids=["artist-2"]),
            "track-solo": Track(track_id="track-solo", name="Nobody's", artist_ids=[]),
        }
        self.artists: dict[str, Artist] = {
            "artist-1": Artist(artist_id="artist-1", name="Artist"),
        }

    async def get_track(self, track_id: str) -> Track:
        if track_id not in self.tracks:
            raise MetadataLookupError(track_id, "not found")
        return self.tracks[track_id]

    async def get_artist(self, artist_id: str) -> Artist:
        if artist_id not in self.artists:
            raise MetadataLookupError(artist_id, "not found")
        return self.artists[artist_id]


class FakeEngine:
    def __init__(self, sink_factory, events: PlaybackEventChannel) -> None:
        self.sink_factory = sink_factory
        self.events = events


class FakeConnectHandle:
    def __init__(self, backend: FakeBackend, number: int) -> None:
        self._backend = backend
        self.number = number
        self.shutdown_calls = 0
        self.stop_event = asyncio.Event()
        self.error: Exception | None = None

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        self._backend.log.append(f"shutdown {self.number}")
        self.stop_event.set()

    def finish(self, error: Exception | None = None) -> None:
        """End the protocol loop without a shutdown request."""
        self.error = error
        self.stop_event.set()


class FakeBackend:
    def __init__(self) -> None:
        self.log: list[str] = []
        self.engines: list[FakeEngine] = []
        self.channels: list[PlaybackEventChannel] = []
        self.handles: list[FakeConnectHandle] = []
        self.connect_configs: list[ConnectConfig] = []
        self.volumes: list[VolumePolicy] = []

    async def connect(self, credentials: Credentials, *, cache_dir: str | None = None) -> FakeSession:
        return FakeSession()

    def new_playback_engine(self, config, session, sink_factory):
        channel = PlaybackEventChannel()
        engine = FakeEngine(sink_factory, channel)
        self.engines.append(engine)
        self.channels.append(channel)
        return engine, channel

    def open_connect(self, config, session, engine, volume):
        handle = FakeConnectHandle(self, len(self.handles) + 1)
        self.handles.append(handle)
        self.connect_configs.append(config)
        self.volumes.append(volume)
        self.log.append(f"open {handle.number}")

        async def _protocol_loop() -> None:
            await handle.stop_event.wait()
            if handle.shutdown_calls:
                engine.events.send(StoppedEvent())
            engine.events.close()
            self.log.append(f"ended {handle.number}")
            if handle.error is not None:
                raise handle.error

        return handle, _protocol_loop()


class FakeTransport:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.fail_join = False

    async def join(self, guild_id: int, channel_id: int) -> None:
        if self.fail_join:
            raise RuntimeError("voice gateway unavailable")
        self.calls.append(("join", guild_id, channel_id))

    async def leave(self, guild_id: int) -> None:
        self.calls.append(("leave", guild_id))

    def set_bitrate(self, kbps: int | None) -> None:
        self.calls.append(("bitrate", kbps))

    def play_source(self, guild_id: int, bridge: ByteBridge) -> None:
        self.calls.append(("play", guild_id, bridge))


class FakeStatus:
    def __init__(self) -> None:
        self.history: list[str | None] = []
        self.fail = False

    @property
    def current(self) -> str | None:
        return self.history[-1] if self.history else None

    async def set_status(self, activity: str | None, *, online: bool = True) -> None:
        if self.fail:
            raise RuntimeError("presence update rejected")
        self.history.append(activity)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def status() -> FakeStatus:
    return FakeStatus()


@pytest.fixture
def controller(backend: FakeBackend, session: FakeSession) -> SessionController:
    return SessionController(backend, session)


@pytest.fixture
def wait_until() -> Callable[[Callable[[], bool]], Awaitable[None]]:
    async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        async def _poll() -> None:
            while not predicate():
                await asyncio.sleep(0.005)

        await asyncio.wait_for(_poll(), timeout=timeout)

    return _wait_until
