"""
Interfaces of the streaming service collaborators.

The streaming protocol, its authentication and the connect protocol loop are
provided by a backend; aiocastbridge only depends on the shapes below. A backend
is any object implementing :class:`StreamingBackend`, named in the configuration
as ``module:attribute`` (a factory called with the :class:`BridgeConfig`).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from aiocastbridge.models.types import MAX_VOLUME, DeviceType, VolumeCurve

if TYPE_CHECKING:
    from aiocastbridge.audio.sink import BridgeSink
    from aiocastbridge.config import BridgeConfig, PlayerConfig
    from aiocastbridge.models.metadata import Artist, Track
    from aiocastbridge.models.types import PlaybackEvent

    from .volume import VolumePolicy


@dataclass(frozen=True)
class Credentials:
    """Credentials for the streaming service."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class ConnectConfig:
    """How the connect session presents this process to remote controllers."""

    name: str
    """Device display name."""
    device_type: DeviceType
    initial_volume: int
    """Initial volume, range 0-65535."""
    volume_curve: VolumeCurve
    autoplay: bool = True

    def __post_init__(self) -> None:
        """Validate field values."""
        if not 0 <= self.initial_volume <= MAX_VOLUME:
            raise ValueError(f"initial_volume must be in range 0-65535, got {self.initial_volume}")


# Factory called by the playback engine whenever it opens its audio output.
SinkFactory = Callable[[], "BridgeSink"]


class StreamingSession(Protocol):
    """Authenticated session with the streaming service."""

    async def get_track(self, track_id: str) -> Track:
        """Resolve track metadata, raising MetadataLookupError on failure."""

    async def get_artist(self, artist_id: str) -> Artist:
        """Resolve artist metadata, raising MetadataLookupError on failure."""


class PlaybackEventStream(Protocol):
    """Ordered stream of playback events of one playback engine."""

    async def recv(self) -> PlaybackEvent | None:
        """Wait for the next event, None once the stream has ended."""


class ConnectHandle(Protocol):
    """Handle of a running connect session."""

    def shutdown(self) -> None:
        """Request the protocol loop to exit; returns without waiting."""


class StreamingBackend(Protocol):
    """Factories for sessions, playback engines and connect sessions."""

    async def connect(
        self, credentials: Credentials, *, cache_dir: str | None = None
    ) -> StreamingSession:
        """Authenticate and return a session."""

    def new_playback_engine(
        self,
        config: PlayerConfig,
        session: StreamingSession,
        sink_factory: SinkFactory,
    ) -> tuple[Any, PlaybackEventStream]:
        """Create a playback engine writing to sinks from ``sink_factory``."""

    def open_connect(
        self,
        config: ConnectConfig,
        session: StreamingSession,
        engine: Any,
        volume: VolumePolicy,
    ) -> tuple[ConnectHandle, Awaitable[None]]:
        """Open a connect session, returning its handle and protocol loop."""


# Factory named by BridgeConfig.backend.
BackendFactory = Callable[["BridgeConfig"], StreamingBackend]
