"""Application context wiring the controller, coordinator and tracker together."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .config import BridgeConfig
from .connect.backend import BackendFactory, Credentials, StreamingBackend, StreamingSession
from .connect.controller import SessionController
from .connect.volume import VolumeChangeCallback
from .errors import ConfigurationError
from .util import import_from_path
from .voice.coordinator import EventCoordinator
from .voice.presence import PresenceTracker
from .voice.transport import MembershipLookup, StatusPublisher, VoiceTransport

logger = logging.getLogger(__name__)


def load_backend(config: BridgeConfig) -> StreamingBackend:
    """Create the streaming backend named by ``config.backend``."""
    factory: BackendFactory = import_from_path(config.backend)
    if not callable(factory):
        raise ConfigurationError(f"Backend {config.backend!r} is not callable")
    logger.debug("Creating streaming backend %s", config.backend)
    return factory(config)


async def connect_session(config: BridgeConfig, backend: StreamingBackend) -> StreamingSession:
    """Authenticate with the streaming service."""
    credentials = Credentials(config.streaming_username, config.streaming_password)
    logger.info("Connecting to the streaming service as %s", credentials.username)
    return await backend.connect(credentials, cache_dir=config.cache_dir)


def load_volume_hook(config: BridgeConfig) -> VolumeChangeCallback | None:
    """Import the callback named by ``config.device.volume_hook``, if any."""
    if config.device.volume_hook is None:
        return None
    hook = import_from_path(config.device.volume_hook)
    if not callable(hook):
        raise ConfigurationError(f"Volume hook {config.device.volume_hook!r} is not callable")
    return hook


def create_controller(
    config: BridgeConfig, backend: StreamingBackend, session: StreamingSession
) -> SessionController:
    """Create the session controller for a configuration."""
    return SessionController(
        backend,
        session,
        player_config=config.player,
        audio_config=config.audio,
        volume_policy=config.device.volume_policy,
        volume_range_db=config.device.volume_range_db,
        on_external_volume=load_volume_hook(config),
    )


@dataclass
class BridgeContext:
    """
    Everything the event handlers need, built once the guild is known.

    Handlers receive this object explicitly instead of looking state up in a
    global registry.
    """

    config: BridgeConfig
    controller: SessionController
    transport: VoiceTransport
    status: StatusPublisher
    guild_id: int
    lookup_channel: MembershipLookup
    coordinator: EventCoordinator = field(init=False)
    tracker: PresenceTracker = field(init=False)

    def __post_init__(self) -> None:
        """Create the coordinator and tracker."""
        self.coordinator = EventCoordinator(
            self.controller,
            self.transport,
            self.status,
            guild_id=self.guild_id,
            watched_user_id=self.config.watched_user_id,
            lookup_channel=self.lookup_channel,
            voice_bitrate=self.config.voice_bitrate,
        )
        self.tracker = PresenceTracker(
            self.controller,
            self.transport,
            guild_id=self.guild_id,
            watched_user_id=self.config.watched_user_id,
            device=self.config.device,
        )

    async def start(self) -> None:
        """Start the coordinator and enable casting if the user is already in voice."""
        self.coordinator.start()
        await self.tracker.sync_initial(self.lookup_channel(self.config.watched_user_id))

    async def close(self) -> None:
        """Stop the coordinator and shut the connect session down."""
        await self.coordinator.stop()
        await self.controller.close()
