"""Cast a streaming connect session into a Discord voice channel."""

from .app import BridgeContext
from .audio import BridgeSink, ByteBridge, SampleEncoder
from .config import BridgeConfig, load_config
from .connect import PlaybackEventChannel, SessionController
from .errors import (
    BridgeClosedError,
    CastBridgeError,
    ConfigurationError,
    EncodeError,
    MetadataLookupError,
)
from .voice import EventCoordinator, PresenceTracker

__all__ = [
    "BridgeClosedError",
    "BridgeConfig",
    "BridgeContext",
    "BridgeSink",
    "ByteBridge",
    "CastBridgeError",
    "ConfigurationError",
    "EncodeError",
    "EventCoordinator",
    "MetadataLookupError",
    "PlaybackEventChannel",
    "PresenceTracker",
    "SampleEncoder",
    "SessionController",
    "load_config",
]
