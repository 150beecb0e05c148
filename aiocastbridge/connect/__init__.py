"""Connect session lifecycle and the interfaces of the streaming backend."""

from .backend import (
    BackendFactory,
    ConnectConfig,
    ConnectHandle,
    Credentials,
    PlaybackEventStream,
    SinkFactory,
    StreamingBackend,
    StreamingSession,
)
from .controller import (
    SessionController,
    SessionDisabledEvent,
    SessionEnabledEvent,
    SessionEndedEvent,
    SessionEvent,
)
from .events import PlaybackEventChannel
from .volume import (
    AdjustableVolume,
    ExternalVolume,
    FixedVolume,
    VolumePolicy,
    create_volume_policy,
    volume_to_gain,
)

__all__ = [
    "AdjustableVolume",
    "BackendFactory",
    "ConnectConfig",
    "ConnectHandle",
    "Credentials",
    "ExternalVolume",
    "FixedVolume",
    "PlaybackEventChannel",
    "PlaybackEventStream",
    "SessionController",
    "SessionDisabledEvent",
    "SessionEnabledEvent",
    "SessionEndedEvent",
    "SessionEvent",
    "SinkFactory",
    "StreamingBackend",
    "StreamingSession",
    "VolumePolicy",
    "create_volume_policy",
    "volume_to_gain",
]
