"""
Playback events for the connect session.

A playback engine emits these events, strictly ordered, on its event stream.
Only ``stopped``, ``started``, ``paused`` and ``playing`` drive actions; the rest
are modelled so that backends can forward them without losing information.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .types import MAX_VOLUME, PlaybackEvent


@dataclass
class StoppedEvent(PlaybackEvent):
    """Playback stopped."""

    play_request_id: int | None = None
    track_id: str | None = None
    type: Literal["stopped"] = "stopped"


@dataclass
class StartedEvent(PlaybackEvent):
    """Playback started for a play request."""

    play_request_id: int | None = None
    track_id: str | None = None
    position_ms: int = 0
    type: Literal["started"] = "started"


@dataclass
class PausedEvent(PlaybackEvent):
    """Playback paused."""

    play_request_id: int | None = None
    track_id: str | None = None
    position_ms: int = 0
    duration_ms: int = 0
    type: Literal["paused"] = "paused"


@dataclass
class PlayingEvent(PlaybackEvent):
    """A track is playing (also sent after resuming or seeking)."""

    track_id: str
    """Identifier of the playing track, resolvable through the streaming session."""
    play_request_id: int | None = None
    position_ms: int = 0
    duration_ms: int = 0
    type: Literal["playing"] = "playing"

    def __post_init__(self) -> None:
        """Validate field values."""
        if not self.track_id:
            raise ValueError("track_id must not be empty")


@dataclass
class LoadingEvent(PlaybackEvent):
    """A track is being loaded."""

    play_request_id: int | None = None
    track_id: str | None = None
    position_ms: int = 0
    type: Literal["loading"] = "loading"


@dataclass
class ChangedEvent(PlaybackEvent):
    """The current track changed."""

    old_track_id: str | None = None
    new_track_id: str | None = None
    type: Literal["changed"] = "changed"


@dataclass
class EndOfTrackEvent(PlaybackEvent):
    """The current track played to its end."""

    play_request_id: int | None = None
    track_id: str | None = None
    type: Literal["end_of_track"] = "end_of_track"


@dataclass
class VolumeSetEvent(PlaybackEvent):
    """A remote controller changed the volume."""

    volume: int
    """Volume range 0-65535."""
    type: Literal["volume_set"] = "volume_set"

    def __post_init__(self) -> None:
        """Validate field values."""
        if not 0 <= self.volume <= MAX_VOLUME:
            raise ValueError(f"Volume must be in range 0-65535, got {self.volume}")


@dataclass
class UnavailableEvent(PlaybackEvent):
    """The requested track is unavailable."""

    play_request_id: int | None = None
    track_id: str | None = None
    type: Literal["unavailable"] = "unavailable"


@dataclass
class OtherEvent(PlaybackEvent):
    """Any event without a dedicated model."""

    name: str = ""
    """Backend specific name of the event."""
    details: dict[str, Any] = field(default_factory=dict)
    type: Literal["other"] = "other"
