"""Models for aiocastbridge."""

from __future__ import annotations

__all__ = [
    "Artist",
    "ChangedEvent",
    "DeviceType",
    "EndOfTrackEvent",
    "LoadingEvent",
    "MembershipChange",
    "NormalisationMethod",
    "NormalisationType",
    "OtherEvent",
    "PausedEvent",
    "PlaybackEvent",
    "PlayingEvent",
    "ResamplerType",
    "StartedEvent",
    "StoppedEvent",
    "StreamBitrate",
    "Track",
    "UnavailableEvent",
    "VoiceMembership",
    "VolumeCurve",
    "VolumePolicyType",
    "VolumeSetEvent",
    "events",
    "format_listening_status",
    "metadata",
    "types",
    "voice",
]

from . import events, metadata, types, voice
from .events import (
    ChangedEvent,
    EndOfTrackEvent,
    LoadingEvent,
    OtherEvent,
    PausedEvent,
    PlayingEvent,
    StartedEvent,
    StoppedEvent,
    UnavailableEvent,
    VolumeSetEvent,
)
from .metadata import Artist, Track, format_listening_status
from .types import (
    DeviceType,
    NormalisationMethod,
    NormalisationType,
    PlaybackEvent,
    ResamplerType,
    StreamBitrate,
    VolumeCurve,
    VolumePolicyType,
)
from .voice import MembershipChange, VoiceMembership
