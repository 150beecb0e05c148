"""Interfaces of the voice call collaborators."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from aiocastbridge.audio.bridge import ByteBridge

# Returns the voice channel a user is connected to, None when not in voice.
MembershipLookup = Callable[[int], "int | None"]


class VoiceTransport(Protocol):
    """Transport of raw audio into a group voice call."""

    async def join(self, guild_id: int, channel_id: int) -> None:
        """Connect to a voice channel, moving if already connected elsewhere."""

    async def leave(self, guild_id: int) -> None:
        """Disconnect from the voice call, if connected."""

    def set_bitrate(self, kbps: int | None) -> None:
        """Set the encoder bitrate used for the next source, None for automatic."""

    def play_source(self, guild_id: int, bridge: ByteBridge) -> None:
        """Start playing interleaved float32 audio pulled from ``bridge``."""


class StatusPublisher(Protocol):
    """Displayed presence of the bot."""

    async def set_status(self, activity: str | None, *, online: bool = True) -> None:
        """Show ``activity`` as the current activity, None to clear it."""
