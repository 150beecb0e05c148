"""Voice transport and status publisher backed by a discord.py client."""

from __future__ import annotations

import logging

import discord

from aiocastbridge.audio.bridge import ByteBridge

from .source import FloatPCMSource

logger = logging.getLogger(__name__)


class DiscordVoiceTransport:
    """Joins voice channels and plays byte bridges through discord.py."""

    _bitrate: int | None = None
    """Encoder bitrate in kbps for the next source, None for the library default."""

    def __init__(self, client: discord.Client) -> None:
        """Initialize the transport for a client."""
        self._client = client

    def _voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._client.get_guild(guild_id)
        if guild is None:
            return None
        voice_client = guild.voice_client
        if isinstance(voice_client, discord.VoiceClient):
            return voice_client
        return None

    async def join(self, guild_id: int, channel_id: int) -> None:
        guild = self._client.get_guild(guild_id)
        if guild is None:
            logger.warning("Cannot join channel %d: guild %d is not cached", channel_id, guild_id)
            return
        channel = guild.get_channel(channel_id)
        if not isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            logger.warning("Cannot join channel %d: not a voice channel", channel_id)
            return
        voice_client = self._voice_client(guild_id)
        if voice_client is None:
            logger.debug("Connecting to voice channel %s", channel.name)
            await channel.connect(self_deaf=True)
        elif voice_client.channel.id != channel_id:
            logger.debug("Moving to voice channel %s", channel.name)
            await voice_client.move_to(channel)

    async def leave(self, guild_id: int) -> None:
        voice_client = self._voice_client(guild_id)
        if voice_client is None:
            return
        logger.debug("Leaving voice channel %s", voice_client.channel)
        await voice_client.disconnect()

    def set_bitrate(self, kbps: int | None) -> None:
        self._bitrate = kbps

    def play_source(self, guild_id: int, bridge: ByteBridge) -> None:
        voice_client = self._voice_client(guild_id)
        if voice_client is None:
            logger.warning("Cannot play: not connected to voice in guild %d", guild_id)
            return
        if voice_client.is_playing():
            voice_client.stop()
        source = FloatPCMSource(bridge)
        if self._bitrate is None:
            voice_client.play(source, after=self._after_play)
        else:
            voice_client.play(source, after=self._after_play, bitrate=self._bitrate)

    @staticmethod
    def _after_play(error: Exception | None) -> None:
        if error is not None:
            logger.error("Voice playback failed: %s", error)
        else:
            logger.debug("Voice playback finished")


class DiscordStatusPublisher:
    """Shows the current track as a "listening to" activity."""

    def __init__(self, client: discord.Client) -> None:
        """Initialize the publisher for a client."""
        self._client = client

    async def set_status(self, activity: str | None, *, online: bool = True) -> None:
        presence = (
            discord.Activity(type=discord.ActivityType.listening, name=activity)
            if activity
            else None
        )
        await self._client.change_presence(
            activity=presence,
            status=discord.Status.online if online else discord.Status.idle,
        )
