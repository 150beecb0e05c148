"""discord.py client running the bridge."""

from __future__ import annotations

import logging

import discord

from aiocastbridge.app import BridgeContext, create_controller
from aiocastbridge.config import BridgeConfig
from aiocastbridge.connect.backend import StreamingBackend, StreamingSession
from aiocastbridge.errors import ConfigurationError
from aiocastbridge.models.voice import MembershipChange, VoiceMembership

from .transport import DiscordStatusPublisher, DiscordVoiceTransport

logger = logging.getLogger(__name__)

# Connect, speak and use voice activity
INVITE_PERMISSIONS = discord.Permissions(36700160)


def default_intents() -> discord.Intents:
    """Intents needed to follow voice states."""
    intents = discord.Intents.default()
    intents.voice_states = True
    return intents


class CastBridgeBot(discord.Client):
    """
    Discord client that casts the connect session into voice.

    The bridge context is built on the first ready event, once the guild is
    known. A configuration problem found at that point is stored in
    :attr:`startup_error` and closes the client.
    """

    context: BridgeContext | None = None
    """Application context, None until the first ready event."""
    startup_error: ConfigurationError | None = None
    """Fatal configuration error found after login."""

    def __init__(
        self,
        config: BridgeConfig,
        backend: StreamingBackend,
        session: StreamingSession,
        *,
        intents: discord.Intents | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Bridge configuration.
            backend: Streaming backend creating engines and connect sessions.
            session: Authenticated streaming session.
            intents: Gateway intents, defaults to :func:`default_intents`.
        """
        super().__init__(intents=intents or default_intents())
        self.config = config
        self.controller = create_controller(config, backend, session)
        self.voice_transport = DiscordVoiceTransport(self)
        self.status_publisher = DiscordStatusPublisher(self)

    def _resolve_guild(self) -> discord.Guild:
        if self.config.guild_id is not None:
            guild = self.get_guild(self.config.guild_id)
            if guild is None:
                raise ConfigurationError(f"Not a member of guild {self.config.guild_id}")
            return guild
        if not self.guilds:
            raise ConfigurationError("Not currently in any guilds")
        return self.guilds[0]

    def lookup_voice_channel(self, user_id: int) -> int | None:
        """Return the voice channel ``user_id`` is connected to in the bridged guild."""
        if self.context is None:
            return None
        guild = self.get_guild(self.context.guild_id)
        if guild is None:
            return None
        for channel in (*guild.voice_channels, *guild.stage_channels):
            if user_id in channel.voice_states:
                return channel.id
        return None

    async def on_ready(self) -> None:
        if self.context is not None:
            logger.debug("Gateway session resumed")
            return
        assert self.user is not None
        logger.info("Ready as %s", self.user)
        logger.info(
            "Invite me with %s",
            discord.utils.oauth_url(self.user.id, permissions=INVITE_PERMISSIONS),
        )
        try:
            guild = self._resolve_guild()
        except ConfigurationError as err:
            logger.error("%s", err)
            self.startup_error = err
            await self.close()
            return

        self.context = BridgeContext(
            config=self.config,
            controller=self.controller,
            transport=self.voice_transport,
            status=self.status_publisher,
            guild_id=guild.id,
            lookup_channel=self.lookup_voice_channel,
        )
        logger.info("Bridging guild %s, watching user %d", guild.name, self.config.watched_user_id)
        await self.context.start()

    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        context = self.context
        if context is None or member.guild.id != context.guild_id:
            return
        change = MembershipChange(
            old=VoiceMembership(member.id, before.channel.id if before.channel else None),
            new=VoiceMembership(member.id, after.channel.id if after.channel else None),
        )
        await context.tracker.handle_change(change)

    async def close(self) -> None:
        if self.context is not None:
            await self.context.close()
        else:
            await self.controller.close()
        await super().close()
