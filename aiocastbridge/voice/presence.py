"""Drives the connect session from voice presence of the watched participant."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aiocastbridge.config import DeviceConfig

if TYPE_CHECKING:
    from aiocastbridge.connect.controller import SessionController
    from aiocastbridge.models.voice import MembershipChange

    from .transport import VoiceTransport

logger = logging.getLogger(__name__)


class PresenceTracker:
    """
    React to voice membership changes of one watched participant.

    Joining voice enables casting, leaving voice disables it and moving between
    channels moves the voice connection along without touching the session.
    """

    def __init__(
        self,
        controller: SessionController,
        transport: VoiceTransport,
        *,
        guild_id: int,
        watched_user_id: int,
        device: DeviceConfig | None = None,
    ) -> None:
        """
        Initialize the tracker.

        Args:
            controller: Controller to enable and disable.
            transport: Voice layer moved along with the participant.
            guild_id: Guild of the voice call.
            watched_user_id: The only participant whose changes are handled.
            device: Device settings passed to enable().
        """
        self._controller = controller
        self._transport = transport
        self._guild_id = guild_id
        self._watched_user_id = watched_user_id
        self._device = device or DeviceConfig()

    @property
    def watched_user_id(self) -> int:
        """Participant whose changes are handled."""
        return self._watched_user_id

    async def _enable(self) -> None:
        device = self._device
        await self._controller.enable(
            device.name,
            device.device_type,
            device.initial_volume,
            device.volume_curve,
            autoplay=device.autoplay,
        )

    async def sync_initial(self, channel_id: int | None) -> None:
        """Enable casting when the participant is already in voice at startup."""
        if channel_id is None:
            logger.info("User %d is not in voice, casting stays off", self._watched_user_id)
            return
        logger.info("User %d is already in channel %d", self._watched_user_id, channel_id)
        await self._enable()

    async def handle_change(self, change: MembershipChange) -> None:
        """Apply the action for one membership change."""
        if change.user_id != self._watched_user_id:
            return

        old_channel = change.old_channel_id
        new_channel = change.new_channel_id

        if old_channel is None:
            logger.info("User %d connected, enabling casting", change.user_id)
            await self._enable()
        elif new_channel is None:
            logger.info("User %d disconnected, disabling casting", change.user_id)
            await self._controller.disable()
        elif old_channel != new_channel:
            logger.info("User %d moved to channel %d", change.user_id, new_channel)
            await self._transport.join(self._guild_id, new_channel)
        else:
            logger.debug("Ignoring voice state update without channel change")
