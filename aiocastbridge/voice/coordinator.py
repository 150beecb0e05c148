"""Turns playback events into voice call and status actions."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import TYPE_CHECKING

from aiocastbridge.errors import MetadataLookupError
from aiocastbridge.models.events import PausedEvent, PlayingEvent, StartedEvent, StoppedEvent
from aiocastbridge.models.metadata import format_listening_status

if TYPE_CHECKING:
    from aiocastbridge.connect.backend import PlaybackEventStream
    from aiocastbridge.connect.controller import SessionController
    from aiocastbridge.models.types import PlaybackEvent

    from .transport import MembershipLookup, StatusPublisher, VoiceTransport

logger = logging.getLogger(__name__)


class EventCoordinator:
    """
    Long-lived loop consuming the event stream of the newest playback engine.

    The loop follows the controller: whenever enable() replaces the event stream,
    the loop moves to the new one. When a stream ends it waits for the next
    enable() instead of polling.

    Events are handled one at a time in stream order; a slow metadata lookup
    only delays later events of the same stream.
    Status updates are best effort: a failing status publisher never blocks
    the voice actions of an event.
    """

    _task: asyncio.Task[None] | None = None
    """Task running the loop, None when not started."""
    _status_text: str | None = None
    """Last activity text published, None when cleared."""

    def __init__(
        self,
        controller: SessionController,
        transport: VoiceTransport,
        status: StatusPublisher,
        *,
        guild_id: int,
        watched_user_id: int,
        lookup_channel: MembershipLookup,
        voice_bitrate: int | None = None,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            controller: Controller owning the event stream and byte bridge.
            transport: Voice layer to join, leave and play through.
            status: Publisher of the displayed status.
            guild_id: Guild of the voice call.
            watched_user_id: Participant whose channel is joined on playback start.
            lookup_channel: Resolves a user's current voice channel.
            voice_bitrate: Encoder bitrate in kbps, None for automatic.
        """
        self._controller = controller
        self._transport = transport
        self._status = status
        self._guild_id = guild_id
        self._watched_user_id = watched_user_id
        self._lookup_channel = lookup_channel
        self._voice_bitrate = voice_bitrate

    @property
    def running(self) -> bool:
        """Whether the loop is running."""
        return self._task is not None and not self._task.done()

    @property
    def status_text(self) -> str | None:
        """Last activity text published by this coordinator."""
        return self._status_text

    def start(self) -> None:
        """Start the loop; does nothing if it already runs."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="event-coordinator")

    async def stop(self) -> None:
        """Stop the loop and wait for it to exit."""
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        generation = 0
        stream: PlaybackEventStream | None = None
        while True:
            if stream is None:
                generation, stream = await self._controller.wait_for_stream(generation)
                logger.debug("Following event stream of session %d", generation)

            recv_task = asyncio.ensure_future(stream.recv())
            replaced_task = asyncio.ensure_future(self._controller.wait_for_stream(generation))
            try:
                done, _ = await asyncio.wait(
                    {recv_task, replaced_task}, return_when=asyncio.FIRST_COMPLETED
                )
            finally:
                for task in (recv_task, replaced_task):
                    if not task.done():
                        task.cancel()

            if recv_task in done:
                try:
                    event = recv_task.result()
                except Exception:
                    logger.exception("Event stream of session %d failed", generation)
                    event = None
                    stream = None
                if event is not None:
                    await self._dispatch(event)
                elif stream is not None:
                    logger.debug("Event stream of session %d ended", generation)
                    stream = None

            if replaced_task in done:
                generation, stream = replaced_task.result()
                logger.debug("Switched to event stream of session %d", generation)

    async def _dispatch(self, event: PlaybackEvent) -> None:
        try:
            await self.handle_event(event)
        except Exception:
            logger.exception("Error handling %s", type(event).__name__)

    async def handle_event(self, event: PlaybackEvent) -> None:
        """Apply the action for one playback event."""
        if isinstance(event, StoppedEvent):
            await self._on_stopped()
        elif isinstance(event, StartedEvent):
            await self._on_started()
        elif isinstance(event, PausedEvent):
            await self._set_status(None)
        elif isinstance(event, PlayingEvent):
            await self._on_playing(event)
        else:
            logger.debug("Ignoring %s", type(event).__name__)

    async def _set_status(self, text: str | None) -> None:
        try:
            await self._status.set_status(text)
        except Exception:
            logger.warning("Could not update status to %r", text, exc_info=True)
            return
        self._status_text = text

    async def _on_stopped(self) -> None:
        logger.info("Playback stopped, leaving voice")
        await self._set_status(None)
        await self._transport.leave(self._guild_id)

    async def _on_started(self) -> None:
        channel_id = self._lookup_channel(self._watched_user_id)
        if channel_id is None:
            logger.info("Playback started but user %d is not in voice", self._watched_user_id)
            return
        bridge = self._controller.bridge
        if bridge is None:
            logger.warning("Playback started without an audio bridge")
            return
        logger.info("Playback started, joining channel %d", channel_id)
        await self._transport.join(self._guild_id, channel_id)
        self._transport.set_bitrate(self._voice_bitrate)
        self._transport.play_source(self._guild_id, bridge)

    async def _on_playing(self, event: PlayingEvent) -> None:
        session = self._controller.session
        try:
            track = await session.get_track(event.track_id)
            artist_id = track.primary_artist_id
            if artist_id is None:
                logger.debug("Track %s has no artists, keeping status", event.track_id)
                return
            artist = await session.get_artist(artist_id)
        except MetadataLookupError as err:
            logger.debug("Keeping status: %s", err)
            return
        await self._set_status(format_listening_status(artist, track))
