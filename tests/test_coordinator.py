"""Tests for turning playback events into voice and status actions."""

from __future__ import annotations

import pytest

from aiocastbridge.connect.controller import SessionController
from aiocastbridge.models.events import (
    ChangedEvent,
    PausedEvent,
    PlayingEvent,
    StartedEvent,
    StoppedEvent,
    VolumeSetEvent,
)
from aiocastbridge.models.types import DeviceType, VolumeCurve
from aiocastbridge.voice.coordinator import EventCoordinator

GUILD_ID = 1000
USER_ID = 2000
CHANNEL_ID = 3000


def _coordinator(
    controller: SessionController,
    transport,
    status,
    *,
    channels: dict[int, int] | None = None,
    voice_bitrate: int | None = None,
) -> EventCoordinator:
    members = {USER_ID: CHANNEL_ID} if channels is None else channels
    return EventCoordinator(
        controller,
        transport,
        status,
        guild_id=GUILD_ID,
        watched_user_id=USER_ID,
        lookup_channel=members.get,
        voice_bitrate=voice_bitrate,
    )


async def _enable(controller: SessionController) -> None:
    await controller.enable("Bridge", DeviceType.COMPUTER, 0x8000, VolumeCurve.LOG)


@pytest.mark.asyncio
async def test_started_joins_watched_user_and_plays(controller, transport, status) -> None:
    coordinator = _coordinator(controller, transport, status, voice_bitrate=128)
    await _enable(controller)

    await coordinator.handle_event(StartedEvent(play_request_id=1))

    assert transport.calls == [
        ("join", GUILD_ID, CHANNEL_ID),
        ("bitrate", 128),
        ("play", GUILD_ID, controller.bridge),
    ]
    await controller.close()


@pytest.mark.asyncio
async def test_started_without_user_in_voice(controller, transport, status) -> None:
    coordinator = _coordinator(controller, transport, status, channels={})
    await _enable(controller)

    await coordinator.handle_event(StartedEvent())

    assert transport.calls == []
    await controller.close()


@pytest.mark.asyncio
async def test_started_without_bridge(controller, transport, status) -> None:
    coordinator = _coordinator(controller, transport, status)

    await coordinator.handle_event(StartedEvent())

    assert transport.calls == []


@pytest.mark.asyncio
async def test_stopped_clears_status_and_leaves(controller, transport, status) -> None:
    coordinator = _coordinator(controller, transport, status)

    await coordinator.handle_event(StoppedEvent())

    assert status.history == [None]
    assert transport.calls == [("leave", GUILD_ID)]
    assert coordinator.status_text is None


@pytest.mark.asyncio
async def test_stopped_leaves_when_status_update_fails(controller, transport, status) -> None:
    coordinator = _coordinator(controller, transport, status)
    status.fail = True

    await coordinator.handle_event(StoppedEvent())

    assert transport.calls == [("leave", GUILD_ID)]


@pytest.mark.asyncio
async def test_failed_status_update_keeps_previous_text(controller, transport, status) -> None:
    coordinator = _coordinator(controller, transport, status)
    await coordinator.handle_event(PlayingEvent(track_id="track-1"))
    status.fail = True

    await coordinator.handle_event(PausedEvent())

    assert coordinator.status_text == "Artist: Song"
    assert status.history == ["Artist: Song"]


@pytest.mark.asyncio
async def test_paused_clears_status(controller, transport, status) -> None:
    coordinator = _coordinator(controller, transport, status)

    await coordinator.handle_event(PlayingEvent(track_id="track-1"))
    await coordinator.handle_event(PausedEvent())

    assert status.history == ["Artist: Song", None]
    assert transport.calls == []


@pytest.mark.asyncio
async def test_playing_sets_listening_status(controller, transport, status) -> None:
    coordinator = _coordinator(controller, transport, status)

    await coordinator.handle_event(PlayingEvent(track_id="track-1"))

    assert status.current == "Artist: Song"
    assert coordinator.status_text == "Artist: Song"


@pytest.mark.asyncio
@pytest.mark.parametrize("track_id", ["missing-track", "track-2", "track-solo"])
async def test_playing_keeps_status_when_metadata_missing(
    controller, transport, status, track_id: str
) -> None:
    coordinator = _coordinator(controller, transport, status)
    await coordinator.handle_event(PlayingEvent(track_id="track-1"))

    await coordinator.handle_event(PlayingEvent(track_id=track_id))

    assert status.history == ["Artist: Song"]


@pytest.mark.asyncio
async def test_other_events_are_ignored(controller, transport, status) -> None:
    coordinator = _coordinator(controller, transport, status)

    await coordinator.handle_event(VolumeSetEvent(volume=10))
    await coordinator.handle_event(ChangedEvent(old_track_id="a", new_track_id="b"))

    assert transport.calls == []
    assert status.history == []


@pytest.mark.asyncio
async def test_loop_handles_stream_events(controller, backend, transport, status, wait_until) -> None:
    coordinator = _coordinator(controller, transport, status)
    coordinator.start()
    assert coordinator.running

    await _enable(controller)
    backend.channels[0].send(StartedEvent())
    backend.channels[0].send(PlayingEvent(track_id="track-1"))
    await wait_until(lambda: status.current == "Artist: Song")

    assert transport.calls[0] == ("join", GUILD_ID, CHANNEL_ID)
    await coordinator.stop()
    assert not coordinator.running
    await controller.close()


@pytest.mark.asyncio
async def test_loop_survives_handler_errors(
    controller, backend, transport, status, wait_until
) -> None:
    coordinator = _coordinator(controller, transport, status)
    coordinator.start()
    await _enable(controller)
    transport.fail_join = True

    backend.channels[0].send(StartedEvent())
    backend.channels[0].send(PlayingEvent(track_id="track-1"))
    await wait_until(lambda: status.current == "Artist: Song")

    assert coordinator.running
    await coordinator.stop()
    await controller.close()


@pytest.mark.asyncio
async def test_loop_follows_replaced_stream(
    controller, backend, transport, status, wait_until
) -> None:
    coordinator = _coordinator(controller, transport, status)
    coordinator.start()
    await _enable(controller)
    await _enable(controller)

    backend.channels[1].send(PlayingEvent(track_id="track-1"))
    await wait_until(lambda: status.current == "Artist: Song")

    await coordinator.stop()
    await controller.close()


@pytest.mark.asyncio
async def test_loop_waits_for_next_session(
    controller, backend, transport, status, wait_until
) -> None:
    coordinator = _coordinator(controller, transport, status)
    coordinator.start()
    await _enable(controller)

    await controller.disable()
    await wait_until(lambda: ("leave", GUILD_ID) in transport.calls)

    await _enable(controller)
    backend.channels[1].send(PlayingEvent(track_id="track-1"))
    await wait_until(lambda: status.current == "Artist: Song")

    assert coordinator.running
    await coordinator.stop()
    await controller.close()


@pytest.mark.asyncio
async def test_start_twice_keeps_single_loop(controller, transport, status) -> None:
    coordinator = _coordinator(controller, transport, status)
    coordinator.start()
    task = coordinator._task

    coordinator.start()

    assert coordinator._task is task
    await coordinator.stop()
    await coordinator.stop()
