"""Tests for driving the connect session from voice presence."""

from __future__ import annotations

import pytest

from aiocastbridge.config import DeviceConfig
from aiocastbridge.models.types import DeviceType, VolumeCurve
from aiocastbridge.models.voice import MembershipChange, VoiceMembership
from aiocastbridge.voice.presence import PresenceTracker

GUILD_ID = 1000
USER_ID = 2000


class RecordingController:
    def __init__(self) -> None:
        self.enable_calls: list[tuple] = []
        self.disable_calls = 0

    async def enable(self, *args, **kwargs) -> None:
        self.enable_calls.append((args, kwargs))

    async def disable(self) -> None:
        self.disable_calls += 1


def _change(old: int | None, new: int | None, *, user_id: int = USER_ID, known: bool = True):
    previous = VoiceMembership(user_id=user_id, channel_id=old) if known else None
    return MembershipChange(new=VoiceMembership(user_id=user_id, channel_id=new), old=previous)


@pytest.fixture
def recorder() -> RecordingController:
    return RecordingController()


@pytest.fixture
def tracker(recorder: RecordingController, transport) -> PresenceTracker:
    return PresenceTracker(recorder, transport, guild_id=GUILD_ID, watched_user_id=USER_ID)


@pytest.mark.asyncio
async def test_join_enables_once(tracker, recorder, transport) -> None:
    await tracker.handle_change(_change(None, 10))

    assert len(recorder.enable_calls) == 1
    assert recorder.disable_calls == 0
    assert transport.calls == []


@pytest.mark.asyncio
async def test_unknown_prior_state_enables(tracker, recorder) -> None:
    await tracker.handle_change(_change(None, 10, known=False))

    assert len(recorder.enable_calls) == 1


@pytest.mark.asyncio
async def test_leave_disables_once(tracker, recorder, transport) -> None:
    await tracker.handle_change(_change(10, None))

    assert recorder.enable_calls == []
    assert recorder.disable_calls == 1
    assert transport.calls == []


@pytest.mark.asyncio
async def test_move_only_joins_new_channel(tracker, recorder, transport) -> None:
    await tracker.handle_change(_change(10, 20))

    assert transport.calls == [("join", GUILD_ID, 20)]
    assert recorder.enable_calls == []
    assert recorder.disable_calls == 0


@pytest.mark.asyncio
async def test_same_channel_is_noop(tracker, recorder, transport) -> None:
    await tracker.handle_change(_change(10, 10))

    assert transport.calls == []
    assert recorder.enable_calls == []
    assert recorder.disable_calls == 0


@pytest.mark.asyncio
async def test_other_users_are_ignored(tracker, recorder, transport) -> None:
    await tracker.handle_change(_change(None, 10, user_id=USER_ID + 1))
    await tracker.handle_change(_change(10, None, user_id=USER_ID + 1))

    assert recorder.enable_calls == []
    assert recorder.disable_calls == 0
    assert transport.calls == []


@pytest.mark.asyncio
async def test_enable_uses_device_settings(recorder, transport) -> None:
    device = DeviceConfig(
        name="Den",
        device_type=DeviceType.SPEAKER,
        initial_volume=100,
        volume_curve=VolumeCurve.LINEAR,
        autoplay=False,
    )
    tracker = PresenceTracker(
        recorder, transport, guild_id=GUILD_ID, watched_user_id=USER_ID, device=device
    )

    await tracker.handle_change(_change(None, 10))

    assert recorder.enable_calls == [
        (("Den", DeviceType.SPEAKER, 100, VolumeCurve.LINEAR), {"autoplay": False})
    ]


@pytest.mark.asyncio
async def test_sync_initial(tracker, recorder) -> None:
    await tracker.sync_initial(None)
    assert recorder.enable_calls == []

    await tracker.sync_initial(10)
    assert len(recorder.enable_calls) == 1


@pytest.mark.asyncio
async def test_presence_drives_real_controller(controller, backend, transport, wait_until) -> None:
    tracker = PresenceTracker(controller, transport, guild_id=GUILD_ID, watched_user_id=USER_ID)

    await tracker.handle_change(_change(None, 10))
    assert controller.enabled

    await tracker.handle_change(_change(10, 20))
    assert controller.generation == 1

    await tracker.handle_change(_change(20, None))
    await wait_until(lambda: "ended 1" in backend.log)
    assert not controller.enabled
