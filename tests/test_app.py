"""Tests for application wiring and helpers."""

from __future__ import annotations

import os.path
from collections import OrderedDict

import pytest

import aiocastbridge.util
from aiocastbridge.app import (
    BridgeContext,
    connect_session,
    create_controller,
    load_backend,
    load_volume_hook,
)
from aiocastbridge.config import BridgeConfig, DeviceConfig, load_config
from aiocastbridge.connect.volume import AdjustableVolume, ExternalVolume
from aiocastbridge.errors import ConfigurationError
from aiocastbridge.models.types import VolumePolicyType
from aiocastbridge.util import import_from_path, parse_snowflake

USER_ID = 2000
GUILD_ID = 1000


def _config(**kwargs) -> BridgeConfig:
    return BridgeConfig(
        discord_token="token",
        streaming_username="listener",
        streaming_password="secret",
        watched_user_id=USER_ID,
        backend=kwargs.pop("backend", "aiocastbridge.util:backend_factory"),
        **kwargs,
    )


def test_import_from_path() -> None:
    assert import_from_path("os.path:join") is os.path.join
    assert import_from_path("collections:OrderedDict.fromkeys") == OrderedDict.fromkeys


@pytest.mark.parametrize(
    "path",
    ["os.path", ":join", "os.path:", "aiocastbridge_missing_module:x", "os.path:missing"],
)
def test_import_from_path_errors(path: str) -> None:
    with pytest.raises(ConfigurationError):
        import_from_path(path)


def test_parse_snowflake() -> None:
    assert parse_snowflake(" 42 ", name="id") == 42
    for value in ("abc", "0", "-1", None):
        with pytest.raises(ConfigurationError, match="id"):
            parse_snowflake(value, name="id")  # type: ignore[arg-type]


def test_load_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[BridgeConfig] = []

    backend = object()

    def _factory(config: BridgeConfig) -> object:
        created.append(config)
        return backend

    monkeypatch.setattr(aiocastbridge.util, "backend_factory", _factory, raising=False)
    config = _config()

    assert load_backend(config) is backend
    assert created == [config]


def test_load_backend_not_callable() -> None:
    with pytest.raises(ConfigurationError, match="not callable"):
        load_backend(_config(backend="aiocastbridge.config:MAX_VOLUME"))


@pytest.mark.asyncio
async def test_connect_session(backend) -> None:
    session = await connect_session(_config(), backend)

    assert (await session.get_track("track-1")).name == "Song"


@pytest.mark.asyncio
async def test_create_controller_uses_device_policy(backend, session) -> None:
    config = _config(device=DeviceConfig(volume_policy=VolumePolicyType.ADJUSTABLE))
    controller = create_controller(config, backend, session)

    await controller.enable("Bridge", config.device.device_type, 0x8000, config.device.volume_curve)

    assert isinstance(backend.volumes[0], AdjustableVolume)
    await controller.close()


@pytest.mark.asyncio
async def test_context_start_and_close(backend, session, transport, status) -> None:
    config = _config(device=DeviceConfig(name="Den"))
    controller = create_controller(config, backend, session)
    context = BridgeContext(
        config=config,
        controller=controller,
        transport=transport,
        status=status,
        guild_id=GUILD_ID,
        lookup_channel={USER_ID: 10}.get,
    )

    await context.start()

    assert context.coordinator.running
    assert controller.enabled
    assert backend.connect_configs[0].name == "Den"

    await context.close()

    assert not context.coordinator.running
    assert not controller.enabled
    assert backend.log == ["open 1", "shutdown 1", "ended 1"]


@pytest.mark.asyncio
async def test_context_start_without_user_in_voice(backend, session, transport, status) -> None:
    config = _config()
    context = BridgeContext(
        config=config,
        controller=create_controller(config, backend, session),
        transport=transport,
        status=status,
        guild_id=GUILD_ID,
        lookup_channel=lambda _user_id: None,
    )

    await context.start()

    assert not context.controller.enabled
    await context.close()


@pytest.mark.asyncio
async def test_external_volume_policy_forwards_to_hook(
    monkeypatch: pytest.MonkeyPatch, tmp_path, backend, session
) -> None:
    changes: list[int] = []
    monkeypatch.setattr(aiocastbridge.util, "volume_hook", changes.append, raising=False)
    path = tmp_path / "config.json"
    path.write_text(
        '{"device": {"volume_policy": "external", "volume_hook": "aiocastbridge.util:volume_hook"}}'
    )
    config = load_config(
        path,
        environ={
            "DISCORD_TOKEN": "token",
            "SPOTIFY_USERNAME": "listener",
            "SPOTIFY_PASSWORD": "secret",
            "DISCORD_USER_ID": str(USER_ID),
            "CASTBRIDGE_BACKEND": "aiocastbridge.util:backend_factory",
        },
    )
    controller = create_controller(config, backend, session)

    await controller.enable("Bridge", config.device.device_type, 100, config.device.volume_curve)

    assert controller.enabled
    assert isinstance(backend.volumes[0], ExternalVolume)
    backend.volumes[0].set_volume(4321)
    assert changes == [4321]
    await controller.close()


def test_volume_hook_must_be_callable() -> None:
    config = _config(
        device=DeviceConfig(
            volume_policy=VolumePolicyType.EXTERNAL,
            volume_hook="aiocastbridge.config:MAX_VOLUME",
        )
    )

    with pytest.raises(ConfigurationError, match="not callable"):
        load_volume_hook(config)
    assert load_volume_hook(_config()) is None
