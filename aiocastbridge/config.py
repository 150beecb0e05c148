"""
Configuration for aiocastbridge.

Configuration is read from an optional JSON file and from environment variables,
with environment variables taking precedence. Everything the bridge needs at
runtime is collected into a single :class:`BridgeConfig`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import orjson
from mashumaro.config import BaseConfig
from mashumaro.exceptions import InvalidFieldValue, MissingField
from mashumaro.mixins.orjson import DataClassORJSONMixin

from .errors import ConfigurationError
from .models.types import (
    MAX_VOLUME,
    DeviceType,
    NormalisationMethod,
    NormalisationType,
    ResamplerType,
    StreamBitrate,
    VolumeCurve,
    VolumePolicyType,
)
from .util import parse_snowflake

logger = logging.getLogger(__name__)

# Environment variables and the config keys they override
ENV_DISCORD_TOKEN = "DISCORD_TOKEN"
ENV_STREAMING_USERNAME = "SPOTIFY_USERNAME"
ENV_STREAMING_PASSWORD = "SPOTIFY_PASSWORD"
ENV_WATCHED_USER_ID = "DISCORD_USER_ID"
ENV_CACHE_DIR = "CACHE_DIR"
ENV_BACKEND = "CASTBRIDGE_BACKEND"

_ENV_OVERRIDES: dict[str, str] = {
    ENV_DISCORD_TOKEN: "discord_token",
    ENV_STREAMING_USERNAME: "streaming_username",
    ENV_STREAMING_PASSWORD: "streaming_password",
    ENV_WATCHED_USER_ID: "watched_user_id",
    ENV_CACHE_DIR: "cache_dir",
    ENV_BACKEND: "backend",
}

_MISSING_MESSAGES: dict[str, str] = {
    "discord_token": f"Expected a token in the environment ({ENV_DISCORD_TOKEN})",
    "streaming_username": f"Expected a Spotify username in the environment ({ENV_STREAMING_USERNAME})",
    "streaming_password": f"Expected a Spotify password in the environment ({ENV_STREAMING_PASSWORD})",
    "watched_user_id": f"Expected a Discord user ID in the environment ({ENV_WATCHED_USER_ID})",
    "backend": f"Expected a streaming backend 'module:attribute' ({ENV_BACKEND})",
}

@dataclass
class AudioConfig(DataClassORJSONMixin):
    """Sample conversion and buffering between the playback engine and voice."""

    input_rate: int = 44100
    """Sample rate in Hz of the blocks written by the playback engine."""
    output_rate: int = 48000
    """Sample rate in Hz expected by the voice layer."""
    channels: int = 2
    """Number of interleaved channels (2 = stereo)."""
    bridge_capacity: int = 7680
    """
    Capacity in bytes of the byte bridge.

    Smaller values bound latency, larger values reduce blocking and thread
    wake-ups. The default holds one 20 ms frame of 48 kHz float32 stereo.
    """
    resampler: ResamplerType = ResamplerType.LINEAR
    """Resampling backend."""

    def __post_init__(self) -> None:
        """Validate field values."""
        if self.input_rate <= 0:
            raise ValueError(f"input_rate must be positive, got {self.input_rate}")
        if self.output_rate <= 0:
            raise ValueError(f"output_rate must be positive, got {self.output_rate}")
        if self.channels not in (1, 2):
            raise ValueError(f"channels must be 1 or 2, got {self.channels}")
        if self.bridge_capacity <= 0:
            raise ValueError(f"bridge_capacity must be positive, got {self.bridge_capacity}")


@dataclass
class PlayerConfig(DataClassORJSONMixin):
    """Settings handed to the playback engine."""

    bitrate: StreamBitrate = StreamBitrate.BITRATE_320
    normalisation: bool = False
    normalisation_type: NormalisationType = NormalisationType.AUTO
    normalisation_method: NormalisationMethod = NormalisationMethod.DYNAMIC
    normalisation_pregain_db: float = 0.0
    normalisation_threshold_dbfs: float = -1.0
    normalisation_attack: float = 0.005
    """Attack time in seconds."""
    normalisation_release: float = 0.1
    """Release time in seconds."""
    normalisation_knee_db: float = 1.0
    gapless: bool = True
    passthrough: bool = False

    def __post_init__(self) -> None:
        """Validate field values."""
        if self.normalisation_attack <= 0 or self.normalisation_release <= 0:
            raise ValueError("normalisation attack and release must be positive")


@dataclass
class DeviceConfig(DataClassORJSONMixin):
    """How this process presents itself as a connect playback target."""

    name: str = "aiocastbridge"
    """Device display name shown to remote controllers."""
    device_type: DeviceType = DeviceType.COMPUTER
    initial_volume: int = 0x8000
    """Initial volume, range 0-65535."""
    volume_curve: VolumeCurve = VolumeCurve.LOG
    volume_range_db: float = 60.0
    """Range in dB covered by the logarithmic volume curve."""
    volume_policy: VolumePolicyType = VolumePolicyType.FIXED
    volume_hook: str | None = None
    """
    Callback named as 'module:attribute' receiving volume changes.

    Required by the external volume policy, which forwards every change to it.
    """
    autoplay: bool = True
    """Keep playing similar tracks when the queue ends."""

    def __post_init__(self) -> None:
        """Validate field values."""
        if not self.name:
            raise ValueError("name must not be empty")
        if not 0 <= self.initial_volume <= MAX_VOLUME:
            raise ValueError(f"initial_volume must be in range 0-65535, got {self.initial_volume}")
        if self.volume_range_db <= 0:
            raise ValueError(f"volume_range_db must be positive, got {self.volume_range_db}")
        if self.volume_policy == VolumePolicyType.EXTERNAL and not self.volume_hook:
            raise ValueError("the external volume policy requires a volume_hook")


@dataclass
class BridgeConfig(DataClassORJSONMixin):
    """Complete runtime configuration."""

    discord_token: str = field(repr=False)
    streaming_username: str
    streaming_password: str = field(repr=False)
    watched_user_id: int
    """Discord user whose voice presence drives the connect session."""
    backend: str
    """Streaming backend factory as 'module:attribute'."""
    guild_id: int | None = None
    """Guild to operate in, None for the first guild the bot is a member of."""
    cache_dir: str | None = None
    """Cache directory handed to the streaming backend."""
    voice_bitrate: int | None = None
    """Voice encoder bitrate in kbps, None lets the voice layer decide."""
    audio: AudioConfig = field(default_factory=AudioConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)

    def __post_init__(self) -> None:
        """Validate field values."""
        if self.watched_user_id <= 0:
            raise ValueError(f"watched_user_id must be positive, got {self.watched_user_id}")
        if self.voice_bitrate is not None and not 8 <= self.voice_bitrate <= 512:
            raise ValueError(f"voice_bitrate must be in range 8-512 kbps, got {self.voice_bitrate}")

    class Config(BaseConfig):
        """Config for parsing json configuration."""

        omit_none = True


def _read_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON config file into a dict."""
    try:
        data = orjson.loads(path.read_bytes())
    except OSError as err:
        raise ConfigurationError(f"Could not read config file {path}: {err}") from err
    except orjson.JSONDecodeError as err:
        raise ConfigurationError(f"Config file {path} is not valid JSON: {err}") from err
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    return data


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> BridgeConfig:
    """
    Load the bridge configuration.

    Args:
        path: Optional JSON config file.
        environ: Environment to read overrides from, defaults to ``os.environ``.

    Raises:
        ConfigurationError: If a required value is missing or a value is invalid.
    """
    data: dict[str, Any] = _read_config_file(Path(path)) if path is not None else {}
    env = os.environ if environ is None else environ

    for env_name, key in _ENV_OVERRIDES.items():
        if value := env.get(env_name):
            logger.debug("Using %s from the environment", key)
            data[key] = value

    for key, message in _MISSING_MESSAGES.items():
        if data.get(key) in (None, ""):
            raise ConfigurationError(message)

    if isinstance(data["watched_user_id"], str):
        data["watched_user_id"] = parse_snowflake(data["watched_user_id"], name="watched_user_id")

    try:
        return BridgeConfig.from_dict(data)
    except (MissingField, InvalidFieldValue, ValueError, TypeError) as err:
        raise ConfigurationError(f"Invalid configuration: {err}") from err
