"""Models for enum types used by aiocastbridge."""

from dataclasses import dataclass
from enum import Enum

from mashumaro.config import BaseConfig
from mashumaro.mixins.orjson import DataClassORJSONMixin
from mashumaro.types import Discriminator


# Base event class
@dataclass
class PlaybackEvent(DataClassORJSONMixin):
    """Base class for playback events emitted by a connect session."""

    class Config(BaseConfig):
        """Config for parsing json events."""

        discriminator = Discriminator(field="type", include_subtypes=True)


# Highest volume of the connect protocol, volumes range 0-65535
MAX_VOLUME = 0xFFFF


# Enums


class DeviceType(Enum):
    """Device type advertised to remote controllers of the connect session."""

    COMPUTER = "computer"
    TABLET = "tablet"
    SMARTPHONE = "smartphone"
    SPEAKER = "speaker"
    TV = "tv"
    AVR = "avr"
    STB = "stb"
    AUDIO_DONGLE = "audio_dongle"
    GAME_CONSOLE = "game_console"
    CAST_AUDIO = "cast_audio"
    CAST_VIDEO = "cast_video"
    AUTOMOBILE = "automobile"
    SMARTWATCH = "smartwatch"
    CHROMEBOOK = "chromebook"


class VolumeCurve(Enum):
    """Mapping from the 0-65535 connect volume to an output gain."""

    LINEAR = "linear"
    LOG = "log"
    """Logarithmic curve spanning ``volume_range_db`` decibels."""
    FIXED = "fixed"
    """Volume changes are reported but never alter the output."""


class VolumePolicyType(Enum):
    """Which volume control is handed to the connect session."""

    FIXED = "fixed"
    """Report a constant volume and ignore volume changes."""
    ADJUSTABLE = "adjustable"
    """Track volume changes and scale samples before encoding."""
    EXTERNAL = "external"
    """Forward volume changes to an external controller."""


class StreamBitrate(Enum):
    """Bitrate requested from the streaming service, in kbps."""

    BITRATE_96 = 96
    BITRATE_160 = 160
    BITRATE_320 = 320


class ResamplerType(Enum):
    """Resampling backend used by the sample encoder."""

    LINEAR = "linear"
    """Linear interpolation computed with numpy, stateless per block."""
    SWR = "swr"
    """libswresample through PyAV, stateful across blocks."""


class NormalisationType(Enum):
    """Loudness normalisation reference."""

    ALBUM = "album"
    TRACK = "track"
    AUTO = "auto"


class NormalisationMethod(Enum):
    """Loudness normalisation method."""

    BASIC = "basic"
    DYNAMIC = "dynamic"
