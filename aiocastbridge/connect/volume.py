"""Volume control policies handed to the connect session."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

import numpy as np

from aiocastbridge.models.types import MAX_VOLUME, VolumeCurve, VolumePolicyType

logger = logging.getLogger(__name__)

# Filter applied to (frames, channels) float32 audio before encoding
AudioFilter = Callable[[np.ndarray], np.ndarray]

# Callback receiving the new 0-65535 volume
VolumeChangeCallback = Callable[[int], None]


def volume_to_gain(volume: int, curve: VolumeCurve, range_db: float = 60.0) -> float:
    """Map a 0-65535 connect volume to a linear gain factor."""
    if not 0 <= volume <= MAX_VOLUME:
        raise ValueError(f"Volume must be in range 0-65535, got {volume}")
    if curve == VolumeCurve.FIXED:
        return 1.0
    if volume == 0:
        return 0.0
    fraction = volume / MAX_VOLUME
    if curve == VolumeCurve.LINEAR:
        return fraction
    return float(10 ** (range_db * (fraction - 1.0) / 20.0))


class VolumePolicy(ABC):
    """Volume control of the connect session.

    Subclasses decide what happens when a remote controller changes the volume.
    """

    policy_type: VolumePolicyType

    def __init__(self, initial_volume: int) -> None:
        """Initialize the policy with the volume reported before any change."""
        if not 0 <= initial_volume <= MAX_VOLUME:
            raise ValueError(f"Volume must be in range 0-65535, got {initial_volume}")
        self._volume = initial_volume

    def start(self) -> None:
        """Playback is about to start."""

    def stop(self) -> None:
        """Playback stopped."""

    def volume(self) -> int:
        """Return the volume reported to remote controllers."""
        return self._volume

    @abstractmethod
    def set_volume(self, volume: int) -> None:
        """Handle a volume change requested by a remote controller."""

    def audio_filter(self) -> AudioFilter | None:
        """Return a filter applied to audio before encoding, if any."""
        return None


class FixedVolume(VolumePolicy):
    """Report a constant volume and ignore all changes."""

    policy_type = VolumePolicyType.FIXED

    def set_volume(self, volume: int) -> None:
        logger.debug("Ignoring volume change to %d, volume is fixed at %d", volume, self._volume)


class AdjustableVolume(VolumePolicy):
    """Track volume changes and scale samples according to a volume curve."""

    policy_type = VolumePolicyType.ADJUSTABLE

    def __init__(
        self,
        initial_volume: int,
        *,
        curve: VolumeCurve = VolumeCurve.LOG,
        range_db: float = 60.0,
    ) -> None:
        super().__init__(initial_volume)
        self._curve = curve
        self._range_db = range_db
        self._gain = volume_to_gain(initial_volume, curve, range_db)

    @property
    def gain(self) -> float:
        """Linear gain applied to samples."""
        return self._gain

    def set_volume(self, volume: int) -> None:
        self._gain = volume_to_gain(volume, self._curve, self._range_db)
        self._volume = volume
        logger.debug("Volume set to %d (gain %.4f)", volume, self._gain)

    def audio_filter(self) -> AudioFilter | None:
        def _apply_gain(frames: np.ndarray) -> np.ndarray:
            gain = self._gain
            if gain == 1.0:
                return frames
            return frames * np.float32(gain)

        return _apply_gain


class ExternalVolume(VolumePolicy):
    """Forward volume changes to an external controller without touching samples."""

    policy_type = VolumePolicyType.EXTERNAL

    def __init__(self, initial_volume: int, *, on_change: VolumeChangeCallback) -> None:
        super().__init__(initial_volume)
        self._on_change = on_change

    def set_volume(self, volume: int) -> None:
        if not 0 <= volume <= MAX_VOLUME:
            raise ValueError(f"Volume must be in range 0-65535, got {volume}")
        self._volume = volume
        try:
            self._on_change(volume)
        except Exception:
            logger.exception("Error in external volume controller")


def create_volume_policy(
    policy_type: VolumePolicyType,
    *,
    initial_volume: int,
    curve: VolumeCurve = VolumeCurve.LOG,
    range_db: float = 60.0,
    on_change: VolumeChangeCallback | None = None,
) -> VolumePolicy:
    """Create the volume policy selected by configuration."""
    if policy_type == VolumePolicyType.FIXED:
        return FixedVolume(initial_volume)
    if policy_type == VolumePolicyType.ADJUSTABLE:
        return AdjustableVolume(initial_volume, curve=curve, range_db=range_db)
    if on_change is None:
        raise ValueError("An external volume policy requires an on_change callback")
    return ExternalVolume(initial_volume, on_change=on_change)
