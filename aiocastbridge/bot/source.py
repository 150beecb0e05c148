"""Voice source reading float32 audio from a byte bridge."""

from __future__ import annotations

import logging

import discord
import numpy as np

from aiocastbridge.audio.bridge import ByteBridge

logger = logging.getLogger(__name__)

# 20 ms of 48 kHz stereo, the frame size the voice player reads
SAMPLES_PER_FRAME = 960
CHANNELS = 2
FLOAT_FRAME_SIZE = SAMPLES_PER_FRAME * CHANNELS * 4
PCM_FRAME_SIZE = SAMPLES_PER_FRAME * CHANNELS * 2
SILENCE_FRAME = b"\x00" * PCM_FRAME_SIZE


def float_to_pcm16(data: bytes) -> bytes:
    """Convert little-endian float32 samples to little-endian signed 16-bit PCM."""
    samples = np.frombuffer(data, dtype="<f4")
    clipped = np.clip(samples, -1.0, 1.0)
    return (clipped * 32767.0).astype("<i2").tobytes()


class FloatPCMSource(discord.AudioSource):
    """
    Audio source pulling one frame of float32 audio per read.

    The voice player calls :meth:`read` from its own thread every 20 ms. While
    the bridge stays empty for longer than ``silence_timeout`` silence is
    returned so the connection stays alive; once the bridge is closed and
    drained the source ends.
    """

    def __init__(self, bridge: ByteBridge, *, silence_timeout: float = 0.1) -> None:
        """
        Initialize the source.

        Args:
            bridge: Bridge to pull interleaved float32 48 kHz stereo from.
            silence_timeout: Seconds to wait for audio before returning silence.
        """
        self._bridge = bridge
        self._silence_timeout = silence_timeout
        self._frames_read = 0

    @property
    def frames_read(self) -> int:
        """Frames of audio returned so far."""
        return self._frames_read

    def read(self) -> bytes:
        try:
            data = self._bridge.pull(FLOAT_FRAME_SIZE, timeout=self._silence_timeout)
        except TimeoutError:
            return SILENCE_FRAME
        if len(data) < FLOAT_FRAME_SIZE:
            logger.debug("Bridge closed after %d frames", self._frames_read)
            return b""
        self._frames_read += 1
        return float_to_pcm16(data)

    def is_opus(self) -> bool:
        return False
