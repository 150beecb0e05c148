"""Sample rate conversion and binary encoding of playback audio."""

from __future__ import annotations

import logging
import types
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from aiocastbridge.errors import EncodeError
from aiocastbridge.models.types import ResamplerType

if TYPE_CHECKING:
    import av

    from aiocastbridge.config import AudioConfig

logger = logging.getLogger(__name__)

# Little-endian float32, the wire format read by the voice source
OUTPUT_DTYPE = np.dtype("<f4")
BYTES_PER_SAMPLE = OUTPUT_DTYPE.itemsize


def _get_av() -> types.ModuleType:
    """Lazy import of av module to avoid slow startup."""
    import av as _av  # noqa: PLC0415

    return _av


def _layout_for_channels(channels: int) -> str:
    if channels == 1:
        return "mono"
    if channels == 2:
        return "stereo"
    raise ValueError("Only mono and stereo layouts are supported")


class _SwrResampler:
    """Stateful libswresample converter producing interleaved float32 frames."""

    def __init__(self, *, input_rate: int, output_rate: int, channels: int) -> None:
        av = _get_av()
        self._input_rate = input_rate
        self._layout = _layout_for_channels(channels)
        self._resampler: av.AudioResampler = av.AudioResampler(
            format="flt",
            layout=self._layout,
            rate=output_rate,
        )

    def resample(self, frames: np.ndarray) -> np.ndarray:
        av = _get_av()
        try:
            in_frame = av.AudioFrame.from_ndarray(
                np.ascontiguousarray(frames.reshape(1, -1)), format="flt", layout=self._layout
            )
            in_frame.sample_rate = self._input_rate
            out_frames = self._resampler.resample(in_frame)
        except (ValueError, av.error.FFmpegError) as err:
            raise EncodeError(f"Resampler rejected block: {err}") from err
        if not out_frames:
            return np.empty(0, dtype=np.float32)
        return np.concatenate([f.to_ndarray().reshape(-1) for f in out_frames])


class SampleEncoder:
    """
    Convert interleaved float blocks to the output rate as little-endian float32 bytes.

    The linear backend is stateless: every block is interpolated on its own and
    yields ``ceil(frames * output_rate / input_rate)`` frames, so the stream can
    drift by at most one frame per block. The SWR backend keeps filter state
    between blocks and may return fewer frames for the first blocks.
    """

    def __init__(
        self,
        *,
        input_rate: int = 44100,
        output_rate: int = 48000,
        channels: int = 2,
        resampler: ResamplerType = ResamplerType.LINEAR,
    ) -> None:
        """
        Initialize the encoder.

        Args:
            input_rate: Sample rate of incoming blocks in Hz.
            output_rate: Sample rate of the encoded output in Hz.
            channels: Number of interleaved channels.
            resampler: Resampling backend.
        """
        if input_rate <= 0 or output_rate <= 0:
            raise ValueError("Sample rates must be positive")
        _layout_for_channels(channels)
        self.input_rate = input_rate
        self.output_rate = output_rate
        self.channels = channels
        self.resampler_type = resampler
        self._swr: _SwrResampler | None = None
        if resampler == ResamplerType.SWR and input_rate != output_rate:
            self._swr = _SwrResampler(
                input_rate=input_rate, output_rate=output_rate, channels=channels
            )

    @classmethod
    def from_config(cls, config: AudioConfig) -> SampleEncoder:
        """Create an encoder from the audio configuration."""
        return cls(
            input_rate=config.input_rate,
            output_rate=config.output_rate,
            channels=config.channels,
            resampler=config.resampler,
        )

    def expected_frames(self, input_frames: int) -> int:
        """Return the number of frames the linear backend produces for a block."""
        return -(-input_frames * self.output_rate // self.input_rate)

    def to_frames(self, samples: Sequence[float] | np.ndarray) -> np.ndarray:
        """
        Validate an interleaved block and reshape it to ``(frames, channels)``.

        Raises:
            EncodeError: If the block is not a flat sequence of numbers whose
                length is a multiple of the channel count.
        """
        try:
            arr = np.asarray(samples, dtype=np.float32)
        except (TypeError, ValueError) as err:
            raise EncodeError(f"Audio block is not numeric: {err}") from err
        if arr.ndim != 1:
            raise EncodeError(f"Audio block must be one-dimensional, got {arr.ndim} dimensions")
        if arr.size % self.channels:
            raise EncodeError(
                f"Audio block of {arr.size} samples is not a multiple of {self.channels} channels"
            )
        return arr.reshape(-1, self.channels)

    def _resample_linear(self, frames: np.ndarray) -> np.ndarray:
        count = frames.shape[0]
        out_count = self.expected_frames(count)
        positions = np.arange(out_count, dtype=np.float64) * (self.input_rate / self.output_rate)
        source = np.arange(count, dtype=np.float64)
        out = np.empty((out_count, self.channels), dtype=np.float32)
        for channel in range(self.channels):
            out[:, channel] = np.interp(positions, source, frames[:, channel])
        return out.reshape(-1)

    def resample(self, frames: np.ndarray) -> np.ndarray:
        """Resample ``(frames, channels)`` to interleaved float32 at the output rate."""
        if frames.shape[0] == 0:
            return np.empty(0, dtype=np.float32)
        if self.input_rate == self.output_rate:
            return frames.reshape(-1)
        if self._swr is not None:
            return self._swr.resample(frames)
        return self._resample_linear(frames)

    def encode_frames(self, frames: np.ndarray) -> bytes:
        """Resample validated ``(frames, channels)`` audio and encode it."""
        resampled = self.resample(frames)
        return np.ascontiguousarray(resampled, dtype=OUTPUT_DTYPE).tobytes()

    def encode(self, samples: Sequence[float] | np.ndarray) -> bytes:
        """
        Resample one interleaved block and encode it as little-endian float32.

        Raises:
            EncodeError: If the block is malformed or the resampler fails.
        """
        return self.encode_frames(self.to_frames(samples))
