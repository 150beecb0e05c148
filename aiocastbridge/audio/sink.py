"""Audio sink that feeds playback engine output into a byte bridge."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from .bridge import ByteBridge
from .encoder import SampleEncoder

if TYPE_CHECKING:
    from aiocastbridge.connect.volume import AudioFilter

logger = logging.getLogger(__name__)


class BridgeSink:
    """
    Sink handed to the playback engine.

    Each written block is filtered, resampled and encoded, then pushed into the
    bridge. ``write`` blocks while the bridge is full, which throttles the
    playback engine to the pace of the voice player.
    """

    def __init__(
        self,
        bridge: ByteBridge,
        encoder: SampleEncoder,
        *,
        audio_filter: AudioFilter | None = None,
    ) -> None:
        """
        Initialize the sink.

        Args:
            bridge: Bridge receiving the encoded bytes.
            encoder: Encoder converting blocks to the output format.
            audio_filter: Optional filter applied to each block before resampling.
        """
        self.bridge = bridge
        self.encoder = encoder
        self._audio_filter = audio_filter
        self._started = False
        self._blocks_written = 0

    @property
    def started(self) -> bool:
        """Whether the playback engine started the sink."""
        return self._started

    @property
    def blocks_written(self) -> int:
        """Number of blocks written since creation."""
        return self._blocks_written

    def start(self) -> None:
        """Playback engine opened the sink."""
        self._started = True
        logger.debug("Sink started")

    def stop(self) -> None:
        """Playback engine closed the sink; buffered bytes remain readable."""
        self._started = False
        logger.debug("Sink stopped after %d blocks", self._blocks_written)

    def write(self, samples: Sequence[float] | np.ndarray) -> int:
        """
        Encode one interleaved block and push it into the bridge.

        Returns:
            Number of bytes pushed.

        Raises:
            EncodeError: If the block cannot be resampled or encoded. Nothing
                is pushed for that block.
            BridgeClosedError: If the bridge was closed while pushing.
        """
        frames = self.encoder.to_frames(samples)
        if self._audio_filter is not None:
            frames = self._audio_filter(frames)
        data = self.encoder.encode_frames(frames)
        self.bridge.push(data)
        self._blocks_written += 1
        return len(data)
