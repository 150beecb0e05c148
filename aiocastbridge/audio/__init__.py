"""Audio conversion and buffering between the playback engine and voice."""

from .bridge import DEFAULT_CAPACITY, ByteBridge
from .encoder import SampleEncoder
from .sink import BridgeSink

__all__ = [
    "DEFAULT_CAPACITY",
    "BridgeSink",
    "ByteBridge",
    "SampleEncoder",
]
