"""discord.py integration: voice transport, status publisher and client."""

from .client import CastBridgeBot, default_intents
from .source import FloatPCMSource, float_to_pcm16
from .transport import DiscordStatusPublisher, DiscordVoiceTransport

__all__ = [
    "CastBridgeBot",
    "DiscordStatusPublisher",
    "DiscordVoiceTransport",
    "FloatPCMSource",
    "default_intents",
    "float_to_pcm16",
]
