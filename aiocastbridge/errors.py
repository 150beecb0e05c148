"""Exceptions raised by aiocastbridge."""

from __future__ import annotations


class CastBridgeError(Exception):
    """Base class for all aiocastbridge errors."""


class EncodeError(CastBridgeError):
    """An audio block could not be resampled or encoded.

    Fatal for the write that raised it; the writer's caller decides whether to
    skip the block, stall or end the session.
    """


class BridgeClosedError(CastBridgeError):
    """Bytes were pushed into a byte bridge that has been closed."""


class MetadataLookupError(CastBridgeError):
    """The streaming session could not resolve track or artist metadata."""

    def __init__(self, item_id: str, reason: str | None = None) -> None:
        """Initialize the error for the item that failed to resolve."""
        self.item_id = item_id
        message = f"Could not resolve metadata for {item_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConfigurationError(CastBridgeError):
    """Startup configuration is missing or invalid."""
