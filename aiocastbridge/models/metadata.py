"""Metadata returned by the streaming session for tracks and artists."""

from __future__ import annotations

from dataclasses import dataclass, field

from mashumaro.config import BaseConfig
from mashumaro.mixins.orjson import DataClassORJSONMixin


@dataclass
class Artist(DataClassORJSONMixin):
    """Artist metadata."""

    artist_id: str
    name: str


@dataclass
class Track(DataClassORJSONMixin):
    """Track metadata."""

    track_id: str
    name: str
    artist_ids: list[str] = field(default_factory=list)
    """Artists credited on the track, primary artist first."""
    album: str | None = None
    duration_ms: int | None = None

    @property
    def primary_artist_id(self) -> str | None:
        """Return the first credited artist, if any."""
        return self.artist_ids[0] if self.artist_ids else None

    class Config(BaseConfig):
        """Config for parsing json metadata."""

        omit_none = True


def format_listening_status(artist: Artist, track: Track) -> str:
    """Return the status text shown while a track is playing."""
    return f"{artist.name}: {track.name}"
