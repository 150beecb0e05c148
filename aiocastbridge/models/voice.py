"""Voice membership models for the watched participant."""

from __future__ import annotations

from dataclasses import dataclass

from mashumaro.mixins.orjson import DataClassORJSONMixin


@dataclass(frozen=True)
class VoiceMembership(DataClassORJSONMixin):
    """Voice channel a participant is connected to, if any."""

    user_id: int
    channel_id: int | None = None
    """Voice channel of the participant, None when not in a voice channel."""


@dataclass(frozen=True)
class MembershipChange(DataClassORJSONMixin):
    """A voice membership transition for one participant."""

    new: VoiceMembership
    old: VoiceMembership | None = None
    """Previous membership, None when no prior state is known."""

    def __post_init__(self) -> None:
        """Validate that both memberships describe the same participant."""
        if self.old is not None and self.old.user_id != self.new.user_id:
            raise ValueError(
                f"Membership change mixes participants {self.old.user_id} and {self.new.user_id}"
            )

    @property
    def user_id(self) -> int:
        """Participant affected by this change."""
        return self.new.user_id

    @property
    def old_channel_id(self) -> int | None:
        """Channel before the change, None when unknown or not connected."""
        return self.old.channel_id if self.old is not None else None

    @property
    def new_channel_id(self) -> int | None:
        """Channel after the change."""
        return self.new.channel_id
