"""Voice call and presence handling."""

from .coordinator import EventCoordinator
from .presence import PresenceTracker
from .transport import MembershipLookup, StatusPublisher, VoiceTransport

__all__ = [
    "EventCoordinator",
    "MembershipLookup",
    "PresenceTracker",
    "StatusPublisher",
    "VoiceTransport",
]
