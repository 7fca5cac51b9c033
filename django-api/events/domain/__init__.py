from events.domain.models import Event, Participant, Session
from events.domain.value_objects import CallerIdentity, Capacity, EventId, Money, SessionId

__all__ = [
    "Event",
    "Session",
    "Participant",
    "EventId",
    "SessionId",
    "CallerIdentity",
    "Money",
    "Capacity",
]
