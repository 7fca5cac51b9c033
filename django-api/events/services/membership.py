"""Join/leave semantics for an Event's participant roster.

Both operations are pure: they take an aggregate value and return a new one.
Persisting the result, and closing the race between reading the roster and
writing it back, is the caller's job (see EventService).
"""

from datetime import datetime

from events.domain.errors import AlreadyMemberError, EventFullError
from events.domain.models import ANONYMOUS, Event, Participant, utcnow
from events.domain.value_objects import CallerIdentity


def join(event: Event, caller: CallerIdentity, now: datetime | None = None) -> Event:
    """Add caller to the roster.

    Raises:
        AlreadyMemberError: If caller is already a participant.
        EventFullError: If the event is bounded and has no room left.
    """
    if event.has_participant(caller.user_id):
        raise AlreadyMemberError(str(event.id), caller.user_id)
    if event.is_full:
        raise EventFullError(str(event.id))

    now = now or utcnow()
    participant = Participant(
        user_id=caller.user_id,
        user_name=caller.name or ANONYMOUS,
        user_email=caller.email or "",
        registered_at=now,
    )
    return event.with_participant(participant).touch(now)


def leave(event: Event, caller: CallerIdentity, now: datetime | None = None) -> Event:
    """Remove caller from the roster. Leaving an event never joined is a no-op."""
    return event.without_participant(caller.user_id).touch(now)
