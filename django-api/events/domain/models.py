"""Domain models representing the Event aggregate.

These are pure domain objects with no API input rules.
Django ORM models are in events/models.py (persistence layer).

Aggregate values are immutable: every mutation returns a new Event and the
caller decides when to persist it.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Self

from events.domain.errors import FieldError, InvalidInputError
from events.domain.value_objects import (
    CallerIdentity,
    Capacity,
    EventId,
    Money,
    SessionId,
)

DEFAULT_LOCATION = "TBD"
DEFAULT_SPEAKER = "TBD"
DEFAULT_ROOM = "TBD"
ANONYMOUS = "Anonymous"

_REQUIRED_EVENT_FIELDS = (
    ("title", "title", "Title is required"),
    ("start_date", "startDate", "Start date is required"),
    ("end_date", "endDate", "End date is required"),
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class Session:
    """Domain representation of a Session embedded in an Event."""

    id: SessionId
    title: str
    start_time: datetime
    end_time: datetime
    description: str = ""
    speaker: str = DEFAULT_SPEAKER
    room: str = DEFAULT_ROOM
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.end_time < self.start_time:
            raise ValueError("Session end time must be after start time")

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> Self:
        """Build a session with a fresh identifier from validated fields."""
        return cls(
            id=SessionId.new(),
            title=fields["title"],
            start_time=fields["start_time"],
            end_time=fields["end_time"],
            description=fields.get("description") or "",
            speaker=fields.get("speaker") or DEFAULT_SPEAKER,
            room=fields.get("room") or DEFAULT_ROOM,
            tags=tuple(fields.get("tags") or ()),
        )


@dataclass(frozen=True)
class Participant:
    """Domain representation of a Participant on an Event's roster."""

    user_id: str
    registered_at: datetime
    user_name: str = ANONYMOUS
    user_email: str = ""


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event and everything it owns."""

    id: EventId
    title: str
    start_date: datetime
    end_date: datetime
    organizer_id: str
    created_at: datetime
    updated_at: datetime
    description: str = ""
    location: str = DEFAULT_LOCATION
    capacity: Capacity = Capacity(0)
    price: Money = Money(Decimal("0"))
    image: str = ""
    organizer_name: str = ANONYMOUS
    organizer_email: str = ""
    is_public: bool = False
    tags: tuple[str, ...] = ()
    sessions: tuple[Session, ...] = ()
    participants: tuple[Participant, ...] = ()
    revision: int = 0

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Event title cannot be empty")
        if self.end_date < self.start_date:
            raise ValueError("End date must be after start date")
        if self.updated_at < self.created_at:
            raise ValueError("Event cannot be updated before it was created")
        user_ids = [p.user_id for p in self.participants]
        if len(set(user_ids)) != len(user_ids):
            raise ValueError("Participants must be unique per event")
        if not self.capacity.is_unbounded and len(user_ids) > self.capacity.value:
            raise ValueError("Participants exceed event capacity")
        session_ids = [s.id for s in self.sessions]
        if len(set(session_ids)) != len(session_ids):
            raise ValueError("Session identifiers must be unique per event")

    @classmethod
    def create(
        cls,
        owner: CallerIdentity,
        fields: Mapping[str, Any],
        now: datetime | None = None,
    ) -> Self:
        """Create a new, unsaved event organized by owner.

        Raises:
            InvalidInputError: If title, start_date or end_date is missing.
        """
        missing = [
            FieldError(field=name, message=message)
            for key, name, message in _REQUIRED_EVENT_FIELDS
            if _is_blank(fields.get(key))
        ]
        if missing:
            raise InvalidInputError(missing)

        now = now or utcnow()
        return cls(
            id=EventId.new(),
            title=fields["title"].strip(),
            description=(fields.get("description") or "").strip(),
            start_date=fields["start_date"],
            end_date=fields["end_date"],
            location=(fields.get("location") or "").strip() or DEFAULT_LOCATION,
            capacity=Capacity(fields.get("capacity") or 0),
            price=Money(Decimal(fields.get("price") or 0)),
            image=(fields.get("image") or "").strip(),
            organizer_id=owner.user_id,
            organizer_name=owner.name or ANONYMOUS,
            organizer_email=owner.email or "",
            is_public=bool(fields.get("is_public", False)),
            tags=tuple(fields.get("tags") or ()),
            sessions=tuple(Session.from_fields(s) for s in fields.get("sessions") or ()),
            created_at=now,
            updated_at=now,
        )

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def is_full(self) -> bool:
        return not self.capacity.admits(self.participant_count)

    def is_owned_by(self, identity: CallerIdentity) -> bool:
        return self.organizer_id == identity.user_id

    def has_participant(self, user_id: str) -> bool:
        return any(p.user_id == user_id for p in self.participants)

    def find_session(self, session_id: SessionId) -> Session | None:
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None

    def touch(self, now: datetime | None = None) -> Self:
        """Return a copy stamped as modified. updated_at never moves backwards."""
        now = now or utcnow()
        return replace(self, updated_at=max(now, self.updated_at))

    def with_details(self, **changes: Any) -> Self:
        """Return a copy with top-level attributes replaced.

        Identity, ownership, children and bookkeeping fields cannot be changed
        this way.
        """
        locked = {"id", "organizer_id", "sessions", "participants", "created_at", "revision"}
        blocked = locked.intersection(changes)
        if blocked:
            raise ValueError(f"Cannot change {', '.join(sorted(blocked))}")
        return replace(self, **changes)

    def with_participant(self, participant: Participant) -> Self:
        return replace(self, participants=self.participants + (participant,))

    def without_participant(self, user_id: str) -> Self:
        remaining = tuple(p for p in self.participants if p.user_id != user_id)
        return replace(self, participants=remaining)

    def with_session(self, session: Session) -> Self:
        return replace(self, sessions=self.sessions + (session,))

    def replacing_session(self, session: Session) -> Self:
        sessions = tuple(session if s.id == session.id else s for s in self.sessions)
        return replace(self, sessions=sessions)

    def without_session(self, session_id: SessionId) -> Self:
        remaining = tuple(s for s in self.sessions if s.id != session_id)
        return replace(self, sessions=remaining)
