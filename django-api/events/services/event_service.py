"""Event service - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Every mutation is a read-modify-write of the whole aggregate. The write is
conditioned on the revision that was read; on a conflicting write the cycle
is restarted from a fresh read, so checks such as capacity are always made
against the state that ends up being replaced.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from events.domain.errors import (
    ConflictError,
    EventNotFoundError,
    FieldError,
    InvalidEventIdError,
    InvalidInputError,
    InvalidSessionIdError,
    NotAuthorizedError,
)
from events.domain.models import DEFAULT_LOCATION, Event, Session, utcnow
from events.domain.value_objects import CallerIdentity, Capacity, EventId, Money, SessionId
from events.services import membership, sessions
from events.services.validation import (
    validate_event_patch,
    validate_event_payload,
    validate_session_patch,
)
from events.stores.interfaces import EventStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

Mutation = Callable[[Event, datetime], tuple[Event, T]]


class EventService:
    """Service for event, membership and session operations."""

    def __init__(
        self,
        store: EventStore,
        max_write_attempts: int = 5,
        public_list_limit: int = 20,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if max_write_attempts < 1:
            raise ValueError("max_write_attempts must be at least 1")
        self._store = store
        self._max_write_attempts = max_write_attempts
        self._public_list_limit = public_list_limit
        self._clock = clock

    # Events

    def create_event(self, caller: CallerIdentity, payload: Any) -> Event:
        """Validate payload and store a new event organized by caller.

        Raises:
            InvalidInputError: If the payload is invalid.
        """
        fields = validate_event_payload(payload)
        event = self._store.save(Event.create(caller, fields, now=self._clock()))
        logger.info(
            "Event %s created by %s with %d sessions",
            event.id,
            caller.user_id,
            len(event.sessions),
        )
        return event

    def list_owned_events(self, caller: CallerIdentity) -> list[Event]:
        """Return events organized by caller, newest first."""
        return self._store.list_by_organizer(caller.user_id)

    def list_public_events(self, caller: CallerIdentity) -> list[Event]:
        """Return public events organized by someone other than caller, newest first."""
        return self._store.list_public(caller.user_id, self._public_list_limit)

    def list_joined_events(self, caller: CallerIdentity) -> list[Event]:
        """Return events caller participates in, newest first."""
        return self._store.list_joined(caller.user_id)

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        return self._load(_parse_event_id(event_id))

    def update_event(self, caller: CallerIdentity, event_id: str, patch: Any) -> Event:
        """Apply a partial update to an event's own fields. Organizer only.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            NotAuthorizedError: If caller is not the organizer.
            InvalidInputError: If the patch is invalid or breaks an invariant.
        """
        changes = validate_event_patch(patch)

        def apply(event: Event, now: datetime) -> tuple[Event, None]:
            if not event.is_owned_by(caller):
                raise NotAuthorizedError(str(event.id))
            return _apply_details(event, changes).touch(now), None

        event, _ = self._mutate(_parse_event_id(event_id), apply)
        logger.info("Event %s updated by %s", event.id, caller.user_id)
        return event

    def delete_event(self, caller: CallerIdentity, event_id: str) -> None:
        """Delete an event with all its sessions and participants. Organizer only.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            NotAuthorizedError: If caller is not the organizer.
        """
        parsed = _parse_event_id(event_id)
        event = self._load(parsed)
        if not event.is_owned_by(caller):
            raise NotAuthorizedError(event_id)
        if not self._store.delete_event(parsed):
            raise EventNotFoundError(event_id)
        logger.info("Event %s deleted by %s", parsed, caller.user_id)

    # Membership

    def join_event(self, caller: CallerIdentity, event_id: str) -> int:
        """Add caller to the event's participants and return the new count.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            AlreadyMemberError: If caller already joined.
            EventFullError: If the event has no room left.
            ConflictError: If the write kept losing to concurrent writes.
        """
        event, _ = self._mutate(
            _parse_event_id(event_id),
            lambda e, now: (membership.join(e, caller, now), None),
        )
        logger.info(
            "User %s joined event %s (%d participants)",
            caller.user_id,
            event.id,
            event.participant_count,
        )
        return event.participant_count

    def leave_event(self, caller: CallerIdentity, event_id: str) -> int:
        """Remove caller from the event's participants and return the new count."""
        event, _ = self._mutate(
            _parse_event_id(event_id),
            lambda e, now: (membership.leave(e, caller, now), None),
        )
        logger.info("User %s left event %s", caller.user_id, event.id)
        return event.participant_count

    # Sessions

    def get_sessions_for_event(self, event_id: str) -> list[Session]:
        """Return sessions for an event in the order they were added.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        return list(self.get_event(event_id).sessions)

    def add_session(self, caller: CallerIdentity, event_id: str, payload: Any) -> Session:
        """Append a session to an event. Organizer only."""
        _, session = self._mutate(
            _parse_event_id(event_id),
            lambda e, now: sessions.add_session(e, caller, payload, now),
        )
        logger.info("Session %s added to event %s", session.id, event_id)
        return session

    def update_session(
        self,
        caller: CallerIdentity,
        event_id: str,
        session_id: str,
        patch: Any,
    ) -> Session:
        """Apply a partial update to one of an event's sessions. Organizer only."""
        parsed_session = _parse_session_id(session_id)
        changes = validate_session_patch(patch)
        _, session = self._mutate(
            _parse_event_id(event_id),
            lambda e, now: sessions.update_session(e, caller, parsed_session, changes, now),
        )
        logger.info("Session %s of event %s updated", session.id, event_id)
        return session

    def remove_session(self, caller: CallerIdentity, event_id: str, session_id: str) -> None:
        """Remove one of an event's sessions. Organizer only."""
        parsed_session = _parse_session_id(session_id)
        self._mutate(
            _parse_event_id(event_id),
            lambda e, now: (sessions.remove_session(e, caller, parsed_session, now), None),
        )
        logger.info("Session %s removed from event %s", session_id, event_id)

    # Read-modify-write

    def _load(self, event_id: EventId) -> Event:
        event = self._store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event

    def _mutate(self, event_id: EventId, mutation: Mutation[T]) -> tuple[Event, T]:
        for attempt in range(1, self._max_write_attempts + 1):
            current = self._load(event_id)
            updated, result = mutation(current, self._clock())
            try:
                return self._store.save(updated), result
            except ConflictError:
                logger.warning(
                    "Write conflict on event %s (attempt %d of %d)",
                    event_id,
                    attempt,
                    self._max_write_attempts,
                )
        raise ConflictError(str(event_id))


def _apply_details(event: Event, changes: dict[str, Any]) -> Event:
    changes = dict(changes)
    start = changes.get("start_date", event.start_date)
    end = changes.get("end_date", event.end_date)
    errors = []
    if end < start:
        errors.append(FieldError("endDate", "End date must be after start date", end))
    if "capacity" in changes:
        capacity = Capacity(changes["capacity"])
        if not capacity.is_unbounded and capacity.value < event.participant_count:
            errors.append(
                FieldError(
                    "capacity",
                    "Capacity cannot be lower than the current number of participants",
                    changes["capacity"],
                )
            )
        changes["capacity"] = capacity
    if errors:
        raise InvalidInputError(errors)

    if "price" in changes:
        changes["price"] = Money(changes["price"])
    if "location" in changes:
        changes["location"] = changes["location"] or DEFAULT_LOCATION
    if "tags" in changes:
        changes["tags"] = tuple(changes["tags"])
    return event.with_details(**changes)


def _parse_event_id(event_id: str) -> EventId:
    try:
        return EventId.from_string(event_id)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidEventIdError() from exc


def _parse_session_id(session_id: str) -> SessionId:
    try:
        return SessionId.from_string(session_id)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidSessionIdError() from exc
