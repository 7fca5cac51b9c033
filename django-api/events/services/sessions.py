"""Organizer-only management of the Sessions embedded in an Event.

Sessions are addressed by identifier inside their owning Event and looked up
by scanning its sessions; they have no identity outside it.
"""

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from events.domain.errors import (
    FieldError,
    InvalidInputError,
    NotAuthorizedError,
    SessionNotFoundError,
)
from events.domain.models import Event, Session
from events.domain.value_objects import CallerIdentity, SessionId
from events.services.validation import validate_session_payload

_PATCHABLE = ("title", "description", "start_time", "end_time", "speaker", "room", "tags")


def add_session(
    event: Event,
    caller: CallerIdentity,
    fields: Mapping[str, Any],
    now: datetime | None = None,
) -> tuple[Event, Session]:
    """Append a new session to the event.

    fields is a raw session payload (camelCase keys); it is validated here.

    Raises:
        NotAuthorizedError: If caller is not the organizer.
        InvalidInputError: If the payload is invalid.
    """
    _ensure_owner(event, caller)
    session = Session.from_fields(validate_session_payload(fields))
    return event.with_session(session).touch(now), session


def update_session(
    event: Event,
    caller: CallerIdentity,
    session_id: SessionId,
    changes: Mapping[str, Any],
    now: datetime | None = None,
) -> tuple[Event, Session]:
    """Merge validated changes over an existing session.

    changes uses domain attribute names, as returned by validate_session_patch.
    Unknown keys and the identifier are ignored.

    Raises:
        NotAuthorizedError: If caller is not the organizer.
        SessionNotFoundError: If the session is not part of this event.
        InvalidInputError: If the merged session would end before it starts.
    """
    _ensure_owner(event, caller)
    current = _find(event, session_id)

    merged = {key: changes[key] for key in _PATCHABLE if key in changes}
    if "tags" in merged:
        merged["tags"] = tuple(merged["tags"])
    start = merged.get("start_time", current.start_time)
    end = merged.get("end_time", current.end_time)
    if end < start:
        raise InvalidInputError(
            [FieldError("endTime", "Session end time must be after start time", end)]
        )

    updated = replace(current, **merged)
    return event.replacing_session(updated).touch(now), updated


def remove_session(
    event: Event,
    caller: CallerIdentity,
    session_id: SessionId,
    now: datetime | None = None,
) -> Event:
    """Remove a session from the event.

    Raises:
        NotAuthorizedError: If caller is not the organizer.
        SessionNotFoundError: If the session is not part of this event.
    """
    _ensure_owner(event, caller)
    _find(event, session_id)
    return event.without_session(session_id).touch(now)


def _ensure_owner(event: Event, caller: CallerIdentity) -> None:
    if not event.is_owned_by(caller):
        raise NotAuthorizedError(str(event.id))


def _find(event: Event, session_id: SessionId) -> Session:
    session = event.find_session(session_id)
    if session is None:
        raise SessionNotFoundError(str(event.id), str(session_id))
    return session
