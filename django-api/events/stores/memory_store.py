"""In-process implementation of the EventStore.

Aggregates are immutable, so they are kept as-is; the lock only guards the
compare-and-set on revisions.
"""

import threading
from collections.abc import Callable
from dataclasses import replace

from events.domain import Event, EventId
from events.domain.errors import ConflictError, EventNotFoundError
from events.stores.interfaces import EventStore


class InMemoryEventStore(EventStore):
    """Dictionary-backed event store for tests and single-process use."""

    def __init__(self) -> None:
        self._events: dict[EventId, Event] = {}
        self._lock = threading.Lock()

    def get_event(self, event_id: EventId) -> Event | None:
        with self._lock:
            return self._events.get(event_id)

    def save(self, event: Event) -> Event:
        with self._lock:
            stored = self._events.get(event.id)
            if event.revision == 0:
                if stored is not None:
                    raise ConflictError(str(event.id))
            elif stored is None:
                raise EventNotFoundError(str(event.id))
            elif stored.revision != event.revision:
                raise ConflictError(str(event.id))

            saved = replace(event, revision=event.revision + 1)
            self._events[event.id] = saved
            return saved

    def delete_event(self, event_id: EventId) -> bool:
        with self._lock:
            return self._events.pop(event_id, None) is not None

    def list_by_organizer(self, organizer_id: str) -> list[Event]:
        return self._newest_first(lambda e: e.organizer_id == organizer_id)

    def list_public(self, excluding_organizer: str, limit: int) -> list[Event]:
        events = self._newest_first(
            lambda e: e.is_public and e.organizer_id != excluding_organizer
        )
        return events[:limit]

    def list_joined(self, user_id: str) -> list[Event]:
        return self._newest_first(lambda e: e.has_participant(user_id))

    def _newest_first(self, predicate: Callable[[Event], bool]) -> list[Event]:
        with self._lock:
            matches = [e for e in self._events.values() if predicate(e)]
        return sorted(matches, key=lambda e: e.created_at, reverse=True)
