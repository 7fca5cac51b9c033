"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. An Event is read and
written as a whole aggregate; writes are conditioned on the revision the
caller read.
"""

from abc import ABC, abstractmethod

from events.domain import Event, EventId


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event with its sessions and participants, or None if not found."""
        ...

    @abstractmethod
    def save(self, event: Event) -> Event:
        """Write the whole aggregate and return it with its new revision.

        An event with revision 0 is inserted. Otherwise the write only happens
        if the stored revision still equals event.revision.

        Raises:
            ConflictError: If another write got there first.
            EventNotFoundError: If the event was deleted in the meantime.
        """
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> bool:
        """Delete an event and everything it owns. Return False if it did not exist."""
        ...

    @abstractmethod
    def list_by_organizer(self, organizer_id: str) -> list[Event]:
        """Return events organized by organizer_id, ordered by created_at descending."""
        ...

    @abstractmethod
    def list_public(self, excluding_organizer: str, limit: int) -> list[Event]:
        """Return public events not organized by excluding_organizer, newest first."""
        ...

    @abstractmethod
    def list_joined(self, user_id: str) -> list[Event]:
        """Return events user_id participates in, ordered by created_at descending."""
        ...
