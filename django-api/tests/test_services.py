"""Unit tests for EventService.

These test orchestration, error mapping and the read-modify-write cycle
against the in-memory store.
Run with: pytest tests/test_services.py -v
"""

import threading
import time
import uuid

import pytest

from events.domain import CallerIdentity
from events.domain.errors import (
    AlreadyMemberError,
    ConflictError,
    EventFullError,
    EventNotFoundError,
    InvalidEventIdError,
    InvalidInputError,
    InvalidSessionIdError,
    NotAuthorizedError,
)
from events.services.event_service import EventService
from events.stores.memory_store import InMemoryEventStore


class SlowReadStore(InMemoryEventStore):
    """Widens the gap between reading an event and writing it back."""

    def get_event(self, event_id):
        event = super().get_event(event_id)
        time.sleep(0.002)
        return event


class ConflictingStore(InMemoryEventStore):
    """Loses the first `conflicts` writes of existing events to a phantom writer."""

    def __init__(self, conflicts: int) -> None:
        super().__init__()
        self.conflicts = conflicts
        self.attempts = 0

    def save(self, event):
        if event.revision > 0:
            self.attempts += 1
            if self.attempts <= self.conflicts:
                raise ConflictError(str(event.id))
        return super().save(event)


class TestEventService:
    """Tests for EventService lookups."""

    def test_get_event_invalid_id_raises_error(self, service):
        """get_event raises InvalidEventIdError for malformed UUID."""
        with pytest.raises(InvalidEventIdError):
            service.get_event("not-a-uuid")

    def test_get_event_not_found_raises_error(self, service):
        """get_event raises EventNotFoundError when store returns None."""
        with pytest.raises(EventNotFoundError):
            service.get_event(str(uuid.uuid4()))

    def test_get_sessions_invalid_id_raises_error(self, service):
        """get_sessions_for_event raises InvalidEventIdError for malformed UUID."""
        with pytest.raises(InvalidEventIdError):
            service.get_sessions_for_event("42")

    def test_get_sessions_event_not_found_raises_error(self, service):
        """get_sessions_for_event raises EventNotFoundError when event doesn't exist."""
        with pytest.raises(EventNotFoundError):
            service.get_sessions_for_event(str(uuid.uuid4()))

    def test_get_sessions_returns_sessions_in_order(
        self, service, organizer, event_payload, session_payload
    ):
        """Sessions come back in the order they were added."""
        event = service.create_event(
            organizer,
            event_payload(sessions=[session_payload(title="One"), session_payload(title="Two")]),
        )

        sessions = service.get_sessions_for_event(str(event.id))

        assert [s.title for s in sessions] == ["One", "Two"]


class TestCreateAndList:
    """Tests for create_event and the listing operations."""

    def test_create_event_persists_aggregate(self, service, store, organizer, event_payload):
        """A created event is stored with its first revision."""
        event = service.create_event(organizer, event_payload())

        assert event.revision == 1
        assert store.get_event(event.id) == event
        assert event.organizer_id == "org1"
        assert event.title == "PyData Meetup"

    def test_create_invalid_event_stores_nothing(self, service, organizer, event_payload):
        """A rejected payload leaves the store untouched."""
        with pytest.raises(InvalidInputError) as excinfo:
            service.create_event(organizer, event_payload(endDate="2025-01-01T00:00:00Z"))

        assert excinfo.value.fields == ["endDate"]
        assert service.list_owned_events(organizer) == []

    def test_list_owned_events_newest_first(self, service, organizer, user_a, event_payload):
        """Only the caller's events are listed, most recently created first."""
        first = service.create_event(organizer, event_payload(title="First"))
        second = service.create_event(organizer, event_payload(title="Second"))
        service.create_event(user_a, event_payload(title="Not mine"))

        owned = service.list_owned_events(organizer)

        assert [e.id for e in owned] == [second.id, first.id]

    def test_list_public_events_excludes_own_and_private(
        self, service, organizer, user_a, event_payload
    ):
        """Public listing hides the caller's own events and private events."""
        public = service.create_event(organizer, event_payload(title="Open"))
        service.create_event(organizer, event_payload(title="Closed", isPublic=False))
        service.create_event(user_a, event_payload(title="Mine"))

        listed = service.list_public_events(user_a)

        assert [e.id for e in listed] == [public.id]

    def test_list_public_events_is_limited(self, store, clock, organizer, user_a, event_payload):
        """At most public_list_limit events are returned."""
        service = EventService(store, public_list_limit=2, clock=clock)
        created = [service.create_event(organizer, event_payload()) for _ in range(3)]

        listed = service.list_public_events(user_a)

        assert [e.id for e in listed] == [created[2].id, created[1].id]

    def test_list_joined_events(self, service, organizer, user_a, event_payload):
        """Joined listing returns events the caller is a participant of."""
        joined = service.create_event(organizer, event_payload(title="Joined"))
        service.create_event(organizer, event_payload(title="Skipped"))
        service.join_event(user_a, str(joined.id))

        listed = service.list_joined_events(user_a)

        assert [e.id for e in listed] == [joined.id]


class TestUpdateAndDelete:
    """Tests for update_event and delete_event."""

    def test_update_event_by_organizer(self, service, organizer, event_payload):
        """The organizer can change event fields; updated_at moves forward."""
        event = service.create_event(organizer, event_payload())

        updated = service.update_event(
            organizer, str(event.id), {"title": "Renamed", "location": "", "capacity": 10}
        )

        assert updated.title == "Renamed"
        assert updated.location == "TBD"
        assert updated.capacity.value == 10
        assert updated.organizer_id == event.organizer_id
        assert updated.updated_at > event.updated_at
        assert updated.created_at == event.created_at

    def test_update_event_by_other_user_is_rejected(self, service, organizer, user_a, event_payload):
        """Only the organizer can update an event."""
        event = service.create_event(organizer, event_payload())

        with pytest.raises(NotAuthorizedError):
            service.update_event(user_a, str(event.id), {"title": "Hijacked"})

        assert service.get_event(str(event.id)) == event

    def test_update_event_rechecks_merged_dates(self, service, organizer, event_payload):
        """A patch moving endDate before the stored startDate is rejected."""
        event = service.create_event(organizer, event_payload())

        with pytest.raises(InvalidInputError) as excinfo:
            service.update_event(organizer, str(event.id), {"endDate": "2025-05-01T00:00:00Z"})

        assert excinfo.value.fields == ["endDate"]

    def test_update_event_cannot_shrink_below_roster(
        self, service, organizer, user_a, user_b, event_payload
    ):
        """Capacity cannot drop below the number of registered participants."""
        event = service.create_event(organizer, event_payload())
        service.join_event(user_a, str(event.id))
        service.join_event(user_b, str(event.id))

        with pytest.raises(InvalidInputError) as excinfo:
            service.update_event(organizer, str(event.id), {"capacity": 1})

        assert excinfo.value.fields == ["capacity"]

    def test_delete_event_by_other_user_is_rejected(self, service, organizer, user_a, event_payload):
        """Ownership is verified before deleting."""
        event = service.create_event(organizer, event_payload())

        with pytest.raises(NotAuthorizedError):
            service.delete_event(user_a, str(event.id))

        assert service.get_event(str(event.id)) == event

    def test_delete_event_by_organizer(self, service, organizer, event_payload):
        """The organizer deletes the event and everything it owns."""
        event = service.create_event(organizer, event_payload())

        service.delete_event(organizer, str(event.id))

        with pytest.raises(EventNotFoundError):
            service.get_event(str(event.id))


class TestMembership:
    """Tests for join_event and leave_event."""

    def test_capacity_one_scenario(self, service, organizer, user_a, user_b, event_payload):
        """A single seat passes from one user to another."""
        event_id = str(service.create_event(organizer, event_payload(capacity=1)).id)

        assert service.join_event(user_a, event_id) == 1
        with pytest.raises(EventFullError):
            service.join_event(user_b, event_id)
        assert service.leave_event(user_a, event_id) == 0
        assert service.join_event(user_b, event_id) == 1

    def test_join_twice_keeps_count(self, service, organizer, user_a, event_payload):
        """The second join fails with AlreadyMember and the count stays the same."""
        event_id = str(service.create_event(organizer, event_payload()).id)
        service.join_event(user_a, event_id)

        with pytest.raises(AlreadyMemberError):
            service.join_event(user_a, event_id)

        assert service.get_event(event_id).participant_count == 1

    def test_leave_without_joining_reports_unchanged_count(
        self, service, organizer, user_a, user_b, event_payload
    ):
        """Leaving an event never joined succeeds."""
        event_id = str(service.create_event(organizer, event_payload()).id)
        service.join_event(user_a, event_id)

        assert service.leave_event(user_b, event_id) == 1

    def test_join_missing_event_raises_not_found(self, service, user_a):
        """Joining an event that does not exist fails."""
        with pytest.raises(EventNotFoundError):
            service.join_event(user_a, str(uuid.uuid4()))

    def test_concurrent_joins_never_exceed_capacity(self, organizer, event_payload):
        """Racing joins past the remaining capacity never overfill the event."""
        store = SlowReadStore()
        service = EventService(store, max_write_attempts=50)
        capacity = 3
        event_id = str(service.create_event(organizer, event_payload(capacity=capacity)).id)

        callers = [CallerIdentity(f"racer{n}") for n in range(10)]
        barrier = threading.Barrier(len(callers))
        joined, rejected = [], []

        def race(caller: CallerIdentity) -> None:
            barrier.wait()
            try:
                service.join_event(caller, event_id)
            except (EventFullError, ConflictError) as exc:
                rejected.append(exc)
            else:
                joined.append(caller.user_id)

        threads = [threading.Thread(target=race, args=(c,)) for c in callers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stored = service.get_event(event_id)
        assert stored.participant_count <= capacity
        assert sorted(p.user_id for p in stored.participants) == sorted(joined)
        assert len(joined) + len(rejected) == len(callers)


class TestWriteConflicts:
    """Tests for retrying writes that lose a race."""

    def test_conflicting_write_is_retried(self, organizer, user_a, event_payload):
        """A lost write is replayed on a fresh read."""
        store = ConflictingStore(conflicts=2)
        service = EventService(store, max_write_attempts=3)
        event_id = str(service.create_event(organizer, event_payload()).id)

        assert service.join_event(user_a, event_id) == 1
        assert store.attempts == 3

    def test_conflict_is_raised_after_max_attempts(self, organizer, user_a, event_payload):
        """When every attempt loses, the caller gets a retryable ConflictError."""
        store = ConflictingStore(conflicts=100)
        service = EventService(store, max_write_attempts=4)
        event_id = str(service.create_event(organizer, event_payload()).id)

        with pytest.raises(ConflictError) as excinfo:
            service.join_event(user_a, event_id)

        assert excinfo.value.retryable
        assert store.attempts == 4
        assert service.get_event(event_id).participant_count == 0


class TestSessionOperations:
    """Tests for session operations through the service."""

    def test_add_two_remove_first(self, service, organizer, event_payload, session_payload):
        """Removing the first of two sessions keeps the second with its fields."""
        event_id = str(service.create_event(organizer, event_payload()).id)
        first = service.add_session(organizer, event_id, session_payload(title="First"))
        second = service.add_session(organizer, event_id, session_payload(title="Second"))

        service.remove_session(organizer, event_id, str(first.id))

        assert service.get_sessions_for_event(event_id) == [second]

    def test_update_session_through_service(self, service, organizer, event_payload, session_payload):
        """A session patch is validated and merged."""
        event_id = str(service.create_event(organizer, event_payload()).id)
        session = service.add_session(organizer, event_id, session_payload())

        updated = service.update_session(
            organizer, event_id, str(session.id), {"endTime": "2025-06-01T11:30:00Z"}
        )

        assert updated.id == session.id
        assert updated.end_time.hour == 11
        assert service.get_sessions_for_event(event_id) == [updated]

    def test_inverted_session_update_leaves_session_unchanged(
        self, service, organizer, event_payload, session_payload
    ):
        """A patch that would end the session before it starts is rejected."""
        event_id = str(service.create_event(organizer, event_payload()).id)
        session = service.add_session(organizer, event_id, session_payload())

        with pytest.raises(InvalidInputError):
            service.update_session(
                organizer, event_id, str(session.id), {"endTime": "2025-06-01T08:00:00Z"}
            )

        assert service.get_sessions_for_event(event_id) == [session]

    def test_session_operations_by_non_organizer_change_nothing(
        self, service, organizer, user_a, event_payload, session_payload
    ):
        """Non-organizers can neither add, update nor remove sessions."""
        event_id = str(service.create_event(organizer, event_payload()).id)
        session = service.add_session(organizer, event_id, session_payload())
        before = service.get_event(event_id)

        with pytest.raises(NotAuthorizedError):
            service.add_session(user_a, event_id, session_payload())
        with pytest.raises(NotAuthorizedError):
            service.update_session(user_a, event_id, str(session.id), {"title": "Nope"})
        with pytest.raises(NotAuthorizedError):
            service.remove_session(user_a, event_id, str(session.id))

        assert service.get_event(event_id) == before

    def test_invalid_session_id_is_rejected(self, service, organizer, event_payload):
        """Session identifiers must be UUIDs."""
        event_id = str(service.create_event(organizer, event_payload()).id)

        with pytest.raises(InvalidSessionIdError):
            service.remove_session(organizer, event_id, "session-1")
