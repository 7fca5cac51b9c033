"""Pytest configuration and shared fixtures."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from events.domain import CallerIdentity
from events.services.event_service import EventService
from events.stores.memory_store import InMemoryEventStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def authenticate(api_client: APIClient):
    """Return a function that makes api_client act as the given caller."""

    def as_caller(identity: CallerIdentity) -> APIClient:
        headers = {"HTTP_X_USER_ID": identity.user_id}
        if identity.name:
            headers["HTTP_X_USER_NAME"] = identity.name
        if identity.email:
            headers["HTTP_X_USER_EMAIL"] = identity.email
        api_client.credentials(**headers)
        return api_client

    return as_caller


@pytest.fixture
def organizer() -> CallerIdentity:
    return CallerIdentity("org1", name="Olivia Organizer", email="olivia@example.com")


@pytest.fixture
def user_a() -> CallerIdentity:
    return CallerIdentity("userA", name="Alex", email="alex@example.com")


@pytest.fixture
def user_b() -> CallerIdentity:
    return CallerIdentity("userB")


@pytest.fixture
def clock():
    """Deterministic clock advancing one second per call."""
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    ticks = itertools.count()
    return lambda: base + timedelta(seconds=next(ticks))


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def service(store: InMemoryEventStore, clock) -> EventService:
    return EventService(store, clock=clock)


@pytest.fixture
def event_payload():
    """Return a builder for a valid event creation payload."""

    def build(**overrides) -> dict:
        payload = {
            "title": "  PyData Meetup ",
            "description": "Monthly meetup",
            "startDate": "2025-06-01T09:00:00Z",
            "endDate": "2025-06-01T17:00:00Z",
            "location": "Main Hall",
            "capacity": 0,
            "price": "12.50",
            "isPublic": True,
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def session_payload():
    """Return a builder for a valid session payload."""

    def build(**overrides) -> dict:
        payload = {
            "title": "Keynote",
            "startTime": "2025-06-01T09:00:00Z",
            "endTime": "2025-06-01T10:00:00Z",
            "speaker": "Grace",
            "room": "A1",
            "tags": ["opening"],
        }
        payload.update(overrides)
        return payload

    return build
