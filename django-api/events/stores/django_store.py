"""Django ORM implementation of the EventStore."""

import logging
from dataclasses import replace
from decimal import Decimal

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Prefetch, QuerySet

from events import models as orm
from events.domain import Capacity, Event, EventId, Money, Participant, Session, SessionId
from events.domain.errors import ConflictError, EventNotFoundError, StoreUnavailableError
from events.stores.interfaces import EventStore

logger = logging.getLogger(__name__)


class DjangoEventStore(EventStore):
    """Relational event store using Django ORM.

    Each save rewrites the event row and its owned session and participant
    rows in one transaction. The event row update is conditioned on the
    revision the caller read, which makes the whole write a compare-and-set.
    """

    def get_event(self, event_id: EventId) -> Event | None:
        try:
            record = self._queryset().filter(pk=event_id.value).first()
        except DatabaseError as exc:
            raise self._unavailable("get_event") from exc
        return _to_domain(record) if record is not None else None

    def save(self, event: Event) -> Event:
        try:
            with transaction.atomic():
                if event.revision == 0:
                    orm.Event.objects.create(id=event.id.value, revision=1, **_event_columns(event))
                else:
                    self._update_row(event)
                self._replace_children(event)
        except IntegrityError as exc:
            logger.warning("Insert collided for event %s", event.id)
            raise ConflictError(str(event.id)) from exc
        except DatabaseError as exc:
            raise self._unavailable("save") from exc
        return replace(event, revision=event.revision + 1)

    def delete_event(self, event_id: EventId) -> bool:
        try:
            deleted, _ = orm.Event.objects.filter(pk=event_id.value).delete()
        except DatabaseError as exc:
            raise self._unavailable("delete_event") from exc
        return deleted > 0

    def list_by_organizer(self, organizer_id: str) -> list[Event]:
        return self._list(self._queryset().filter(organizer_id=organizer_id))

    def list_public(self, excluding_organizer: str, limit: int) -> list[Event]:
        queryset = (
            self._queryset()
            .filter(is_public=True)
            .exclude(organizer_id=excluding_organizer)
        )
        return self._list(queryset[:limit])

    def list_joined(self, user_id: str) -> list[Event]:
        joined = orm.Participant.objects.filter(user_id=user_id).values("event_id")
        return self._list(self._queryset().filter(pk__in=joined))

    def _update_row(self, event: Event) -> None:
        updated = orm.Event.objects.filter(
            pk=event.id.value, revision=event.revision
        ).update(revision=F("revision") + 1, **_event_columns(event))
        if updated:
            return
        if orm.Event.objects.filter(pk=event.id.value).exists():
            raise ConflictError(str(event.id))
        raise EventNotFoundError(str(event.id))

    def _replace_children(self, event: Event) -> None:
        orm.Session.objects.filter(event_id=event.id.value).delete()
        orm.Participant.objects.filter(event_id=event.id.value).delete()
        orm.Session.objects.bulk_create(
            orm.Session(
                id=s.id.value,
                event_id=event.id.value,
                position=position,
                title=s.title,
                description=s.description,
                start_time=s.start_time,
                end_time=s.end_time,
                speaker=s.speaker,
                room=s.room,
                tags=list(s.tags),
            )
            for position, s in enumerate(event.sessions)
        )
        orm.Participant.objects.bulk_create(
            orm.Participant(
                event_id=event.id.value,
                position=position,
                user_id=p.user_id,
                user_name=p.user_name,
                user_email=p.user_email,
                registered_at=p.registered_at,
            )
            for position, p in enumerate(event.participants)
        )

    def _queryset(self) -> QuerySet:
        return orm.Event.objects.order_by("-created_at").prefetch_related(
            Prefetch("sessions", queryset=orm.Session.objects.order_by("position")),
            Prefetch("participants", queryset=orm.Participant.objects.order_by("position")),
        )

    def _list(self, queryset: QuerySet) -> list[Event]:
        try:
            return [_to_domain(record) for record in queryset]
        except DatabaseError as exc:
            raise self._unavailable("list") from exc

    def _unavailable(self, operation: str) -> StoreUnavailableError:
        logger.exception("Event store %s failed", operation)
        return StoreUnavailableError()


def _event_columns(event: Event) -> dict:
    return {
        "title": event.title,
        "description": event.description,
        "start_date": event.start_date,
        "end_date": event.end_date,
        "location": event.location,
        "capacity": event.capacity.value,
        "price": event.price.amount,
        "image": event.image,
        "organizer_id": event.organizer_id,
        "organizer_name": event.organizer_name,
        "organizer_email": event.organizer_email,
        "is_public": event.is_public,
        "tags": list(event.tags),
        "created_at": event.created_at,
        "updated_at": event.updated_at,
    }


def _to_domain(record: orm.Event) -> Event:
    return Event(
        id=EventId(record.id),
        title=record.title,
        description=record.description,
        start_date=record.start_date,
        end_date=record.end_date,
        location=record.location,
        capacity=Capacity(record.capacity),
        price=Money(Decimal(record.price)),
        image=record.image,
        organizer_id=record.organizer_id,
        organizer_name=record.organizer_name,
        organizer_email=record.organizer_email,
        is_public=record.is_public,
        tags=tuple(record.tags),
        sessions=tuple(
            Session(
                id=SessionId(s.id),
                title=s.title,
                description=s.description,
                start_time=s.start_time,
                end_time=s.end_time,
                speaker=s.speaker,
                room=s.room,
                tags=tuple(s.tags),
            )
            for s in record.sessions.all()
        ),
        participants=tuple(
            Participant(
                user_id=p.user_id,
                user_name=p.user_name,
                user_email=p.user_email,
                registered_at=p.registered_at,
            )
            for p in record.participants.all()
        ),
        created_at=record.created_at,
        updated_at=record.updated_at,
        revision=record.revision,
    )
