"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
Sessions and participants are owned rows of an Event and are rewritten with
it on every save (see stores/django_store.py).
"""

import uuid

from django.db import models


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    location = models.CharField(max_length=255, default="TBD")
    capacity = models.PositiveIntegerField(default=0)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    image = models.CharField(max_length=500, blank=True, default="")
    organizer_id = models.CharField(max_length=255)
    organizer_name = models.CharField(max_length=255, default="Anonymous")
    organizer_email = models.CharField(max_length=255, blank=True, default="")
    is_public = models.BooleanField(default=False)
    tags = models.JSONField(default=list, blank=True)
    revision = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"]),
            models.Index(fields=["organizer_id", "-created_at"]),
            models.Index(fields=["is_public", "-created_at"]),
        ]

    def __str__(self) -> str:
        return self.title


class Session(models.Model):
    """Persistence model for event sessions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="sessions")
    position = models.PositiveIntegerField()
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    speaker = models.CharField(max_length=255, default="TBD")
    room = models.CharField(max_length=255, default="TBD")
    tags = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["position"]
        indexes = [
            models.Index(fields=["event", "position"]),
        ]

    def __str__(self) -> str:
        return f"{self.event.title} - {self.title}"


class Participant(models.Model):
    """Persistence model for an event's roster entries."""

    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="participants"
    )
    position = models.PositiveIntegerField()
    user_id = models.CharField(max_length=255)
    user_name = models.CharField(max_length=255, default="Anonymous")
    user_email = models.CharField(max_length=255, blank=True, default="")
    registered_at = models.DateTimeField()

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user_id"], name="unique_participant_per_event"
            ),
        ]
        indexes = [
            models.Index(fields=["user_id"]),
        ]

    def __str__(self) -> str:
        return f"{self.user_name} - {self.event.title}"
