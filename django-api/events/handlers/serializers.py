"""Serializers for transforming domain models to API responses.

Input payloads are validated in events/services/validation.py.
"""

from rest_framework import serializers


class ParticipantSerializer(serializers.Serializer):
    """Serializer for Participant domain model."""

    userId = serializers.CharField(source="user_id")
    userName = serializers.CharField(source="user_name")
    userEmail = serializers.CharField(source="user_email")
    registeredAt = serializers.DateTimeField(source="registered_at")


class SessionSerializer(serializers.Serializer):
    """Serializer for Session domain model."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    startTime = serializers.DateTimeField(source="start_time")
    endTime = serializers.DateTimeField(source="end_time")
    speaker = serializers.CharField()
    room = serializers.CharField()
    tags = serializers.ListField(child=serializers.CharField())


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    startDate = serializers.DateTimeField(source="start_date")
    endDate = serializers.DateTimeField(source="end_date")
    location = serializers.CharField()
    capacity = serializers.IntegerField(source="capacity.value")
    price = serializers.DecimalField(
        source="price.amount", max_digits=10, decimal_places=2, coerce_to_string=False
    )
    image = serializers.CharField()
    organizerId = serializers.CharField(source="organizer_id")
    organizerName = serializers.CharField(source="organizer_name")
    organizerEmail = serializers.CharField(source="organizer_email")
    isPublic = serializers.BooleanField(source="is_public")
    tags = serializers.ListField(child=serializers.CharField())
    sessions = SessionSerializer(many=True)
    participants = ParticipantSerializer(many=True)
    participantCount = serializers.IntegerField(source="participant_count")
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")
