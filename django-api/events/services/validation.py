"""Input validation for event and session payloads.

Payloads are checked with REST framework serializers and returned as plain
dicts keyed by domain attribute names (start_date, is_public, ...). Unknown
keys are dropped. Every violation found is raised at once as
InvalidInputError, each tagged with its dotted field path in the payload's
own naming (e.g. "sessions.1.endTime").
"""

from collections.abc import Iterator, Mapping
from decimal import Decimal
from typing import Any

from rest_framework import ISO_8601, serializers
from rest_framework.fields import SkipField
from rest_framework.settings import api_settings

from events.domain.errors import FieldError, InvalidInputError

# Largest value the capacity column holds on every supported database.
MAX_CAPACITY = 2_147_483_647


class DateWindowMixin:
    """Report an inverted start/end pair alongside any other field errors.

    REST framework only runs object-level validation once every field is
    valid; the window is checked here instead so it is never masked.
    """

    window: tuple[str, str]
    window_message: str

    def to_internal_value(self, data):
        errors: dict[str, Any] = {}
        attrs: Mapping[str, Any] = {}
        try:
            attrs = super().to_internal_value(data)
        except serializers.ValidationError as exc:
            errors = dict(exc.detail)

        if isinstance(data, Mapping) and self._window_inverted(data):
            errors[self.window[1]] = [self.window_message]

        if errors:
            raise serializers.ValidationError(errors)
        return attrs

    def _window_inverted(self, data: Mapping[str, Any]) -> bool:
        start_field, end_field = (self.fields[name] for name in self.window)
        try:
            start = start_field.run_validation(start_field.get_value(data))
            end = end_field.run_validation(end_field.get_value(data))
        except (serializers.ValidationError, SkipField):
            return False
        return start is not None and end is not None and end < start


class SessionInputSerializer(DateWindowMixin, serializers.Serializer):
    window = ("startTime", "endTime")
    window_message = "Session end time must be after start time"

    title = serializers.CharField(
        max_length=255,
        error_messages={
            "required": "Session title is required",
            "blank": "Session title is required",
        },
    )
    description = serializers.CharField(allow_blank=True, default="")
    startTime = serializers.DateTimeField(
        source="start_time",
        input_formats=[ISO_8601],
        error_messages={
            "invalid": "Session start time must be in ISO 8601 format",
            "required": "Session start time is required",
        },
    )
    endTime = serializers.DateTimeField(
        source="end_time",
        input_formats=[ISO_8601],
        error_messages={
            "invalid": "Session end time must be in ISO 8601 format",
            "required": "Session end time is required",
        },
    )
    speaker = serializers.CharField(allow_blank=True, max_length=255, default="TBD")
    room = serializers.CharField(allow_blank=True, max_length=255, default="TBD")
    tags = serializers.ListField(child=serializers.CharField(), default=list)


class EventInputSerializer(DateWindowMixin, serializers.Serializer):
    window = ("startDate", "endDate")
    window_message = "End date must be after start date"

    title = serializers.CharField(
        max_length=255,
        error_messages={"required": "Title is required", "blank": "Title is required"},
    )
    description = serializers.CharField(allow_blank=True, default="")
    startDate = serializers.DateTimeField(
        source="start_date",
        error_messages={
            "invalid": "Start date must be a valid date",
            "required": "Start date is required",
        },
    )
    endDate = serializers.DateTimeField(
        source="end_date",
        error_messages={
            "invalid": "End date must be a valid date",
            "required": "End date is required",
        },
    )
    location = serializers.CharField(allow_blank=True, max_length=255, default="")
    capacity = serializers.IntegerField(
        min_value=0,
        max_value=MAX_CAPACITY,
        default=0,
        error_messages={
            "min_value": "Capacity cannot be negative",
            "max_value": f"Capacity cannot exceed {MAX_CAPACITY}",
        },
    )
    price = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0"),
        default=Decimal("0"),
    )
    image = serializers.CharField(allow_blank=True, max_length=500, default="")
    isPublic = serializers.BooleanField(source="is_public", default=False)
    tags = serializers.ListField(child=serializers.CharField(), default=list)
    sessions = SessionInputSerializer(many=True, required=False)


class EventPatchSerializer(EventInputSerializer):
    """Event fields an organizer may change after creation."""

    sessions = None


def validate_event_payload(data: Any) -> dict[str, Any]:
    """Validate an event creation payload, including embedded sessions."""
    validated = _validated(EventInputSerializer(data=data))
    validated["sessions"] = [dict(s) for s in validated.get("sessions", [])]
    return validated


def validate_event_patch(data: Any) -> dict[str, Any]:
    """Validate a partial event update. Only supplied fields are returned."""
    return _validated(EventPatchSerializer(data=data, partial=True))


def validate_session_payload(data: Any) -> dict[str, Any]:
    return _validated(SessionInputSerializer(data=data))


def validate_session_patch(data: Any) -> dict[str, Any]:
    """Validate a partial session update. Only supplied fields are returned."""
    return _validated(SessionInputSerializer(data=data, partial=True))


def _validated(serializer: serializers.Serializer) -> dict[str, Any]:
    if not serializer.is_valid():
        errors = list(_collect(serializer.errors, serializer.initial_data))
        raise InvalidInputError(errors)
    return dict(serializer.validated_data)


def _collect(detail: Any, data: Any, path: tuple[str, ...] = ()) -> Iterator[FieldError]:
    if isinstance(detail, Mapping):
        for key, value in detail.items():
            if key == api_settings.NON_FIELD_ERRORS_KEY:
                yield from _collect(value, data, path)
            else:
                yield from _collect(value, data, (*path, str(key)))
    elif isinstance(detail, list):
        for index, item in enumerate(detail):
            if isinstance(item, (Mapping, list)):
                yield from _collect(item, data, (*path, str(index)))
            else:
                yield FieldError(
                    field=".".join(path) or api_settings.NON_FIELD_ERRORS_KEY,
                    message=str(item),
                    value=_lookup(data, path) if path else None,
                )


def _lookup(data: Any, path: tuple[str, ...]) -> Any:
    value = data
    for part in path:
        if isinstance(value, Mapping):
            value = value.get(part)
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return None
    return value
