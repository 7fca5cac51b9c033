"""Domain error codes for the events module."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    INVALID_SESSION_ID = "INVALID_SESSION_ID"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    ALREADY_MEMBER = "ALREADY_MEMBER"
    EVENT_FULL = "EVENT_FULL"
    CONFLICT = "CONFLICT"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class FieldError:
    """A single payload violation, addressed by dotted field path."""

    field: str
    message: str
    value: Any = None


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    retryable: ClassVar[bool] = False

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class SessionNotFoundError(DomainError):
    """Raised when a session does not exist in the given event."""

    def __init__(self, event_id: str, session_id: str) -> None:
        super().__init__(
            code=ErrorCode.SESSION_NOT_FOUND,
            message="Session not found",
        )
        self.event_id = event_id
        self.session_id = session_id


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class InvalidSessionIdError(DomainError):
    """Raised when a session ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_SESSION_ID,
            message="Invalid session ID format",
        )


class InvalidInputError(DomainError):
    """Raised when a payload fails validation. Carries every violation found."""

    def __init__(self, errors: list[FieldError] | tuple[FieldError, ...]) -> None:
        super().__init__(
            code=ErrorCode.INVALID_INPUT,
            message="Validation failed",
        )
        self.errors = tuple(errors)

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.errors]


class NotAuthorizedError(DomainError):
    """Raised when a caller other than the organizer modifies an event."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_AUTHORIZED,
            message="Not authorized to modify this event",
        )
        self.event_id = event_id


class AlreadyMemberError(DomainError):
    """Raised when a caller joins an event they already joined."""

    def __init__(self, event_id: str, user_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_MEMBER,
            message="Already joined this event",
        )
        self.event_id = event_id
        self.user_id = user_id


class EventFullError(DomainError):
    """Raised when a bounded event has no room left."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_FULL,
            message="Event is full",
        )
        self.event_id = event_id


class ConflictError(DomainError):
    """Raised when a write lost a race against another write of the same event."""

    retryable = True

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.CONFLICT,
            message="Event was modified concurrently, retry the request",
        )
        self.event_id = event_id


class StoreUnavailableError(DomainError):
    """Raised when the backing store fails for reasons unrelated to the domain."""

    retryable = True

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="Event storage is temporarily unavailable",
        )
