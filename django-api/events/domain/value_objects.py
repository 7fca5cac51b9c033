"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self
from uuid import UUID, uuid4


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class SessionId:
    """Unique identifier for a Session, scoped to its Event."""

    value: UUID

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative participant limit. Zero means the event is unbounded."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")

    @property
    def is_unbounded(self) -> bool:
        return self.value == 0

    def admits(self, current_count: int) -> bool:
        """Return True if one more participant fits on top of current_count."""
        return self.is_unbounded or current_count < self.value


@dataclass(frozen=True)
class CallerIdentity:
    """The authenticated caller of an operation.

    name and email are display copies handed over by the identity provider
    and may be missing.
    """

    user_id: str
    name: str | None = None
    email: str | None = None

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValueError("Caller identity requires a user id")
