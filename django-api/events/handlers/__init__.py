from events.handlers.views import (
    EventDetailView,
    EventJoinView,
    EventLeaveView,
    EventListView,
    JoinedEventListView,
    PublicEventListView,
    SessionDetailView,
    SessionListView,
    health,
)

__all__ = [
    "EventListView",
    "PublicEventListView",
    "JoinedEventListView",
    "EventDetailView",
    "EventJoinView",
    "EventLeaveView",
    "SessionListView",
    "SessionDetailView",
    "health",
]
