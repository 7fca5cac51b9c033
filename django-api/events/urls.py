from django.urls import path

from events.handlers import (
    EventDetailView,
    EventJoinView,
    EventLeaveView,
    EventListView,
    JoinedEventListView,
    PublicEventListView,
    SessionDetailView,
    SessionListView,
)

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/public", PublicEventListView.as_view(), name="event-public-list"),
    path("events/joined", JoinedEventListView.as_view(), name="event-joined-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("events/<str:event_id>/join", EventJoinView.as_view(), name="event-join"),
    path("events/<str:event_id>/leave", EventLeaveView.as_view(), name="event-leave"),
    path(
        "events/<str:event_id>/sessions",
        SessionListView.as_view(),
        name="session-list",
    ),
    path(
        "events/<str:event_id>/sessions/<str:session_id>",
        SessionDetailView.as_view(),
        name="session-detail",
    ),
]
