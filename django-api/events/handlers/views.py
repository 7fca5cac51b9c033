"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/errors.py)
- Never contain business logic
- Never expose internal error details
"""

from django.conf import settings
from django.http import HttpResponse
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events.domain import CallerIdentity
from events.handlers.serializers import EventSerializer, SessionSerializer
from events.services.event_service import EventService
from events.stores.django_store import DjangoEventStore


def get_event_service() -> EventService:
    return EventService(
        DjangoEventStore(),
        max_write_attempts=settings.EVENTS_MAX_WRITE_ATTEMPTS,
        public_list_limit=settings.EVENTS_PUBLIC_LIST_LIMIT,
    )


def health(request) -> HttpResponse:
    return HttpResponse("OK", content_type="text/plain")


class CallerAPIView(APIView):
    """Base view exposing the authenticated caller and the event service."""

    @property
    def caller(self) -> CallerIdentity:
        return self.request.user.identity

    @property
    def service(self) -> EventService:
        return get_event_service()


class EventListView(CallerAPIView):
    """Handler for GET/POST /api/events"""

    def get(self, request: Request) -> Response:
        events = self.service.list_owned_events(self.caller)
        return Response(EventSerializer(events, many=True).data)

    def post(self, request: Request) -> Response:
        event = self.service.create_event(self.caller, request.data)
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class PublicEventListView(CallerAPIView):
    """Handler for GET /api/events/public"""

    def get(self, request: Request) -> Response:
        events = self.service.list_public_events(self.caller)
        return Response(EventSerializer(events, many=True).data)


class JoinedEventListView(CallerAPIView):
    """Handler for GET /api/events/joined"""

    def get(self, request: Request) -> Response:
        events = self.service.list_joined_events(self.caller)
        return Response(EventSerializer(events, many=True).data)


class EventDetailView(CallerAPIView):
    """Handler for GET/PUT/PATCH/DELETE /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        event = self.service.get_event(event_id)
        return Response(EventSerializer(event).data)

    def put(self, request: Request, event_id: str) -> Response:
        event = self.service.update_event(self.caller, event_id, request.data)
        return Response(EventSerializer(event).data)

    patch = put

    def delete(self, request: Request, event_id: str) -> Response:
        self.service.delete_event(self.caller, event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EventJoinView(CallerAPIView):
    """Handler for POST /api/events/{event_id}/join"""

    def post(self, request: Request, event_id: str) -> Response:
        count = self.service.join_event(self.caller, event_id)
        return Response({"participants": count})


class EventLeaveView(CallerAPIView):
    """Handler for POST /api/events/{event_id}/leave"""

    def post(self, request: Request, event_id: str) -> Response:
        count = self.service.leave_event(self.caller, event_id)
        return Response({"participants": count})


class SessionListView(CallerAPIView):
    """Handler for GET/POST /api/events/{event_id}/sessions"""

    def get(self, request: Request, event_id: str) -> Response:
        sessions = self.service.get_sessions_for_event(event_id)
        return Response(SessionSerializer(sessions, many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        session = self.service.add_session(self.caller, event_id, request.data)
        return Response(SessionSerializer(session).data, status=status.HTTP_201_CREATED)


class SessionDetailView(CallerAPIView):
    """Handler for PUT/PATCH/DELETE /api/events/{event_id}/sessions/{session_id}"""

    def put(self, request: Request, event_id: str, session_id: str) -> Response:
        session = self.service.update_session(self.caller, event_id, session_id, request.data)
        return Response(SessionSerializer(session).data)

    patch = put

    def delete(self, request: Request, event_id: str, session_id: str) -> Response:
        self.service.remove_session(self.caller, event_id, session_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
