"""Caller identity resolution.

Token verification happens upstream; the identity proxy forwards the
verified caller in request headers.
"""

from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.request import Request

from events.domain import CallerIdentity

USER_ID_HEADER = "X-User-Id"
USER_NAME_HEADER = "X-User-Name"
USER_EMAIL_HEADER = "X-User-Email"

# Identity values are stored in CharField(max_length=255) columns.
MAX_IDENTITY_LENGTH = 255


class CallerUser:
    """Request user wrapping the resolved caller identity."""

    is_authenticated = True
    is_anonymous = False

    def __init__(self, identity: CallerIdentity) -> None:
        self.identity = identity

    def __str__(self) -> str:
        return self.identity.user_id


class HeaderIdentityAuthentication(BaseAuthentication):
    """Authenticate requests from the identity headers set by the proxy."""

    def authenticate(self, request: Request) -> tuple[CallerUser, None] | None:
        user_id = self._header(request, USER_ID_HEADER).strip()
        if not user_id:
            return None
        identity = CallerIdentity(
            user_id=user_id,
            name=self._header(request, USER_NAME_HEADER) or None,
            email=self._header(request, USER_EMAIL_HEADER) or None,
        )
        return CallerUser(identity), None

    def authenticate_header(self, request: Request) -> str:
        return USER_ID_HEADER

    def _header(self, request: Request, name: str) -> str:
        value = request.headers.get(name, "")
        if len(value) > MAX_IDENTITY_LENGTH:
            raise AuthenticationFailed(
                f"{name} header cannot exceed {MAX_IDENTITY_LENGTH} characters"
            )
        return value
