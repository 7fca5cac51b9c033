"""Mapping of domain errors to HTTP responses."""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from events.domain.errors import DomainError, ErrorCode, InvalidInputError

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SESSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_SESSION_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_AUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorCode.ALREADY_MEMBER: status.HTTP_409_CONFLICT,
    ErrorCode.EVENT_FULL: status.HTTP_409_CONFLICT,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def domain_exception_handler(exc, context):
    """REST framework exception handler that also understands DomainError."""
    if not isinstance(exc, DomainError):
        return exception_handler(exc, context)

    body = {"error": exc.code.value, "message": exc.message}
    if isinstance(exc, InvalidInputError):
        body["details"] = [
            {"field": e.field, "message": e.message, "value": e.value} for e in exc.errors
        ]
    if exc.retryable:
        body["retryable"] = True

    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logger.error("Request failed: %s", exc)
    return Response(body, status=status_code)
