# pulse_core/common/api/exceptions.py
"""
Error envelope shared by every API response that is not a 2xx:

    {"error": {"code": ..., "message": ..., "details": ..., "request_id": ...}}

Services raise DRF exceptions (NotFound, PermissionDenied, ValidationError)
or ConflictError; api_exception_handler renders them.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

# First match wins; subclasses before their bases.
_ERROR_CODES: tuple[tuple[type, str], ...] = (
    (ValidationError, "validation_error"),
    (NotAuthenticated, "not_authenticated"),
    (PermissionDenied, "permission_denied"),
    (NotFound, "not_found"),
    (Http404, "not_found"),
)


def ensure_request_id(request) -> str:
    """Return request.request_id, minting one first if the request has none."""
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            request.request_id = rid
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": ensure_request_id(request),
        }
    }


class ConflictError(APIException):
    """
    409: the request is valid but the current state forbids it
    (weekly check-in already submitted, duplicate username, protected delete).
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"


def error_code(exc: Exception, http_status: int) -> str:
    for exc_type, code in _ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    if isinstance(exc, APIException):
        return exc.default_code or "api_error"
    return "server_error" if http_status >= 500 else "error"


def _unwrap(value: Any) -> Any:
    # DRF wraps single messages in a one-item list
    if isinstance(value, list) and len(value) == 1:
        return value[0]
    return value


def split_message(data: Any) -> tuple[str, Any]:
    """
    {"detail": x}            -> (x, None)
    {"detail": x, **rest}    -> (x, rest)
    [x]                      -> (x, None)
    anything else            -> ("Request failed.", data)
    """
    if isinstance(data, dict) and "detail" in data:
        rest = {k: v for k, v in data.items() if k != "detail"}
        return str(_unwrap(data["detail"])), rest or None
    if isinstance(data, list) and len(data) == 1:
        return str(data[0]), None
    return "Request failed.", data


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")

    # Model-level invariants (e.g. the append-only ledger) surface as 400s
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(exc.message_dict if hasattr(exc, "error_dict") else {"detail": exc.messages})

    response = drf_exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled API error (request_id=%s)", ensure_request_id(request), exc_info=exc)
        return Response(
            build_error_envelope(request=request, code="server_error", message="Unexpected server error."),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    message, details = split_message(response.data)
    return Response(
        build_error_envelope(
            request=request,
            code=error_code(exc, response.status_code),
            message=message,
            details=details,
        ),
        status=response.status_code,
        headers=response.headers,
    )
