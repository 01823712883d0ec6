"""
DRF exception handler rendering every error in one body shape.

Registered via REST_FRAMEWORK["EXCEPTION_HANDLER"]. Both application errors
(core.exceptions, usually raised by ServiceResult.raise_for_error) and DRF's
own API exceptions are rendered as:

    {
        "error": "Conversation not found",
        "error_code": "NOT_FOUND",
        "details": {...}          # optional
    }

DRF exception mapping:
    NotAuthenticated, AuthenticationFailed -> 401 UNAUTHENTICATED
    NotFound (incl. Http404)               -> 404 NOT_FOUND
    PermissionDenied                       -> 403 FORBIDDEN
    ValidationError, ParseError            -> 400 INVALID_ARGUMENT
    anything else                          -> DRF status, code from DRF
"""

from __future__ import annotations

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError, ErrorCode

logger = logging.getLogger(__name__)

DRF_ERROR_CODES: dict[type[drf_exceptions.APIException], str] = {
    drf_exceptions.NotAuthenticated: ErrorCode.UNAUTHENTICATED,
    drf_exceptions.AuthenticationFailed: ErrorCode.UNAUTHENTICATED,
    drf_exceptions.NotFound: ErrorCode.NOT_FOUND,
    drf_exceptions.PermissionDenied: ErrorCode.FORBIDDEN,
    drf_exceptions.ValidationError: ErrorCode.INVALID_ARGUMENT,
    drf_exceptions.ParseError: ErrorCode.INVALID_ARGUMENT,
}


def _drf_error_code(exc: Exception) -> str | None:
    for exc_class, code in DRF_ERROR_CODES.items():
        if isinstance(exc, exc_class):
            return code
    return None


def api_exception_handler(exc, context):
    """
    Convert an exception raised in a view to a Response.

    Returns None for exceptions DRF does not handle, which lets Django
    produce its usual 500 response.
    """
    if isinstance(exc, BaseApplicationError):
        view = context.get("view")
        logger.info(
            f"{exc.error_code} in {view.__class__.__name__ if view else 'view'}: {exc.message}"
        )
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound(str(exc) or None)
    elif isinstance(exc, DjangoPermissionDenied):
        exc = drf_exceptions.PermissionDenied(str(exc) or None)

    response = exception_handler(exc, context)
    if response is None:
        return None

    error_code = _drf_error_code(exc)
    if error_code is None:
        codes = exc.get_codes() if isinstance(exc, drf_exceptions.APIException) else None
        error_code = codes.upper() if isinstance(codes, str) else "ERROR"

    body = {"error_code": error_code}
    if isinstance(exc, drf_exceptions.ValidationError):
        body["error"] = "Invalid input"
        body["details"] = response.data
    else:
        body["error"] = str(getattr(exc, "detail", exc))

    response.data = body
    return response
