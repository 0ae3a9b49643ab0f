# magnaporta_backend/exceptions.py
"""
Global exception handler (REST_FRAMEWORK["EXCEPTION_HANDLER"]).

Translates anything raised inside a DRF view into the response envelope:
- APIException subclasses keep their status code
- Django PermissionDenied / Http404 -> 403 / 404 (via DRF's default handler)
- IntegrityError -> 409 for unique violations, 400 for other constraints
- everything else -> 500, logged with its traceback
"""

import logging
import traceback

from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation
PG_UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    cause = exc.__cause__
    if getattr(cause, "pgcode", None) == PG_UNIQUE_VIOLATION:
        return True
    if getattr(getattr(cause, "diag", None), "sqlstate", None) == PG_UNIQUE_VIOLATION:
        return True
    text = str(exc).lower()
    return "unique" in text or "duplicate" in text


def _first_message(detail) -> str:
    if isinstance(detail, list):
        return _first_message(detail[0]) if detail else ""
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = _first_message(value)
            if key in ("detail", "non_field_errors"):
                return message
            return f"{key}: {message}"
        return ""
    return str(detail)


def envelope_exception_handler(exc, context):
    if isinstance(exc, IntegrityError):
        set_rollback()
        if _is_unique_violation(exc):
            logger.info("Unique constraint violated", extra={"error": str(exc)})
            return Response(
                {"success": False, "message": "Resource already exists.", "data": None},
                status=status.HTTP_409_CONFLICT,
            )
        logger.info("Constraint violated", extra={"error": str(exc)})
        return Response(
            {"success": False, "message": "Invalid reference or missing required value.", "data": None},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        request = context.get("request")
        if request is not None:
            # Picked up by the request audit middleware
            request._request.audit_error_stack = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
        logger.exception(
            "Unhandled error in %s", view.__class__.__name__ if view else "unknown view",
        )
        return Response(
            {"success": False, "message": "Internal server error.", "data": None},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        response.data = {
            "success": False,
            "message": _first_message(response.data) or "Validation failed.",
            "data": {"errors": response.data},
        }
    else:
        response.data = {
            "success": False,
            "message": _first_message(response.data),
            "data": None,
        }
    return response
