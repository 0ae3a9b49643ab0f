# magnaporta_backend/responses.py
"""
Response envelope helpers.

Every endpoint answers with ``{"success", "message", "data"}``.
"""

from rest_framework import status
from rest_framework.response import Response


def envelope(data=None, message: str = "", status_code: int = status.HTTP_200_OK, success: bool = True) -> Response:
    return Response(
        {"success": success, "message": message, "data": data},
        status=status_code,
    )


def created(data=None, message: str = "Created successfully") -> Response:
    return envelope(data, message, status.HTTP_201_CREATED)


def failure(message: str, status_code: int = status.HTTP_400_BAD_REQUEST, data=None) -> Response:
    return envelope(data, message, status_code, success=False)


def fail_response(result) -> Response:
    """Map a failed CommandResult to its HTTP status."""
    return failure(result.error, result.http_status)
