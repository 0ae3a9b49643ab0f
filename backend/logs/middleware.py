"""
Request audit middleware.

Records selected API requests into LogEntry:
- only paths under AUDIT_LOG_PATHS (matched after the /api prefix)
- request data, response body and timing
- sensitive keys masked recursively before anything is stored

The row is written after the response has been sent, from the
response's close hook, or handed to Celery when AUDIT_LOG_ASYNC is set.
A failure to persist is logged and never reaches the client.
"""
import json
import logging
import secrets
import string
import time

from django.conf import settings
from django.core.exceptions import RequestDataTooBig
from django.db import DatabaseError
from django.http.request import RawPostDataException
from django.utils import timezone
from kombu.exceptions import KombuError

from logs.commands import create_log
from logs.models import LogEntry
from logs.tasks import persist_audit_log

logger = logging.getLogger(__name__)

MASK = "***MASKED***"
SENSITIVE_KEYS = frozenset({
    "password",
    "current_password",
    "new_password",
    "token",
    "access_token",
    "refresh_token",
    "refresh",
    "authorization",
    "secret",
    "x-api-key",
})
MAX_RESPONSE_BODY = 10000
API_PREFIX = "/api"

_REQUEST_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_request_id() -> str:
    """req_<epoch-ms>_<9 random chars>"""
    suffix = "".join(secrets.choice(_REQUEST_ID_ALPHABET) for _ in range(9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


def mask_sensitive(data):
    """Replace values of sensitive keys at any depth (case-insensitive)."""
    if isinstance(data, dict):
        return {
            key: MASK if str(key).lower() in SENSITIVE_KEYS else mask_sensitive(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item) for item in data]
    return data


def strip_api_prefix(path: str) -> str:
    if path == API_PREFIX or path.startswith(API_PREFIX + "/"):
        return path[len(API_PREFIX):] or "/"
    return path


def should_audit(path: str, prefixes=None) -> bool:
    prefixes = prefixes if prefixes is not None else settings.AUDIT_LOG_PATHS
    path = strip_api_prefix(path)
    for prefix in prefixes:
        prefix = prefix.strip().rstrip("/")
        if prefix and (path == prefix or path.startswith(prefix + "/")):
            return True
    return False


def level_for_status(status_code: int) -> str:
    if status_code >= 500:
        return LogEntry.Level.ERROR
    if status_code >= 400:
        return LogEntry.Level.WARN
    return LogEntry.Level.INFO


def client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


def _request_headers(request) -> dict:
    return mask_sensitive({key.lower(): value for key, value in request.headers.items()})


def _request_body(request):
    """
    Parsed request body, masked.

    Multipart bodies are not read here (uploads can be large); only the
    content type is recorded.
    """
    content_type = request.content_type or ""
    if content_type.startswith("multipart/"):
        return {"content_type": content_type}
    try:
        raw = request.body
    except (RequestDataTooBig, RawPostDataException):
        return None
    if not raw:
        return None
    try:
        return mask_sensitive(json.loads(raw))
    except (ValueError, UnicodeDecodeError):
        return raw.decode("utf-8", errors="replace")[:MAX_RESPONSE_BODY]


def _response_body(response):
    if getattr(response, "streaming", False):
        return None, 0
    content = response.content or b""
    size = len(content)
    if not content:
        return None, size
    try:
        body = mask_sensitive(json.loads(content))
    except (ValueError, UnicodeDecodeError):
        return content.decode("utf-8", errors="replace")[:MAX_RESPONSE_BODY], size

    serialized = json.dumps(body, default=str)
    if len(serialized) > MAX_RESPONSE_BODY:
        return serialized[:MAX_RESPONSE_BODY], size
    return body, size


def persist(data: dict) -> None:
    """Write the audit row; never raises."""
    try:
        if getattr(settings, "AUDIT_LOG_ASYNC", False):
            persist_audit_log.delay(data)
        else:
            create_log(data)
    except (DatabaseError, KombuError, OSError) as exc:
        logger.error(
            "Failed to persist request audit log",
            extra={"transaction_id": data.get("transaction_id"), "error": str(exc)},
        )


class RequestAuditMiddleware:
    """
    Audit selected API requests into the logs table.

    Must sit after AuthenticationMiddleware; the JWT user set by DRF on
    the underlying request is read once the view has run.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.request_id = generate_request_id()

        if not should_audit(request.path):
            return self.get_response(request)

        started = time.monotonic()
        request_body = _request_body(request)

        response = self.get_response(request)

        elapsed_ms = int((time.monotonic() - started) * 1000)
        data = self.build_entry(request, response, request_body, elapsed_ms)
        # Private hook: HttpResponseBase.close() runs these after the body is sent.
        # Django is pinned below 6.0 in pyproject.toml for that reason.
        response._resource_closers.append(lambda: persist(data))
        return response

    def build_entry(self, request, response, request_body, elapsed_ms) -> dict:
        response_body, response_size = _response_body(response)
        status_code = response.status_code

        user = getattr(request, "user", None)
        user_id = None
        user_role = ""
        if user is not None and user.is_authenticated:
            user_id = user.pk
            user_role = getattr(user, "role_name", "")

        return {
            "level": level_for_status(status_code),
            "message": f"{request.method} {request.path} - {status_code}",
            "service_name": settings.SERVICE_NAME,
            "environment": settings.ENVIRONMENT,
            "method": request.method,
            "url": request.get_full_path(),
            "status_code": status_code,
            "user_id": user_id,
            "user_role": user_role,
            "ip": client_ip(request),
            "user_agent": request.META.get("HTTP_USER_AGENT", ""),
            "headers": _request_headers(request),
            "query_params": mask_sensitive({k: v for k, v in request.GET.items()}),
            "metadata": {
                "request_body": request_body,
                "response_size": response_size,
                "timestamp": timezone.now().isoformat(),
            },
            "response_body": response_body,
            "error_stack": getattr(request, "audit_error_stack", ""),
            "transaction_id": request.request_id,
            "execution_time": elapsed_ms,
        }
