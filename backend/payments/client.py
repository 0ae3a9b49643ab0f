# payments/client.py
"""
Airwallex REST client.

Token-based: ``authenticate`` exchanges the client id / API key for a
bearer token which is cached until shortly before it expires. Uploads go
to the files host (the API host with ``api`` replaced by ``files``).
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Optional

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)

TOKEN_REFRESH_MARGIN = timedelta(seconds=60)
DEFAULT_TOKEN_TTL = timedelta(minutes=30)


class AirwallexError(Exception):
    """Upstream refusal or transport failure talking to Airwallex."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details


def _parse_expiry(value) -> datetime:
    if value:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
        except ValueError:
            logger.warning("Unparseable Airwallex token expiry", extra={"expires_at": value})
    return datetime.now(timezone.utc) + DEFAULT_TOKEN_TTL


class AirwallexClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        client_id: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        upload_timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or settings.AIRWALLEX_BASE_URL).rstrip("/")
        self.client_id = client_id if client_id is not None else settings.AIRWALLEX_CLIENT_ID
        self.api_key = api_key if api_key is not None else settings.AIRWALLEX_API_KEY
        self.timeout = timeout or settings.AIRWALLEX_TIMEOUT
        self.upload_timeout = upload_timeout or settings.AIRWALLEX_UPLOAD_TIMEOUT
        self._transport = transport
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        self._token_lock = threading.Lock()

    @property
    def files_base_url(self) -> str:
        return self.base_url.replace("api", "files", 1)

    def _http(self, timeout: float) -> httpx.Client:
        return httpx.Client(timeout=timeout, transport=self._transport)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def _cached_token(self) -> Optional[str]:
        now = datetime.now(timezone.utc)
        if self._token and self._token_expires_at and now < self._token_expires_at - TOKEN_REFRESH_MARGIN:
            return self._token
        return None

    def authenticate(self) -> str:
        """Bearer token, cached until shortly before expiry. Shared by all threads."""
        with self._token_lock:
            token = self._cached_token()
            if token is None:
                token = self._login()
            return token

    def _login(self) -> str:
        headers = {
            "x-client-id": self.client_id,
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        try:
            with self._http(self.timeout) as http:
                response = http.post(f"{self.base_url}/api/v1/authentication/login", headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("airwallex_auth_transport_error", extra={"error": str(exc)})
            raise AirwallexError(f"Could not reach Airwallex: {exc}") from exc

        data = self._handle(response, "authentication")
        token = data.get("token")
        if not token:
            raise AirwallexError("Airwallex authentication returned no token", response.status_code)

        self._token = token
        self._token_expires_at = _parse_expiry(data.get("expires_at"))
        return token

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        json: Any = None,
        files: Any = None,
        params: Optional[dict] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> dict:
        token = self.authenticate()
        url = f"{base_url or self.base_url}{path}"
        try:
            with self._http(timeout or self.timeout) as http:
                response = http.request(
                    method,
                    url,
                    headers={"Authorization": f"Bearer {token}"},
                    json=json,
                    files=files,
                    params=params,
                )
        except httpx.TimeoutException as exc:
            logger.warning("airwallex_timeout", extra={"operation": operation, "url": url})
            raise AirwallexError(f"Airwallex {operation} timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("airwallex_transport_error", extra={"operation": operation, "error": str(exc)})
            raise AirwallexError(f"Could not reach Airwallex: {exc}") from exc

        return self._handle(response, operation)

    @staticmethod
    def _extract_error(response: httpx.Response):
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase, None, None
        if isinstance(body, dict):
            return body.get("message") or response.reason_phrase, body.get("code"), body
        return str(body), None, body

    def _handle(self, response: httpx.Response, operation: str) -> dict:
        if response.is_success:
            if not response.content:
                return {}
            try:
                return response.json()
            except ValueError as exc:
                raise AirwallexError(
                    f"Invalid response from Airwallex {operation}", response.status_code
                ) from exc

        message, code, body = self._extract_error(response)
        logger.warning(
            "airwallex_http_error",
            extra={"operation": operation, "status_code": response.status_code, "code": code},
        )
        raise AirwallexError(message, response.status_code, code, body)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def create_account(self, payload: dict) -> dict:
        return self._request("POST", "/api/v1/accounts/create", "account creation", json=payload)

    def upload_file(self, filename: str, content: bytes, content_type: Optional[str] = None, notes: Optional[str] = None) -> dict:
        return self._request(
            "POST",
            "/api/v1/files/upload",
            "file upload",
            files={"file": (filename, content, content_type or "application/octet-stream")},
            params={"notes": notes} if notes else None,
            base_url=self.files_base_url,
            timeout=self.upload_timeout,
        )

    def get_download_links(self, file_ids: list) -> dict:
        return self._request(
            "POST",
            "/api/v1/files/download_links",
            "download links",
            json={"file_ids": list(file_ids)},
        )


@lru_cache(maxsize=1)
def get_airwallex_client() -> AirwallexClient:
    """Process-wide client so the bearer token is reused across requests."""
    return AirwallexClient()
