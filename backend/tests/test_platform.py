# tests/test_platform.py
"""
Tests for shared infrastructure.

Tests cover:
- Error envelope from the global exception handler
- Airwallex client (token caching, error mapping, files host)
- File proxy endpoints
- Health checks
"""

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from magnaporta_backend.results import ErrorKind
from payments.client import AirwallexClient, AirwallexError, get_airwallex_client
from payments.commands import get_download_links, upstream_failure


BASE_URL = "https://api-demo.airwallex.com"


def _client(handler):
    return AirwallexClient(
        base_url=BASE_URL,
        client_id="cid",
        api_key="key",
        timeout=5,
        upload_timeout=5,
        transport=httpx.MockTransport(handler),
    )


# =============================================================================
# Error envelope
# =============================================================================

@pytest.mark.django_db
class TestErrorEnvelope:

    def test_validation_error_shape(self, admin_client):
        response = admin_client.post("/api/companies", {}, format="json")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"].startswith("name:")
        assert "name" in body["data"]["errors"]

    def test_unauthenticated_request(self, api_client):
        response = api_client.get("/api/companies")

        assert response.status_code == 401
        assert response.json()["success"] is False
        assert response.json()["data"] is None


# =============================================================================
# Airwallex client
# =============================================================================

class TestAirwallexClient:

    def test_token_is_cached_between_calls(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            if request.url.path == "/api/v1/authentication/login":
                assert request.headers["x-client-id"] == "cid"
                return httpx.Response(200, json={"token": "tok", "expires_at": "2999-01-01T00:00:00Z"})
            assert request.headers["Authorization"] == "Bearer tok"
            return httpx.Response(201, json={"id": "acct_new"})

        client = _client(handler)
        first = client.create_account({"account_details": {}})
        client.create_account({"account_details": {}})

        assert first == {"id": "acct_new"}
        assert calls.count("/api/v1/authentication/login") == 1
        assert calls.count("/api/v1/accounts/create") == 2

    def test_upstream_error_is_raised(self):
        def handler(request):
            if request.url.path.endswith("/login"):
                return httpx.Response(200, json={"token": "tok"})
            return httpx.Response(400, json={"code": "invalid_argument", "message": "bad email"})

        with pytest.raises(AirwallexError) as excinfo:
            _client(handler).create_account({})

        assert excinfo.value.status_code == 400
        assert excinfo.value.code == "invalid_argument"
        assert excinfo.value.message == "bad email"

    def test_transport_error_has_no_status(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(AirwallexError) as excinfo:
            _client(handler).authenticate()

        assert excinfo.value.status_code is None

    def test_upload_goes_to_files_host(self):
        hosts = []

        def handler(request):
            hosts.append(request.url.host)
            if request.url.path.endswith("/login"):
                return httpx.Response(200, json={"token": "tok"})
            return httpx.Response(200, json={"file_id": "f_1"})

        result = _client(handler).upload_file("kyc.pdf", b"%PDF", "application/pdf")

        assert result == {"file_id": "f_1"}
        assert hosts == ["api-demo.airwallex.com", "files-demo.airwallex.com"]

    def test_commands_reuse_one_client_and_token(self):
        logins = []

        def handler(request):
            if request.url.path.endswith("/login"):
                logins.append(request.url.path)
                return httpx.Response(200, json={"token": "tok", "expires_at": "2999-01-01T00:00:00Z"})
            return httpx.Response(200, json={"files": []})

        get_airwallex_client.cache_clear()
        try:
            with patch("payments.client.AirwallexClient", side_effect=lambda: _client(handler)) as factory:
                assert get_download_links(["f_1"]).success
                assert get_download_links(["f_2"]).success
        finally:
            get_airwallex_client.cache_clear()

        assert factory.call_count == 1
        assert len(logins) == 1


class TestUpstreamFailure:

    def test_status_mapping(self):
        assert upstream_failure(AirwallexError("x", 401), "op").kind == ErrorKind.UNAUTHORIZED
        assert upstream_failure(AirwallexError("bad", 400), "op").error == "bad"
        assert upstream_failure(AirwallexError("x", 503), "op").error == "Airwallex service is currently unavailable"
        assert upstream_failure(AirwallexError("down"), "op").kind == ErrorKind.UPSTREAM


# =============================================================================
# File endpoints
# =============================================================================

@pytest.mark.django_db
class TestFileEndpoints:

    def test_upload_forwards_file(self, customer_client):
        fake = MagicMock()
        fake.upload_file.return_value = {"file_id": "f_1"}

        with patch("payments.commands.get_airwallex_client", return_value=fake):
            response = customer_client.post(
                "/api/airwallex/files/upload",
                {"file": SimpleUploadedFile("id.pdf", b"%PDF-1.4", content_type="application/pdf"), "notes": "passport"},
                format="multipart",
            )

        assert response.status_code == 200
        assert response.json()["data"] == {"file_id": "f_1"}
        fake.upload_file.assert_called_once_with("id.pdf", b"%PDF-1.4", "application/pdf", "passport")

    def test_upload_requires_file(self, customer_client):
        response = customer_client.post("/api/airwallex/files/upload", {}, format="multipart")

        assert response.status_code == 400
        assert response.json()["message"] == "File is required"

    def test_download_links_validation(self, customer_client):
        response = customer_client.post(
            "/api/airwallex/files/download-links", {"file_ids": []}, format="json"
        )

        assert response.status_code == 400

    def test_download_links_upstream_unauthorized(self, customer_client):
        fake = MagicMock()
        fake.get_download_links.side_effect = AirwallexError("expired", 401)

        with patch("payments.commands.get_airwallex_client", return_value=fake):
            response = customer_client.post(
                "/api/airwallex/files/download-links", {"file_ids": ["f_1"]}, format="json"
            )

        assert response.status_code == 401


# =============================================================================
# Health
# =============================================================================

@pytest.mark.django_db
class TestHealth:

    def test_liveness(self, client):
        response = client.get("/_health/live")

        assert response.status_code == 200
        assert json.loads(response.content) == {"status": "alive"}

    def test_readiness_with_eager_tasks(self, client):
        response = client.get("/_health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"
