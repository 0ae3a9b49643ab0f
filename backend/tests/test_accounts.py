# tests/test_accounts.py
"""
Tests for the accounts module.

Tests cover:
- Login, refresh rotation and logout blacklisting
- Role guard (admin implicit allow, customer key checks)
- Soft delete vs. activate vs. admin activate
- Self-service profile edits
"""

import pytest
from django.contrib.auth import get_user_model

from accounts import commands
from accounts.authz import resolve_actor
from accounts.models import ApiPermission, RolePermission


User = get_user_model()


# =============================================================================
# Authentication
# =============================================================================

@pytest.mark.django_db
class TestLogin:

    def test_login_returns_token_pair_and_user(self, api_client, customer_user):
        response = api_client.post(
            "/api/auth/login",
            {"email": "Customer@Test.com", "password": "testpass123"},
            format="json",
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login Success"
        assert body["data"]["token_type"] == "Bearer"
        assert body["data"]["access_token"]
        assert body["data"]["refresh_token"]
        assert body["data"]["user"]["email"] == "customer@test.com"

    def test_wrong_password_is_unauthorized(self, api_client, customer_user):
        response = api_client.post(
            "/api/auth/login",
            {"email": "customer@test.com", "password": "wrong-password"},
            format="json",
        )

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_soft_deleted_user_cannot_login(self, api_client, customer_user):
        commands.soft_delete_user(customer_user.pk)

        response = api_client.post(
            "/api/auth/login",
            {"email": "customer@test.com", "password": "testpass123"},
            format="json",
        )

        assert response.status_code == 401

    def test_missing_password_is_validation_error(self, api_client):
        response = api_client.post("/api/auth/login", {"email": "a@b.com"}, format="json")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "password" in body["data"]["errors"]


@pytest.mark.django_db
class TestRefreshAndLogout:

    def _tokens(self, user):
        return commands.issue_tokens(user)

    def test_refresh_returns_new_access_token(self, api_client, customer_user):
        tokens = self._tokens(customer_user)

        response = api_client.post(
            "/api/auth/refresh",
            {"refresh_token": tokens["refresh_token"]},
            format="json",
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["access_token"]
        assert data["token_type"] == "Bearer"
        assert data["expires_in"] > 0

    def test_garbage_refresh_token_is_unauthorized(self, api_client):
        response = api_client.post("/api/auth/refresh", {"refresh_token": "not-a-token"}, format="json")

        assert response.status_code == 401
        assert response.json()["success"] is False
        assert response.json()["message"] == "Invalid or expired refresh token"

    def test_logout_blacklists_refresh_token(self, api_client, customer_user):
        tokens = self._tokens(customer_user)

        logout = api_client.post("/api/auth/logout", {"refresh_token": tokens["refresh_token"]}, format="json")
        assert logout.status_code == 200

        refresh = api_client.post("/api/auth/refresh", {"refresh_token": tokens["refresh_token"]}, format="json")
        assert refresh.status_code == 401

    def test_logout_with_invalid_token(self, api_client):
        response = api_client.post("/api/auth/logout", {"refresh_token": "junk"}, format="json")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid token"


@pytest.mark.django_db
class TestMe:

    def test_admin_sees_every_permission_key(self, admin_client):
        response = admin_client.get("/api/auth/me")

        assert response.status_code == 200
        perms = set(response.json()["data"]["permissions"])
        assert perms == set(ApiPermission.objects.values_list("key", flat=True))

    def test_customer_sees_role_keys_only(self, customer_client):
        response = customer_client.get("/api/auth/me")

        perms = set(response.json()["data"]["permissions"])
        assert "companies.view" in perms
        assert "users.manage" not in perms

    def test_anonymous_is_rejected(self, api_client):
        response = api_client.get("/api/auth/me")

        assert response.status_code == 401


# =============================================================================
# Role Guard
# =============================================================================

@pytest.mark.django_db
class TestRoleGuard:

    def test_customer_cannot_list_users(self, customer_client):
        response = customer_client.get("/api/users")

        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_admin_can_list_users(self, admin_client, customer_user):
        response = admin_client.get("/api/users")

        assert response.status_code == 200
        emails = {u["email"] for u in response.json()["data"]}
        assert "customer@test.com" in emails

    def test_granted_key_takes_effect_on_next_request(self, customer_client, customer_user, roles):
        assert customer_client.get("/api/users").status_code == 403

        perm = ApiPermission.objects.get(key="users.view")
        RolePermission.objects.create(role=roles["customer"], permission=perm)

        assert customer_client.get("/api/users").status_code == 200

    def test_customer_cannot_reach_admin_endpoints(self, customer_client):
        response = customer_client.get("/api/admin/stats")

        assert response.status_code == 403

    def test_actor_context_reflects_role(self, rf, customer_user):
        request = rf.get("/")
        request.user = customer_user

        actor = resolve_actor(request)

        assert actor.is_admin is False
        assert actor.has("currency.view") is True
        assert actor.has("currency.manage") is False


# =============================================================================
# Lifecycle: delete / activate / admin activate
# =============================================================================

@pytest.mark.django_db
class TestUserLifecycle:

    def test_delete_is_soft(self, admin_client, customer_user):
        response = admin_client.delete(f"/api/users/{customer_user.pk}")

        assert response.status_code == 200
        customer_user.refresh_from_db()
        assert customer_user.is_deleted is True
        assert customer_user.is_active is False
        assert admin_client.get(f"/api/users/{customer_user.pk}").status_code == 404

    def test_activate_does_not_restore_deleted_user(self, admin_client, customer_user):
        commands.soft_delete_user(customer_user.pk)

        response = admin_client.patch(f"/api/users/{customer_user.pk}/activate")

        assert response.status_code == 200
        customer_user.refresh_from_db()
        assert customer_user.is_active is True
        assert customer_user.is_deleted is True

    def test_admin_activate_restores_deleted_user(self, admin_client, customer_user):
        commands.soft_delete_user(customer_user.pk)

        response = admin_client.patch(f"/api/admin/users/{customer_user.pk}/activate")

        assert response.status_code == 200
        customer_user.refresh_from_db()
        assert customer_user.is_active is True
        assert customer_user.is_deleted is False

    def test_admin_deactivate_keeps_row_visible(self, admin_client, customer_user):
        admin_client.patch(f"/api/admin/users/{customer_user.pk}/deactivate")

        customer_user.refresh_from_db()
        assert customer_user.is_active is False
        assert customer_user.is_deleted is False

    def test_admin_reset_password(self, admin_client, customer_user):
        response = admin_client.post(
            f"/api/admin/users/{customer_user.pk}/reset-password",
            {"new_password": "brand-new-pass"},
            format="json",
        )

        assert response.status_code == 200
        customer_user.refresh_from_db()
        assert customer_user.check_password("brand-new-pass")

    def test_admin_stats_counts(self, admin_client, customer_user):
        commands.soft_delete_user(customer_user.pk)

        data = admin_client.get("/api/admin/stats").json()["data"]

        assert data["users"]["total"] == 2
        assert data["users"]["deleted"] == 1
        assert data["companies"]["total"] == 1
        assert data["uptime_seconds"] >= 0


@pytest.mark.django_db
class TestUserCreate:

    def test_duplicate_email_conflicts(self, admin_client, customer_user, roles):
        response = admin_client.post(
            "/api/users",
            {
                "email": "customer@test.com",
                "password": "testpass123",
                "first_name": "Dup",
                "last_name": "User",
                "role_id": roles["customer"].pk,
            },
            format="json",
        )

        assert response.status_code == 409

    def test_password_is_hashed(self, admin_client, roles):
        response = admin_client.post(
            "/api/users",
            {
                "email": "new@test.com",
                "password": "testpass123",
                "first_name": "New",
                "last_name": "User",
                "role_id": roles["customer"].pk,
            },
            format="json",
        )

        assert response.status_code == 201
        user = User.objects.get(email="new@test.com")
        assert user.password != "testpass123"
        assert user.check_password("testpass123")
        assert "password" not in response.json()["data"]


@pytest.mark.django_db
class TestSelfService:

    def test_user_can_read_own_record(self, customer_client, customer_user):
        response = customer_client.get(f"/api/users/{customer_user.pk}")

        assert response.status_code == 200

    def test_user_cannot_read_someone_else(self, customer_client, admin_user):
        response = customer_client.get(f"/api/users/{admin_user.pk}")

        assert response.status_code == 403

    def test_self_edit_cannot_change_role(self, customer_client, customer_user, roles):
        response = customer_client.patch(
            f"/api/users/{customer_user.pk}",
            {"first_name": "Renamed", "role_id": roles["admin"].pk},
            format="json",
        )

        assert response.status_code == 200
        customer_user.refresh_from_db()
        assert customer_user.first_name == "Renamed"
        assert customer_user.role_id == roles["customer"].pk

    def test_self_edit_cannot_set_verification_flags(self, customer_client, customer_user):
        response = customer_client.patch(
            f"/api/users/{customer_user.pk}",
            {"is_verified": True, "sca_setup": True},
            format="json",
        )

        assert response.status_code == 200
        customer_user.refresh_from_db()
        assert customer_user.is_verified is False
        assert customer_user.sca_setup is False

    def test_admin_can_set_verification_flags(self, admin_client, customer_user):
        response = admin_client.patch(
            f"/api/users/{customer_user.pk}",
            {"is_verified": True},
            format="json",
        )

        assert response.status_code == 200
        customer_user.refresh_from_db()
        assert customer_user.is_verified is True

    def test_password_change_requires_current_password(self, customer_client, customer_user):
        response = customer_client.patch(
            f"/api/users/{customer_user.pk}",
            {"password": "brand-new-pass"},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Current password is required to change the password."

    def test_password_change_rejects_wrong_current_password(self, customer_client, customer_user):
        response = customer_client.patch(
            f"/api/users/{customer_user.pk}",
            {"password": "brand-new-pass", "current_password": "not-my-password"},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect."
        customer_user.refresh_from_db()
        assert customer_user.check_password("testpass123")

    def test_password_change_with_current_password(self, customer_client, customer_user):
        response = customer_client.patch(
            f"/api/users/{customer_user.pk}",
            {"password": "brand-new-pass", "current_password": "testpass123"},
            format="json",
        )

        assert response.status_code == 200
        customer_user.refresh_from_db()
        assert customer_user.check_password("brand-new-pass")
