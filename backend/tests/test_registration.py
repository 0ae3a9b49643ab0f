# tests/test_registration.py
"""
Tests for self-service registration.

The payments-provider client is mocked; each test checks both the HTTP
answer and the RegistrationAttempt left behind.
"""

from unittest import mock

import pytest
from django.contrib.auth import get_user_model
from django.db import DatabaseError

from accounts.models import CUSTOMER_ROLE, RegistrationAttempt
from accounts.registration import _create_local_records, close_orphaned_attempt, register_signup
from accounts.tasks import reconcile_registrations
from companies.models import Company
from payments.client import AirwallexError


User = get_user_model()

SIGNUP = {
    "email": "founder@newco.com",
    "password": "supersecret1",
    "first_name": "Nur",
    "last_name": "Founder",
    "phone_number": "+905551112233",
    "company_name": "NewCo",
}


@pytest.fixture
def airwallex():
    client = mock.Mock()
    client.create_account.return_value = {"id": "acct_newco", "status": "CREATED"}
    with mock.patch("accounts.registration.get_airwallex_client", return_value=client):
        yield client


@pytest.mark.django_db
class TestRegisterEndpoint:

    def test_successful_registration(self, api_client, roles, airwallex):
        response = api_client.post("/api/auth/register", SIGNUP, format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Register Success"
        assert body["data"]["email"] == "founder@newco.com"
        assert body["data"]["role_name"] == "customer"

        company = Company.objects.get(name="NewCo")
        assert company.airwallex_account_id == "acct_newco"
        assert company.is_active is False
        assert company.is_verified is False

        user = User.objects.get(email="founder@newco.com")
        assert user.company_id == company.pk
        assert user.check_password("supersecret1")

        attempt = RegistrationAttempt.objects.get(email="founder@newco.com")
        assert attempt.state == RegistrationAttempt.State.COMPLETED
        assert attempt.company_id == company.pk

    def test_provider_receives_business_name_and_contact(self, api_client, roles, airwallex):
        api_client.post("/api/auth/register", SIGNUP, format="json", HTTP_USER_AGENT="pytest-agent")

        payload = airwallex.create_account.call_args[0][0]
        assert payload["account_details"]["business_details"]["business_name"] == "NewCo"
        assert payload["primary_contact"]["email"] == "founder@newco.com"
        device = payload["customer_agreements"]["terms_and_conditions"]["device_data"]
        assert device["user_agent"] == "pytest-agent"

    def test_duplicate_company_rejected_before_provider_call(self, api_client, roles, airwallex, company):
        response = api_client.post(
            "/api/auth/register",
            {**SIGNUP, "company_name": "Acme Trading"},
            format="json",
        )

        assert response.status_code == 409
        airwallex.create_account.assert_not_called()
        assert RegistrationAttempt.objects.count() == 0

    def test_duplicate_email_rejected_before_provider_call(self, api_client, roles, airwallex, customer_user):
        response = api_client.post(
            "/api/auth/register",
            {**SIGNUP, "email": "customer@test.com"},
            format="json",
        )

        assert response.status_code == 409
        airwallex.create_account.assert_not_called()

    def test_duplicate_phone_rejected_before_provider_call(self, api_client, roles, airwallex, company):
        response = api_client.post(
            "/api/auth/register",
            {**SIGNUP, "phone_number": "+905550000001"},
            format="json",
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Phone number '+905550000001' is already registered."
        airwallex.create_account.assert_not_called()
        assert RegistrationAttempt.objects.count() == 0
        assert not Company.objects.filter(name="NewCo").exists()

    def test_provider_failure_is_bad_gateway(self, api_client, roles, airwallex):
        airwallex.create_account.side_effect = AirwallexError("rejected", 400)

        response = api_client.post("/api/auth/register", SIGNUP, format="json")

        assert response.status_code == 502
        assert response.json()["message"] == "Failed to create Airwallex account"
        assert not Company.objects.filter(name="NewCo").exists()
        attempt = RegistrationAttempt.objects.get()
        assert attempt.state == RegistrationAttempt.State.FAILED

    def test_short_password_is_rejected(self, api_client, roles, airwallex):
        response = api_client.post("/api/auth/register", {**SIGNUP, "password": "short"}, format="json")

        assert response.status_code == 400
        airwallex.create_account.assert_not_called()


@pytest.mark.django_db
class TestOrphanedRegistration:

    def test_local_failure_leaves_orphaned_attempt(self, roles, airwallex):
        with mock.patch(
            "accounts.registration._create_local_records",
            side_effect=DatabaseError("disk full"),
        ):
            result = register_signup(dict(SIGNUP))

        assert result.success is False
        assert result.http_status == 409
        assert result.error == "Failed to create company record"

        attempt = RegistrationAttempt.objects.get()
        assert attempt.state == RegistrationAttempt.State.ORPHANED
        assert attempt.airwallex_account_id == "acct_newco"
        assert not Company.objects.filter(name="NewCo").exists()

    def test_reconcile_task_counts_orphans(self, roles, airwallex):
        with mock.patch(
            "accounts.registration._create_local_records",
            side_effect=DatabaseError("disk full"),
        ):
            register_signup(dict(SIGNUP))

        assert reconcile_registrations() == 1

    def test_closing_an_orphan_marks_it_reconciled(self, roles, airwallex):
        with mock.patch(
            "accounts.registration._create_local_records",
            side_effect=DatabaseError("disk full"),
        ):
            register_signup(dict(SIGNUP))
        attempt = RegistrationAttempt.objects.get()

        result = close_orphaned_attempt(attempt.pk, note="account closed at provider")

        assert result.success is True
        attempt.refresh_from_db()
        assert attempt.state == RegistrationAttempt.State.RECONCILED
        assert "account closed at provider" in attempt.failure_reason
        assert reconcile_registrations() == 0

    def test_missing_customer_role(self, db, airwallex):
        result = register_signup(dict(SIGNUP))

        assert result.success is False
        assert result.http_status == 404
        airwallex.create_account.assert_not_called()

    def test_local_records_link_user_to_company(self, roles):
        company, user = _create_local_records(roles[CUSTOMER_ROLE], dict(SIGNUP), "+905551112233", "acct_newco")

        assert company.airwallex_account_id == "acct_newco"
        assert company.is_active is False
        assert user.company_id == company.pk
        assert user.role.name == CUSTOMER_ROLE
