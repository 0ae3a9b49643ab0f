# tests/conftest.py
"""
Pytest fixtures for MagnaPorta tests.

- roles: built-in admin/customer roles with their default permissions
- admin_user / customer_user: users bound to those roles
- *_client: DRF APIClient authenticated as the matching user
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.models import ADMIN_ROLE, CUSTOMER_ROLE, Role
from accounts.permissions import seed_default_roles
from companies.models import Company, Plan
from currency.models import CompanyCurrencyRate, Currency, CurrencyGroup


User = get_user_model()


# =============================================================================
# Roles & Users
# =============================================================================

@pytest.fixture
def roles(db):
    seed_default_roles()
    return {
        ADMIN_ROLE: Role.objects.get(name=ADMIN_ROLE),
        CUSTOMER_ROLE: Role.objects.get(name=CUSTOMER_ROLE),
    }


@pytest.fixture
def company(db):
    return Company.objects.create(
        name="Acme Trading",
        phone_number="+905550000001",
        airwallex_account_id="acct_acme",
        is_active=True,
    )


@pytest.fixture
def other_company(db):
    return Company.objects.create(
        name="Globex",
        phone_number="+905550000002",
        airwallex_account_id="acct_globex",
        is_active=True,
    )


@pytest.fixture
def plan(db):
    return Plan.objects.create(name="Standard", description="Default plan")


@pytest.fixture
def admin_user(roles):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        first_name="Ada",
        last_name="Admin",
        role=roles[ADMIN_ROLE],
    )


@pytest.fixture
def customer_user(roles, company):
    return User.objects.create_user(
        email="customer@test.com",
        password="testpass123",
        first_name="Cem",
        last_name="Customer",
        role=roles[CUSTOMER_ROLE],
        company=company,
    )


# =============================================================================
# API Clients
# =============================================================================

@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def customer_client(customer_user):
    client = APIClient()
    client.force_authenticate(user=customer_user)
    return client


# =============================================================================
# Currency Fixtures
# =============================================================================

@pytest.fixture
def currency_groups(db):
    """Two groups: majors (USD, EUR) and emerging (TRY)."""
    majors = CurrencyGroup.objects.create(name="Majors")
    emerging = CurrencyGroup.objects.create(name="Emerging")
    Currency.objects.create(code="USD", name="US Dollar", symbol="$", group=majors)
    Currency.objects.create(code="EUR", name="Euro", symbol="€", group=majors)
    Currency.objects.create(code="TRY", name="Turkish Lira", symbol="₺", group=emerging)
    return {"majors": majors, "emerging": emerging}


@pytest.fixture
def company_rates(company, currency_groups):
    """Majors 2.00 + 0.50 = 2.50, emerging 2.00 + 1.25 = 3.25."""
    majors = CompanyCurrencyRate.objects.create(
        company=company,
        group=currency_groups["majors"],
        aw_rate=Decimal("2.00"),
        mp_rate=Decimal("0.50"),
    )
    emerging = CompanyCurrencyRate.objects.create(
        company=company,
        group=currency_groups["emerging"],
        aw_rate=Decimal("2.00"),
        mp_rate=Decimal("1.25"),
    )
    return {"majors": majors, "emerging": emerging}
