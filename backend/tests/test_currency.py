# tests/test_currency.py
"""
Tests for currency rates and conversion-rate resolution.

Tests cover:
- conversion_rate = aw_rate + mp_rate on every write
- one rate per (owner, group), single and bulk
- same-group and cross-group resolution (tie goes to the to-group)
- company scoping of the conversion endpoints
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from companies.models import Plan
from currency import commands
from currency.commands import COMPANY_RATES, PLAN_RATES
from currency.models import CompanyCurrencyRate, Currency, PlanCurrencyRate
from currency.rates import select_rate


# =============================================================================
# Rate records
# =============================================================================

@pytest.mark.django_db
class TestRateRecompute:

    def test_conversion_rate_is_sum_on_create(self, company_rates):
        assert company_rates["majors"].conversion_rate == Decimal("2.50")
        assert company_rates["emerging"].conversion_rate == Decimal("3.25")

    def test_conversion_rate_follows_update(self, company_rates):
        rate = company_rates["majors"]

        result = commands.update_rate(COMPANY_RATES, rate.pk, {"mp_rate": Decimal("1.00")})

        assert result.success is True
        rate.refresh_from_db()
        assert rate.conversion_rate == Decimal("3.00")

    def test_update_fields_save_still_recomputes(self, company_rates):
        rate = company_rates["majors"]
        rate.aw_rate = Decimal("1.00")
        rate.save(update_fields=["aw_rate"])

        rate.refresh_from_db()
        assert rate.conversion_rate == Decimal("1.50")

    def test_defaults_applied_when_rates_omitted(self, company, currency_groups):
        result = commands.create_rate(
            COMPANY_RATES,
            {"company_id": company.pk, "group_id": currency_groups["majors"].pk},
        )

        assert result.success is True
        assert result.data.aw_rate == Decimal("2.00")
        assert result.data.mp_rate == Decimal("0")
        assert result.data.conversion_rate == Decimal("2.00")


@pytest.mark.django_db
class TestRateUniqueness:

    def test_duplicate_company_rate_conflicts(self, admin_client, company, company_rates, currency_groups):
        response = admin_client.post(
            "/api/currency/company-rates",
            {"company_id": company.pk, "group_id": currency_groups["majors"].pk, "mp_rate": "0.10"},
            format="json",
        )

        assert response.status_code == 409

    def test_missing_group_is_not_found(self, admin_client, company):
        response = admin_client.post(
            "/api/currency/company-rates",
            {"company_id": company.pk, "group_id": 99999},
            format="json",
        )

        assert response.status_code == 404

    def test_bulk_is_all_or_nothing(self, admin_client, company, other_company, company_rates, currency_groups):
        response = admin_client.post(
            "/api/currency/company-rates/bulk",
            {
                "rates": [
                    {"company_id": other_company.pk, "group_id": currency_groups["majors"].pk},
                    {"company_id": company.pk, "group_id": currency_groups["majors"].pk},
                ]
            },
            format="json",
        )

        assert response.status_code == 409
        assert str(company.pk) in response.json()["message"]
        assert not CompanyCurrencyRate.objects.filter(company=other_company).exists()

    def test_bulk_rejects_clash_inside_batch(self, company, currency_groups):
        group_id = currency_groups["emerging"].pk
        result = commands.bulk_create_rates(
            COMPANY_RATES,
            [
                {"company_id": company.pk, "group_id": group_id},
                {"company_id": company.pk, "group_id": group_id},
            ],
        )

        assert result.success is False
        assert result.http_status == 409

    def test_duplicate_plan_rates_copies_every_group(self, plan, currency_groups):
        target = Plan.objects.create(name="Premium")
        for group in currency_groups.values():
            PlanCurrencyRate.objects.create(plan=plan, group=group, mp_rate=Decimal("0.75"))

        result = commands.duplicate_plan_rates(plan.pk, target.pk)

        assert result.success is True
        assert PlanCurrencyRate.objects.filter(plan=target).count() == 2


# =============================================================================
# Conversion rate resolution
# =============================================================================

class TestSelectRate:

    def test_from_group_wins_only_when_strictly_greater(self):
        high = SimpleNamespace(conversion_rate=Decimal("3.00"))
        low = SimpleNamespace(conversion_rate=Decimal("2.00"))

        assert select_rate(high, low) is high
        assert select_rate(low, high) is high

    def test_tie_selects_to_group(self):
        from_rate = SimpleNamespace(conversion_rate=Decimal("2.50"))
        to_rate = SimpleNamespace(conversion_rate=Decimal("2.50"))

        assert select_rate(from_rate, to_rate) is to_rate


@pytest.mark.django_db
class TestConversionRate:

    def test_same_group(self, company, company_rates, currency_groups):
        result = commands.conversion_rate_for_company(company.pk, "usd", "EUR")

        assert result.success is True
        assert result.data.is_cross_group is False
        assert result.data.rate == Decimal("2.50")
        assert result.data.selected_group_id == currency_groups["majors"].pk

    def test_cross_group_takes_higher_rate(self, company, company_rates, currency_groups):
        result = commands.conversion_rate_for_company(company.pk, "USD", "TRY")

        assert result.data.is_cross_group is True
        assert result.data.rate == Decimal("3.25")
        assert result.data.selected_group_id == currency_groups["emerging"].pk
        assert result.data.fee_percentage == Decimal("1.25")

    def test_cross_group_tie_goes_to_target_group(self, company, company_rates, currency_groups):
        company_rates["emerging"].mp_rate = Decimal("0.50")
        company_rates["emerging"].save()

        result = commands.conversion_rate_for_company(company.pk, "USD", "TRY")

        assert result.data.selected_group_id == currency_groups["emerging"].pk

    def test_inactive_currency_is_not_found(self, company, company_rates):
        Currency.objects.filter(code="TRY").update(is_active=False)

        result = commands.conversion_rate_for_company(company.pk, "USD", "TRY")

        assert result.http_status == 404

    def test_missing_group_rate_is_not_found(self, company, company_rates):
        company_rates["emerging"].delete()

        result = commands.conversion_rate_for_company(company.pk, "USD", "TRY")

        assert result.http_status == 404

    def test_by_account_id_adds_company(self, company, company_rates):
        result = commands.conversion_rate_for_account("acct_acme", "USD", "TRY")

        assert result.success is True
        assert result.data["company_id"] == company.pk
        assert result.data["company_name"] == "Acme Trading"
        assert result.data["rate"] == 3.25

    def test_plan_conversion_rate(self, plan, currency_groups):
        PlanCurrencyRate.objects.create(plan=plan, group=currency_groups["majors"], mp_rate=Decimal("0.40"))

        result = commands.conversion_rate_for_plan(plan.pk, "USD", "EUR")

        assert result.data.rate == Decimal("2.40")
        assert PLAN_RATES.rates_for(plan.pk).count() == 1


@pytest.mark.django_db
class TestConversionEndpoints:

    def test_customer_reads_own_company(self, customer_client, company, company_rates):
        response = customer_client.get(f"/api/currency/conversion-rate/{company.pk}?from=USD&to=TRY")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["rate"] == 3.25
        assert data["is_cross_group"] is True

    def test_customer_cannot_read_other_company(self, customer_client, other_company, currency_groups):
        response = customer_client.get(f"/api/currency/conversion-rate/{other_company.pk}?from=USD&to=TRY")

        assert response.status_code == 403

    def test_account_endpoint_scoped_to_own_account(self, customer_client, other_company, currency_groups):
        response = customer_client.get("/api/currency/conversion-rate/airwallex/acct_globex?from=USD&to=EUR")

        assert response.status_code == 403

    def test_missing_query_params(self, admin_client, company):
        response = admin_client.get(f"/api/currency/conversion-rate/{company.pk}?from=USD")

        assert response.status_code == 400

    def test_customer_cannot_create_rates(self, customer_client, company, currency_groups):
        response = customer_client.post(
            "/api/currency/company-rates",
            {"company_id": company.pk, "group_id": currency_groups["majors"].pk},
            format="json",
        )

        assert response.status_code == 403


# =============================================================================
# Currency groups
# =============================================================================

@pytest.mark.django_db
class TestCurrencyGroupMove:

    def test_move_keeps_single_currency_row(self, admin_client, currency_groups):
        usd = Currency.objects.get(code="USD")
        before = Currency.objects.count()

        response = admin_client.put(
            f"/api/currency/{usd.pk}/group", {"group_id": currency_groups["emerging"].pk}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["data"]["group_id"] == currency_groups["emerging"].pk
        assert Currency.objects.count() == before
        assert Currency.objects.filter(code="USD").count() == 1
        assert list(currency_groups["majors"].currencies.values_list("code", flat=True)) == ["EUR"]

    def test_move_to_missing_group_is_not_found(self, admin_client, currency_groups):
        usd = Currency.objects.get(code="USD")

        response = admin_client.put(f"/api/currency/{usd.pk}/group", {"group_id": 99999}, format="json")

        assert response.status_code == 404
        usd.refresh_from_db()
        assert usd.group_id == currency_groups["majors"].pk

    def test_customer_cannot_move(self, customer_client, currency_groups):
        usd = Currency.objects.get(code="USD")

        response = customer_client.put(
            f"/api/currency/{usd.pk}/group", {"group_id": currency_groups["emerging"].pk}, format="json"
        )

        assert response.status_code == 403
