# tests/test_markup_rates.py
"""
Tests for transfer markup rates.

Tests cover:
- one live rate per (plan, country, currency, method); codes upper-cased
- soft delete / restore, including a restore into a taken slot
- account lookup: swift ignores the country, local needs it, SEPA fallback for EUR
- bulk fee updates report failures per rate
- grouping, summary and duplication across plans
"""

from decimal import Decimal

import pytest

from companies.models import Plan
from currency import markup
from currency.models import TransferMarkupRate


def _rate(plan, **fields):
    values = {
        "region": "Europe",
        "country": "Germany",
        "country_code": "DE",
        "currency": "EUR",
        "transfer_method": "local",
        "fee_our_percentage": Decimal("0.200"),
        "fee_our_minimum": Decimal("2.00"),
    }
    values.update(fields)
    return TransferMarkupRate.objects.create(plan=plan, **values)


@pytest.fixture
def planned_company(company, plan):
    company.plan = plan
    company.save()
    return company


# =============================================================================
# Create / update / delete
# =============================================================================

@pytest.mark.django_db
class TestMarkupRateLifecycle:

    def test_create_normalizes_codes_and_defaults_fee_currency(self, admin_client, plan):
        response = admin_client.post(
            "/api/transfer-markup-rates",
            {
                "plan_id": plan.pk,
                "country_code": "tr",
                "currency": "try",
                "transfer_method": "local",
                "fee_our_percentage": "0.5",
                "fee_our_minimum": "3.00",
            },
            format="json",
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["country_code"] == "TR"
        assert data["currency"] == "TRY"
        assert data["fee_currency"] == "TRY"
        assert data["fee_sha_percentage"] is None

    def test_taken_slot_conflicts(self, admin_client, plan):
        _rate(plan)

        response = admin_client.post(
            "/api/transfer-markup-rates",
            {
                "plan_id": plan.pk,
                "country_code": "de",
                "currency": "EUR",
                "transfer_method": "local",
                "fee_our_percentage": "0.1",
                "fee_our_minimum": "1.00",
            },
            format="json",
        )

        assert response.status_code == 409
        assert TransferMarkupRate.objects.filter(plan=plan).count() == 1

    def test_unknown_plan_is_not_found(self, admin_client):
        response = admin_client.post(
            "/api/transfer-markup-rates",
            {
                "plan_id": 99999,
                "country_code": "DE",
                "currency": "EUR",
                "transfer_method": "swift",
                "fee_our_percentage": "0.1",
                "fee_our_minimum": "1.00",
            },
            format="json",
        )

        assert response.status_code == 404

    def test_negative_fee_is_rejected(self, admin_client, plan):
        response = admin_client.post(
            "/api/transfer-markup-rates",
            {
                "plan_id": plan.pk,
                "country_code": "DE",
                "currency": "EUR",
                "transfer_method": "swift",
                "fee_our_percentage": "-1",
                "fee_our_minimum": "1.00",
            },
            format="json",
        )

        assert response.status_code == 400

    def test_update_into_taken_slot_conflicts(self, admin_client, plan):
        _rate(plan)
        swift = _rate(plan, transfer_method="swift")

        response = admin_client.patch(
            f"/api/transfer-markup-rates/{swift.pk}", {"transfer_method": "local"}, format="json"
        )

        assert response.status_code == 409

    def test_fee_only_update_skips_slot_check(self, admin_client, plan):
        rate = _rate(plan)

        response = admin_client.patch(
            f"/api/transfer-markup-rates/{rate.pk}", {"fee_our_minimum": "5.00"}, format="json"
        )

        assert response.status_code == 200
        rate.refresh_from_db()
        assert rate.fee_our_minimum == Decimal("5.00")

    def test_soft_delete_frees_slot_and_blocks_restore(self, admin_client, plan):
        rate = _rate(plan)

        assert admin_client.delete(f"/api/transfer-markup-rates/{rate.pk}").status_code == 200
        assert admin_client.get(f"/api/transfer-markup-rates/{rate.pk}").status_code == 404

        replacement = markup.create_markup_rate(
            {
                "plan_id": plan.pk,
                "country_code": "DE",
                "currency": "EUR",
                "transfer_method": "local",
                "fee_our_percentage": Decimal("0.3"),
                "fee_our_minimum": Decimal("2.00"),
            }
        )
        assert replacement.success is True

        response = admin_client.post(f"/api/transfer-markup-rates/{rate.pk}/restore")

        assert response.status_code == 409

    def test_restore_deleted_rate(self, admin_client, plan):
        rate = _rate(plan, is_deleted=True)

        response = admin_client.post(f"/api/transfer-markup-rates/{rate.pk}/restore")

        assert response.status_code == 200
        rate.refresh_from_db()
        assert rate.is_deleted is False

    def test_restore_live_rate_is_not_found(self, admin_client, plan):
        rate = _rate(plan)

        response = admin_client.post(f"/api/transfer-markup-rates/{rate.pk}/restore")

        assert response.status_code == 404

    def test_customer_cannot_create(self, customer_client, plan):
        response = customer_client.post("/api/transfer-markup-rates", {"plan_id": plan.pk}, format="json")

        assert response.status_code == 403


# =============================================================================
# Account lookup
# =============================================================================

@pytest.mark.django_db
class TestMarkupForAccount:

    def test_swift_ignores_country(self, planned_company, plan):
        rate = _rate(plan, country_code="US", currency="USD", transfer_method="swift")

        result = markup.markup_rate_for_account("acct_acme", "usd", "swift", country_code="GB")

        assert result.success is True
        assert result.data.pk == rate.pk

    def test_local_requires_country(self, planned_company, plan):
        result = markup.markup_rate_for_account("acct_acme", "EUR", "local")

        assert result.success is False
        assert result.http_status == 400

    def test_local_without_type_only_matches_untyped(self, planned_company, plan):
        _rate(plan, transaction_type="ACH", country_code="US", currency="USD")

        result = markup.markup_rate_for_account("acct_acme", "USD", "local", country_code="US")

        assert result.success is False
        assert result.http_status == 404
        assert result.error == "No markup rate found for the specified criteria"

    def test_local_matches_transaction_type(self, planned_company, plan):
        rate = _rate(plan, transaction_type="ACH", country_code="US", currency="USD")

        result = markup.markup_rate_for_account(
            "acct_acme", "USD", "local", country_code="us", transaction_type="ACH"
        )

        assert result.success is True
        assert result.data.pk == rate.pk

    def test_eur_local_falls_back_to_sepa(self, planned_company, plan):
        sepa = _rate(plan, transaction_type="SEPA", country_code="DE")

        result = markup.markup_rate_for_account("acct_acme", "EUR", "local", country_code="FR")

        assert result.success is True
        assert result.data.pk == sepa.pk
        assert "SEPA fallback" in result.message

    def test_no_sepa_fallback_for_other_currencies(self, planned_company, plan):
        _rate(plan, transaction_type="SEPA", country_code="DE", currency="GBP")

        result = markup.markup_rate_for_account("acct_acme", "GBP", "local", country_code="FR")

        assert result.http_status == 404

    def test_company_without_plan(self, company):
        result = markup.markup_rate_for_account("acct_acme", "EUR", "swift")

        assert result.success is False
        assert result.http_status == 400

    def test_deleted_rate_is_ignored(self, planned_company, plan):
        _rate(plan, transfer_method="swift", is_deleted=True)

        result = markup.markup_rate_for_account("acct_acme", "EUR", "swift")

        assert result.http_status == 404

    def test_customer_reads_own_account(self, customer_client, planned_company, plan):
        _rate(plan, transfer_method="swift")

        response = customer_client.get(
            "/api/transfer-markup-rates/by-account?account_id=acct_acme&currency=EUR&transfer_method=swift"
        )

        assert response.status_code == 200
        assert response.json()["data"]["transfer_method"] == "swift"

    def test_customer_cannot_read_other_account(self, customer_client, other_company):
        response = customer_client.get(
            "/api/transfer-markup-rates/by-account?account_id=acct_globex&currency=EUR&transfer_method=swift"
        )

        assert response.status_code == 403


# =============================================================================
# Bulk, grouping and duplication
# =============================================================================

@pytest.mark.django_db
class TestMarkupBulkAndReports:

    def test_bulk_update_reports_missing_rates(self, admin_client, plan):
        rate = _rate(plan)

        response = admin_client.patch(
            "/api/transfer-markup-rates/bulk-update",
            {"rates": [{"id": rate.pk, "fee_our_percentage": "1.5"}, {"id": 99999, "fee_our_minimum": "1.00"}]},
            format="json",
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["data"]["success_count"] == 1
        assert body["data"]["successful_ids"] == [rate.pk]
        assert body["data"]["failures"][0]["id"] == 99999
        rate.refresh_from_db()
        assert rate.fee_our_percentage == Decimal("1.500")

    def test_bulk_update_caps_percentage(self, admin_client, plan):
        rate = _rate(plan)

        response = admin_client.patch(
            "/api/transfer-markup-rates/bulk-update",
            {"rates": [{"id": rate.pk, "fee_our_percentage": "150"}]},
            format="json",
        )

        assert response.status_code == 400

    def test_grouped_nests_by_region_country_currency_type(self, admin_client, plan):
        _rate(plan)
        _rate(plan, transfer_method="swift")
        _rate(plan, region="North America", country="United States", country_code="US", currency="USD",
              transaction_type="ACH")

        response = admin_client.get(f"/api/transfer-markup-rates/grouped/{plan.pk}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_rates"] == 3
        assert data["local_rates_count"] == 2
        assert data["swift_rates_count"] == 1
        europe = next(r for r in data["regions"] if r["region"] == "Europe")
        methods = europe["countries"][0]["currencies"][0]["transaction_types"]["default"]
        assert set(methods) == {"local", "swift"}
        america = next(r for r in data["regions"] if r["region"] == "North America")
        assert set(america["countries"][0]["currencies"][0]["transaction_types"]) == {"ACH"}

    def test_plans_summary_counts(self, admin_client, plan):
        _rate(plan)
        _rate(plan, transfer_method="swift")
        _rate(plan, region="Asia", country="Japan", country_code="JP", currency="JPY")

        response = admin_client.get("/api/transfer-markup-rates/plans-summary")

        summary = next(s for s in response.json()["data"] if s["plan_id"] == plan.pk)
        assert summary["total_rates"] == 3
        assert summary["swift_rates"] == 1
        assert summary["countries_count"] == 2
        assert summary["regions_count"] == 2

    def test_regions_and_countries(self, admin_client, plan):
        _rate(plan)
        _rate(plan, region="Asia", country="Japan", country_code="JP", currency="JPY")

        regions = admin_client.get("/api/transfer-markup-rates/regions").json()["data"]
        countries = admin_client.get("/api/transfer-markup-rates/countries?region=Asia").json()["data"]

        assert regions == ["Asia", "Europe"]
        assert [c["country_code"] for c in countries] == ["JP"]

    def test_duplicate_copies_rates_once(self, plan):
        target = Plan.objects.create(name="Premium")
        _rate(plan)
        _rate(plan, transfer_method="swift")

        first = markup.duplicate_markup_rates(plan.pk, target.pk)
        second = markup.duplicate_markup_rates(plan.pk, target.pk)

        assert first.success is True
        assert len(first.data) == 2
        assert second.http_status == 409

    def test_duplicate_empty_source_is_ok(self, plan):
        target = Plan.objects.create(name="Premium")

        result = markup.duplicate_markup_rates(plan.pk, target.pk)

        assert result.success is True
        assert result.data == []

    def test_rates_for_missing_plan(self, admin_client):
        response = admin_client.get("/api/transfer-markup-rates/plan/99999")

        assert response.status_code == 404
