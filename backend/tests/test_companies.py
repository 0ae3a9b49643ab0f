# tests/test_companies.py
"""
Tests for companies and plans.

Tests cover:
- Company scoping for non-admin actors
- Soft delete / restore
- Immutable airwallex_account_id
- Pagination envelope
- Plan types: unique names, in-use delete refused
"""

import pytest

from companies.models import Company, Plan, PlanType


@pytest.mark.django_db
class TestCompanyScoping:

    def test_customer_lists_only_own_company(self, customer_client, company, other_company):
        response = customer_client.get("/api/companies")

        assert response.status_code == 200
        names = [c["name"] for c in response.json()["data"]]
        assert names == ["Acme Trading"]

    def test_customer_cannot_read_other_company(self, customer_client, other_company):
        response = customer_client.get(f"/api/companies/{other_company.pk}")

        assert response.status_code == 404

    def test_admin_lists_every_company(self, admin_client, company, other_company):
        response = admin_client.get("/api/companies")

        assert {c["name"] for c in response.json()["data"]} == {"Acme Trading", "Globex"}

    def test_customer_cannot_create_company(self, customer_client):
        response = customer_client.post("/api/companies", {"name": "Rogue"}, format="json")

        assert response.status_code == 403


@pytest.mark.django_db
class TestCompanyLifecycle:

    def test_create_duplicate_name_conflicts(self, admin_client, company):
        response = admin_client.post("/api/companies", {"name": "acme trading"}, format="json")

        assert response.status_code == 409

    def test_soft_delete_and_restore(self, admin_client, company):
        assert admin_client.delete(f"/api/companies/{company.pk}").status_code == 200
        company.refresh_from_db()
        assert company.is_deleted is True
        assert admin_client.get(f"/api/companies/{company.pk}").status_code == 404

        assert admin_client.post(f"/api/companies/{company.pk}/restore").status_code == 200
        company.refresh_from_db()
        assert company.is_deleted is False

    def test_airwallex_account_id_is_immutable(self, admin_client, company):
        response = admin_client.patch(
            f"/api/companies/{company.pk}",
            {"airwallex_account_id": "acct_other"},
            format="json",
        )

        assert response.status_code == 400
        company.refresh_from_db()
        assert company.airwallex_account_id == "acct_acme"

    def test_assign_and_clear_plan(self, admin_client, company, plan):
        response = admin_client.post(f"/api/companies/{company.pk}/plan", {"plan_id": plan.pk}, format="json")

        assert response.status_code == 200
        assert response.json()["data"]["plan"] == {"id": plan.pk, "name": "Standard"}

        admin_client.delete(f"/api/companies/{company.pk}/plan")
        company.refresh_from_db()
        assert company.plan_id is None


@pytest.mark.django_db
class TestPlans:

    def test_hard_delete_detaches_companies(self, admin_client, company, plan):
        company.plan = plan
        company.save()

        response = admin_client.delete(f"/api/plans/{plan.pk}")

        assert response.status_code == 200
        assert not Plan.objects.filter(pk=plan.pk).exists()
        company.refresh_from_db()
        assert company.plan_id is None

    def test_soft_deleted_plan_hidden_from_active(self, admin_client, plan):
        admin_client.delete(f"/api/plans/{plan.pk}/soft")

        response = admin_client.get("/api/plans/active")

        assert response.json()["data"] == []


@pytest.mark.django_db
class TestPagination:

    def test_meta_and_limit_cap(self, admin_client):
        Company.objects.bulk_create([Company(name=f"Company {i:03d}") for i in range(105)])

        response = admin_client.get("/api/companies/paginated?page=2&limit=500&order_by=name&order=ASC")

        assert response.status_code == 200
        payload = response.json()["data"]
        assert payload["meta"] == {
            "totalItems": 105,
            "itemsPerPage": 100,
            "totalPages": 2,
            "currentPage": 2,
        }
        assert [c["name"] for c in payload["data"]] == [f"Company {i:03d}" for i in range(100, 105)]

    def test_unknown_order_by_is_rejected(self, admin_client):
        response = admin_client.get("/api/companies/paginated?order_by=password")

        assert response.status_code == 400

    def test_invalid_order_is_rejected(self, admin_client):
        response = admin_client.get("/api/companies/paginated?order=sideways")

        assert response.status_code == 400


@pytest.mark.django_db
class TestPlanTypes:

    def test_create_and_duplicate_name_conflicts(self, admin_client):
        first = admin_client.post("/api/plan-types", {"name": "business", "display_name": "Business"}, format="json")
        second = admin_client.post("/api/plan-types", {"name": "Business"}, format="json")

        assert first.status_code == 201
        assert first.json()["data"]["display_name"] == "Business"
        assert second.status_code == 409

    def test_plan_can_reference_type(self, admin_client):
        plan_type = PlanType.objects.create(name="business")

        response = admin_client.post("/api/plans", {"name": "Pro", "plan_type_id": plan_type.pk}, format="json")

        assert response.status_code == 201
        assert response.json()["data"]["plan_type_id"] == plan_type.pk

    def test_unknown_plan_type_is_not_found(self, admin_client, plan):
        response = admin_client.patch(f"/api/plans/{plan.pk}", {"plan_type_id": 99999}, format="json")

        assert response.status_code == 404

    def test_delete_refused_while_in_use(self, admin_client, plan):
        plan_type = PlanType.objects.create(name="business")
        plan.plan_type = plan_type
        plan.save()

        response = admin_client.delete(f"/api/plan-types/{plan_type.pk}")

        assert response.status_code == 400
        plan_type.refresh_from_db()
        assert plan_type.is_deleted is False

    def test_soft_delete_and_restore(self, admin_client):
        plan_type = PlanType.objects.create(name="personal")

        assert admin_client.delete(f"/api/plan-types/{plan_type.pk}").status_code == 200
        assert admin_client.get(f"/api/plan-types/{plan_type.pk}").status_code == 404
        assert admin_client.get("/api/plan-types").json()["data"] == []

        response = admin_client.patch(f"/api/plan-types/{plan_type.pk}/restore")

        assert response.status_code == 200
        assert response.json()["data"]["is_deleted"] is False

    def test_active_excludes_inactive(self, admin_client):
        PlanType.objects.create(name="personal")
        PlanType.objects.create(name="legacy", is_active=False)

        response = admin_client.get("/api/plan-types/active")

        assert [t["name"] for t in response.json()["data"]] == ["personal"]

    def test_customer_cannot_manage(self, customer_client):
        response = customer_client.post("/api/plan-types", {"name": "business"}, format="json")

        assert response.status_code == 403
