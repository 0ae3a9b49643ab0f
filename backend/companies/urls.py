# companies/urls.py
"""
URL configuration for companies, plans and plan types.

Endpoints:
- /companies/  - Company CRUD, soft delete/restore and plan assignment
- /plans/      - Plan CRUD, soft delete/restore and plan members
- /plan-types/ - Plan type CRUD, soft delete/restore
"""

from django.urls import path

from .views import (
    # Companies
    CompanyListCreateView,
    CompanyPaginatedView,
    CompanyDetailView,
    CompanyRestoreView,
    CompanyPlanView,
    # Plans
    PlanListCreateView,
    ActivePlanListView,
    PlanPaginatedView,
    PlanDetailView,
    PlanSoftDeleteView,
    PlanRestoreView,
    PlanCompaniesView,
    # Plan types
    PlanTypeListCreateView,
    ActivePlanTypeListView,
    PlanTypeDetailView,
    PlanTypeRestoreView,
)

app_name = "companies"

urlpatterns = [
    # ==========================================================================
    # Companies
    # ==========================================================================
    path("companies", CompanyListCreateView.as_view(), name="company-list"),
    path("companies/paginated", CompanyPaginatedView.as_view(), name="company-paginated"),
    path("companies/<int:pk>", CompanyDetailView.as_view(), name="company-detail"),
    path("companies/<int:pk>/restore", CompanyRestoreView.as_view(), name="company-restore"),
    path("companies/<int:pk>/plan", CompanyPlanView.as_view(), name="company-plan"),

    # ==========================================================================
    # Plans
    # ==========================================================================
    path("plans", PlanListCreateView.as_view(), name="plan-list"),
    path("plans/active", ActivePlanListView.as_view(), name="plan-active"),
    path("plans/paginated", PlanPaginatedView.as_view(), name="plan-paginated"),
    path("plans/<int:pk>", PlanDetailView.as_view(), name="plan-detail"),
    path("plans/<int:pk>/soft", PlanSoftDeleteView.as_view(), name="plan-soft-delete"),
    path("plans/<int:pk>/restore", PlanRestoreView.as_view(), name="plan-restore"),
    path("plans/<int:pk>/companies", PlanCompaniesView.as_view(), name="plan-companies"),

    # ==========================================================================
    # Plan types
    # ==========================================================================
    path("plan-types", PlanTypeListCreateView.as_view(), name="plan-type-list"),
    path("plan-types/active", ActivePlanTypeListView.as_view(), name="plan-type-active"),
    path("plan-types/<int:pk>", PlanTypeDetailView.as_view(), name="plan-type-detail"),
    path("plan-types/<int:pk>/restore", PlanTypeRestoreView.as_view(), name="plan-type-restore"),
]
