# currency/urls.py
"""
URL configuration for currencies and rates.

Endpoints:
- /currency/              - Groups, currencies, company rates, conversion rate, seed
- /plan-currency-rates/   - Plan rates
- /transfer-markup-rates/ - Transfer markup rates per plan and destination
"""

from django.urls import path

from .views import (
    # Groups and currencies
    CurrencyGroupListCreateView,
    CurrencyListCreateView,
    CurrencyDetailView,
    CurrencyAssignGroupView,
    CurrenciesByGroupView,
    CurrencySeedView,
    # Company rates
    CompanyRateCreateView,
    CompanyRateBulkView,
    CompanyRateListView,
    CompanyRateForGroupView,
    CompanyRateDetailView,
    # Conversion rate
    CompanyConversionRateView,
    AccountConversionRateView,
    # Plan rates
    PlanRateListCreateView,
    PlanRateBulkView,
    PlanRateAllView,
    PlanRatesByPlanView,
    PlanRateForGroupView,
    PlanRatesByGroupView,
    PlanRateDetailView,
    PlanRateDuplicateView,
    PlanConversionRateView,
    # Transfer markup rates
    MarkupRateListCreateView,
    MarkupRatePaginatedView,
    MarkupRatesByCountryView,
    MarkupRatesByCurrencyView,
    MarkupRatesByMethodView,
    MarkupPlansSummaryView,
    MarkupGroupedRatesView,
    MarkupFilteredRatesView,
    MarkupRegionsView,
    MarkupCountriesView,
    MarkupRateByAccountView,
    MarkupSpecificRateView,
    MarkupRatesByPlanView,
    MarkupRatesByPlanPaginatedView,
    MarkupRateDetailView,
    MarkupRateRestoreView,
    MarkupBulkUpdateView,
    MarkupDuplicateView,
)

app_name = "currency"

urlpatterns = [
    # ==========================================================================
    # Groups and currencies
    # ==========================================================================
    path("currency", CurrencyListCreateView.as_view(), name="currency-list"),
    path("currency/groups", CurrencyGroupListCreateView.as_view(), name="group-list"),
    path("currency/seed", CurrencySeedView.as_view(), name="seed"),
    path("currency/group/<int:group_id>", CurrenciesByGroupView.as_view(), name="currency-by-group"),
    path("currency/<int:pk>", CurrencyDetailView.as_view(), name="currency-detail"),
    path("currency/<int:pk>/group", CurrencyAssignGroupView.as_view(), name="currency-assign-group"),

    # ==========================================================================
    # Company rates
    # ==========================================================================
    path("currency/company-rates", CompanyRateCreateView.as_view(), name="company-rate-create"),
    path("currency/company-rates/bulk", CompanyRateBulkView.as_view(), name="company-rate-bulk"),
    path("currency/company-rates/id/<int:rate_id>", CompanyRateDetailView.as_view(), name="company-rate-detail"),
    path("currency/company-rates/<int:company_id>", CompanyRateListView.as_view(), name="company-rate-list"),
    path(
        "currency/company-rates/<int:company_id>/group/<int:group_id>",
        CompanyRateForGroupView.as_view(),
        name="company-rate-for-group",
    ),

    # ==========================================================================
    # Conversion rate
    # ==========================================================================
    path(
        "currency/conversion-rate/airwallex/<str:account_id>",
        AccountConversionRateView.as_view(),
        name="conversion-rate-account",
    ),
    path(
        "currency/conversion-rate/<int:company_id>",
        CompanyConversionRateView.as_view(),
        name="conversion-rate-company",
    ),

    # ==========================================================================
    # Plan rates
    # ==========================================================================
    path("plan-currency-rates", PlanRateListCreateView.as_view(), name="plan-rate-list"),
    path("plan-currency-rates/bulk", PlanRateBulkView.as_view(), name="plan-rate-bulk"),
    path("plan-currency-rates/all", PlanRateAllView.as_view(), name="plan-rate-all"),
    path("plan-currency-rates/plan/<int:plan_id>", PlanRatesByPlanView.as_view(), name="plan-rate-by-plan"),
    path(
        "plan-currency-rates/plan/<int:plan_id>/group/<int:group_id>",
        PlanRateForGroupView.as_view(),
        name="plan-rate-for-group",
    ),
    path("plan-currency-rates/group/<int:group_id>", PlanRatesByGroupView.as_view(), name="plan-rate-by-group"),
    path(
        "plan-currency-rates/duplicate/<int:source_plan_id>/<int:target_plan_id>",
        PlanRateDuplicateView.as_view(),
        name="plan-rate-duplicate",
    ),
    path(
        "plan-currency-rates/conversion-rate/<int:plan_id>",
        PlanConversionRateView.as_view(),
        name="plan-conversion-rate",
    ),
    path("plan-currency-rates/<int:pk>", PlanRateDetailView.as_view(), name="plan-rate-detail"),

    # ==========================================================================
    # Transfer markup rates
    # ==========================================================================
    path("transfer-markup-rates", MarkupRateListCreateView.as_view(), name="markup-list"),
    path("transfer-markup-rates/paginated", MarkupRatePaginatedView.as_view(), name="markup-paginated"),
    path("transfer-markup-rates/country/<str:country_code>", MarkupRatesByCountryView.as_view(), name="markup-by-country"),
    path("transfer-markup-rates/currency/<str:currency>", MarkupRatesByCurrencyView.as_view(), name="markup-by-currency"),
    path("transfer-markup-rates/transfer-method/<str:method>", MarkupRatesByMethodView.as_view(), name="markup-by-method"),
    path("transfer-markup-rates/plans-summary", MarkupPlansSummaryView.as_view(), name="markup-plans-summary"),
    path("transfer-markup-rates/grouped/<int:plan_id>", MarkupGroupedRatesView.as_view(), name="markup-grouped"),
    path("transfer-markup-rates/filtered", MarkupFilteredRatesView.as_view(), name="markup-filtered"),
    path("transfer-markup-rates/regions", MarkupRegionsView.as_view(), name="markup-regions"),
    path("transfer-markup-rates/countries", MarkupCountriesView.as_view(), name="markup-countries"),
    path("transfer-markup-rates/by-account", MarkupRateByAccountView.as_view(), name="markup-by-account"),
    path("transfer-markup-rates/specific-rate", MarkupSpecificRateView.as_view(), name="markup-specific-rate"),
    path("transfer-markup-rates/bulk-update", MarkupBulkUpdateView.as_view(), name="markup-bulk-update"),
    path(
        "transfer-markup-rates/duplicate/<int:source_plan_id>/<int:target_plan_id>",
        MarkupDuplicateView.as_view(),
        name="markup-duplicate",
    ),
    path("transfer-markup-rates/plan/<int:plan_id>", MarkupRatesByPlanView.as_view(), name="markup-by-plan"),
    path(
        "transfer-markup-rates/plan/<int:plan_id>/paginated",
        MarkupRatesByPlanPaginatedView.as_view(),
        name="markup-by-plan-paginated",
    ),
    path("transfer-markup-rates/<int:pk>", MarkupRateDetailView.as_view(), name="markup-detail"),
    path("transfer-markup-rates/<int:pk>/restore", MarkupRateRestoreView.as_view(), name="markup-restore"),
]
