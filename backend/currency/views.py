# currency/views.py
"""
Currency groups, currencies, company/plan rates, conversion-rate lookups and
transfer markup rates.

Reads need currency.view, writes need currency.manage; plan rates and
markup rates use plans.view and plans.manage. Actors outside the admin
role only see rates of their own company.
"""

from django.core.exceptions import PermissionDenied
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from companies.models import Plan
from magnaporta_backend.pagination import paginate, parse_page_params
from magnaporta_backend.responses import envelope, fail_response, failure

from . import commands, markup
from .commands import COMPANY_RATES, PLAN_RATES
from .models import CompanyCurrencyRate, Currency, CurrencyGroup, PlanCurrencyRate, TransferMethod
from .serializers import (
    AssignCurrencyGroupSerializer,
    CompanyRateBulkSerializer,
    CompanyRateCreateSerializer,
    CompanyRateSerializer,
    ConversionRateQuerySerializer,
    CurrencyCreateSerializer,
    CurrencyGroupCreateSerializer,
    CurrencyGroupSerializer,
    CurrencySerializer,
    CurrencyUpdateSerializer,
    MarkupBulkUpdateSerializer,
    MarkupByAccountQuerySerializer,
    MarkupFilterQuerySerializer,
    MarkupRateCreateSerializer,
    MarkupRateUpdateSerializer,
    MarkupSpecificRateQuerySerializer,
    PlanRateBulkSerializer,
    PlanRateCreateSerializer,
    PlanRateSerializer,
    RateUpdateSerializer,
    TransferMarkupRateSerializer,
)

PLAN_RATE_ORDER_FIELDS = ("created_at", "updated_at", "plan_id", "group_id", "conversion_rate")


def _require_company_access(actor, company_id):
    if actor.is_admin:
        return
    if actor.company is None or actor.company.pk != company_id:
        raise PermissionDenied("Permission denied: company scope")


def _result_response(result, serializer_class=None, many=False, status_code=status.HTTP_200_OK):
    if not result.success:
        return fail_response(result)
    data = result.data
    if serializer_class is not None and data is not None:
        data = serializer_class(data, many=many).data
    return envelope(data, result.message, status_code)


def _company_rates():
    return CompanyCurrencyRate.objects.select_related("group")


def _plan_rates():
    return PlanCurrencyRate.objects.select_related("group")


# =============================================================================
# Groups and currencies
# =============================================================================

class CurrencyGroupListCreateView(APIView):
    """
    GET  /api/currency/groups -> active groups with their currencies
    POST /api/currency/groups -> create group (duplicate name -> 409)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "currency.view")

        groups = CurrencyGroup.objects.filter(is_active=True).prefetch_related("currencies")
        return envelope(CurrencyGroupSerializer(groups, many=True).data, "Currency groups retrieved successfully")

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "currency.manage")

        serializer = CurrencyGroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_group(**serializer.validated_data)
        return _result_response(result, CurrencyGroupSerializer, status_code=status.HTTP_201_CREATED)


class CurrencyListCreateView(APIView):
    """
    GET  /api/currency -> active currencies ordered by code
    POST /api/currency -> create currency
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "currency.view")

        currencies = Currency.objects.filter(is_active=True).order_by("code")
        return envelope(CurrencySerializer(currencies, many=True).data, "Currencies retrieved successfully")

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "currency.manage")

        serializer = CurrencyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_currency(serializer.validated_data)
        return _result_response(result, CurrencySerializer, status_code=status.HTTP_201_CREATED)


class CurrencyDetailView(APIView):
    """
    GET    /api/currency/<id>
    PUT    /api/currency/<id>
    DELETE /api/currency/<id>
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "currency.view")

        currency = Currency.objects.filter(pk=pk).first()
        if currency is None:
            return failure(f"Currency {pk} not found.", status.HTTP_404_NOT_FOUND)
        return envelope(CurrencySerializer(currency).data, "Currency retrieved successfully")

    def put(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "currency.manage")

        serializer = CurrencyUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.update_currency(pk, serializer.validated_data)
        return _result_response(result, CurrencySerializer)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "currency.manage")

        return _result_response(commands.delete_currency(pk))


class CurrencyAssignGroupView(APIView):
    """PUT /api/currency/<id>/group {group_id} -> move currency to another group"""
    permission_classes = [IsAuthenticated]

    def put(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "currency.manage")

        serializer = AssignCurrencyGroupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.assign_currency_group(pk, serializer.validated_data["group_id"])
        return _result_response(result, CurrencySerializer)


class CurrenciesByGroupView(APIView):
    """GET /api/currency/group/<group_id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, group_id):
        actor = resolve_actor(request)
        require(actor, "currency.view")

        currencies = Currency.objects.filter(group_id=group_id, is_active=True).order_by("code")
        return envelope(CurrencySerializer(currencies, many=True).data, "Currencies retrieved successfully")


class CurrencySeedView(APIView):
    """POST /api/currency/seed (idempotent)"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "currency.manage")

        return _result_response(commands.seed_currencies())


# =============================================================================
# Company rates
# =============================================================================

class CompanyRateCreateView(APIView):
    """POST /api/currency/company-rates"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "currency.manage")

        serializer = CompanyRateCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_rate(COMPANY_RATES, serializer.validated_data)
        return _result_response(result, CompanyRateSerializer, status_code=status.HTTP_201_CREATED)


class CompanyRateBulkView(APIView):
    """POST /api/currency/company-rates/bulk {rates: [...]} (all or nothing)"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "currency.manage")

        serializer = CompanyRateBulkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.bulk_create_rates(COMPANY_RATES, serializer.validated_data["rates"])
        return _result_response(result, CompanyRateSerializer, many=True, status_code=status.HTTP_201_CREATED)


class CompanyRateListView(APIView):
    """GET /api/currency/company-rates/<company_id> -> active rates ordered by group"""
    permission_classes = [IsAuthenticated]

    def get(self, request, company_id):
        actor = resolve_actor(request)
        require(actor, "currency.view")
        _require_company_access(actor, company_id)

        rates = _company_rates().filter(company_id=company_id, is_active=True).order_by("group_id")
        return envelope(CompanyRateSerializer(rates, many=True).data, "Company rates retrieved successfully")


class CompanyRateForGroupView(APIView):
    """GET /api/currency/company-rates/<company_id>/group/<group_id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, company_id, group_id):
        actor = resolve_actor(request)
        require(actor, "currency.view")
        _require_company_access(actor, company_id)

        rate = _company_rates().filter(company_id=company_id, group_id=group_id, is_active=True).first()
        if rate is None:
            return failure("Rate not found for this company and group", status.HTTP_404_NOT_FOUND)
        return envelope(CompanyRateSerializer(rate).data, "Company rate retrieved successfully")


class CompanyRateDetailView(APIView):
    """
    PUT    /api/currency/company-rates/id/<rate_id> -> conversion_rate recomputed
    DELETE /api/currency/company-rates/id/<rate_id>
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, rate_id):
        actor = resolve_actor(request)
        require(actor, "currency.manage")

        serializer = RateUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.update_rate(COMPANY_RATES, rate_id, serializer.validated_data)
        return _result_response(result, CompanyRateSerializer)

    def delete(self, request, rate_id):
        actor = resolve_actor(request)
        require(actor, "currency.manage")

        return _result_response(commands.delete_rate(COMPANY_RATES, rate_id))


# =============================================================================
# Conversion rate
# =============================================================================

def _conversion_query(request):
    serializer = ConversionRateQuerySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data["from"], serializer.validated_data["to"]


class CompanyConversionRateView(APIView):
    """GET /api/currency/conversion-rate/<company_id>?from=&to="""
    permission_classes = [IsAuthenticated]

    def get(self, request, company_id):
        actor = resolve_actor(request)
        require(actor, "currency.view")
        _require_company_access(actor, company_id)

        from_code, to_code = _conversion_query(request)
        result = commands.conversion_rate_for_company(company_id, from_code, to_code)
        if not result.success:
            return fail_response(result)
        return envelope(result.data.as_dict(), result.message)


class AccountConversionRateView(APIView):
    """GET /api/currency/conversion-rate/airwallex/<account_id>?from=&to="""
    permission_classes = [IsAuthenticated]

    def get(self, request, account_id):
        actor = resolve_actor(request)
        require(actor, "currency.view")
        if not actor.is_admin and (actor.company is None or actor.company.airwallex_account_id != account_id):
            raise PermissionDenied("Permission denied: company scope")

        from_code, to_code = _conversion_query(request)
        return _result_response(commands.conversion_rate_for_account(account_id, from_code, to_code))


# =============================================================================
# Plan rates
# =============================================================================

class PlanRateListCreateView(APIView):
    """
    GET  /api/plan-currency-rates -> paginated
    POST /api/plan-currency-rates -> create plan rate
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        params = parse_page_params(request.query_params, allowed_order_by=PLAN_RATE_ORDER_FIELDS)
        return envelope(paginate(_plan_rates(), params, PlanRateSerializer), "Plan rates retrieved successfully")

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        serializer = PlanRateCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_rate(PLAN_RATES, serializer.validated_data)
        return _result_response(result, PlanRateSerializer, status_code=status.HTTP_201_CREATED)


class PlanRateBulkView(APIView):
    """POST /api/plan-currency-rates/bulk {rates: [...]} (all or nothing)"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        serializer = PlanRateBulkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.bulk_create_rates(PLAN_RATES, serializer.validated_data["rates"])
        return _result_response(result, PlanRateSerializer, many=True, status_code=status.HTTP_201_CREATED)


class PlanRateAllView(APIView):
    """GET /api/plan-currency-rates/all"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        rates = _plan_rates().order_by("plan_id", "group_id")
        return envelope(PlanRateSerializer(rates, many=True).data, "Plan rates retrieved successfully")


class PlanRatesByPlanView(APIView):
    """GET /api/plan-currency-rates/plan/<plan_id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, plan_id):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        rates = _plan_rates().filter(plan_id=plan_id).order_by("group_id")
        return envelope(PlanRateSerializer(rates, many=True).data, "Plan rates retrieved successfully")


class PlanRateForGroupView(APIView):
    """GET /api/plan-currency-rates/plan/<plan_id>/group/<group_id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, plan_id, group_id):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        rate = _plan_rates().filter(plan_id=plan_id, group_id=group_id).first()
        if rate is None:
            return failure("Rate not found for this plan and group", status.HTTP_404_NOT_FOUND)
        return envelope(PlanRateSerializer(rate).data, "Plan rate retrieved successfully")


class PlanRatesByGroupView(APIView):
    """GET /api/plan-currency-rates/group/<group_id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, group_id):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        rates = _plan_rates().filter(group_id=group_id).order_by("plan_id")
        return envelope(PlanRateSerializer(rates, many=True).data, "Plan rates retrieved successfully")


class PlanRateDetailView(APIView):
    """
    GET    /api/plan-currency-rates/<id>
    PATCH  /api/plan-currency-rates/<id> -> conversion_rate recomputed
    DELETE /api/plan-currency-rates/<id>
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        rate = _plan_rates().filter(pk=pk).first()
        if rate is None:
            return failure(f"Rate {pk} not found.", status.HTTP_404_NOT_FOUND)
        return envelope(PlanRateSerializer(rate).data, "Plan rate retrieved successfully")

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        serializer = RateUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.update_rate(PLAN_RATES, pk, serializer.validated_data)
        return _result_response(result, PlanRateSerializer)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        return _result_response(commands.delete_rate(PLAN_RATES, pk))


class PlanRateDuplicateView(APIView):
    """POST /api/plan-currency-rates/duplicate/<source_plan_id>/<target_plan_id>"""
    permission_classes = [IsAuthenticated]

    def post(self, request, source_plan_id, target_plan_id):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        result = commands.duplicate_plan_rates(source_plan_id, target_plan_id)
        return _result_response(result, PlanRateSerializer, many=True, status_code=status.HTTP_201_CREATED)


class PlanConversionRateView(APIView):
    """GET /api/plan-currency-rates/conversion-rate/<plan_id>?from=&to="""
    permission_classes = [IsAuthenticated]

    def get(self, request, plan_id):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        from_code, to_code = _conversion_query(request)
        result = commands.conversion_rate_for_plan(plan_id, from_code, to_code)
        if not result.success:
            return fail_response(result)
        return envelope(result.data.as_dict(), result.message)


# =============================================================================
# Transfer markup rates
# =============================================================================

MARKUP_ORDER_FIELDS = ("created_at", "updated_at", "plan_id", "country_code", "currency")


def _markup_list(rates, message="Transfer markup rates retrieved successfully"):
    return envelope(TransferMarkupRateSerializer(rates, many=True).data, message)


def _render_markup(rate):
    return TransferMarkupRateSerializer(rate).data


class MarkupRateListCreateView(APIView):
    """
    GET  /api/transfer-markup-rates -> live rates
    POST /api/transfer-markup-rates -> create rate (taken slot -> 409)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        return _markup_list(markup.filter_rates())

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        serializer = MarkupRateCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = markup.create_markup_rate(serializer.validated_data)
        return _result_response(result, TransferMarkupRateSerializer, status_code=status.HTTP_201_CREATED)


class MarkupRatePaginatedView(APIView):
    """GET /api/transfer-markup-rates/paginated"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        params = parse_page_params(request.query_params, allowed_order_by=MARKUP_ORDER_FIELDS)
        return envelope(
            paginate(markup.live_rates(), params, TransferMarkupRateSerializer),
            "Transfer markup rates retrieved successfully",
        )


class MarkupRatesByCountryView(APIView):
    """GET /api/transfer-markup-rates/country/<country_code>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, country_code):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        return _markup_list(markup.filter_rates(country_code=country_code))


class MarkupRatesByCurrencyView(APIView):
    """GET /api/transfer-markup-rates/currency/<currency>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, currency):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        return _markup_list(markup.filter_rates(currency=currency))


class MarkupRatesByMethodView(APIView):
    """GET /api/transfer-markup-rates/transfer-method/<local|swift>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, method):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        if method not in TransferMethod.values:
            return failure("Transfer method must be local or swift.", status.HTTP_400_BAD_REQUEST)
        return _markup_list(markup.filter_rates(transfer_method=method))


class MarkupPlansSummaryView(APIView):
    """GET /api/transfer-markup-rates/plans-summary -> rate counts per plan"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        return envelope(markup.plans_summary(), "Plans summary retrieved successfully")


class MarkupGroupedRatesView(APIView):
    """GET /api/transfer-markup-rates/grouped/<plan_id> -> region > country > currency > type > method"""
    permission_classes = [IsAuthenticated]

    def get(self, request, plan_id):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        return _result_response(markup.grouped_rates_for_plan(plan_id, _render_markup))


class MarkupFilteredRatesView(APIView):
    """GET /api/transfer-markup-rates/filtered?plan_id=&region=&country_code=&currency=&transfer_method="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        serializer = MarkupFilterQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        return _markup_list(markup.filter_rates(**serializer.validated_data))


class MarkupRegionsView(APIView):
    """GET /api/transfer-markup-rates/regions"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        return envelope(markup.regions(), "Regions retrieved successfully")


class MarkupCountriesView(APIView):
    """GET /api/transfer-markup-rates/countries?region="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        return envelope(markup.countries(request.query_params.get("region")), "Countries retrieved successfully")


class MarkupRateByAccountView(APIView):
    """
    GET /api/transfer-markup-rates/by-account
        ?account_id=&currency=&transfer_method=&country_code=&transaction_type=

    Customers may only look up their own company's account.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "currency.view")

        serializer = MarkupByAccountQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        query = serializer.validated_data

        account_id = query["account_id"]
        if not actor.is_admin and (actor.company is None or actor.company.airwallex_account_id != account_id):
            raise PermissionDenied("Permission denied: company scope")

        result = markup.markup_rate_for_account(
            account_id,
            query["currency"],
            query["transfer_method"],
            country_code=query.get("country_code"),
            transaction_type=query.get("transaction_type"),
        )
        return _result_response(result, TransferMarkupRateSerializer)


class MarkupSpecificRateView(APIView):
    """GET /api/transfer-markup-rates/specific-rate?plan_id=&country_code=&currency=&transfer_method="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        serializer = MarkupSpecificRateQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        result = markup.specific_rate(**serializer.validated_data)
        return _result_response(result, TransferMarkupRateSerializer)


class MarkupRatesByPlanView(APIView):
    """GET /api/transfer-markup-rates/plan/<plan_id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, plan_id):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        if not Plan.objects.filter(pk=plan_id, is_deleted=False).exists():
            return failure(f"Plan {plan_id} not found.", status.HTTP_404_NOT_FOUND)
        return _markup_list(markup.filter_rates(plan_id=plan_id))


class MarkupRatesByPlanPaginatedView(APIView):
    """GET /api/transfer-markup-rates/plan/<plan_id>/paginated"""
    permission_classes = [IsAuthenticated]

    def get(self, request, plan_id):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        if not Plan.objects.filter(pk=plan_id, is_deleted=False).exists():
            return failure(f"Plan {plan_id} not found.", status.HTTP_404_NOT_FOUND)
        params = parse_page_params(request.query_params, allowed_order_by=MARKUP_ORDER_FIELDS)
        return envelope(
            paginate(markup.live_rates().filter(plan_id=plan_id), params, TransferMarkupRateSerializer),
            "Transfer markup rates retrieved successfully",
        )


class MarkupRateDetailView(APIView):
    """
    GET    /api/transfer-markup-rates/<id>
    PATCH  /api/transfer-markup-rates/<id>
    DELETE /api/transfer-markup-rates/<id> -> soft delete
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        rate = markup.live_rates().filter(pk=pk).first()
        if rate is None:
            return failure(f"Transfer markup rate {pk} not found.", status.HTTP_404_NOT_FOUND)
        return envelope(TransferMarkupRateSerializer(rate).data, "Transfer markup rate retrieved successfully")

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        serializer = MarkupRateUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = markup.update_markup_rate(pk, serializer.validated_data)
        return _result_response(result, TransferMarkupRateSerializer)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        return _result_response(markup.soft_delete_markup_rate(pk), TransferMarkupRateSerializer)


class MarkupRateRestoreView(APIView):
    """POST /api/transfer-markup-rates/<id>/restore"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        return _result_response(markup.restore_markup_rate(pk), TransferMarkupRateSerializer)


class MarkupBulkUpdateView(APIView):
    """
    PATCH /api/transfer-markup-rates/bulk-update {rates: [{id, fee fields}]}

    Rates are updated one by one; success is false when any failed.
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        serializer = MarkupBulkUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = markup.bulk_update_markup_fees(serializer.validated_data["rates"])
        return envelope(result.data, result.message, success=result.data["failure_count"] == 0)


class MarkupDuplicateView(APIView):
    """POST /api/transfer-markup-rates/duplicate/<source_plan_id>/<target_plan_id>"""
    permission_classes = [IsAuthenticated]

    def post(self, request, source_plan_id, target_plan_id):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        result = markup.duplicate_markup_rates(source_plan_id, target_plan_id)
        return _result_response(result, TransferMarkupRateSerializer, many=True, status_code=status.HTTP_201_CREATED)
