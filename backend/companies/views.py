# companies/views.py
"""
Company, plan and plan type endpoints.

Actors without the admin role only ever see their own company.
"""

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from magnaporta_backend.pagination import paginate, parse_page_params
from magnaporta_backend.responses import created, envelope, fail_response, failure

from . import commands
from .models import Company, Plan, PlanType
from .serializers import (
    AssignPlanSerializer,
    CompanyCreateSerializer,
    CompanySerializer,
    CompanyUpdateSerializer,
    PlanCreateSerializer,
    PlanSerializer,
    PlanTypeCreateSerializer,
    PlanTypeSerializer,
    PlanTypeUpdateSerializer,
    PlanUpdateSerializer,
)

COMPANY_ORDER_FIELDS = ("created_at", "updated_at", "name")
PLAN_ORDER_FIELDS = ("created_at", "updated_at", "name")


def _visible_companies(actor):
    qs = Company.objects.select_related("plan").filter(is_deleted=False)
    if not actor.is_admin:
        qs = qs.filter(pk=actor.company.pk) if actor.company else qs.none()
    return qs


def _company_response(result, status_code=status.HTTP_200_OK):
    if not result.success:
        return fail_response(result)
    return envelope(CompanySerializer(result.data).data, result.message, status_code)


def _plan_response(result, status_code=status.HTTP_200_OK):
    if not result.success:
        return fail_response(result)
    data = PlanSerializer(result.data).data if result.data is not None else None
    return envelope(data, result.message, status_code)


# =============================================================================
# Company Views
# =============================================================================

class CompanyListCreateView(APIView):
    """
    GET  /api/companies -> list companies
    POST /api/companies -> create company (duplicate name/phone -> 409)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "companies.view")

        companies = _visible_companies(actor)
        return envelope(CompanySerializer(companies, many=True).data, "Companies retrieved successfully")

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "companies.manage")

        serializer = CompanyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_company(serializer.validated_data)
        return _company_response(result, status.HTTP_201_CREATED)


class CompanyPaginatedView(APIView):
    """GET /api/companies/paginated"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "companies.view")

        params = parse_page_params(request.query_params, allowed_order_by=COMPANY_ORDER_FIELDS)
        return envelope(
            paginate(_visible_companies(actor), params, CompanySerializer),
            "Companies retrieved successfully",
        )


class CompanyDetailView(APIView):
    """
    GET    /api/companies/<id>
    PATCH  /api/companies/<id> -> airwallex_account_id is immutable
    DELETE /api/companies/<id> -> soft delete
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "companies.view")

        company = _visible_companies(actor).filter(pk=pk).first()
        if company is None:
            return failure(f"Company {pk} not found.", status.HTTP_404_NOT_FOUND)
        return envelope(CompanySerializer(company).data, "Company retrieved successfully")

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "companies.manage")

        serializer = CompanyUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.update_company(pk, serializer.validated_data)
        return _company_response(result)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "companies.manage")

        result = commands.soft_delete_company(pk)
        return _company_response(result)


class CompanyRestoreView(APIView):
    """POST /api/companies/<id>/restore"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "companies.manage")

        result = commands.restore_company(pk)
        return _company_response(result)


class CompanyPlanView(APIView):
    """
    POST   /api/companies/<id>/plan {plan_id} -> assign plan
    DELETE /api/companies/<id>/plan           -> clear plan
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "companies.manage")

        serializer = AssignPlanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.assign_plan(pk, serializer.validated_data["plan_id"])
        return _company_response(result)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "companies.manage")

        result = commands.clear_plan(pk)
        return _company_response(result)


# =============================================================================
# Plan Views
# =============================================================================

class PlanListCreateView(APIView):
    """
    GET  /api/plans -> non-deleted plans
    POST /api/plans -> create plan
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        plans = Plan.objects.filter(is_deleted=False)
        return envelope(PlanSerializer(plans, many=True).data, "Plans retrieved successfully")

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        serializer = PlanCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_plan(serializer.validated_data)
        return _plan_response(result, status.HTTP_201_CREATED)


class ActivePlanListView(APIView):
    """GET /api/plans/active"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        plans = Plan.objects.filter(is_deleted=False, is_active=True)
        return envelope(PlanSerializer(plans, many=True).data, "Plans retrieved successfully")


class PlanPaginatedView(APIView):
    """GET /api/plans/paginated"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        params = parse_page_params(request.query_params, allowed_order_by=PLAN_ORDER_FIELDS)
        return envelope(
            paginate(Plan.objects.filter(is_deleted=False), params, PlanSerializer),
            "Plans retrieved successfully",
        )


class PlanDetailView(APIView):
    """
    GET    /api/plans/<id>
    PATCH  /api/plans/<id>
    DELETE /api/plans/<id> -> hard delete
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        plan = Plan.objects.filter(pk=pk, is_deleted=False).first()
        if plan is None:
            return failure(f"Plan {pk} not found.", status.HTTP_404_NOT_FOUND)
        return envelope(PlanSerializer(plan).data, "Plan retrieved successfully")

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        serializer = PlanUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.update_plan(pk, serializer.validated_data)
        return _plan_response(result)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        result = commands.delete_plan(pk)
        return _plan_response(result)


class PlanSoftDeleteView(APIView):
    """DELETE /api/plans/<id>/soft"""
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        result = commands.soft_delete_plan(pk)
        return _plan_response(result)


class PlanRestoreView(APIView):
    """PATCH /api/plans/<id>/restore"""
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        result = commands.restore_plan(pk)
        return _plan_response(result)


class PlanCompaniesView(APIView):
    """GET /api/plans/<id>/companies"""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.view")
        require(actor, "companies.view")

        plan = Plan.objects.filter(pk=pk, is_deleted=False).first()
        if plan is None:
            return failure(f"Plan {pk} not found.", status.HTTP_404_NOT_FOUND)

        companies = _visible_companies(actor).filter(plan=plan)
        return envelope(CompanySerializer(companies, many=True).data, "Companies retrieved successfully")


# =============================================================================
# Plan Type Views
# =============================================================================

def _plan_type_response(result, status_code=status.HTTP_200_OK):
    if not result.success:
        return fail_response(result)
    return envelope(PlanTypeSerializer(result.data).data, result.message, status_code)


class PlanTypeListCreateView(APIView):
    """
    GET  /api/plan-types -> non-deleted plan types, oldest first
    POST /api/plan-types -> create plan type (duplicate name -> 409)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        plan_types = PlanType.objects.filter(is_deleted=False)
        return envelope(PlanTypeSerializer(plan_types, many=True).data, "Plan types retrieved successfully")

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        serializer = PlanTypeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_plan_type(serializer.validated_data)
        return _plan_type_response(result, status.HTTP_201_CREATED)


class ActivePlanTypeListView(APIView):
    """GET /api/plan-types/active"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        plan_types = PlanType.objects.filter(is_deleted=False, is_active=True)
        return envelope(PlanTypeSerializer(plan_types, many=True).data, "Plan types retrieved successfully")


class PlanTypeDetailView(APIView):
    """
    GET    /api/plan-types/<id>
    PATCH  /api/plan-types/<id>
    DELETE /api/plan-types/<id> -> soft delete, refused while plans use the type
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.view")

        plan_type = PlanType.objects.filter(pk=pk, is_deleted=False).first()
        if plan_type is None:
            return failure(f"Plan type {pk} not found.", status.HTTP_404_NOT_FOUND)
        return envelope(PlanTypeSerializer(plan_type).data, "Plan type retrieved successfully")

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        serializer = PlanTypeUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.update_plan_type(pk, serializer.validated_data)
        return _plan_type_response(result)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        result = commands.soft_delete_plan_type(pk)
        return _plan_type_response(result)


class PlanTypeRestoreView(APIView):
    """PATCH /api/plan-types/<id>/restore"""
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "plans.manage")

        result = commands.restore_plan_type(pk)
        return _plan_type_response(result)
