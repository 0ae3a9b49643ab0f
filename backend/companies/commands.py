# companies/commands.py
"""
Command layer for companies, plans and plan types.

Soft delete hides a row (is_deleted=True) and restore brings it back;
is_active is a separate switch. airwallex_account_id is only ever set
on creation.
"""

import logging

from django.db import transaction

from companies.models import Company, Plan, PlanType
from magnaporta_backend.results import CommandResult

logger = logging.getLogger(__name__)


def _clean(value):
    value = (value or "").strip()
    return value or None


def _get_company(company_id, include_deleted=False):
    qs = Company.objects.select_related("plan")
    if not include_deleted:
        qs = qs.filter(is_deleted=False)
    return qs.filter(pk=company_id).first()


def _get_plan(plan_id, include_deleted=False):
    qs = Plan.objects.all()
    if not include_deleted:
        qs = qs.filter(is_deleted=False)
    return qs.filter(pk=plan_id).first()


def _get_plan_type(plan_type_id, include_deleted=False):
    qs = PlanType.objects.all()
    if not include_deleted:
        qs = qs.filter(is_deleted=False)
    return qs.filter(pk=plan_type_id).first()


def _resolve_plan_type(data: dict):
    """Returns (plan_type, error). A null plan_type_id clears the type."""
    plan_type_id = data.get("plan_type_id")
    if plan_type_id is None:
        return None, None
    plan_type = _get_plan_type(plan_type_id)
    if plan_type is None:
        return None, CommandResult.not_found(f"Plan type {plan_type_id} not found.")
    return plan_type, None


# =============================================================================
# Company commands
# =============================================================================

def _check_company_unique(name=None, phone_number=None, airwallex_account_id=None, exclude_pk=None):
    qs = Company.objects.all()
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if name and qs.filter(name__iexact=name).exists():
        return CommandResult.conflict(f"Company '{name}' already exists.")
    if phone_number and qs.filter(phone_number=phone_number).exists():
        return CommandResult.conflict(f"Company with phone number '{phone_number}' already exists.")
    if airwallex_account_id and qs.filter(airwallex_account_id=airwallex_account_id).exists():
        return CommandResult.conflict(f"Airwallex account '{airwallex_account_id}' is already linked.")
    return None


@transaction.atomic
def create_company(data: dict) -> CommandResult:
    phone_number = _clean(data.get("phone_number"))
    account_id = _clean(data.get("airwallex_account_id"))

    conflict = _check_company_unique(data["name"], phone_number, account_id)
    if conflict:
        return conflict

    plan = None
    if data.get("plan_id") is not None:
        plan = _get_plan(data["plan_id"])
        if plan is None:
            return CommandResult.not_found(f"Plan {data['plan_id']} not found.")

    company = Company.objects.create(
        name=data["name"],
        phone_number=phone_number,
        airwallex_account_id=account_id,
        is_active=data.get("is_active", False),
        is_verified=data.get("is_verified", False),
        plan=plan,
    )
    logger.info("Company created", extra={"company_id": company.pk})
    return CommandResult.ok(company, message="Company created successfully")


@transaction.atomic
def update_company(company_id, data: dict) -> CommandResult:
    company = _get_company(company_id)
    if company is None:
        return CommandResult.not_found(f"Company {company_id} not found.")

    data = dict(data)
    if "phone_number" in data:
        data["phone_number"] = _clean(data["phone_number"])

    conflict = _check_company_unique(
        name=data.get("name") if data.get("name") != company.name else None,
        phone_number=data.get("phone_number") if data.get("phone_number") != company.phone_number else None,
        exclude_pk=company.pk,
    )
    if conflict:
        return conflict

    if "plan_id" in data:
        plan = None
        if data["plan_id"] is not None:
            plan = _get_plan(data["plan_id"])
            if plan is None:
                return CommandResult.not_found(f"Plan {data['plan_id']} not found.")
        company.plan = plan

    for field in ("name", "phone_number", "is_active", "is_verified"):
        if field in data:
            setattr(company, field, data[field])

    company.save()
    logger.info("Company updated", extra={"company_id": company.pk, "fields": sorted(data.keys())})
    return CommandResult.ok(company, message="Company updated successfully")


@transaction.atomic
def soft_delete_company(company_id) -> CommandResult:
    company = _get_company(company_id)
    if company is None:
        return CommandResult.not_found(f"Company {company_id} not found.")

    company.is_deleted = True
    company.save(update_fields=["is_deleted", "updated_at"])
    logger.info("Company soft-deleted", extra={"company_id": company.pk})
    return CommandResult.ok(company, message="Company deleted successfully")


@transaction.atomic
def restore_company(company_id) -> CommandResult:
    company = _get_company(company_id, include_deleted=True)
    if company is None:
        return CommandResult.not_found(f"Company {company_id} not found.")

    company.is_deleted = False
    company.save(update_fields=["is_deleted", "updated_at"])
    return CommandResult.ok(company, message="Company restored successfully")


@transaction.atomic
def assign_plan(company_id, plan_id) -> CommandResult:
    company = _get_company(company_id)
    if company is None:
        return CommandResult.not_found(f"Company {company_id} not found.")
    plan = _get_plan(plan_id)
    if plan is None:
        return CommandResult.not_found(f"Plan {plan_id} not found.")

    company.plan = plan
    company.save(update_fields=["plan", "updated_at"])
    return CommandResult.ok(company, message="Plan assigned successfully")


@transaction.atomic
def clear_plan(company_id) -> CommandResult:
    company = _get_company(company_id)
    if company is None:
        return CommandResult.not_found(f"Company {company_id} not found.")

    company.plan = None
    company.save(update_fields=["plan", "updated_at"])
    return CommandResult.ok(company, message="Plan removed successfully")


# =============================================================================
# Plan commands
# =============================================================================

@transaction.atomic
def create_plan(data: dict) -> CommandResult:
    name = data["name"].strip()
    if Plan.objects.filter(name__iexact=name).exists():
        return CommandResult.conflict(f"Plan '{name}' already exists.")
    plan_type, error = _resolve_plan_type(data)
    if error:
        return error

    plan = Plan.objects.create(
        name=name,
        description=data.get("description", ""),
        is_active=data.get("is_active", True),
        plan_type=plan_type,
    )
    return CommandResult.ok(plan, message="Plan created successfully")


@transaction.atomic
def update_plan(plan_id, data: dict) -> CommandResult:
    plan = _get_plan(plan_id)
    if plan is None:
        return CommandResult.not_found(f"Plan {plan_id} not found.")

    name = data.get("name")
    if name is not None:
        name = name.strip()
        if Plan.objects.filter(name__iexact=name).exclude(pk=plan.pk).exists():
            return CommandResult.conflict(f"Plan '{name}' already exists.")
        plan.name = name
    if "plan_type_id" in data:
        plan_type, error = _resolve_plan_type(data)
        if error:
            return error
        plan.plan_type = plan_type
    for field in ("description", "is_active"):
        if field in data:
            setattr(plan, field, data[field])

    plan.save()
    return CommandResult.ok(plan, message="Plan updated successfully")


@transaction.atomic
def delete_plan(plan_id) -> CommandResult:
    """Hard delete. Companies on the plan are detached; its rates go with it."""
    plan = _get_plan(plan_id, include_deleted=True)
    if plan is None:
        return CommandResult.not_found(f"Plan {plan_id} not found.")

    plan.delete()
    logger.info("Plan deleted", extra={"plan_id": plan_id})
    return CommandResult.ok(None, message="Plan deleted successfully")


@transaction.atomic
def soft_delete_plan(plan_id) -> CommandResult:
    plan = _get_plan(plan_id)
    if plan is None:
        return CommandResult.not_found(f"Plan {plan_id} not found.")

    plan.is_deleted = True
    plan.save(update_fields=["is_deleted", "updated_at"])
    return CommandResult.ok(plan, message="Plan deleted successfully")


@transaction.atomic
def restore_plan(plan_id) -> CommandResult:
    plan = _get_plan(plan_id, include_deleted=True)
    if plan is None:
        return CommandResult.not_found(f"Plan {plan_id} not found.")

    plan.is_deleted = False
    plan.save(update_fields=["is_deleted", "updated_at"])
    return CommandResult.ok(plan, message="Plan restored successfully")


# =============================================================================
# Plan type commands
# =============================================================================

@transaction.atomic
def create_plan_type(data: dict) -> CommandResult:
    name = data["name"].strip()
    if PlanType.objects.filter(name__iexact=name).exists():
        return CommandResult.conflict(f"Plan type '{name}' already exists.")

    plan_type = PlanType.objects.create(
        name=name,
        display_name=data.get("display_name") or "",
        description=data.get("description") or "",
        is_active=data.get("is_active", True),
    )
    return CommandResult.ok(plan_type, message="Plan type created successfully")


@transaction.atomic
def update_plan_type(plan_type_id, data: dict) -> CommandResult:
    plan_type = _get_plan_type(plan_type_id)
    if plan_type is None:
        return CommandResult.not_found(f"Plan type {plan_type_id} not found.")

    name = data.get("name")
    if name is not None:
        name = name.strip()
        if PlanType.objects.filter(name__iexact=name).exclude(pk=plan_type.pk).exists():
            return CommandResult.conflict(f"Plan type '{name}' already exists.")
        plan_type.name = name
    for field in ("display_name", "description"):
        if field in data:
            setattr(plan_type, field, data[field] or "")
    if "is_active" in data:
        plan_type.is_active = data["is_active"]

    plan_type.save()
    return CommandResult.ok(plan_type, message="Plan type updated successfully")


@transaction.atomic
def soft_delete_plan_type(plan_type_id) -> CommandResult:
    """Refused while any non-deleted plan still uses the type."""
    plan_type = _get_plan_type(plan_type_id)
    if plan_type is None:
        return CommandResult.not_found(f"Plan type {plan_type_id} not found.")

    in_use = Plan.objects.filter(plan_type=plan_type, is_deleted=False).count()
    if in_use:
        return CommandResult.fail(f"Cannot delete plan type '{plan_type.name}': {in_use} plan(s) still use it.")

    plan_type.is_deleted = True
    plan_type.save(update_fields=["is_deleted", "updated_at"])
    logger.info("Plan type soft-deleted", extra={"plan_type_id": plan_type.pk})
    return CommandResult.ok(plan_type, message="Plan type deleted successfully")


@transaction.atomic
def restore_plan_type(plan_type_id) -> CommandResult:
    plan_type = _get_plan_type(plan_type_id, include_deleted=True)
    if plan_type is None:
        return CommandResult.not_found(f"Plan type {plan_type_id} not found.")

    plan_type.is_deleted = False
    plan_type.save(update_fields=["is_deleted", "updated_at"])
    return CommandResult.ok(plan_type, message="Plan type restored successfully")
