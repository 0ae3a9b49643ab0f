# currency/markup.py
"""
Command layer for transfer markup rates.

A markup rate is the fee a plan charges on an outgoing transfer to one
destination (country, currency, transfer method). Rules:
- the plan must exist and not be deleted (404)
- one live rate per (plan, country_code, currency, transfer_method) (409)
- delete is soft; restore refuses when a live rate took the slot (409)

Lookup for an account resolves the company's plan, then:
- swift: first rate on (plan, currency, swift), country ignored
- local: country_code required; transaction_type matched when given,
  otherwise only rates without one
- EUR local with no match falls back to the plan's SEPA rate
"""

import logging
from collections import OrderedDict

from django.db import transaction

from companies.models import Company, Plan
from currency.models import TransferMarkupRate, TransferMethod
from magnaporta_backend.results import CommandResult

logger = logging.getLogger(__name__)

DEFAULT_TRANSACTION_TYPE = "default"
SEPA_TRANSACTION_TYPE = "SEPA"
FEE_FIELDS = ("fee_sha_percentage", "fee_sha_minimum", "fee_our_percentage", "fee_our_minimum")
UNIQUE_FIELDS = ("plan_id", "country_code", "currency", "transfer_method")


def live_rates():
    return TransferMarkupRate.objects.filter(is_deleted=False).select_related("plan")


def _get_plan(plan_id):
    return Plan.objects.filter(pk=plan_id, is_deleted=False).first()


def _upper(value):
    return (value or "").strip().upper()


def _slot_taken(plan_id, country_code, currency, transfer_method, exclude_pk=None) -> bool:
    qs = TransferMarkupRate.objects.filter(
        is_deleted=False,
        plan_id=plan_id,
        country_code=country_code,
        currency=currency,
        transfer_method=transfer_method,
    )
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def _slot_conflict(country_code, currency, transfer_method, plan_id) -> CommandResult:
    return CommandResult.conflict(
        f"Transfer markup rate already exists for plan {plan_id}, "
        f"{country_code}/{currency}/{transfer_method}"
    )


# =============================================================================
# Write commands
# =============================================================================

@transaction.atomic
def create_markup_rate(data: dict) -> CommandResult:
    plan = _get_plan(data["plan_id"])
    if plan is None:
        return CommandResult.not_found(f"Plan {data['plan_id']} not found.")

    country_code = _upper(data["country_code"])
    currency = _upper(data["currency"])
    transfer_method = data["transfer_method"]
    if _slot_taken(plan.pk, country_code, currency, transfer_method):
        return _slot_conflict(country_code, currency, transfer_method, plan.pk)

    rate = TransferMarkupRate(
        plan=plan,
        region=data.get("region") or "",
        country=data.get("country") or "",
        country_code=country_code,
        currency=currency,
        transaction_type=data.get("transaction_type") or "",
        transfer_method=transfer_method,
        fee_currency=_upper(data.get("fee_currency")) or currency,
    )
    for field in FEE_FIELDS:
        setattr(rate, field, data.get(field))
    rate.save()

    logger.info(
        "Transfer markup rate created",
        extra={"plan_id": plan.pk, "country_code": country_code, "currency": currency, "method": transfer_method},
    )
    return CommandResult.ok(rate, message="Transfer markup rate created successfully")


@transaction.atomic
def update_markup_rate(rate_id, data: dict) -> CommandResult:
    """Merge the given fields. The slot is re-checked only when it moves."""
    rate = live_rates().filter(pk=rate_id).first()
    if rate is None:
        return CommandResult.not_found(f"Transfer markup rate {rate_id} not found.")

    data = dict(data)
    for field in ("country_code", "currency", "fee_currency"):
        if field in data:
            data[field] = _upper(data[field])

    if "plan_id" in data and data["plan_id"] != rate.plan_id:
        plan = _get_plan(data["plan_id"])
        if plan is None:
            return CommandResult.not_found(f"Plan {data['plan_id']} not found.")
        rate.plan = plan

    for field in ("region", "country", "transaction_type", "country_code", "currency", "transfer_method"):
        if field in data:
            setattr(rate, field, data[field] or "")
    for field in FEE_FIELDS:
        if field in data:
            setattr(rate, field, data[field])
    if "fee_currency" in data:
        rate.fee_currency = data["fee_currency"]

    moved = any(field in data for field in UNIQUE_FIELDS)
    if moved and _slot_taken(rate.plan_id, rate.country_code, rate.currency, rate.transfer_method, rate.pk):
        return _slot_conflict(rate.country_code, rate.currency, rate.transfer_method, rate.plan_id)

    rate.save()
    return CommandResult.ok(rate, message="Transfer markup rate updated successfully")


@transaction.atomic
def soft_delete_markup_rate(rate_id) -> CommandResult:
    rate = live_rates().filter(pk=rate_id).first()
    if rate is None:
        return CommandResult.not_found(f"Transfer markup rate {rate_id} not found.")

    rate.is_deleted = True
    rate.save(update_fields=["is_deleted", "updated_at"])
    logger.info("Transfer markup rate soft-deleted", extra={"rate_id": rate.pk})
    return CommandResult.ok(rate, message="Transfer markup rate deleted successfully")


@transaction.atomic
def restore_markup_rate(rate_id) -> CommandResult:
    rate = TransferMarkupRate.objects.filter(pk=rate_id, is_deleted=True).first()
    if rate is None:
        return CommandResult.not_found(f"Deleted transfer markup rate {rate_id} not found.")
    if _slot_taken(rate.plan_id, rate.country_code, rate.currency, rate.transfer_method):
        return _slot_conflict(rate.country_code, rate.currency, rate.transfer_method, rate.plan_id)

    rate.is_deleted = False
    rate.save(update_fields=["is_deleted", "updated_at"])
    return CommandResult.ok(rate, message="Transfer markup rate restored successfully")


def bulk_update_markup_fees(items: list) -> CommandResult:
    """
    Update fee fields on several rates, each one on its own.

    Missing rates are reported in ``failures`` without stopping the
    batch. The result is always ok; the caller reads failure_count.
    """
    summary = {"success_count": 0, "failure_count": 0, "successful_ids": [], "failures": []}

    for item in items:
        with transaction.atomic():
            rate = live_rates().select_for_update().filter(pk=item["id"]).first()
            if rate is None:
                summary["failure_count"] += 1
                summary["failures"].append({"id": item["id"], "error": f"Rate with ID {item['id']} not found"})
                continue
            changed = [field for field in FEE_FIELDS if field in item]
            for field in changed:
                setattr(rate, field, item[field])
            rate.save(update_fields=changed + ["updated_at"])
        summary["success_count"] += 1
        summary["successful_ids"].append(item["id"])

    logger.info(
        "Transfer markup fees bulk-updated",
        extra={"updated": summary["success_count"], "failed": summary["failure_count"]},
    )
    if summary["failure_count"]:
        message = f"{summary['success_count']} rates updated, {summary['failure_count']} failed"
    else:
        message = "All rates updated successfully"
    return CommandResult.ok(summary, message=message)


@transaction.atomic
def duplicate_markup_rates(source_plan_id, target_plan_id) -> CommandResult:
    """Copy the live rates of the source plan onto a target plan that has none."""
    source = _get_plan(source_plan_id)
    if source is None:
        return CommandResult.not_found(f"Source plan {source_plan_id} not found.")
    target = _get_plan(target_plan_id)
    if target is None:
        return CommandResult.not_found(f"Target plan {target_plan_id} not found.")
    if source.pk == target.pk:
        return CommandResult.fail("Source and target plan must differ.")

    source_rates = list(live_rates().filter(plan=source))
    if not source_rates:
        return CommandResult.ok([], message=f"No transfer markup rates found in plan {source.pk} to duplicate")
    if live_rates().filter(plan=target).exists():
        return CommandResult.conflict(f"Plan {target.pk} already has transfer markup rates.")

    copies = []
    for rate in source_rates:
        copy = TransferMarkupRate(
            plan=target,
            region=rate.region,
            country=rate.country,
            country_code=rate.country_code,
            currency=rate.currency,
            transaction_type=rate.transaction_type,
            transfer_method=rate.transfer_method,
            fee_currency=rate.fee_currency,
        )
        for field in FEE_FIELDS:
            setattr(copy, field, getattr(rate, field))
        copy.save()
        copies.append(copy)

    logger.info(
        "Transfer markup rates duplicated",
        extra={"source_plan_id": source.pk, "target_plan_id": target.pk, "count": len(copies)},
    )
    return CommandResult.ok(copies, message=f"{len(copies)} transfer markup rates copied to plan {target.name}")


# =============================================================================
# Queries
# =============================================================================

def filter_rates(plan_id=None, region=None, country_code=None, currency=None, transfer_method=None):
    qs = live_rates()
    if plan_id is not None:
        qs = qs.filter(plan_id=plan_id)
    if region:
        qs = qs.filter(region=region)
    if country_code:
        qs = qs.filter(country_code=_upper(country_code))
    if currency:
        qs = qs.filter(currency=_upper(currency))
    if transfer_method:
        qs = qs.filter(transfer_method=transfer_method)
    return qs.order_by("plan_id", "region", "country_code", "currency", "transfer_method")


def regions() -> list:
    values = live_rates().exclude(region="").values_list("region", flat=True).distinct()
    return sorted(set(values))


def countries(region=None) -> list:
    """Unique countries by code, sorted by name."""
    qs = live_rates().exclude(country_code="")
    if region:
        qs = qs.filter(region=region)
    seen = {}
    for code, name, rate_region in qs.values_list("country_code", "country", "region"):
        seen.setdefault(code, {"country_code": code, "country": name, "region": rate_region})
    return sorted(seen.values(), key=lambda item: (item["country"], item["country_code"]))


def plans_summary() -> list:
    summaries = []
    for plan in Plan.objects.filter(is_deleted=False).order_by("name"):
        rates = list(TransferMarkupRate.objects.filter(plan=plan, is_deleted=False))
        summaries.append(
            {
                "plan_id": plan.pk,
                "plan_name": plan.name,
                "total_rates": len(rates),
                "local_rates": sum(1 for r in rates if r.transfer_method == TransferMethod.LOCAL),
                "swift_rates": sum(1 for r in rates if r.transfer_method == TransferMethod.SWIFT),
                "countries_count": len({r.country_code for r in rates}),
                "regions_count": len({r.region for r in rates}),
            }
        )
    return summaries


def group_rates(plan, rates, render) -> dict:
    """
    Nest rates as region > country > currency > transaction type > method.

    ``render`` turns one rate into its output form. Rates without a
    transaction type land under "default"; a method key is present only
    when it has rates.
    """
    tree = OrderedDict()
    for rate in rates:
        country = tree.setdefault(rate.region, OrderedDict()).setdefault(
            rate.country_code,
            {
                "country_code": rate.country_code,
                "country_name": rate.country,
                "region": rate.region,
                "by_currency": OrderedDict(),
            },
        )
        types = country["by_currency"].setdefault(rate.currency, OrderedDict())
        methods = types.setdefault(rate.transaction_type or DEFAULT_TRANSACTION_TYPE, {})
        methods.setdefault(rate.transfer_method, []).append(render(rate))

    regions_out = []
    for region, country_map in tree.items():
        countries_out = []
        for country in country_map.values():
            by_currency = country.pop("by_currency")
            country["currencies"] = [
                {"currency": currency, "transaction_types": dict(types)} for currency, types in by_currency.items()
            ]
            countries_out.append(country)
        regions_out.append({"region": region, "countries": countries_out})

    return {
        "plan_id": plan.pk,
        "plan_name": plan.name,
        "regions": regions_out,
        "total_rates": len(rates),
        "local_rates_count": sum(1 for r in rates if r.transfer_method == TransferMethod.LOCAL),
        "swift_rates_count": sum(1 for r in rates if r.transfer_method == TransferMethod.SWIFT),
    }


def grouped_rates_for_plan(plan_id, render) -> CommandResult:
    plan = _get_plan(plan_id)
    if plan is None:
        return CommandResult.not_found(f"Plan {plan_id} not found.")
    rates = list(
        TransferMarkupRate.objects.filter(plan=plan, is_deleted=False).order_by("region", "country", "currency", "id")
    )
    return CommandResult.ok(group_rates(plan, rates, render), message="Grouped rates retrieved successfully")


def specific_rate(plan_id, country_code: str, currency: str, transfer_method: str) -> CommandResult:
    rate = live_rates().filter(
        plan_id=plan_id,
        country_code=_upper(country_code),
        currency=_upper(currency),
        transfer_method=transfer_method,
    ).first()
    if rate is None:
        return CommandResult.not_found("No markup rate found for the specified criteria")
    return CommandResult.ok(rate, message="Transfer markup rate retrieved successfully")


def markup_rate_for_account(
    airwallex_account_id: str,
    currency: str,
    transfer_method: str,
    country_code: str = None,
    transaction_type: str = None,
) -> CommandResult:
    company = Company.objects.select_related("plan").filter(
        airwallex_account_id=airwallex_account_id,
        is_deleted=False,
    ).first()
    if company is None:
        return CommandResult.not_found(f"Company with airwallex_account_id {airwallex_account_id} not found")
    if company.plan_id is None:
        return CommandResult.fail(f"Company {company.name} does not have an assigned plan")

    currency = _upper(currency)
    country_code = _upper(country_code)
    rates = live_rates().filter(plan_id=company.plan_id, currency=currency, transfer_method=transfer_method)

    if transfer_method == TransferMethod.SWIFT:
        rate = rates.order_by("id").first()
    else:
        if not country_code:
            return CommandResult.fail("Country code is required for local transfers")
        local = rates.filter(country_code=country_code)
        if transaction_type:
            local = local.filter(transaction_type=transaction_type)
        else:
            local = local.filter(transaction_type="")
        rate = local.order_by("id").first()

        if rate is None and currency == "EUR":
            rate = rates.filter(transaction_type=SEPA_TRANSACTION_TYPE).order_by("id").first()
            if rate is not None:
                logger.info(
                    "SEPA markup fallback used",
                    extra={"company_id": company.pk, "country_code": country_code, "rate_id": rate.pk},
                )
                return CommandResult.ok(rate, message="Transfer markup rate found (SEPA fallback for EUR/LOCAL)")

    if rate is None:
        return CommandResult.not_found("No markup rate found for the specified criteria")
    return CommandResult.ok(rate, message="Transfer markup rate found")
