# currency/commands.py
"""
Command layer for currency groups, currencies and owner rates.

Company rates and plan rates follow the same rules, so the rate commands
take a RateOwner describing which table and owner they act on:
- the group must exist (404) and so must the owner (404)
- one rate per (owner, group) (409)
- conversion_rate = aw_rate + mp_rate, recomputed on every write
"""

import logging
from dataclasses import dataclass

from django.db import transaction

from companies.models import Company, Plan
from currency.models import (
    CompanyCurrencyRate,
    Currency,
    CurrencyGroup,
    PlanCurrencyRate,
)
from currency.rates import resolve_conversion_rate
from magnaporta_backend.results import CommandResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateOwner:
    model: type
    owner_model: type
    field: str
    label: str

    @property
    def id_field(self) -> str:
        return f"{self.field}_id"

    def get_owner(self, owner_id):
        return self.owner_model.objects.filter(pk=owner_id, is_deleted=False).first()

    def rates_for(self, owner_id):
        return self.model.objects.filter(**{self.id_field: owner_id})


COMPANY_RATES = RateOwner(CompanyCurrencyRate, Company, "company", "company")
PLAN_RATES = RateOwner(PlanCurrencyRate, Plan, "plan", "plan")


# =============================================================================
# Seed data
# =============================================================================

SEED_GROUPS = [
    {
        "name": "Major Currencies",
        "description": "Major world currencies like EUR, USD, GBP",
        "currencies": [("EUR", "Euro", "€"), ("USD", "US Dollar", "$"), ("GBP", "British Pound", "£")],
    },
    {
        "name": "Emerging Markets",
        "description": "Emerging market currencies like TRY, BRL, INR",
        "currencies": [("TRY", "Turkish Lira", "₺"), ("BRL", "Brazilian Real", "R$"), ("INR", "Indian Rupee", "₹")],
    },
    {
        "name": "Asian Currencies",
        "description": "Asian currencies like JPY, CNY, KRW",
        "currencies": [("JPY", "Japanese Yen", "¥"), ("CNY", "Chinese Yuan", "¥"), ("KRW", "South Korean Won", "₩")],
    },
]


@transaction.atomic
def seed_currencies() -> CommandResult:
    """Insert the default groups and currencies. Existing rows are left alone."""
    groups_created = 0
    currencies_created = 0
    for seed in SEED_GROUPS:
        group, created = CurrencyGroup.objects.get_or_create(
            name=seed["name"],
            defaults={"description": seed["description"], "is_active": True},
        )
        groups_created += int(created)
        for code, name, symbol in seed["currencies"]:
            _, created = Currency.objects.get_or_create(
                code=code,
                defaults={"name": name, "symbol": symbol, "group": group, "is_active": True},
            )
            currencies_created += int(created)

    logger.info(
        "Currency seed completed",
        extra={"groups_created": groups_created, "currencies_created": currencies_created},
    )
    return CommandResult.ok(
        {"groups_created": groups_created, "currencies_created": currencies_created},
        message="Currency data seeded successfully",
    )


# =============================================================================
# Group and currency commands
# =============================================================================

@transaction.atomic
def create_group(name: str, description: str = "", is_active: bool = True) -> CommandResult:
    name = name.strip()
    if CurrencyGroup.objects.filter(name=name).exists():
        return CommandResult.conflict("Currency group with this name already exists")

    group = CurrencyGroup.objects.create(name=name, description=description, is_active=is_active)
    return CommandResult.ok(group, message="Currency group created successfully")


@transaction.atomic
def create_currency(data: dict) -> CommandResult:
    code = data["code"].strip().upper()

    group = CurrencyGroup.objects.filter(pk=data["group_id"]).first()
    if group is None:
        return CommandResult.not_found("Currency group not found")
    if Currency.objects.filter(code=code).exists():
        return CommandResult.conflict("Currency with this code already exists")

    currency = Currency.objects.create(
        code=code,
        name=data["name"],
        symbol=data["symbol"],
        group=group,
        is_active=data.get("is_active", True),
    )
    return CommandResult.ok(currency, message="Currency created successfully")


@transaction.atomic
def update_currency(currency_id, data: dict) -> CommandResult:
    currency = Currency.objects.filter(pk=currency_id).first()
    if currency is None:
        return CommandResult.not_found(f"Currency {currency_id} not found.")

    if "code" in data:
        code = data["code"].strip().upper()
        if Currency.objects.filter(code=code).exclude(pk=currency.pk).exists():
            return CommandResult.conflict("Currency with this code already exists")
        currency.code = code
    if "group_id" in data:
        group = CurrencyGroup.objects.filter(pk=data["group_id"]).first()
        if group is None:
            return CommandResult.not_found("Currency group not found")
        currency.group = group
    for field in ("name", "symbol", "is_active"):
        if field in data:
            setattr(currency, field, data[field])

    currency.save()
    return CommandResult.ok(currency, message="Currency updated successfully")


@transaction.atomic
def delete_currency(currency_id) -> CommandResult:
    currency = Currency.objects.filter(pk=currency_id).first()
    if currency is None:
        return CommandResult.not_found(f"Currency {currency_id} not found.")

    currency.delete()
    return CommandResult.ok(None, message="Currency deleted successfully")


@transaction.atomic
def assign_currency_group(currency_id, group_id) -> CommandResult:
    """Move a currency to another group; the currency row itself is kept."""
    currency = Currency.objects.select_for_update().filter(pk=currency_id).first()
    if currency is None:
        return CommandResult.not_found(f"Currency {currency_id} not found.")
    group = CurrencyGroup.objects.filter(pk=group_id).first()
    if group is None:
        return CommandResult.not_found("Currency group not found")

    previous_group_id = currency.group_id
    currency.group = group
    currency.save(update_fields=["group", "updated_at"])
    logger.info(
        "Currency moved between groups",
        extra={"currency": currency.code, "from_group": previous_group_id, "to_group": group.pk},
    )
    return CommandResult.ok(currency, message="Currency group updated successfully")


# =============================================================================
# Rate commands
# =============================================================================

def _rate_exists(owner: RateOwner, owner_id, group_id, exclude_pk=None) -> bool:
    qs = owner.model.objects.filter(**{owner.id_field: owner_id, "group_id": group_id})
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def _build_rate(owner: RateOwner, owner_obj, group, data: dict):
    rate = owner.model(group=group, **{owner.field: owner_obj})
    if data.get("aw_rate") is not None:
        rate.aw_rate = data["aw_rate"]
    if data.get("mp_rate") is not None:
        rate.mp_rate = data["mp_rate"]
    rate.is_active = data.get("is_active", True)
    rate.notes = data.get("notes") or ""
    return rate


@transaction.atomic
def create_rate(owner: RateOwner, data: dict) -> CommandResult:
    owner_id = data[owner.id_field]
    group = CurrencyGroup.objects.filter(pk=data["group_id"]).first()
    if group is None:
        return CommandResult.not_found("Currency group not found")
    owner_obj = owner.get_owner(owner_id)
    if owner_obj is None:
        return CommandResult.not_found(f"{owner.label.capitalize()} {owner_id} not found.")
    if _rate_exists(owner, owner_id, group.pk):
        return CommandResult.conflict(f"Rate already exists for this {owner.label} and group")

    rate = _build_rate(owner, owner_obj, group, data)
    rate.save()
    logger.info(
        "Currency rate created",
        extra={"owner": owner.label, "owner_id": owner_id, "group_id": group.pk, "rate": str(rate.conversion_rate)},
    )
    return CommandResult.ok(rate, message=f"{owner.label.capitalize()} rate created successfully")


@transaction.atomic
def bulk_create_rates(owner: RateOwner, items: list) -> CommandResult:
    """
    Create several rates at once, all or nothing.

    Every owner and group is checked first; any missing row fails with
    404 and any (owner, group) clash, with stored rates or inside the
    batch, fails with 409 listing all clashes.
    """
    if not items:
        return CommandResult.fail("At least one rate is required.")

    group_ids = {item["group_id"] for item in items}
    owner_ids = {item[owner.id_field] for item in items}
    groups = CurrencyGroup.objects.in_bulk(group_ids)
    owners = owner.owner_model.objects.filter(is_deleted=False).in_bulk(owner_ids)

    missing_groups = sorted(group_ids - set(groups))
    if missing_groups:
        return CommandResult.not_found(f"Currency group(s) not found: {', '.join(map(str, missing_groups))}")
    missing_owners = sorted(owner_ids - set(owners))
    if missing_owners:
        return CommandResult.not_found(
            f"{owner.label.capitalize()}(s) not found: {', '.join(map(str, missing_owners))}"
        )

    existing = set(
        owner.model.objects.filter(**{f"{owner.id_field}__in": owner_ids, "group_id__in": group_ids})
        .values_list(owner.id_field, "group_id")
    )
    seen = set()
    conflicts = []
    for item in items:
        key = (item[owner.id_field], item["group_id"])
        if key in existing or key in seen:
            conflicts.append(f"{owner.label} {key[0]} / group {key[1]}")
        seen.add(key)
    if conflicts:
        return CommandResult.conflict(f"Rates already exist for: {', '.join(conflicts)}")

    created = []
    for item in items:
        rate = _build_rate(owner, owners[item[owner.id_field]], groups[item["group_id"]], item)
        rate.save()
        created.append(rate)

    logger.info("Currency rates bulk-created", extra={"owner": owner.label, "count": len(created)})
    return CommandResult.ok(created, message=f"{len(created)} rates created successfully")


@transaction.atomic
def update_rate(owner: RateOwner, rate_id, data: dict) -> CommandResult:
    """Merge the given fields and recompute conversion_rate."""
    rate = owner.model.objects.select_related("group").filter(pk=rate_id).first()
    if rate is None:
        return CommandResult.not_found(f"Rate {rate_id} not found.")

    if "group_id" in data and data["group_id"] != rate.group_id:
        group = CurrencyGroup.objects.filter(pk=data["group_id"]).first()
        if group is None:
            return CommandResult.not_found("Currency group not found")
        if _rate_exists(owner, getattr(rate, owner.id_field), group.pk, exclude_pk=rate.pk):
            return CommandResult.conflict(f"Rate already exists for this {owner.label} and group")
        rate.group = group

    for field in ("aw_rate", "mp_rate"):
        if data.get(field) is not None:
            setattr(rate, field, data[field])
    for field in ("is_active", "notes"):
        if field in data:
            setattr(rate, field, data[field] if data[field] is not None else "")

    rate.save()
    return CommandResult.ok(rate, message=f"{owner.label.capitalize()} rate updated successfully")


@transaction.atomic
def delete_rate(owner: RateOwner, rate_id) -> CommandResult:
    rate = owner.model.objects.filter(pk=rate_id).first()
    if rate is None:
        return CommandResult.not_found(f"Rate {rate_id} not found.")

    rate.delete()
    return CommandResult.ok(None, message=f"{owner.label.capitalize()} rate deleted successfully")


@transaction.atomic
def duplicate_plan_rates(source_plan_id, target_plan_id) -> CommandResult:
    """Copy every rate of the source plan onto a target plan that has none."""
    source = PLAN_RATES.get_owner(source_plan_id)
    if source is None:
        return CommandResult.not_found(f"Plan {source_plan_id} not found.")
    target = PLAN_RATES.get_owner(target_plan_id)
    if target is None:
        return CommandResult.not_found(f"Plan {target_plan_id} not found.")
    if source.pk == target.pk:
        return CommandResult.fail("Source and target plan must differ.")
    if PlanCurrencyRate.objects.filter(plan=target).exists():
        return CommandResult.conflict(f"Plan {target.pk} already has currency rates.")

    copies = []
    for rate in PlanCurrencyRate.objects.filter(plan=source).select_related("group"):
        copy = PlanCurrencyRate(
            plan=target,
            group=rate.group,
            aw_rate=rate.aw_rate,
            mp_rate=rate.mp_rate,
            is_active=rate.is_active,
            notes=rate.notes,
        )
        copy.save()
        copies.append(copy)

    logger.info(
        "Plan rates duplicated",
        extra={"source_plan_id": source.pk, "target_plan_id": target.pk, "count": len(copies)},
    )
    return CommandResult.ok(copies, message=f"{len(copies)} rates copied to plan {target.name}")


# =============================================================================
# Conversion-rate queries
# =============================================================================

def conversion_rate_for_company(company_id, from_code: str, to_code: str) -> CommandResult:
    company = COMPANY_RATES.get_owner(company_id)
    if company is None:
        return CommandResult.not_found(f"Company {company_id} not found.")
    return resolve_conversion_rate(COMPANY_RATES.rates_for(company.pk), from_code, to_code, f"company {company.name}")


def conversion_rate_for_account(airwallex_account_id: str, from_code: str, to_code: str) -> CommandResult:
    company = Company.objects.filter(
        airwallex_account_id=airwallex_account_id,
        is_active=True,
        is_deleted=False,
    ).first()
    if company is None:
        return CommandResult.not_found(f"Company with airwallex_account_id {airwallex_account_id} not found")

    result = resolve_conversion_rate(COMPANY_RATES.rates_for(company.pk), from_code, to_code, f"company {company.name}")
    if not result.success:
        return result

    data = result.data.as_dict()
    data["company_id"] = company.pk
    data["company_name"] = company.name
    return CommandResult.ok(data, message=result.message)


def conversion_rate_for_plan(plan_id, from_code: str, to_code: str) -> CommandResult:
    plan = PLAN_RATES.get_owner(plan_id)
    if plan is None:
        return CommandResult.not_found(f"Plan {plan_id} not found.")
    return resolve_conversion_rate(PLAN_RATES.rates_for(plan.pk), from_code, to_code, f"plan {plan.name}")
