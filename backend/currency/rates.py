# currency/rates.py
"""
Conversion-rate resolution.

Given two currency codes and the active rates of one owner (a company or
a plan), pick the rate that applies:

- both currencies in the same group: that group's rate
- different groups: the from-group rate when it is strictly greater,
  otherwise the to-group rate (a tie selects the to-group)

``select_rate`` is the pure policy; ``resolve_conversion_rate`` does the
lookups around it and reports failures as CommandResult.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Optional

from currency.models import Currency
from magnaporta_backend.results import CommandResult


@dataclass(frozen=True)
class RateResolution:
    rate: Decimal
    fee_percentage: Decimal
    is_cross_group: bool
    selected_group_id: int
    group_name: str

    def as_dict(self) -> dict:
        data = asdict(self)
        data["rate"] = float(self.rate)
        data["fee_percentage"] = float(self.fee_percentage)
        return data


def select_rate(from_rate, to_rate):
    """
    Pick between the from-group and to-group rate records.

    Returns the from-group record only when its conversion_rate is
    strictly greater; equal rates select the to-group record.
    """
    if from_rate.conversion_rate > to_rate.conversion_rate:
        return from_rate
    return to_rate


def _resolution(record, is_cross_group: bool) -> RateResolution:
    return RateResolution(
        rate=record.conversion_rate,
        fee_percentage=record.mp_rate,
        is_cross_group=is_cross_group,
        selected_group_id=record.group_id,
        group_name=record.group.name,
    )


def resolve_conversion_rate(rates, from_code: str, to_code: str, owner_label: str = "owner") -> CommandResult:
    """
    Resolve the conversion rate between two currency codes.

    Args:
        rates: queryset of the owner's rate records (company or plan rates)
        from_code / to_code: ISO codes, case-insensitive
        owner_label: used in not-found messages

    Returns:
        CommandResult with a RateResolution
    """
    from_code = (from_code or "").strip().upper()
    to_code = (to_code or "").strip().upper()
    if not from_code or not to_code:
        return CommandResult.fail("Both 'from' and 'to' currency codes are required.")

    currencies = {
        c.code: c
        for c in Currency.objects.filter(code__in=[from_code, to_code], is_active=True)
    }
    from_currency: Optional[Currency] = currencies.get(from_code)
    to_currency: Optional[Currency] = currencies.get(to_code)
    if from_currency is None or to_currency is None:
        return CommandResult.not_found("One or both currencies not found")

    active = rates.filter(is_active=True).select_related("group")

    if from_currency.group_id == to_currency.group_id:
        record = active.filter(group_id=from_currency.group_id).first()
        if record is None:
            return CommandResult.not_found(f"No rate found for {owner_label} and this currency group")
        return CommandResult.ok(
            _resolution(record, is_cross_group=False),
            message="Conversion rate retrieved successfully (same group)",
        )

    from_rate = active.filter(group_id=from_currency.group_id).first()
    to_rate = active.filter(group_id=to_currency.group_id).first()
    if from_rate is None or to_rate is None:
        return CommandResult.not_found(f"No rate found for {owner_label} in one or both currency groups")

    selected = select_rate(from_rate, to_rate)
    return CommandResult.ok(
        _resolution(selected, is_cross_group=True),
        message=f"Cross-group conversion: using rate from group {selected.group_id}",
    )
