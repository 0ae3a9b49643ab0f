# webhooks/rules.py
"""
Processing-rule validation and evaluation.

conditions (all keys must match):
    min_amount / max_amount   payload amount bounds (inclusive)
    currency                  payload currency, case-insensitive
    account_id                webhook account id
    equals                    {"dotted.path": value, ...}

actions:
    send_email (bool), to (list of addresses), notify_company_users (bool),
    channel, locale, stop (bool: skip lower-priority rules)
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from webhooks.models import WebhookProcessingRule
from webhooks.rendering import lookup_path

CONDITION_KEYS = frozenset({"min_amount", "max_amount", "currency", "account_id", "equals"})
ACTION_KEYS = frozenset({"send_email", "to", "notify_company_users", "channel", "locale", "stop"})

AMOUNT_PATHS = ("amount", "amount_beneficiary_receives", "amount_payer_pays.amount", "source_amount")
CURRENCY_PATHS = ("currency", "transfer_currency", "amount_payer_pays.currency", "buy_currency")

_ABSENT = object()


def _decimal(value) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


# =============================================================================
# Validation (write time)
# =============================================================================

def validate_conditions(conditions) -> List[str]:
    """Return a list of problems; empty means valid."""
    if conditions is None:
        return []
    if not isinstance(conditions, dict):
        return ["conditions must be an object."]

    errors = [f"Unknown condition '{key}'." for key in sorted(set(conditions) - CONDITION_KEYS)]
    for key in ("min_amount", "max_amount"):
        if key in conditions and _decimal(conditions[key]) is None:
            errors.append(f"{key} must be a number.")
    for key in ("currency", "account_id"):
        if key in conditions and not isinstance(conditions[key], str):
            errors.append(f"{key} must be a string.")
    if "equals" in conditions and not isinstance(conditions["equals"], dict):
        errors.append("equals must be an object of path -> value.")
    return errors


def validate_actions(actions) -> List[str]:
    if actions is None:
        return []
    if not isinstance(actions, dict):
        return ["actions must be an object."]

    errors = [f"Unknown action '{key}'." for key in sorted(set(actions) - ACTION_KEYS)]
    for key in ("send_email", "notify_company_users", "stop"):
        if key in actions and not isinstance(actions[key], bool):
            errors.append(f"{key} must be a boolean.")
    for key in ("channel", "locale"):
        if key in actions and not isinstance(actions[key], str):
            errors.append(f"{key} must be a string.")
    if "to" in actions:
        recipients = actions["to"]
        if not isinstance(recipients, list):
            errors.append("to must be a list of email addresses.")
        else:
            for address in recipients:
                try:
                    validate_email(address)
                except (DjangoValidationError, TypeError):
                    errors.append(f"Invalid email address in to: {address!r}.")
    return errors


# =============================================================================
# Evaluation
# =============================================================================

def payload_amount(payload) -> Optional[Decimal]:
    for path in AMOUNT_PATHS:
        value = _decimal(lookup_path(payload, path, default=None))
        if value is not None:
            return value
    return None


def payload_currency(payload) -> str:
    for path in CURRENCY_PATHS:
        value = lookup_path(payload, path, default=None)
        if isinstance(value, str) and value:
            return value.upper()
    return ""


def conditions_match(conditions, payload, account_id: str = "") -> bool:
    conditions = conditions or {}

    if "min_amount" in conditions or "max_amount" in conditions:
        amount = payload_amount(payload)
        if amount is None:
            return False
        if "min_amount" in conditions and amount < _decimal(conditions["min_amount"]):
            return False
        if "max_amount" in conditions and amount > _decimal(conditions["max_amount"]):
            return False

    if "currency" in conditions:
        if payload_currency(payload) != str(conditions["currency"]).upper():
            return False

    if "account_id" in conditions and conditions["account_id"] != (account_id or ""):
        return False

    for path, expected in (conditions.get("equals") or {}).items():
        if lookup_path(payload, path, default=_ABSENT) != expected:
            return False

    return True


@dataclass
class RuleActions:
    send_email: bool = False
    to: List[str] = field(default_factory=list)
    notify_company_users: bool = True
    channel: str = "email"
    locale: str = "en"
    stop: bool = False

    @classmethod
    def from_json(cls, actions) -> "RuleActions":
        actions = actions or {}
        return cls(
            send_email=bool(actions.get("send_email", False)),
            to=list(actions.get("to") or []),
            notify_company_users=bool(actions.get("notify_company_users", True)),
            channel=actions.get("channel") or "email",
            locale=actions.get("locale") or "en",
            stop=bool(actions.get("stop", False)),
        )


def evaluate_rules(event_name: str, payload, account_id: str = "") -> List[WebhookProcessingRule]:
    """
    Enabled rules of the event type whose conditions match, in priority
    order (lowest first). A matched rule with ``stop`` ends evaluation.
    """
    rules = (
        WebhookProcessingRule.objects
        .select_related("event_type")
        .filter(event_type__event_name=event_name, is_enabled=True)
        .order_by("priority", "id")
    )
    matched = []
    for rule in rules:
        if not conditions_match(rule.conditions, payload, account_id):
            continue
        matched.append(rule)
        if RuleActions.from_json(rule.actions).stop:
            break
    return matched
