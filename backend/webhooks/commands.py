# webhooks/commands.py
"""
Command layer for webhook configuration and inbound events.

Duplicate event names and duplicate (event, channel, locale) templates
are conflicts. Receiving a webhook whose id is already stored is not an
error: the stored row is returned unchanged.
"""

import logging

from django.db import transaction
from django.utils.dateparse import parse_datetime
from kombu.exceptions import KombuError

from magnaporta_backend.results import CommandResult
from webhooks.models import (
    Webhook,
    WebhookChannel,
    WebhookEventType,
    WebhookLocale,
    WebhookProcessingRule,
    WebhookTemplate,
)
from webhooks.rules import validate_actions, validate_conditions
from webhooks.tasks import deliver_webhook_notification

logger = logging.getLogger(__name__)

SEED_CHANNELS = [
    {"key": "email", "name": "Email", "description": "Email notifications"},
    {"key": "sms", "name": "SMS", "description": "Text message notifications"},
]
SEED_LOCALES = [
    {"code": "en", "name": "English"},
    {"code": "tr", "name": "Turkish"},
]

TEMPLATE_CONTENT_FIELDS = (
    "subject",
    "header",
    "subtext1",
    "subtext2",
    "main_color",
    "body",
    "table_rows",
    "is_active",
    "auto_send_mail",
)

DEFAULT_TEMPLATES = [
    {
        "event_name": "conversion.settled",
        "channel": "email",
        "locale": "en",
        "subject": "Your conversion has settled",
        "body": "<h2>Conversion Settled</h2><p>Short Ref: {{short_reference_id}}</p><p>Status: {{status}}</p>",
        "is_active": True,
        "auto_send_mail": False,
    },
    {
        "event_name": "global_account.active",
        "channel": "email",
        "locale": "en",
        "subject": "Your global account is active",
        "body": "<h2>Account Active</h2><p>Account: {{account_name}}</p><p>IBAN: {{iban}}</p>",
        "is_active": True,
        "auto_send_mail": False,
    },
    {
        "event_name": "payout.transfer.funding.funded",
        "channel": "email",
        "locale": "en",
        "subject": "Your payout has been funded",
        "body": (
            "<h2>Payout Funded</h2>"
            "<p>Amount: {{amount_payer_pays.amount:money_amount}} {{amount_payer_pays.currency}}</p>"
            "<p>Status: {{status}}</p>"
        ),
        "is_active": True,
        "auto_send_mail": False,
    },
]


# =============================================================================
# Reference data
# =============================================================================

@transaction.atomic
def seed_references() -> CommandResult:
    """Create the default channels and locales; existing rows are kept."""
    created = 0
    for row in SEED_CHANNELS:
        _, was_created = WebhookChannel.objects.get_or_create(
            key=row["key"],
            defaults={"name": row["name"], "description": row["description"]},
        )
        created += int(was_created)
    for row in SEED_LOCALES:
        _, was_created = WebhookLocale.objects.get_or_create(code=row["code"], defaults={"name": row["name"]})
        created += int(was_created)

    return CommandResult.ok(
        {
            "created": created,
            "channels": WebhookChannel.objects.count(),
            "locales": WebhookLocale.objects.count(),
        },
        message="Reference data seeded successfully",
    )


# =============================================================================
# Event types
# =============================================================================

def ensure_event_type(event_name: str, description: str = "") -> WebhookEventType:
    event_type, _ = WebhookEventType.objects.get_or_create(
        event_name=event_name,
        defaults={"description": description or ""},
    )
    return event_type


@transaction.atomic
def create_event_type(data: dict) -> CommandResult:
    event_name = data["event_name"].strip()
    if WebhookEventType.objects.filter(event_name=event_name).exists():
        return CommandResult.conflict(f"Event type '{event_name}' already exists.")

    event_type = WebhookEventType.objects.create(
        event_name=event_name,
        description=data.get("description") or "",
    )
    logger.info("Webhook event type created", extra={"event_name": event_name})
    return CommandResult.ok(event_type, message="Event type created successfully")


@transaction.atomic
def delete_event_type(event_type_id: int) -> CommandResult:
    event_type = WebhookEventType.objects.filter(pk=event_type_id).first()
    if event_type is None:
        return CommandResult.not_found("Event type not found")
    event_type.delete()
    return CommandResult.ok(message="Event type deleted successfully")


# =============================================================================
# Templates
# =============================================================================

def find_template(event_name: str, channel: str, locale: str = "en"):
    return (
        WebhookTemplate.objects
        .select_related("event_type")
        .filter(event_type__event_name=event_name, channel=channel, locale=locale or "en")
        .first()
    )


@transaction.atomic
def create_template(data: dict) -> CommandResult:
    event_type = ensure_event_type(data["event_name"])
    channel = data["channel"]
    locale = data.get("locale") or "en"

    if WebhookTemplate.objects.filter(event_type=event_type, channel=channel, locale=locale).exists():
        return CommandResult.conflict("Template already exists for this event_name + channel + locale")

    template = WebhookTemplate.objects.create(
        event_type=event_type,
        channel=channel,
        locale=locale,
        **{field: data[field] for field in TEMPLATE_CONTENT_FIELDS if field in data},
    )
    logger.info(
        "Webhook template created",
        extra={"template_id": template.pk, "event_name": event_type.event_name, "channel": channel},
    )
    return CommandResult.ok(template, message="Template created successfully")


@transaction.atomic
def update_template(template_id: int, data: dict) -> CommandResult:
    template = WebhookTemplate.objects.select_related("event_type").filter(pk=template_id).first()
    if template is None:
        return CommandResult.not_found("Template not found")

    if data.get("event_name") or data.get("channel") or data.get("locale"):
        event_type = ensure_event_type(data["event_name"]) if data.get("event_name") else template.event_type
        channel = data.get("channel") or template.channel
        locale = data.get("locale") or template.locale

        clash = (
            WebhookTemplate.objects
            .filter(event_type=event_type, channel=channel, locale=locale)
            .exclude(pk=template.pk)
            .exists()
        )
        if clash:
            return CommandResult.conflict(
                "Another template already exists with the same event_name + channel + locale"
            )
        template.event_type = event_type
        template.channel = channel
        template.locale = locale

    for field in TEMPLATE_CONTENT_FIELDS:
        if field in data:
            setattr(template, field, data[field])
    template.save()
    return CommandResult.ok(template, message="Template updated successfully")


@transaction.atomic
def delete_template(template_id: int) -> CommandResult:
    template = WebhookTemplate.objects.filter(pk=template_id).first()
    if template is None:
        return CommandResult.not_found("Template not found")
    template.delete()
    return CommandResult.ok(message="Template deleted successfully")


@transaction.atomic
def seed_default_templates() -> CommandResult:
    """Upsert the default templates -> {created, updated}."""
    created = updated = 0
    for seed in DEFAULT_TEMPLATES:
        existing = find_template(seed["event_name"], seed["channel"], seed["locale"])
        if existing is None:
            result = create_template(seed)
            created += 1
        else:
            result = update_template(existing.pk, seed)
            updated += 1
        if not result.success:
            return result
    return CommandResult.ok({"created": created, "updated": updated}, message="Default templates seeded")


# =============================================================================
# Processing rules
# =============================================================================

@transaction.atomic
def create_rule(data: dict) -> CommandResult:
    conditions = data.get("conditions") or {}
    actions = data.get("actions") or {}

    errors = validate_conditions(conditions) + validate_actions(actions)
    if errors:
        return CommandResult.fail(" ".join(errors))

    rule = WebhookProcessingRule.objects.create(
        event_type=ensure_event_type(data["event_name"]),
        is_enabled=data.get("is_enabled", True),
        priority=data.get("priority", 100),
        conditions=conditions,
        actions=actions,
    )
    logger.info("Webhook processing rule created", extra={"rule_id": rule.pk, "event_name": data["event_name"]})
    return CommandResult.ok(rule, message="Processing rule created successfully")


@transaction.atomic
def delete_rule(rule_id: int) -> CommandResult:
    rule = WebhookProcessingRule.objects.filter(pk=rule_id).first()
    if rule is None:
        return CommandResult.not_found("Processing rule not found")
    rule.delete()
    return CommandResult.ok(message="Processing rule deleted successfully")


# =============================================================================
# Inbound webhooks
# =============================================================================

def _enqueue_delivery(webhook_pk: int) -> None:
    try:
        deliver_webhook_notification.delay(webhook_pk)
    except (KombuError, OSError) as exc:
        # Left unsent; the periodic sweep picks it up.
        logger.error(
            "Failed to enqueue webhook notification",
            extra={"webhook_pk": webhook_pk, "error": str(exc)},
        )


@transaction.atomic
def receive_webhook(data: dict) -> CommandResult:
    """
    Store an inbound event and schedule its notification.

    Returns the stored row for an already-received id.
    """
    existing = Webhook.objects.filter(webhook_id=data["id"]).first()
    if existing is not None:
        logger.info("Duplicate webhook ignored", extra={"webhook_id": existing.webhook_id})
        return CommandResult.ok(existing, message="Webhook already received")

    created_at = data.get("created_at")
    if isinstance(created_at, str):
        created_at = parse_datetime(created_at)

    webhook = Webhook.objects.create(
        webhook_id=data["id"],
        webhook_name=data["name"],
        account_id=data.get("account_id") or "",
        data=data.get("data") or {},
        event_created_at=created_at,
    )
    logger.info(
        "Webhook received",
        extra={"webhook_id": webhook.webhook_id, "webhook_name": webhook.webhook_name},
    )
    transaction.on_commit(lambda: _enqueue_delivery(webhook.pk))
    return CommandResult.ok(webhook, message="Webhook received successfully")
