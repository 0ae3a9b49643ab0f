# webhooks/tasks.py
"""
Notification delivery for received webhooks.

deliver_webhook_notification decides, per webhook, whether a mail goes
out and to whom:

1. Matched processing rules (webhooks.rules) drive the decision. With no
   matching rule, an active email/en template with auto_send_mail implies
   a default send to the company users.
2. Recipients: active users of the company owning the account id, plus
   any ``to`` addresses of the matched rules. When company users should
   be notified but none can be found, NOTIFICATION_ADMIN_EMAIL receives
   the notice instead.
3. Content: the matching template, or the generic fallback.
"""

import logging
from datetime import timedelta
from smtplib import SMTPException

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.utils import timezone
from django.utils.html import strip_tags

from companies.models import Company
from webhooks.models import Webhook, WebhookTemplate
from webhooks.rendering import render_fallback, render_template
from webhooks.rules import RuleActions, evaluate_rules

logger = logging.getLogger(__name__)

User = get_user_model()

SWEEP_BATCH_SIZE = 100
# fresh webhooks are still owned by the task enqueued on receipt
SWEEP_MIN_AGE = timedelta(minutes=5)


def _active_template(event_name: str, channel: str, locale: str):
    return (
        WebhookTemplate.objects
        .filter(event_type__event_name=event_name, channel=channel, locale=locale, is_active=True)
        .first()
    )


def company_recipients(account_id: str) -> list:
    if not account_id:
        return []
    company = Company.objects.filter(airwallex_account_id=account_id, is_deleted=False).first()
    if company is None:
        return []
    return list(
        User.objects
        .filter(company=company, is_active=True, is_deleted=False)
        .exclude(email="")
        .order_by("pk")
        .values_list("email", flat=True)
    )


def plan_delivery(webhook: Webhook):
    """
    Decide how a webhook is delivered.

    Returns None when nothing should be sent, otherwise a dict with
    ``channel``, ``locale``, ``notify_company_users`` and ``extra_to``.
    """
    rules = evaluate_rules(webhook.webhook_name, webhook.data, webhook.account_id)
    if rules:
        actions = [RuleActions.from_json(rule.actions) for rule in rules]
        sending = [a for a in actions if a.send_email]
        if not sending:
            return None
        extra_to = []
        for action in sending:
            extra_to.extend(address for address in action.to if address not in extra_to)
        return {
            "channel": sending[0].channel,
            "locale": sending[0].locale,
            "notify_company_users": any(a.notify_company_users for a in sending),
            "extra_to": extra_to,
        }

    template = _active_template(webhook.webhook_name, WebhookTemplate.Channel.EMAIL, "en")
    if template is not None and template.auto_send_mail:
        return {
            "channel": WebhookTemplate.Channel.EMAIL,
            "locale": "en",
            "notify_company_users": True,
            "extra_to": [],
        }
    return None


def render_for(webhook: Webhook, channel: str, locale: str) -> dict:
    template = _active_template(webhook.webhook_name, channel, locale)
    if template is None:
        return render_fallback(webhook.webhook_name, webhook.data)
    return render_template(template, webhook.data)


@shared_task(
    name="webhooks.tasks.deliver_webhook_notification",
    autoretry_for=(SMTPException, ConnectionError),
    retry_backoff=True,
    max_retries=5,
)
def deliver_webhook_notification(webhook_pk: int) -> str:
    webhook = Webhook.objects.filter(pk=webhook_pk).first()
    if webhook is None:
        logger.warning("Webhook not found for delivery", extra={"webhook_pk": webhook_pk})
        return "missing"
    if webhook.mail_sent or webhook.processed_at is not None:
        return "already_processed"

    plan = plan_delivery(webhook)
    if plan is None:
        webhook.processed_at = timezone.now()
        webhook.save(update_fields=["processed_at"])
        logger.info("No notification configured for webhook", extra={"webhook_id": webhook.webhook_id})
        return "skipped"

    recipients = []
    if plan["notify_company_users"]:
        recipients = company_recipients(webhook.account_id)
        if not recipients:
            logger.warning(
                "No company users for webhook account; notifying admin",
                extra={"webhook_id": webhook.webhook_id, "account_id": webhook.account_id},
            )
            recipients = [settings.NOTIFICATION_ADMIN_EMAIL]
    recipients.extend(address for address in plan["extra_to"] if address not in recipients)

    if not recipients:
        webhook.processed_at = timezone.now()
        webhook.save(update_fields=["processed_at"])
        return "skipped"

    rendered = render_for(webhook, plan["channel"], plan["locale"])
    send_mail(
        subject=rendered["subject"],
        message=strip_tags(rendered["html"]),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=recipients,
        html_message=rendered["html"],
        fail_silently=False,
    )

    now = timezone.now()
    webhook.mail_sent = True
    webhook.mail_sent_at = now
    webhook.processed_at = now
    webhook.save(update_fields=["mail_sent", "mail_sent_at", "processed_at"])
    logger.info(
        "Webhook notification sent",
        extra={"webhook_id": webhook.webhook_id, "recipient_count": len(recipients)},
    )
    return "sent"


@shared_task(name="webhooks.tasks.deliver_unsent_notifications")
def deliver_unsent_notifications(limit: int = SWEEP_BATCH_SIZE) -> int:
    """Queue delivery for webhooks that were stored but never processed."""
    pending = list(
        Webhook.objects
        .filter(
            processed_at__isnull=True,
            mail_sent=False,
            received_at__lt=timezone.now() - SWEEP_MIN_AGE,
        )
        .order_by("received_at")
        .values_list("pk", flat=True)[:limit]
    )
    for pk in pending:
        deliver_webhook_notification.delay(pk)
    if pending:
        logger.info("Queued unsent webhook notifications", extra={"count": len(pending)})
    return len(pending)
