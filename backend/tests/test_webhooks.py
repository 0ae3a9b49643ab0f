# tests/test_webhooks.py
"""
Tests for inbound webhooks and their notifications.

Tests cover:
- Placeholder resolution and money formatting
- Template uniqueness, seeding and rendering
- Processing-rule validation and evaluation order
- Idempotent receipt and notification delivery
- Company scoping of received webhooks
"""

from unittest.mock import patch

import pytest
from django.core import mail

from webhooks import commands
from webhooks.models import Webhook, WebhookEventType, WebhookProcessingRule, WebhookTemplate
from webhooks.rendering import format_money_amount, render_fallback, resolve_placeholders
from webhooks.rules import conditions_match, evaluate_rules
from webhooks.tasks import deliver_webhook_notification, deliver_unsent_notifications


PAYOUT_EVENT = "payout.transfer.funding.funded"


def _payload(amount="1500.00", currency="USD"):
    return {
        "status": "FUNDED",
        "short_reference_id": "P-1001",
        "amount_payer_pays": {"amount": amount, "currency": currency},
    }


def _webhook(account_id="acct_acme", name=PAYOUT_EVENT, data=None, webhook_id="evt_1"):
    return Webhook.objects.create(
        webhook_id=webhook_id,
        webhook_name=name,
        account_id=account_id,
        data=data if data is not None else _payload(),
    )


def _template(event_name=PAYOUT_EVENT, **fields):
    event_type, _ = WebhookEventType.objects.get_or_create(event_name=event_name)
    fields.setdefault("subject", "Payout {{short_reference_id}}")
    fields.setdefault("body", "<p>{{amount_payer_pays.amount:money_amount}}</p>")
    fields.setdefault("locale", "en")
    return WebhookTemplate.objects.create(event_type=event_type, channel="email", **fields)


def _rule(priority=100, conditions=None, actions=None, event_name=PAYOUT_EVENT, is_enabled=True):
    event_type, _ = WebhookEventType.objects.get_or_create(event_name=event_name)
    return WebhookProcessingRule.objects.create(
        event_type=event_type,
        priority=priority,
        is_enabled=is_enabled,
        conditions=conditions or {},
        actions=actions or {},
    )


# =============================================================================
# Placeholders
# =============================================================================

class TestPlaceholders:

    def test_money_amount_format(self):
        assert format_money_amount("1234.5") == "1.234,50"
        assert format_money_amount(1234567) == "1.234.567,00"
        assert format_money_amount("n/a") == "n/a"

    def test_money_amount_beyond_decimal_precision_is_left_alone(self):
        assert format_money_amount("1e30") == "1e30"
        assert resolve_placeholders("{{a:money_amount}}", {"a": "1e30"}) == "1e30"

    def test_dotted_paths_and_missing_values(self):
        data = {"payer": {"company_name": "Acme"}, "items": [{"sku": "A1"}]}

        text = resolve_placeholders("{{payer.company_name}} {{items.0.sku}} [{{payer.missing}}]", data)

        assert text == "Acme A1 []"

    def test_money_placeholder(self):
        text = resolve_placeholders("Total {{amount:money_amount}}", {"amount": "98765.432"})

        assert text == "Total 98.765,43"

    def test_escape_applies_to_values_only(self):
        text = resolve_placeholders("<b>{{name}}</b>", {"name": "<script>"}, escape_values=True)

        assert text == "<b>&lt;script&gt;</b>"


class TestFallbackRendering:

    def test_fallback_subject_and_rows(self):
        rendered = render_fallback(PAYOUT_EVENT, {"status": "FUNDED", "id": "tx_9"})

        assert rendered["subject"] == "Webhook Notification: Payout Transfer Funding Funded"
        assert "FUNDED" in rendered["html"]
        assert "tx_9" in rendered["html"]

    def test_fallback_without_known_fields(self):
        rendered = render_fallback("account.created", {})

        assert "Webhook data received successfully" in rendered["html"]


# =============================================================================
# Templates
# =============================================================================

@pytest.mark.django_db
class TestTemplates:

    def test_create_template_and_conflict(self, admin_client):
        body = {"event_name": PAYOUT_EVENT, "channel": "email", "subject": "Funded"}

        first = admin_client.post("/api/webhooks/templates", body, format="json")
        second = admin_client.post("/api/webhooks/templates", body, format="json")

        assert first.status_code == 201
        assert first.json()["data"]["event_name"] == PAYOUT_EVENT
        assert second.status_code == 409
        assert WebhookEventType.objects.filter(event_name=PAYOUT_EVENT).count() == 1

    def test_update_into_existing_key_conflicts(self, admin_client):
        _template(locale="en")
        turkish = _template(locale="tr")

        response = admin_client.patch(
            f"/api/webhooks/templates/{turkish.pk}", {"locale": "en"}, format="json"
        )

        assert response.status_code == 409
        turkish.refresh_from_db()
        assert turkish.locale == "tr"

    def test_seed_creates_then_updates(self, db):
        first = commands.seed_default_templates()
        second = commands.seed_default_templates()

        assert first.data == {"created": 3, "updated": 0}
        assert second.data == {"created": 0, "updated": 3}
        assert WebhookTemplate.objects.count() == 3

    def test_render_endpoint(self, admin_client):
        template = _template(header="Hello {{payer.name}}")

        response = admin_client.post(
            f"/api/webhooks/templates/{template.pk}/render",
            {"short_reference_id": "P-7", "amount_payer_pays": {"amount": "2500"}, "payer": {"name": "Acme"}},
            format="json",
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["subject"] == "Payout P-7"
        assert "2.500,00" in data["html"]
        assert "Hello Acme" in data["html"]

    def test_preview_falls_back_without_template(self, admin_client):
        response = admin_client.post(
            "/api/webhooks/templates/preview/by-event",
            {"event_name": "deposit.settled", "data": {"status": "SETTLED"}},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["data"]["subject"] == "Webhook Notification: Deposit Settled"

    def test_customer_cannot_manage_templates(self, customer_client):
        response = customer_client.post(
            "/api/webhooks/templates", {"event_name": PAYOUT_EVENT, "channel": "email"}, format="json"
        )

        assert response.status_code == 403


# =============================================================================
# Processing rules
# =============================================================================

class TestConditions:

    def test_amount_bounds_are_inclusive(self):
        payload = _payload(amount="1000")

        assert conditions_match({"min_amount": 1000, "max_amount": "1000"}, payload)
        assert not conditions_match({"min_amount": "1000.01"}, payload)

    def test_missing_amount_fails_amount_condition(self):
        assert not conditions_match({"min_amount": 1}, {"status": "FUNDED"})

    def test_currency_is_case_insensitive(self):
        assert conditions_match({"currency": "usd"}, _payload(currency="USD"))
        assert not conditions_match({"currency": "EUR"}, _payload(currency="USD"))

    def test_equals_and_account(self):
        payload = _payload()

        assert conditions_match({"equals": {"status": "FUNDED"}, "account_id": "acct_acme"}, payload, "acct_acme")
        assert not conditions_match({"account_id": "acct_acme"}, payload, "acct_globex")
        assert not conditions_match({"equals": {"payer.name": "x"}}, payload)


@pytest.mark.django_db
class TestRuleEvaluation:

    def test_priority_order_and_stop(self):
        late = _rule(priority=50, actions={"send_email": True})
        first = _rule(priority=10, actions={"send_email": True, "stop": True})
        _rule(priority=1, is_enabled=False)

        matched = evaluate_rules(PAYOUT_EVENT, _payload(), "acct_acme")

        assert matched == [first]
        assert late not in matched

    def test_non_matching_rules_are_skipped(self):
        _rule(priority=1, conditions={"currency": "EUR"})
        usd = _rule(priority=2, conditions={"currency": "USD"})

        assert evaluate_rules(PAYOUT_EVENT, _payload(), "") == [usd]

    def test_create_rule_rejects_unknown_keys(self, admin_client):
        response = admin_client.post(
            "/api/webhooks/processing-rules",
            {"event_name": PAYOUT_EVENT, "conditions": {"colour": "red"}, "actions": {"send_email": "yes"}},
            format="json",
        )

        assert response.status_code == 400
        assert WebhookProcessingRule.objects.count() == 0

    def test_create_rule(self, admin_client):
        response = admin_client.post(
            "/api/webhooks/processing-rules",
            {
                "event_name": PAYOUT_EVENT,
                "priority": 5,
                "conditions": {"min_amount": 100},
                "actions": {"send_email": True, "to": ["ops@acme.test"]},
            },
            format="json",
        )

        assert response.status_code == 201
        assert WebhookProcessingRule.objects.get().priority == 5


# =============================================================================
# Receipt
# =============================================================================

@pytest.mark.django_db
class TestReceiveWebhook:

    BODY = {"id": "evt_100", "name": PAYOUT_EVENT, "account_id": "acct_acme", "data": _payload()}

    def test_receive_is_unauthenticated(self, api_client, django_capture_on_commit_callbacks):
        with patch("webhooks.commands.deliver_webhook_notification") as deliver:
            with django_capture_on_commit_callbacks(execute=True):
                response = api_client.post("/api/webhooks/receive", self.BODY, format="json")

        assert response.status_code == 200
        assert response.json()["message"] == "Webhook received successfully"
        deliver.delay.assert_called_once_with(Webhook.objects.get(webhook_id="evt_100").pk)

    def test_receive_is_idempotent(self, api_client):
        with patch("webhooks.commands.deliver_webhook_notification"):
            api_client.post("/api/webhooks/receive", self.BODY, format="json")
            response = api_client.post("/api/webhooks/receive", self.BODY, format="json")

        assert response.status_code == 200
        assert response.json()["message"] == "Webhook already received"
        assert Webhook.objects.filter(webhook_id="evt_100").count() == 1

    def test_missing_id_is_rejected(self, api_client):
        response = api_client.post("/api/webhooks/receive", {"name": PAYOUT_EVENT}, format="json")

        assert response.status_code == 400


# =============================================================================
# Delivery
# =============================================================================

@pytest.mark.django_db
class TestDelivery:

    def test_nothing_configured_is_skipped(self, customer_user):
        webhook = _webhook()

        assert deliver_webhook_notification(webhook.pk) == "skipped"

        webhook.refresh_from_db()
        assert webhook.mail_sent is False
        assert webhook.processed_at is not None
        assert len(mail.outbox) == 0

    def test_auto_send_template_notifies_company_users(self, customer_user):
        _template(auto_send_mail=True)
        webhook = _webhook()

        assert deliver_webhook_notification(webhook.pk) == "sent"

        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == ["customer@test.com"]
        assert message.subject == "Payout P-1001"
        html = message.alternatives[0][0]
        assert "1.500,00" in html
        webhook.refresh_from_db()
        assert webhook.mail_sent is True
        assert webhook.mail_sent_at is not None

    def test_admin_is_notified_when_company_has_no_users(self, settings, other_company):
        settings.NOTIFICATION_ADMIN_EMAIL = "alerts@magnaporta.test"
        _template(auto_send_mail=True)
        webhook = _webhook(account_id="acct_globex")

        assert deliver_webhook_notification(webhook.pk) == "sent"

        assert mail.outbox[0].to == ["alerts@magnaporta.test"]

    def test_rule_recipients_and_fallback_content(self, customer_user):
        _rule(actions={"send_email": True, "to": ["ops@acme.test"]})
        webhook = _webhook()

        deliver_webhook_notification(webhook.pk)

        message = mail.outbox[0]
        assert message.to == ["customer@test.com", "ops@acme.test"]
        assert message.subject.startswith("Webhook Notification:")

    def test_rule_without_send_suppresses_template(self, customer_user):
        _template(auto_send_mail=True)
        _rule(actions={"send_email": False})
        webhook = _webhook()

        assert deliver_webhook_notification(webhook.pk) == "skipped"
        assert len(mail.outbox) == 0

    def test_oversized_amount_still_delivers(self, customer_user):
        _template(auto_send_mail=True)
        webhook = _webhook(data=_payload(amount="1e30"))

        assert deliver_webhook_notification(webhook.pk) == "sent"

        assert "1e30" in mail.outbox[0].alternatives[0][0]

    def test_second_delivery_is_a_no_op(self, customer_user):
        _template(auto_send_mail=True)
        webhook = _webhook()

        deliver_webhook_notification(webhook.pk)

        assert deliver_webhook_notification(webhook.pk) == "already_processed"
        assert len(mail.outbox) == 1

    def test_sweep_ignores_fresh_webhooks(self):
        _webhook()

        with patch.object(deliver_webhook_notification, "delay") as delay:
            assert deliver_unsent_notifications() == 0
        delay.assert_not_called()

    def test_sweep_queues_stale_webhooks(self):
        webhook = _webhook()
        Webhook.objects.filter(pk=webhook.pk).update(received_at="2020-01-01T00:00:00Z")

        with patch.object(deliver_webhook_notification, "delay") as delay:
            assert deliver_unsent_notifications() == 1
        delay.assert_called_once_with(webhook.pk)


# =============================================================================
# Scoping
# =============================================================================

@pytest.mark.django_db
class TestWebhookScoping:

    def test_customer_sees_only_own_account(self, customer_client, other_company):
        _webhook(account_id="acct_acme", webhook_id="evt_a")
        _webhook(account_id="acct_globex", webhook_id="evt_b")

        response = customer_client.get("/api/webhooks")

        assert response.status_code == 200
        assert [w["webhook_id"] for w in response.json()["data"]] == ["evt_a"]

    def test_customer_cannot_read_other_account_by_id(self, customer_client):
        _webhook(account_id="acct_globex", webhook_id="evt_b")

        response = customer_client.get("/api/webhooks/webhook-id/evt_b")

        assert response.status_code == 404

    def test_admin_sees_everything(self, admin_client):
        _webhook(account_id="acct_acme", webhook_id="evt_a")
        _webhook(account_id="acct_globex", webhook_id="evt_b")

        response = admin_client.get("/api/webhooks/name/" + PAYOUT_EVENT)

        assert len(response.json()["data"]) == 2
