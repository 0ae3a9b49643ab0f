# webhooks/models.py
"""
Inbound payments-provider webhooks and the notification configuration
around them: reference channels and locales, event types, templates and
processing rules.
"""

from django.db import models

from magnaporta_backend.models import TimeStampedModel

DEFAULT_MAIN_COLOR = "#667eea"


class WebhookChannel(TimeStampedModel):
    key = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return self.key


class WebhookLocale(TimeStampedModel):
    code = models.CharField(max_length=16, unique=True)
    name = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return self.code


class WebhookEventType(TimeStampedModel):
    event_name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["event_name"]

    def __str__(self):
        return self.event_name


class WebhookTemplate(TimeStampedModel):
    """
    Notification content for one (event type, channel, locale).

    Text fields may carry ``{{dotted.path}}`` placeholders resolved
    against the webhook payload; see webhooks.rendering.
    """

    class Channel(models.TextChoices):
        EMAIL = "email", "Email"
        SMS = "sms", "SMS"
        WEB = "web", "Web"
        SLACK = "slack", "Slack"
        INTERNAL = "internal", "Internal"

    event_type = models.ForeignKey(
        WebhookEventType,
        on_delete=models.CASCADE,
        related_name="templates",
    )
    channel = models.CharField(max_length=16, choices=Channel.choices)
    locale = models.CharField(max_length=16, default="en")

    subject = models.CharField(max_length=255, blank=True, default="")
    header = models.CharField(max_length=255, blank=True, default="")
    subtext1 = models.TextField(blank=True, default="")
    subtext2 = models.TextField(blank=True, default="")
    main_color = models.CharField(max_length=16, blank=True, default=DEFAULT_MAIN_COLOR)
    body = models.TextField(blank=True, default="")
    # [{"key": "...", "value": "..."}]
    table_rows = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(default=True)
    auto_send_mail = models.BooleanField(default=False)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["event_type", "channel", "locale"],
                name="uniq_template_event_channel_locale",
            ),
        ]

    def __str__(self):
        return f"{self.event_type.event_name} [{self.channel}/{self.locale}]"


class WebhookProcessingRule(TimeStampedModel):
    """Conditions/actions evaluated for every received webhook of the event type."""
    event_type = models.ForeignKey(
        WebhookEventType,
        on_delete=models.CASCADE,
        related_name="rules",
    )
    is_enabled = models.BooleanField(default=True)
    priority = models.IntegerField(default=100)
    conditions = models.JSONField(default=dict, blank=True)
    actions = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["priority", "id"]

    def __str__(self):
        return f"{self.event_type.event_name} (priority {self.priority})"


class Webhook(models.Model):
    """One event received from the payments provider."""
    webhook_id = models.CharField(max_length=255, unique=True)
    webhook_name = models.CharField(max_length=255, db_index=True)
    account_id = models.CharField(max_length=255, blank=True, default="", db_index=True)
    data = models.JSONField(default=dict, blank=True)
    event_created_at = models.DateTimeField(null=True, blank=True)
    received_at = models.DateTimeField(auto_now_add=True)
    mail_sent = models.BooleanField(default=False)
    mail_sent_at = models.DateTimeField(null=True, blank=True)
    # set once delivery has been decided (sent or nothing to send)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-received_at"]
        indexes = [
            models.Index(fields=["processed_at", "received_at"], name="webhooks_pending_idx"),
        ]

    def __str__(self):
        return f"{self.webhook_name} ({self.webhook_id})"
