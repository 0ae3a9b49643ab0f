# webhooks/serializers.py

from rest_framework import serializers

from webhooks.models import (
    Webhook,
    WebhookChannel,
    WebhookEventType,
    WebhookLocale,
    WebhookProcessingRule,
    WebhookTemplate,
)
from webhooks.rules import validate_actions, validate_conditions


# =============================================================================
# Output
# =============================================================================

class WebhookChannelSerializer(serializers.ModelSerializer):
    class Meta:
        model = WebhookChannel
        fields = ["id", "key", "name", "description", "is_active"]


class WebhookLocaleSerializer(serializers.ModelSerializer):
    class Meta:
        model = WebhookLocale
        fields = ["id", "code", "name", "is_active"]


class WebhookEventTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = WebhookEventType
        fields = ["id", "event_name", "description", "created_at", "updated_at"]


class WebhookTemplateSerializer(serializers.ModelSerializer):
    event_name = serializers.CharField(source="event_type.event_name", read_only=True)
    event_type_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = WebhookTemplate
        fields = [
            "id",
            "event_type_id",
            "event_name",
            "channel",
            "locale",
            "subject",
            "header",
            "subtext1",
            "subtext2",
            "main_color",
            "body",
            "table_rows",
            "is_active",
            "auto_send_mail",
            "created_at",
            "updated_at",
        ]


class WebhookProcessingRuleSerializer(serializers.ModelSerializer):
    event_name = serializers.CharField(source="event_type.event_name", read_only=True)
    event_type_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = WebhookProcessingRule
        fields = [
            "id",
            "event_type_id",
            "event_name",
            "is_enabled",
            "priority",
            "conditions",
            "actions",
            "created_at",
            "updated_at",
        ]


class WebhookSerializer(serializers.ModelSerializer):
    class Meta:
        model = Webhook
        fields = [
            "id",
            "webhook_id",
            "webhook_name",
            "account_id",
            "data",
            "event_created_at",
            "received_at",
            "mail_sent",
            "mail_sent_at",
        ]


# =============================================================================
# Input
# =============================================================================

class EventTypeCreateSerializer(serializers.Serializer):
    event_name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class TableRowSerializer(serializers.Serializer):
    key = serializers.CharField(allow_blank=True)
    value = serializers.CharField(allow_blank=True)


class TemplateWriteSerializer(serializers.Serializer):
    event_name = serializers.CharField(max_length=255)
    channel = serializers.ChoiceField(choices=WebhookTemplate.Channel.choices)
    locale = serializers.CharField(max_length=16, required=False, default="en")
    subject = serializers.CharField(max_length=255, required=False, allow_blank=True)
    header = serializers.CharField(max_length=255, required=False, allow_blank=True)
    subtext1 = serializers.CharField(required=False, allow_blank=True)
    subtext2 = serializers.CharField(required=False, allow_blank=True)
    main_color = serializers.CharField(max_length=16, required=False, allow_blank=True)
    body = serializers.CharField(required=False, allow_blank=True)
    table_rows = TableRowSerializer(many=True, required=False)
    is_active = serializers.BooleanField(required=False)
    auto_send_mail = serializers.BooleanField(required=False)


class TemplateLookupSerializer(serializers.Serializer):
    event_name = serializers.CharField()
    channel = serializers.ChoiceField(choices=WebhookTemplate.Channel.choices)
    locale = serializers.CharField(required=False, default="en")


class TemplateFilterSerializer(serializers.Serializer):
    event_name = serializers.CharField(required=False)
    channel = serializers.ChoiceField(choices=WebhookTemplate.Channel.choices, required=False)
    locale = serializers.CharField(required=False)


class PreviewByEventSerializer(serializers.Serializer):
    event_name = serializers.CharField()
    channel = serializers.ChoiceField(
        choices=WebhookTemplate.Channel.choices,
        required=False,
        default=WebhookTemplate.Channel.EMAIL,
    )
    locale = serializers.CharField(required=False, default="en")
    data = serializers.JSONField(required=False, default=dict)


class ProcessingRuleCreateSerializer(serializers.Serializer):
    event_name = serializers.CharField(max_length=255)
    is_enabled = serializers.BooleanField(required=False, default=True)
    priority = serializers.IntegerField(required=False, default=100)
    conditions = serializers.JSONField(required=False, default=dict)
    actions = serializers.JSONField(required=False, default=dict)

    def validate_conditions(self, value):
        errors = validate_conditions(value)
        if errors:
            raise serializers.ValidationError(errors)
        return value or {}

    def validate_actions(self, value):
        errors = validate_actions(value)
        if errors:
            raise serializers.ValidationError(errors)
        return value or {}


class ReceiveWebhookSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=255)
    name = serializers.CharField(max_length=255)
    account_id = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    data = serializers.JSONField(required=False, default=dict)
    created_at = serializers.DateTimeField(required=False, allow_null=True)
