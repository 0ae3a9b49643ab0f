from django.contrib import admin

from .models import (
    Webhook,
    WebhookChannel,
    WebhookEventType,
    WebhookLocale,
    WebhookProcessingRule,
    WebhookTemplate,
)


@admin.register(WebhookChannel)
class WebhookChannelAdmin(admin.ModelAdmin):
    list_display = ["key", "name", "is_active"]


@admin.register(WebhookLocale)
class WebhookLocaleAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "is_active"]


@admin.register(WebhookEventType)
class WebhookEventTypeAdmin(admin.ModelAdmin):
    list_display = ["event_name", "description", "created_at"]
    search_fields = ["event_name"]


@admin.register(WebhookTemplate)
class WebhookTemplateAdmin(admin.ModelAdmin):
    list_display = ["event_type", "channel", "locale", "is_active", "auto_send_mail", "updated_at"]
    list_filter = ["channel", "locale", "is_active", "auto_send_mail"]
    search_fields = ["event_type__event_name", "subject"]


@admin.register(WebhookProcessingRule)
class WebhookProcessingRuleAdmin(admin.ModelAdmin):
    list_display = ["event_type", "priority", "is_enabled", "updated_at"]
    list_filter = ["is_enabled"]
    ordering = ["priority", "id"]


@admin.register(Webhook)
class WebhookAdmin(admin.ModelAdmin):
    list_display = ["webhook_id", "webhook_name", "account_id", "mail_sent", "received_at"]
    list_filter = ["mail_sent", "webhook_name"]
    search_fields = ["webhook_id", "account_id"]
    readonly_fields = ["webhook_id", "webhook_name", "account_id", "data", "event_created_at", "received_at"]
