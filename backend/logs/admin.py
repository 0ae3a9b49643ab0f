from django.contrib import admin

from .models import LogEntry


@admin.register(LogEntry)
class LogEntryAdmin(admin.ModelAdmin):
    list_display = ("created_at", "level", "method", "url", "status_code", "execution_time", "user_id")
    list_filter = ("level", "service_name", "environment")
    search_fields = ("message", "url", "transaction_id")

    def has_change_permission(self, request, obj=None):
        return False
