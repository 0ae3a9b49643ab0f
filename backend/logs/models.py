from django.db import models


class LogEntry(models.Model):
    """
    One audited request, or a log line posted by another service.

    Append-only: rows are created by the audit middleware or the
    /logs/external endpoint and never updated through the API.
    """

    class Level(models.TextChoices):
        DEBUG = "debug", "Debug"
        INFO = "info", "Info"
        WARN = "warn", "Warning"
        ERROR = "error", "Error"

    level = models.CharField(max_length=10, choices=Level.choices, default=Level.INFO)
    message = models.TextField()
    service_name = models.CharField(max_length=100)
    method = models.CharField(max_length=10, blank=True, default="")
    url = models.TextField(blank=True, default="")
    status_code = models.PositiveSmallIntegerField(null=True, blank=True)

    user_id = models.BigIntegerField(null=True, blank=True)
    user_role = models.CharField(max_length=50, blank=True, default="")
    ip = models.CharField(max_length=64, blank=True, default="")
    user_agent = models.TextField(blank=True, default="")

    headers = models.JSONField(null=True, blank=True)
    query_params = models.JSONField(null=True, blank=True)
    metadata = models.JSONField(null=True, blank=True)
    response_body = models.JSONField(null=True, blank=True)
    error_stack = models.TextField(blank=True, default="")

    transaction_id = models.CharField(max_length=64, blank=True, default="")
    environment = models.CharField(max_length=32, blank=True, default="")
    execution_time = models.PositiveIntegerField(null=True, blank=True, help_text="Milliseconds")
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["level"], name="logs_level_idx"),
            models.Index(fields=["service_name"], name="logs_service_idx"),
            models.Index(fields=["transaction_id"], name="logs_txn_idx"),
        ]

    def __str__(self):
        return f"[{self.level}] {self.message}"
