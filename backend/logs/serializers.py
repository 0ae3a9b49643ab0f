# logs/serializers.py

from rest_framework import serializers

from .models import LogEntry


class LogEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = LogEntry
        fields = [
            "id",
            "level",
            "message",
            "service_name",
            "method",
            "url",
            "status_code",
            "user_id",
            "user_role",
            "ip",
            "user_agent",
            "headers",
            "query_params",
            "metadata",
            "response_body",
            "error_stack",
            "transaction_id",
            "environment",
            "execution_time",
            "created_at",
        ]


class ExternalLogSerializer(serializers.Serializer):
    """Log line posted by another service."""
    level = serializers.ChoiceField(choices=LogEntry.Level.choices)
    message = serializers.CharField()
    service_name = serializers.CharField(max_length=100)
    method = serializers.CharField(max_length=10, required=False, allow_blank=True)
    url = serializers.CharField(required=False, allow_blank=True)
    status_code = serializers.IntegerField(min_value=100, max_value=599, required=False, allow_null=True)
    user_id = serializers.IntegerField(required=False, allow_null=True)
    user_role = serializers.CharField(max_length=50, required=False, allow_blank=True)
    ip = serializers.CharField(max_length=64, required=False, allow_blank=True)
    user_agent = serializers.CharField(required=False, allow_blank=True)
    headers = serializers.JSONField(required=False, allow_null=True)
    query_params = serializers.JSONField(required=False, allow_null=True)
    metadata = serializers.JSONField(required=False, allow_null=True)
    response_body = serializers.JSONField(required=False, allow_null=True)
    error_stack = serializers.CharField(required=False, allow_blank=True)
    transaction_id = serializers.CharField(max_length=64, required=False, allow_blank=True)
    environment = serializers.CharField(max_length=32, required=False, allow_blank=True)
    execution_time = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class LogFilterSerializer(serializers.Serializer):
    level = serializers.ChoiceField(choices=LogEntry.Level.choices, required=False)
    service_name = serializers.CharField(required=False)
    method = serializers.CharField(required=False)
    status_code = serializers.IntegerField(required=False)
    user_id = serializers.IntegerField(required=False)
    environment = serializers.CharField(required=False)
    transaction_id = serializers.CharField(required=False)
