# logs/views.py
"""
Logs API. Read-only apart from /logs/external; rows are never updated
or deleted through the API.
"""

from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from magnaporta_backend.pagination import paginate, parse_page_params
from magnaporta_backend.responses import created, envelope

from .commands import create_log
from .models import LogEntry
from .serializers import ExternalLogSerializer, LogEntrySerializer, LogFilterSerializer

LIST_LIMIT = 1000
LOG_ORDER_FIELDS = ("created_at", "level", "status_code", "execution_time")


class ExternalLogView(APIView):
    """POST /api/logs/external -> store a log line from another service"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "logs.create")

        serializer = ExternalLogSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_log(serializer.validated_data)
        return created(LogEntrySerializer(result.data).data, result.message)


class LogListView(APIView):
    """GET /api/logs?level=&service_name=&method=&status_code=&user_id=&environment=&transaction_id="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "logs.view")

        filters = LogFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        logs = LogEntry.objects.filter(**filters.validated_data).order_by("-created_at", "-pk")[:LIST_LIMIT]
        return envelope(LogEntrySerializer(logs, many=True).data, "Logs retrieved successfully")


class LogPaginatedView(APIView):
    """GET /api/logs/paginated?page=&limit=&order_by=&order="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "logs.view")

        params = parse_page_params(request.query_params, allowed_order_by=LOG_ORDER_FIELDS)
        return envelope(paginate(LogEntry.objects.all(), params, LogEntrySerializer), "Logs retrieved successfully")
