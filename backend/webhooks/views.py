# webhooks/views.py
"""
Webhook configuration and inbound event endpoints.

/receive is called by the payments provider and is unauthenticated.
Received webhooks are visible to admins in full and to other actors only
for their own company's provider account.
"""

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from magnaporta_backend.pagination import paginate, parse_page_params
from magnaporta_backend.responses import created, envelope, fail_response, failure

from . import commands
from .models import (
    Webhook,
    WebhookChannel,
    WebhookEventType,
    WebhookLocale,
    WebhookProcessingRule,
    WebhookTemplate,
)
from .rendering import render_fallback, render_template
from .serializers import (
    EventTypeCreateSerializer,
    PreviewByEventSerializer,
    ProcessingRuleCreateSerializer,
    ReceiveWebhookSerializer,
    TemplateFilterSerializer,
    TemplateLookupSerializer,
    TemplateWriteSerializer,
    WebhookChannelSerializer,
    WebhookEventTypeSerializer,
    WebhookLocaleSerializer,
    WebhookProcessingRuleSerializer,
    WebhookSerializer,
    WebhookTemplateSerializer,
)

EVENT_TYPE_ORDER_FIELDS = ("created_at", "updated_at", "event_name")
TEMPLATE_ORDER_FIELDS = ("created_at", "updated_at", "channel", "locale")


def _templates():
    return WebhookTemplate.objects.select_related("event_type")


def _visible_webhooks(actor):
    qs = Webhook.objects.all()
    if not actor.is_admin:
        account_id = actor.company.airwallex_account_id if actor.company else None
        qs = qs.filter(account_id=account_id) if account_id else qs.none()
    return qs


def _template_response(result, status_code=status.HTTP_200_OK):
    if not result.success:
        return fail_response(result)
    data = WebhookTemplateSerializer(result.data).data if result.data is not None else None
    return envelope(data, result.message, status_code)


# =============================================================================
# Reference data
# =============================================================================

class ChannelListView(APIView):
    """GET /api/webhooks/refs/channels"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        channels = WebhookChannel.objects.all()
        return envelope(WebhookChannelSerializer(channels, many=True).data, "Channels retrieved successfully")


class LocaleListView(APIView):
    """GET /api/webhooks/refs/locales"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        locales = WebhookLocale.objects.all()
        return envelope(WebhookLocaleSerializer(locales, many=True).data, "Locales retrieved successfully")


class SeedReferencesView(APIView):
    """POST /api/webhooks/refs/seed -> idempotent"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.manage")

        result = commands.seed_references()
        return envelope(result.data, result.message)


# =============================================================================
# Event types
# =============================================================================

class EventTypeListCreateView(APIView):
    """
    GET  /api/webhooks/event-types
    POST /api/webhooks/event-types -> duplicate event_name -> 409
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        event_types = WebhookEventType.objects.all()
        return envelope(
            WebhookEventTypeSerializer(event_types, many=True).data,
            "Event types retrieved successfully",
        )

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.manage")

        serializer = EventTypeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_event_type(serializer.validated_data)
        if not result.success:
            return fail_response(result)
        return created(WebhookEventTypeSerializer(result.data).data, result.message)


class EventTypePaginatedView(APIView):
    """GET /api/webhooks/event-types/paginated"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        params = parse_page_params(request.query_params, allowed_order_by=EVENT_TYPE_ORDER_FIELDS)
        return envelope(
            paginate(WebhookEventType.objects.all(), params, WebhookEventTypeSerializer),
            "Event types retrieved successfully",
        )


class EventTypeDetailView(APIView):
    """DELETE /api/webhooks/event-types/<id>"""
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "webhooks.manage")

        result = commands.delete_event_type(pk)
        if not result.success:
            return fail_response(result)
        return envelope(None, result.message)


# =============================================================================
# Templates
# =============================================================================

class TemplateListCreateView(APIView):
    """
    GET  /api/webhooks/templates
    POST /api/webhooks/templates -> event type created on demand;
                                    duplicate (event, channel, locale) -> 409
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        return envelope(
            WebhookTemplateSerializer(_templates(), many=True).data,
            "Templates retrieved successfully",
        )

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.manage")

        serializer = TemplateWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_template(serializer.validated_data)
        return _template_response(result, status.HTTP_201_CREATED)


class TemplateOneView(APIView):
    """GET /api/webhooks/templates/one?event_name=&channel=&locale="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        serializer = TemplateLookupSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        template = commands.find_template(data["event_name"], data["channel"], data["locale"])
        if template is None:
            return failure("Template not found", status.HTTP_404_NOT_FOUND)
        return envelope(WebhookTemplateSerializer(template).data, "Template retrieved successfully")


class TemplatePaginatedView(APIView):
    """GET /api/webhooks/templates/paginated?event_name=&channel=&locale="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        params = parse_page_params(request.query_params, allowed_order_by=TEMPLATE_ORDER_FIELDS)
        filters = TemplateFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        qs = _templates()
        if filters.validated_data.get("event_name"):
            qs = qs.filter(event_type__event_name=filters.validated_data["event_name"])
        if filters.validated_data.get("channel"):
            qs = qs.filter(channel=filters.validated_data["channel"])
        if filters.validated_data.get("locale"):
            qs = qs.filter(locale=filters.validated_data["locale"])

        return envelope(paginate(qs, params, WebhookTemplateSerializer), "Templates retrieved successfully")


class TemplateDetailView(APIView):
    """
    GET    /api/webhooks/templates/<id>
    PATCH  /api/webhooks/templates/<id> -> combination change is conflict-checked
    DELETE /api/webhooks/templates/<id>
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        template = _templates().filter(pk=pk).first()
        if template is None:
            return failure("Template not found", status.HTTP_404_NOT_FOUND)
        return envelope(WebhookTemplateSerializer(template).data, "Template retrieved successfully")

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "webhooks.manage")

        serializer = TemplateWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = commands.update_template(pk, serializer.validated_data)
        return _template_response(result)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "webhooks.manage")

        result = commands.delete_template(pk)
        return _template_response(result)


class TemplateRenderView(APIView):
    """
    GET  /api/webhooks/templates/<id>/render -> render with empty data
    POST /api/webhooks/templates/<id>/render -> body is the payload
    """
    permission_classes = [IsAuthenticated]

    def _render(self, request, pk, data):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        template = _templates().filter(pk=pk).first()
        if template is None:
            return failure("Template not found", status.HTTP_404_NOT_FOUND)
        return envelope(render_template(template, data), "Template rendered successfully")

    def get(self, request, pk):
        return self._render(request, pk, {})

    def post(self, request, pk):
        data = request.data if isinstance(request.data, dict) else {}
        return self._render(request, pk, data)


class TemplateSeedView(APIView):
    """POST /api/webhooks/templates/seed -> {created, updated}"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.manage")

        result = commands.seed_default_templates()
        if not result.success:
            return fail_response(result)
        return envelope(result.data, result.message)


class TemplatePreviewByEventView(APIView):
    """
    POST /api/webhooks/templates/preview/by-event

    Falls back to the generic notification when the event type or the
    template does not exist.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        serializer = PreviewByEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        template = commands.find_template(data["event_name"], data["channel"], data["locale"])
        if template is None:
            rendered = render_fallback(data["event_name"], data["data"])
        else:
            rendered = render_template(template, data["data"])
        return envelope(rendered, "Preview rendered successfully")


# =============================================================================
# Processing rules
# =============================================================================

class ProcessingRuleListCreateView(APIView):
    """
    GET  /api/webhooks/processing-rules -> priority ascending
    POST /api/webhooks/processing-rules -> unknown condition/action keys -> 400
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        rules = WebhookProcessingRule.objects.select_related("event_type").order_by("priority", "id")
        return envelope(
            WebhookProcessingRuleSerializer(rules, many=True).data,
            "Processing rules retrieved successfully",
        )

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.manage")

        serializer = ProcessingRuleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_rule(serializer.validated_data)
        if not result.success:
            return fail_response(result)
        return created(WebhookProcessingRuleSerializer(result.data).data, result.message)


class ProcessingRuleDetailView(APIView):
    """DELETE /api/webhooks/processing-rules/<id>"""
    permission_classes = [IsAuthenticated]

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "webhooks.manage")

        result = commands.delete_rule(pk)
        if not result.success:
            return fail_response(result)
        return envelope(None, result.message)


# =============================================================================
# Inbound webhooks
# =============================================================================

class ReceiveWebhookView(APIView):
    """
    POST /api/webhooks/receive

    Called by the payments provider. A repeated id returns the stored row.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = ReceiveWebhookSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.receive_webhook(serializer.validated_data)
        return envelope(WebhookSerializer(result.data).data, result.message)


class WebhookListView(APIView):
    """GET /api/webhooks"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        return envelope(
            WebhookSerializer(_visible_webhooks(actor), many=True).data,
            "Webhooks retrieved successfully",
        )


class WebhookDetailView(APIView):
    """GET /api/webhooks/<id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        webhook = _visible_webhooks(actor).filter(pk=pk).first()
        if webhook is None:
            return failure("Webhook not found", status.HTTP_404_NOT_FOUND)
        return envelope(WebhookSerializer(webhook).data, "Webhook retrieved successfully")


class WebhookByProviderIdView(APIView):
    """GET /api/webhooks/webhook-id/<webhook_id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, webhook_id):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        webhook = _visible_webhooks(actor).filter(webhook_id=webhook_id).first()
        if webhook is None:
            return failure("Webhook not found", status.HTTP_404_NOT_FOUND)
        return envelope(WebhookSerializer(webhook).data, "Webhook retrieved successfully")


class WebhooksByAccountView(APIView):
    """GET /api/webhooks/account/<account_id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, account_id):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        webhooks = _visible_webhooks(actor).filter(account_id=account_id)
        return envelope(WebhookSerializer(webhooks, many=True).data, "Webhooks retrieved successfully")


class WebhooksByNameView(APIView):
    """GET /api/webhooks/name/<name>"""
    permission_classes = [IsAuthenticated]

    def get(self, request, name):
        actor = resolve_actor(request)
        require(actor, "webhooks.view")

        webhooks = _visible_webhooks(actor).filter(webhook_name=name)
        return envelope(WebhookSerializer(webhooks, many=True).data, "Webhooks retrieved successfully")
