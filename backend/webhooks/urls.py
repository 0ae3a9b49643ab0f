# webhooks/urls.py

from django.urls import path

from . import views

app_name = "webhooks"

urlpatterns = [
    # Reference data
    path("webhooks/refs/channels", views.ChannelListView.as_view(), name="channel-list"),
    path("webhooks/refs/locales", views.LocaleListView.as_view(), name="locale-list"),
    path("webhooks/refs/seed", views.SeedReferencesView.as_view(), name="refs-seed"),

    # Event types
    path("webhooks/event-types", views.EventTypeListCreateView.as_view(), name="event-type-list"),
    path("webhooks/event-types/paginated", views.EventTypePaginatedView.as_view(), name="event-type-paginated"),
    path("webhooks/event-types/<int:pk>", views.EventTypeDetailView.as_view(), name="event-type-detail"),

    # Templates
    path("webhooks/templates", views.TemplateListCreateView.as_view(), name="template-list"),
    path("webhooks/templates/one", views.TemplateOneView.as_view(), name="template-one"),
    path("webhooks/templates/paginated", views.TemplatePaginatedView.as_view(), name="template-paginated"),
    path("webhooks/templates/seed", views.TemplateSeedView.as_view(), name="template-seed"),
    path(
        "webhooks/templates/preview/by-event",
        views.TemplatePreviewByEventView.as_view(),
        name="template-preview-by-event",
    ),
    path("webhooks/templates/<int:pk>", views.TemplateDetailView.as_view(), name="template-detail"),
    path("webhooks/templates/<int:pk>/render", views.TemplateRenderView.as_view(), name="template-render"),

    # Processing rules
    path("webhooks/processing-rules", views.ProcessingRuleListCreateView.as_view(), name="rule-list"),
    path("webhooks/processing-rules/<int:pk>", views.ProcessingRuleDetailView.as_view(), name="rule-detail"),

    # Inbound webhooks
    path("webhooks/receive", views.ReceiveWebhookView.as_view(), name="receive"),
    path("webhooks", views.WebhookListView.as_view(), name="webhook-list"),
    path("webhooks/webhook-id/<str:webhook_id>", views.WebhookByProviderIdView.as_view(), name="webhook-by-id"),
    path("webhooks/account/<str:account_id>", views.WebhooksByAccountView.as_view(), name="webhook-by-account"),
    path("webhooks/name/<str:name>", views.WebhooksByNameView.as_view(), name="webhook-by-name"),
    path("webhooks/<int:pk>", views.WebhookDetailView.as_view(), name="webhook-detail"),
]
