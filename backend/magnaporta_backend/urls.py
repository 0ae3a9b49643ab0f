from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Operations endpoints (no auth required)
    path("_health/", include("ops.urls")),

    # Django admin; /api/admin/... belongs to the API
    path("django-admin/", admin.site.urls),

    # API
    path("api/", include("accounts.urls")),
    path("api/", include("companies.urls")),
    path("api/", include("currency.urls")),
    path("api/", include("logs.urls")),
    path("api/", include("webhooks.urls")),
    path("api/airwallex/", include("payments.urls")),
]
