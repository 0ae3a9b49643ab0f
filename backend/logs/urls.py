# logs/urls.py

from django.urls import path

from .views import ExternalLogView, LogListView, LogPaginatedView

app_name = "logs"

urlpatterns = [
    path("logs", LogListView.as_view(), name="log-list"),
    path("logs/paginated", LogPaginatedView.as_view(), name="log-paginated"),
    path("logs/external", ExternalLogView.as_view(), name="log-external"),
]
