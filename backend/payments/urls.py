# payments/urls.py
from django.urls import path

from .views import FileDownloadLinksView, FileUploadView

app_name = "payments"

urlpatterns = [
    path("files/upload", FileUploadView.as_view(), name="file-upload"),
    path("files/download-links", FileDownloadLinksView.as_view(), name="file-download-links"),
]
