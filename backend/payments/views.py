# payments/views.py
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from magnaporta_backend.responses import envelope, fail_response

from .commands import get_download_links, upload_file


class FileUploadView(APIView):
    """POST /api/airwallex/files/upload (multipart: file, notes)"""
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "files.upload")

        result = upload_file(request.FILES.get("file"), request.data.get("notes"))
        if not result.success:
            return fail_response(result)
        return envelope(result.data, result.message)


class FileDownloadLinksView(APIView):
    """POST /api/airwallex/files/download-links {"file_ids": [...]}"""
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "files.download")

        result = get_download_links(request.data.get("file_ids"))
        if not result.success:
            return fail_response(result)
        return envelope(result.data, result.message)
