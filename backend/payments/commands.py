# payments/commands.py
"""
File upload / download-link commands proxied to Airwallex.

Upstream statuses are translated the same way for every operation:
401 -> unauthorized, 400/404/429/5xx -> bad request with a readable
message, transport failures -> upstream error.
"""

import logging

from magnaporta_backend.results import CommandResult, ErrorKind
from payments.client import AirwallexError, get_airwallex_client

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 20 * 1024 * 1024
MAX_FILENAME_LENGTH = 50
MAX_NOTES_LENGTH = 50


def upstream_failure(exc: AirwallexError, operation: str, not_found_message: str = "Resource not found on Airwallex") -> CommandResult:
    status_code = exc.status_code
    if status_code == 401:
        return CommandResult.fail("Invalid or expired Airwallex credentials", ErrorKind.UNAUTHORIZED)
    if status_code == 400:
        return CommandResult.fail(exc.message or f"Invalid {operation} request")
    if status_code == 404:
        return CommandResult.fail(not_found_message)
    if status_code == 429:
        return CommandResult.fail("Too many requests. Please try again later.")
    if status_code is not None and status_code >= 500:
        return CommandResult.fail("Airwallex service is currently unavailable")
    if status_code is None:
        return CommandResult.fail(f"Failed to complete {operation}: {exc.message}", ErrorKind.UPSTREAM)
    return CommandResult.fail(f"Failed to complete {operation}: {exc.message}")


def upload_file(uploaded_file, notes: str = None) -> CommandResult:
    """Validate and forward an uploaded file (Django UploadedFile)."""
    if uploaded_file is None:
        return CommandResult.fail("File is required")
    if uploaded_file.size > MAX_FILE_SIZE:
        return CommandResult.fail("File size cannot exceed 20MB")
    if len(uploaded_file.name) > MAX_FILENAME_LENGTH:
        return CommandResult.fail(f"Filename cannot exceed {MAX_FILENAME_LENGTH} characters")
    if notes and len(notes) > MAX_NOTES_LENGTH:
        return CommandResult.fail(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")

    logger.info(
        "Uploading file to Airwallex",
        extra={"file_name": uploaded_file.name, "size": uploaded_file.size},
    )
    try:
        data = get_airwallex_client().upload_file(
            uploaded_file.name,
            uploaded_file.read(),
            getattr(uploaded_file, "content_type", None),
            notes or None,
        )
    except AirwallexError as exc:
        return upstream_failure(exc, "file upload")

    return CommandResult.ok(data, message="File uploaded successfully")


def get_download_links(file_ids) -> CommandResult:
    if not isinstance(file_ids, list) or not file_ids:
        return CommandResult.fail("File IDs array is required and cannot be empty")
    for file_id in file_ids:
        if not isinstance(file_id, str) or not file_id.strip():
            return CommandResult.fail("All file IDs must be valid non-empty strings")

    try:
        data = get_airwallex_client().get_download_links(file_ids)
    except AirwallexError as exc:
        return upstream_failure(exc, "download links", not_found_message="One or more files not found")

    return CommandResult.ok(data, message="Download links retrieved successfully")
