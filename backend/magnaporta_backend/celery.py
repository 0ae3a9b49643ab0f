"""
Celery application configuration.

This is the main Celery app for the MagnaPorta backend.
It persists request audit records, delivers webhook notifications
and runs the periodic housekeeping jobs (token flush, registration
reconciliation).

Usage:
    # Start worker
    celery -A magnaporta_backend worker -l INFO

    # Start beat scheduler (for periodic tasks)
    celery -A magnaporta_backend beat -l INFO

    # Start both (development only)
    celery -A magnaporta_backend worker -B -l INFO
"""
import os

from celery import Celery

# Set default Django settings
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "magnaporta_backend.settings")

# Create Celery app
app = Celery("magnaporta_backend")

# Load config from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
