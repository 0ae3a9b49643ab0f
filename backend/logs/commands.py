# logs/commands.py

import logging

from logs.models import LogEntry
from magnaporta_backend.results import CommandResult

logger = logging.getLogger(__name__)

LOG_FIELDS = frozenset(
    f.name for f in LogEntry._meta.get_fields() if f.concrete and f.name not in ("id", "created_at")
)


def create_log(data: dict) -> CommandResult:
    """Insert a log row. Unknown keys are dropped."""
    entry = LogEntry.objects.create(**{k: v for k, v in data.items() if k in LOG_FIELDS})
    return CommandResult.ok(entry, message="Log created successfully")
