# accounts/tasks.py
"""
Periodic maintenance for accounts.

- flush_expired_tokens: drop expired OutstandingToken/BlacklistedToken rows
- reconcile_registrations: surface provider accounts with no local company
"""

import logging

from celery import shared_task
from django.core.management import call_command

from accounts.registration import orphaned_attempts

logger = logging.getLogger(__name__)


@shared_task(name="accounts.tasks.flush_expired_tokens")
def flush_expired_tokens():
    call_command("flushexpiredtokens")
    logger.info("Expired refresh tokens flushed")


@shared_task(name="accounts.tasks.reconcile_registrations")
def reconcile_registrations():
    """
    Log one warning per orphaned registration attempt.

    Closing an orphan is an operator decision
    (``manage.py reconcile_registrations --close <id>``).
    """
    count = 0
    for attempt in orphaned_attempts().order_by("created_at"):
        count += 1
        logger.warning(
            "Orphaned Airwallex account awaiting reconciliation",
            extra={
                "attempt_id": attempt.pk,
                "airwallex_account_id": attempt.airwallex_account_id,
                "email": attempt.email,
                "company_name": attempt.company_name,
            },
        )
    return count
