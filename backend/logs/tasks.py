# logs/tasks.py

import logging

from celery import shared_task

from logs.commands import create_log

logger = logging.getLogger(__name__)


@shared_task(name="logs.tasks.persist_audit_log", ignore_result=True)
def persist_audit_log(data: dict):
    create_log(data)
