# magnaporta_backend/models.py
"""Abstract base models shared by every app."""

from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class SoftDeleteModel(TimeStampedModel):
    """
    Rows are hidden with is_deleted instead of being removed.

    is_deleted is independent of any is_active flag a subclass carries:
    deactivation and deletion are separate states.
    """
    is_deleted = models.BooleanField(default=False)

    class Meta:
        abstract = True
