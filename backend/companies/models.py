from django.db import models
from django.utils.translation import gettext_lazy as _

from magnaporta_backend.models import SoftDeleteModel


class PlanType(SoftDeleteModel):
    """Category a plan belongs to. Cannot be deleted while plans use it."""
    name = models.CharField(max_length=100, unique=True)
    display_name = models.CharField(max_length=150, blank=True, default="")
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return self.display_name or self.name


class Plan(SoftDeleteModel):
    """Subscription plan; carries default conversion rates per currency group."""
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    plan_type = models.ForeignKey(
        PlanType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="plans",
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Company(SoftDeleteModel):
    """
    Tenant company.

    airwallex_account_id is assigned once, when the payments-provider
    account is created during registration, and never reassigned.
    """
    name = models.CharField(max_length=255, unique=True)
    phone_number = models.CharField(max_length=32, unique=True, null=True, blank=True)
    airwallex_account_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    is_active = models.BooleanField(default=False)
    is_verified = models.BooleanField(default=False)
    plan = models.ForeignKey(
        Plan,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="companies",
    )

    class Meta:
        verbose_name = _("Company")
        verbose_name_plural = _("Companies")
        ordering = ["name"]

    def __str__(self):
        return self.name
