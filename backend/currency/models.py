from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from magnaporta_backend.models import SoftDeleteModel, TimeStampedModel

DEFAULT_AW_RATE = Decimal("2.00")
DEFAULT_MP_RATE = Decimal("0")


class CurrencyGroup(TimeStampedModel):
    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return self.name


class Currency(TimeStampedModel):
    """A currency belongs to exactly one group at a time."""
    code = models.CharField(max_length=3, unique=True)
    name = models.CharField(max_length=100)
    symbol = models.CharField(max_length=5)
    is_active = models.BooleanField(default=True)
    group = models.ForeignKey(CurrencyGroup, on_delete=models.CASCADE, related_name="currencies")

    class Meta:
        ordering = ["code"]
        verbose_name_plural = "currencies"

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.code


class CurrencyRate(TimeStampedModel):
    """
    Rate charged to an owner (company or plan) for one currency group.

    conversion_rate is always aw_rate + mp_rate and is recomputed on
    every save.
    """
    conversion_rate = models.DecimalField(max_digits=10, decimal_places=4, default=DEFAULT_AW_RATE)
    aw_rate = models.DecimalField(
        max_digits=5, decimal_places=2, default=DEFAULT_AW_RATE, validators=[MinValueValidator(0)]
    )
    mp_rate = models.DecimalField(
        max_digits=10, decimal_places=4, default=DEFAULT_MP_RATE, validators=[MinValueValidator(0)]
    )
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True, default="")

    class Meta:
        abstract = True

    def recompute(self):
        if self.aw_rate is None:
            self.aw_rate = DEFAULT_AW_RATE
        if self.mp_rate is None:
            self.mp_rate = DEFAULT_MP_RATE
        self.conversion_rate = Decimal(self.aw_rate) + Decimal(self.mp_rate)

    def save(self, *args, **kwargs):
        self.recompute()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "conversion_rate" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["conversion_rate"]
        super().save(*args, **kwargs)


class CompanyCurrencyRate(CurrencyRate):
    company = models.ForeignKey("companies.Company", on_delete=models.CASCADE, related_name="currency_rates")
    group = models.ForeignKey(CurrencyGroup, on_delete=models.CASCADE, related_name="company_rates")

    class Meta:
        ordering = ["company_id", "group_id"]
        constraints = [
            models.UniqueConstraint(fields=["company", "group"], name="uniq_company_currency_group"),
        ]

    def __str__(self):
        return f"{self.company_id}:{self.group_id}={self.conversion_rate}"


class PlanCurrencyRate(CurrencyRate):
    plan = models.ForeignKey("companies.Plan", on_delete=models.CASCADE, related_name="currency_rates")
    group = models.ForeignKey(CurrencyGroup, on_delete=models.CASCADE, related_name="plan_rates")

    class Meta:
        ordering = ["plan_id", "group_id"]
        constraints = [
            models.UniqueConstraint(fields=["plan", "group"], name="uniq_plan_currency_group"),
        ]

    def __str__(self):
        return f"plan {self.plan_id}:{self.group_id}={self.conversion_rate}"


class TransferMethod(models.TextChoices):
    LOCAL = "local", "Local"
    SWIFT = "swift", "SWIFT"


class TransferMarkupRate(SoftDeleteModel):
    """
    Fee a plan charges on outgoing transfers for one destination.

    At most one live rate per (plan, country_code, currency, transfer_method).
    Codes are stored upper-case and fee_currency falls back to currency.
    """
    plan = models.ForeignKey("companies.Plan", on_delete=models.CASCADE, related_name="markup_rates")
    region = models.CharField(max_length=100, blank=True, default="")
    country = models.CharField(max_length=100, blank=True, default="")
    country_code = models.CharField(max_length=2)
    currency = models.CharField(max_length=3)
    transaction_type = models.CharField(max_length=50, blank=True, default="")
    transfer_method = models.CharField(max_length=10, choices=TransferMethod.choices)
    fee_sha_percentage = models.DecimalField(
        max_digits=10, decimal_places=3, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    fee_sha_minimum = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    fee_our_percentage = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(0)])
    fee_our_minimum = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    fee_currency = models.CharField(max_length=3)

    class Meta:
        ordering = ["plan_id", "country_code", "currency", "transfer_method"]
        constraints = [
            models.UniqueConstraint(
                fields=["plan", "country_code", "currency", "transfer_method"],
                condition=models.Q(is_deleted=False),
                name="uniq_live_transfer_markup_rate",
            ),
        ]

    def save(self, *args, **kwargs):
        self.country_code = (self.country_code or "").strip().upper()
        self.currency = (self.currency or "").strip().upper()
        self.fee_currency = (self.fee_currency or "").strip().upper() or self.currency
        super().save(*args, **kwargs)

    def __str__(self):
        return f"plan {self.plan_id}:{self.country_code}/{self.currency}/{self.transfer_method}"
