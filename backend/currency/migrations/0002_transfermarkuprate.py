import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ("companies", "0002_plantype"),
        ("currency", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="TransferMarkupRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("is_deleted", models.BooleanField(default=False)),
                ("region", models.CharField(blank=True, default="", max_length=100)),
                ("country", models.CharField(blank=True, default="", max_length=100)),
                ("country_code", models.CharField(max_length=2)),
                ("currency", models.CharField(max_length=3)),
                ("transaction_type", models.CharField(blank=True, default="", max_length=50)),
                (
                    "transfer_method",
                    models.CharField(choices=[("local", "Local"), ("swift", "SWIFT")], max_length=10),
                ),
                (
                    "fee_sha_percentage",
                    models.DecimalField(
                        blank=True,
                        decimal_places=3,
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "fee_sha_minimum",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "fee_our_percentage",
                    models.DecimalField(
                        decimal_places=3, max_digits=10, validators=[django.core.validators.MinValueValidator(0)]
                    ),
                ),
                (
                    "fee_our_minimum",
                    models.DecimalField(
                        decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)]
                    ),
                ),
                ("fee_currency", models.CharField(max_length=3)),
                (
                    "plan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="markup_rates",
                        to="companies.plan",
                    ),
                ),
            ],
            options={
                "ordering": ["plan_id", "country_code", "currency", "transfer_method"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_deleted", False)),
                        fields=("plan", "country_code", "currency", "transfer_method"),
                        name="uniq_live_transfer_markup_rate",
                    )
                ],
            },
        ),
    ]
