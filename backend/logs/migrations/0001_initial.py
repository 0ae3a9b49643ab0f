from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LogEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "level",
                    models.CharField(
                        choices=[("debug", "Debug"), ("info", "Info"), ("warn", "Warning"), ("error", "Error")],
                        default="info",
                        max_length=10,
                    ),
                ),
                ("message", models.TextField()),
                ("service_name", models.CharField(max_length=100)),
                ("method", models.CharField(blank=True, default="", max_length=10)),
                ("url", models.TextField(blank=True, default="")),
                ("status_code", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("user_id", models.BigIntegerField(blank=True, null=True)),
                ("user_role", models.CharField(blank=True, default="", max_length=50)),
                ("ip", models.CharField(blank=True, default="", max_length=64)),
                ("user_agent", models.TextField(blank=True, default="")),
                ("headers", models.JSONField(blank=True, null=True)),
                ("query_params", models.JSONField(blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, null=True)),
                ("response_body", models.JSONField(blank=True, null=True)),
                ("error_stack", models.TextField(blank=True, default="")),
                ("transaction_id", models.CharField(blank=True, default="", max_length=64)),
                ("environment", models.CharField(blank=True, default="", max_length=32)),
                ("execution_time", models.PositiveIntegerField(blank=True, help_text="Milliseconds", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["level"], name="logs_level_idx"),
                    models.Index(fields=["service_name"], name="logs_service_idx"),
                    models.Index(fields=["transaction_id"], name="logs_txn_idx"),
                ],
            },
        ),
    ]
