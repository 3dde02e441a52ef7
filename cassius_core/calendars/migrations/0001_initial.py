import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("appointments", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CalendarIntegration",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("tenant_id", models.UUIDField(db_index=True)),
                ("provider", models.CharField(default="google", max_length=32)),
                ("is_enabled", models.BooleanField(db_index=True, default=True)),
                ("target_calendar_id", models.CharField(max_length=255)),
                ("access_token", models.TextField(blank=True)),
                ("sync_token", models.TextField(blank=True)),
                ("last_sync_at", models.DateTimeField(blank=True, null=True)),
                ("sync_error_count", models.PositiveIntegerField(default=0)),
                ("last_sync_error", models.TextField(blank=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="calendar_integrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "calendars_integration",
            },
        ),
        migrations.CreateModel(
            name="AppointmentExternalLink",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("provider", models.CharField(default="google", max_length=32)),
                ("external_calendar_id", models.CharField(max_length=255)),
                ("external_event_id", models.CharField(max_length=255)),
                ("etag", models.CharField(blank=True, max_length=255)),
                (
                    "sync_status",
                    models.CharField(
                        choices=[("NONE", "Not synced"), ("PENDING", "Pending"), ("SYNCED", "Synced"), ("ERROR", "Error")],
                        default="NONE",
                        max_length=16,
                    ),
                ),
                ("last_synced_at", models.DateTimeField(blank=True, null=True)),
                ("last_error", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "appointment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="external_links",
                        to="appointments.appointment",
                    ),
                ),
                (
                    "integration",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="links",
                        to="calendars.calendarintegration",
                    ),
                ),
            ],
            options={
                "db_table": "calendars_appointment_external_link",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("appointment", "integration"), name="uq_link_appointment_integration"
                    ),
                    models.UniqueConstraint(fields=("integration", "external_event_id"), name="uq_link_integration_event"),
                ],
            },
        ),
    ]
