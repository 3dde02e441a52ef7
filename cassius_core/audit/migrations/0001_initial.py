import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("tenant_id", models.UUIDField(db_index=True)),
                (
                    "entity_type",
                    models.CharField(
                        choices=[
                            ("PATIENT", "Patient"),
                            ("OPERATION", "Operation"),
                            ("SURGERY_IMPLANT", "Surgery implant"),
                            ("CATALOG_IMPLANT", "Catalog implant"),
                            ("DOCUMENT", "Document"),
                            ("RADIO", "Radiograph"),
                            ("APPOINTMENT", "Appointment"),
                        ],
                        max_length=32,
                    ),
                ),
                ("entity_id", models.CharField(max_length=64)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("CREATE", "Create"),
                            ("UPDATE", "Update"),
                            ("DELETE", "Delete"),
                            ("VIEW", "View"),
                            ("ARCHIVE", "Archive"),
                            ("RESTORE", "Restore"),
                        ],
                        max_length=16,
                    ),
                ),
                ("details", models.TextField(blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, null=True)),
                (
                    "created_at",
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now, editable=False),
                ),
                (
                    "actor_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "audit_audit_log",
                "indexes": [
                    models.Index(
                        fields=["tenant_id", "entity_type", "entity_id", "created_at"],
                        name="audit_log_entity_history_idx",
                    ),
                    models.Index(fields=["tenant_id", "created_at"], name="audit_log_tenant_recent_idx"),
                ],
            },
        ),
    ]
