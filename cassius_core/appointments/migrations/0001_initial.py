import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Appointment",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("tenant_id", models.UUIDField(db_index=True)),
                ("patient_id", models.UUIDField(db_index=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("CONSULTATION", "Consultation"),
                            ("SUIVI", "Follow-up"),
                            ("CHIRURGIE", "Surgery"),
                            ("CONTROLE", "Check-up"),
                            ("URGENCE", "Emergency"),
                            ("AUTRE", "Other"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("UPCOMING", "Upcoming"), ("COMPLETED", "Completed"), ("CANCELLED", "Cancelled")],
                        db_index=True,
                        default="UPCOMING",
                        max_length=16,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("date_start", models.DateTimeField()),
                ("date_end", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancel_reason", models.TextField(blank=True)),
            ],
            options={
                "db_table": "appointments_appointment",
                "indexes": [
                    models.Index(fields=["status", "date_end"], name="appt_status_date_end_idx"),
                    models.Index(fields=["tenant_id", "date_start"], name="appt_tenant_date_start_idx"),
                    models.Index(fields=["tenant_id", "patient_id"], name="appt_tenant_patient_idx"),
                ],
            },
        ),
    ]
