# cassius_core/appointments/models.py
from django.db import models

from cassius_core.common.models import ScopedModel


class AppointmentType(models.TextChoices):
    CONSULTATION = "CONSULTATION", "Consultation"
    SUIVI = "SUIVI", "Follow-up"
    CHIRURGIE = "CHIRURGIE", "Surgery"
    CONTROLE = "CONTROLE", "Check-up"
    URGENCE = "URGENCE", "Emergency"
    AUTRE = "AUTRE", "Other"


class AppointmentStatus(models.TextChoices):
    UPCOMING = "UPCOMING", "Upcoming"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"


class Appointment(ScopedModel):
    """
    Clinical appointment (consultation, follow-up, surgery...).
    UPCOMING appointments whose date_end has passed are completed by a background job.
    """
    patient_id = models.UUIDField(db_index=True)

    type = models.CharField(max_length=16, choices=AppointmentType.choices)
    status = models.CharField(
        max_length=16,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.UPCOMING,
        db_index=True,
    )

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    date_start = models.DateTimeField()
    date_end = models.DateTimeField(null=True, blank=True)

    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.TextField(blank=True)

    class Meta:
        db_table = "appointments_appointment"
        indexes = [
            models.Index(fields=["status", "date_end"], name="appt_status_date_end_idx"),
            models.Index(fields=["tenant_id", "date_start"], name="appt_tenant_date_start_idx"),
            models.Index(fields=["tenant_id", "patient_id"], name="appt_tenant_patient_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.status})"

    def audit_snapshot(self) -> dict:
        return {
            "status": self.status,
            "title": self.title,
            "date_start": self.date_start.isoformat() if self.date_start else None,
            "date_end": self.date_end.isoformat() if self.date_end else None,
            "cancel_reason": self.cancel_reason or None,
        }
