# cassius_core/calendars/models.py
import uuid

from django.conf import settings
from django.db import models

from cassius_core.appointments.models import Appointment
from cassius_core.common.models import ScopedModel


class SyncStatus(models.TextChoices):
    NONE = "NONE", "Not synced"
    PENDING = "PENDING", "Pending"
    SYNCED = "SYNCED", "Synced"
    ERROR = "ERROR", "Error"


class CalendarIntegration(ScopedModel):
    """
    Connection between an organisation (optionally one user) and an external calendar.
    Token exchange/refresh happens elsewhere; the sync job only reads access_token.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="calendar_integrations",
        null=True,
        blank=True,
    )
    provider = models.CharField(max_length=32, default="google")
    is_enabled = models.BooleanField(default=True, db_index=True)

    target_calendar_id = models.CharField(max_length=255)
    access_token = models.TextField(blank=True)

    # incremental sync cursor handed back by the provider
    sync_token = models.TextField(blank=True)
    last_sync_at = models.DateTimeField(null=True, blank=True)
    sync_error_count = models.PositiveIntegerField(default=0)
    last_sync_error = models.TextField(blank=True)

    class Meta:
        db_table = "calendars_integration"

    def __str__(self) -> str:
        return f"{self.provider}:{self.target_calendar_id}"


class AppointmentExternalLink(models.Model):
    """
    Maps a local appointment to its event in an external calendar.
    (integration, external_event_id) is the reconciliation key.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    appointment = models.ForeignKey(Appointment, on_delete=models.CASCADE, related_name="external_links")
    integration = models.ForeignKey(CalendarIntegration, on_delete=models.CASCADE, related_name="links")

    provider = models.CharField(max_length=32, default="google")
    external_calendar_id = models.CharField(max_length=255)
    external_event_id = models.CharField(max_length=255)
    etag = models.CharField(max_length=255, blank=True)

    sync_status = models.CharField(max_length=16, choices=SyncStatus.choices, default=SyncStatus.NONE)
    last_synced_at = models.DateTimeField(null=True, blank=True)
    last_error = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "calendars_appointment_external_link"
        constraints = [
            models.UniqueConstraint(fields=["appointment", "integration"], name="uq_link_appointment_integration"),
            models.UniqueConstraint(fields=["integration", "external_event_id"], name="uq_link_integration_event"),
        ]

    def __str__(self) -> str:
        return f"{self.appointment_id} -> {self.external_event_id}"
