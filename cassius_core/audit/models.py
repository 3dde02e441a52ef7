# cassius_core/audit/models.py
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

UNKNOWN_ACTOR_LABEL = "Unknown user"

ENTITY_ID_MAX_LENGTH = 64


class AuditEntityType(models.TextChoices):
    PATIENT = "PATIENT", "Patient"
    OPERATION = "OPERATION", "Operation"
    SURGERY_IMPLANT = "SURGERY_IMPLANT", "Surgery implant"
    CATALOG_IMPLANT = "CATALOG_IMPLANT", "Catalog implant"
    DOCUMENT = "DOCUMENT", "Document"
    RADIO = "RADIO", "Radiograph"
    APPOINTMENT = "APPOINTMENT", "Appointment"


class AuditAction(models.TextChoices):
    CREATE = "CREATE", "Create"
    UPDATE = "UPDATE", "Update"
    DELETE = "DELETE", "Delete"
    VIEW = "VIEW", "View"
    ARCHIVE = "ARCHIVE", "Archive"
    RESTORE = "RESTORE", "Restore"


class AuditLog(models.Model):
    """
    Immutable audit record (append-only).
    (entity_type, entity_id) ordered by created_at is the canonical history of a record.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant_id = models.UUIDField(db_index=True)

    entity_type = models.CharField(max_length=32, choices=AuditEntityType.choices)
    entity_id = models.CharField(max_length=ENTITY_ID_MAX_LENGTH)
    action = models.CharField(max_length=16, choices=AuditAction.choices)

    details = models.TextField(null=True, blank=True)
    # UUIDs, datetimes and Decimals are stored as strings
    metadata = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)

    # null for system/background actions; kept when the user is removed
    actor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="audit_logs",
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(default=timezone.now, editable=False, db_index=True)

    class Meta:
        db_table = "audit_audit_log"
        indexes = [
            models.Index(
                fields=["tenant_id", "entity_type", "entity_id", "created_at"],
                name="audit_log_entity_history_idx",
            ),
            models.Index(fields=["tenant_id", "created_at"], name="audit_log_tenant_recent_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.entity_type}:{self.entity_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Audit log entries are append-only.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Audit log entries cannot be deleted.")

    @property
    def actor_display_name(self) -> str:
        user = self.actor_user
        if user is None:
            return UNKNOWN_ACTOR_LABEL
        full_name = user.get_full_name().strip() if hasattr(user, "get_full_name") else ""
        return full_name or getattr(user, "username", "") or UNKNOWN_ACTOR_LABEL
