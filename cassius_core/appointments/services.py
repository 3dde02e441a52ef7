# cassius_core/appointments/services.py

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import connection, transaction
from django.utils.timezone import now as tz_now

from cassius_core.appointments.models import Appointment, AppointmentStatus
from cassius_core.audit.models import AuditAction, AuditEntityType
from cassius_core.audit.services import AuditService
from cassius_core.common.exceptions import ConflictError

logger = logging.getLogger(__name__)


class AppointmentService:
    """
    Appointment write-model operations.

    Notes:
    - Every mutation records its audit entry inside the same transaction;
      a failed audit write rolls the mutation back.
    - auto_complete_past_due is the only bulk path and writes no audit entries.
    """

    @staticmethod
    def _get_scoped(*, tenant_id: UUID, appointment_id: UUID) -> Appointment:
        return Appointment.objects.select_for_update().get(id=appointment_id, tenant_id=tenant_id)

    @staticmethod
    @transaction.atomic
    def create_appointment(
        *,
        tenant_id: UUID,
        actor_user_id: int | None,
        patient_id: UUID,
        type: str,
        title: str,
        date_start,
        date_end=None,
        description: str = "",
    ) -> Appointment:
        if date_end is not None and date_end < date_start:
            raise ValidationError({"date_end": "date_end must not be before date_start."})

        appt = Appointment.objects.create(
            tenant_id=tenant_id,
            patient_id=patient_id,
            type=type,
            title=title,
            description=description or "",
            date_start=date_start,
            date_end=date_end,
        )

        AuditService.record(
            tenant_id=tenant_id,
            entity_type=AuditEntityType.APPOINTMENT,
            entity_id=appt.id,
            action=AuditAction.CREATE,
            actor_user_id=actor_user_id,
            details=f"Appointment created: {appt.title}",
            metadata={"after": appt.audit_snapshot(), "patient_id": str(patient_id)},
        )
        return appt

    @staticmethod
    @transaction.atomic
    def cancel_appointment(
        *,
        tenant_id: UUID,
        appointment_id: UUID,
        actor_user_id: int | None,
        reason: Optional[str] = None,
    ) -> Appointment:
        """
        UPCOMING -> CANCELLED. Anything else is a conflict.
        """
        appt = AppointmentService._get_scoped(tenant_id=tenant_id, appointment_id=appointment_id)

        if appt.status != AppointmentStatus.UPCOMING:
            raise ConflictError(f"Only UPCOMING appointments can be cancelled (current: {appt.status}).")

        before = appt.audit_snapshot()

        appt.status = AppointmentStatus.CANCELLED
        appt.cancelled_at = tz_now()
        appt.cancel_reason = reason or ""
        appt.save(update_fields=["status", "cancelled_at", "cancel_reason", "updated_at"])

        AuditService.record_change(
            tenant_id=tenant_id,
            entity_type=AuditEntityType.APPOINTMENT,
            entity_id=appt.id,
            actor_user_id=actor_user_id,
            before=before,
            after=appt.audit_snapshot(),
            details="Appointment cancelled",
        )
        return appt

    @staticmethod
    @transaction.atomic
    def auto_complete_past_due(*, now=None) -> list[UUID]:
        """
        Flip every UPCOMING appointment whose date_end is strictly in the past to COMPLETED.

        Single conditional UPDATE ... RETURNING so rows changed concurrently are
        never overwritten from a stale read. Returns the affected ids.
        """
        ts = now or tz_now()
        stamp = connection.ops.adapt_datetimefield_value(ts)
        qn = connection.ops.quote_name

        sql = (
            f"UPDATE {qn(Appointment._meta.db_table)} "
            f"SET {qn('status')} = %s, {qn('completed_at')} = %s, {qn('updated_at')} = %s "
            f"WHERE {qn('status')} = %s AND {qn('date_end')} IS NOT NULL AND {qn('date_end')} < %s "
            f"RETURNING {qn('id')}"
        )
        with connection.cursor() as cursor:
            cursor.execute(
                sql,
                [AppointmentStatus.COMPLETED.value, stamp, stamp, AppointmentStatus.UPCOMING.value, stamp],
            )
            rows = cursor.fetchall()

        ids = [UUID(str(row[0])) for row in rows]
        if ids:
            logger.info(
                "Auto-completed %d appointment(s): %s",
                len(ids),
                ", ".join(str(i) for i in ids),
            )
        return ids
