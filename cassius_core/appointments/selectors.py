# cassius_core/appointments/selectors.py
from __future__ import annotations

from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from cassius_core.appointments.models import Appointment


class AppointmentSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def get_appointment(*, tenant_id: UUID, appointment_id) -> Appointment:
        try:
            return Appointment.objects.get(id=appointment_id, tenant_id=tenant_id)
        except (Appointment.DoesNotExist, ValidationError):
            raise AppointmentSelector.NotFound()

    @staticmethod
    def list_appointments(*, tenant_id: UUID) -> QuerySet[Appointment]:
        return Appointment.objects.filter(tenant_id=tenant_id).order_by("date_start")
