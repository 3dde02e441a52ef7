# cassius_core/appointments/filters.py
from __future__ import annotations

import django_filters

from cassius_core.appointments.models import Appointment, AppointmentStatus, AppointmentType


class AppointmentFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=AppointmentStatus.choices)
    type = django_filters.ChoiceFilter(choices=AppointmentType.choices)
    patient_id = django_filters.UUIDFilter()
    date_from = django_filters.IsoDateTimeFilter(field_name="date_start", lookup_expr="gte")
    date_to = django_filters.IsoDateTimeFilter(field_name="date_start", lookup_expr="lte")

    class Meta:
        model = Appointment
        fields = ["status", "type", "patient_id", "date_from", "date_to"]
