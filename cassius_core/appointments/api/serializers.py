# cassius_core/appointments/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cassius_core.appointments.models import Appointment, AppointmentType


class AppointmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Appointment
        fields = [
            "id",
            "tenant_id",
            "patient_id",
            "type",
            "status",
            "title",
            "description",
            "date_start",
            "date_end",
            "completed_at",
            "cancelled_at",
            "cancel_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AppointmentCreateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    type = serializers.ChoiceField(choices=AppointmentType.choices)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    date_start = serializers.DateTimeField()
    date_end = serializers.DateTimeField(required=False, allow_null=True, default=None)


class AppointmentCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
