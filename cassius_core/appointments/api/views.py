# cassius_core/appointments/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError as DRFValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from cassius_core.appointments.api.serializers import (
    AppointmentCancelSerializer,
    AppointmentCreateSerializer,
    AppointmentSerializer,
)
from cassius_core.appointments.filters import AppointmentFilter
from cassius_core.appointments.models import Appointment
from cassius_core.appointments.selectors import AppointmentSelector
from cassius_core.appointments.services import AppointmentService
from cassius_core.audit.models import AuditAction, AuditEntityType
from cassius_core.audit.services import AuditService
from cassius_core.common.api.pagination import paginate
from cassius_core.iam.scope import require_tenant_id


def _actor_id(request) -> int | None:
    user = getattr(request, "user", None)
    return user.id if user and user.is_authenticated else None


class AppointmentViewSet(viewsets.ViewSet):
    """
    Thin API layer:
    - scope parsing
    - selectors for reads, services for writes
    - every access/mutation leaves an audit entry
    """

    permission_classes = [IsAuthenticated]

    serializer_class = AppointmentSerializer
    queryset = Appointment.objects.none()

    def _get_object(self, request, pk):
        tenant_id = require_tenant_id(request)
        try:
            return AppointmentSelector.get_appointment(tenant_id=tenant_id, appointment_id=pk)
        except AppointmentSelector.NotFound:
            raise NotFound("Appointment not found in this organisation.")

    def list(self, request):
        tenant_id = require_tenant_id(request)

        filterset = AppointmentFilter(
            request.query_params,
            queryset=AppointmentSelector.list_appointments(tenant_id=tenant_id),
        )
        if not filterset.is_valid():
            raise DRFValidationError(filterset.errors)

        return paginate(request, filterset.qs, AppointmentSerializer)

    def retrieve(self, request, pk=None):
        appt = self._get_object(request, pk)

        AuditService.record(
            tenant_id=appt.tenant_id,
            entity_type=AuditEntityType.APPOINTMENT,
            entity_id=appt.id,
            action=AuditAction.VIEW,
            actor_user_id=_actor_id(request),
        )
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)

    def create(self, request):
        tenant_id = require_tenant_id(request)

        ser = AppointmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        appt = AppointmentService.create_appointment(
            tenant_id=tenant_id,
            actor_user_id=_actor_id(request),
            **ser.validated_data,
        )
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        appt = self._get_object(request, pk)

        ser = AppointmentCancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        appt = AppointmentService.cancel_appointment(
            tenant_id=appt.tenant_id,
            appointment_id=appt.id,
            actor_user_id=_actor_id(request),
            reason=ser.validated_data.get("reason"),
        )
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_200_OK)
