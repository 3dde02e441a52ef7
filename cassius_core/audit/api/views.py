# cassius_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from cassius_core.audit.api.serializers import AuditHistorySerializer, AuditLogSerializer
from cassius_core.audit.models import AuditLog
from cassius_core.audit.selectors import get_entity_history, list_audit_logs, list_recent_activity
from cassius_core.common.api.pagination import clamp_limit
from cassius_core.iam.scope import require_tenant_id

HISTORY_DEFAULT_LIMIT = 50
LIST_DEFAULT_LIMIT = 200
MAX_LIMIT = 500

LIMIT_PARAM = OpenApiParameter(
    name="limit",
    type=OpenApiTypes.INT,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Max records to return (max 500).",
)


class AuditHistoryView(APIView):
    """
    History of one record, newest first, with the total so the client can show "N more".
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Audit"], responses={200: AuditHistorySerializer}, parameters=[LIMIT_PARAM])
    def get(self, request, entity_type: str, entity_id: str):
        tenant_id = require_tenant_id(request)
        limit = clamp_limit(request.query_params.get("limit"), default=HISTORY_DEFAULT_LIMIT, maximum=MAX_LIMIT)

        history = get_entity_history(
            tenant_id=tenant_id,
            entity_type=entity_type.upper(),
            entity_id=entity_id,
            limit=limit,
        )
        return Response(AuditHistorySerializer(history).data, status=status.HTTP_200_OK)


class RecentActivityView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Audit"], responses={200: AuditLogSerializer(many=True)}, parameters=[LIMIT_PARAM])
    def get(self, request):
        tenant_id = require_tenant_id(request)
        limit = clamp_limit(request.query_params.get("limit"), default=10, maximum=MAX_LIMIT)

        entries = list_recent_activity(tenant_id=tenant_id, limit=limit)
        return Response(AuditLogSerializer(entries, many=True).data, status=status.HTTP_200_OK)


class AuditLogViewSet(viewsets.GenericViewSet):
    """
    List audit events for the organisation (filterable).
    """
    permission_classes = [IsAuthenticated]

    serializer_class = AuditLogSerializer
    queryset = AuditLog.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditLogSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="entity_type",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity type (e.g. PATIENT, APPOINTMENT).",
            ),
            OpenApiParameter(
                name="entity_id",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity id.",
            ),
            OpenApiParameter(
                name="action",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by action (CREATE, UPDATE, DELETE, VIEW, ARCHIVE, RESTORE).",
            ),
            OpenApiParameter(
                name="actor_user_id",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by actor user id (int).",
            ),
            LIMIT_PARAM,
        ],
    )
    def list(self, request):
        tenant_id = require_tenant_id(request)

        actor_user_raw = request.query_params.get("actor_user_id")
        actor_user_id = None
        if actor_user_raw not in (None, ""):
            try:
                actor_user_id = int(actor_user_raw)
            except ValueError:
                raise DRFValidationError({"detail": "Invalid actor_user_id (int expected)"})

        qs = list_audit_logs(
            tenant_id=tenant_id,
            entity_type=(request.query_params.get("entity_type") or "").upper() or None,
            entity_id=request.query_params.get("entity_id") or None,
            action=(request.query_params.get("action") or "").upper() or None,
            actor_user_id=actor_user_id,
        )

        # timeline endpoints can get huge
        limit = clamp_limit(request.query_params.get("limit"), default=LIST_DEFAULT_LIMIT, maximum=MAX_LIMIT)
        return Response(AuditLogSerializer(qs[:limit], many=True).data, status=status.HTTP_200_OK)
