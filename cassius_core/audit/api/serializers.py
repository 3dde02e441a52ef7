# cassius_core/audit/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cassius_core.audit.models import AuditLog
from cassius_core.audit.presentation import describe_action


class AuditLogSerializer(serializers.ModelSerializer):
    actor_user_id = serializers.IntegerField(read_only=True, allow_null=True)
    actor_name = serializers.CharField(source="actor_display_name", read_only=True)
    action_label = serializers.SerializerMethodField()
    action_category = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "entity_type",
            "entity_id",
            "action",
            "action_label",
            "action_category",
            "details",
            "metadata",
            "actor_user_id",
            "actor_name",
            "created_at",
        ]
        read_only_fields = fields

    def get_action_label(self, obj: AuditLog) -> str:
        return describe_action(obj.action).label

    def get_action_category(self, obj: AuditLog) -> str:
        return describe_action(obj.action).category


class AuditHistorySerializer(serializers.Serializer):
    count = serializers.IntegerField(source="total")
    remaining = serializers.IntegerField()
    results = AuditLogSerializer(source="entries", many=True)
