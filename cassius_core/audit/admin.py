# cassius_core/audit/admin.py
from django.contrib import admin

from cassius_core.audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = (
        "action",
        "entity_type",
        "entity_id",
        "tenant_id",
        "actor_user",
        "created_at",
    )
    list_filter = ("tenant_id", "action", "entity_type")
    search_fields = ("entity_type", "entity_id", "details")
    ordering = ("-created_at",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
