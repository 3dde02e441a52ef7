# cassius_core/audit/selectors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from cassius_core.audit.models import AuditEntityType, AuditLog


@dataclass(frozen=True)
class AuditHistory:
    """
    One page of a record's history (newest first) plus the total available,
    so a consumer can render "N more entries" without another call.
    """
    entries: list[AuditLog]
    total: int

    @property
    def remaining(self) -> int:
        return max(self.total - len(self.entries), 0)

    @property
    def has_more(self) -> bool:
        return self.remaining > 0


def _scoped(tenant_id: UUID) -> QuerySet[AuditLog]:
    return AuditLog.objects.filter(tenant_id=tenant_id).select_related("actor_user")


def get_entity_history(
    *,
    tenant_id: UUID,
    entity_type: str,
    entity_id: Any,
    limit: int | None = None,
) -> AuditHistory:
    if entity_type not in AuditEntityType.values:
        raise ValidationError({"entity_type": f"Unknown entity type: {entity_type!r}."})
    if limit is not None and limit < 1:
        raise ValidationError({"limit": "limit must be a positive integer."})

    qs = _scoped(tenant_id).filter(entity_type=entity_type, entity_id=str(entity_id).strip()).order_by("-created_at")

    total = qs.count()
    page = qs[:limit] if limit is not None else qs
    return AuditHistory(entries=list(page), total=total)


def list_recent_activity(*, tenant_id: UUID, limit: int = 10) -> list[AuditLog]:
    return list(_scoped(tenant_id).order_by("-created_at")[:limit])


def list_audit_logs(
    *,
    tenant_id: UUID,
    entity_type: str | None = None,
    entity_id: str | None = None,
    action: str | None = None,
    actor_user_id: int | None = None,
) -> QuerySet[AuditLog]:
    qs = _scoped(tenant_id)

    if entity_type:
        qs = qs.filter(entity_type=entity_type)
    if entity_id:
        qs = qs.filter(entity_id=entity_id.strip())
    if action:
        qs = qs.filter(action=action)
    if actor_user_id is not None:
        qs = qs.filter(actor_user_id=actor_user_id)

    return qs.order_by("-created_at")
