# cassius_core/audit/services.py
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import DatabaseError, transaction
from django.utils.timezone import now

from cassius_core.audit.models import ENTITY_ID_MAX_LENGTH, AuditAction, AuditEntityType, AuditLog
from cassius_core.common.exceptions import StorageError

logger = logging.getLogger(__name__)


def _validate(*, entity_type: str, entity_id: Any, action: str, metadata: Any) -> dict[str, str]:
    errors: dict[str, str] = {}
    if entity_type not in AuditEntityType.values:
        errors["entity_type"] = f"Unknown entity type: {entity_type!r}."
    if action not in AuditAction.values:
        errors["action"] = f"Unknown audit action: {action!r}."
    if entity_id is None or not str(entity_id).strip():
        errors["entity_id"] = "entity_id is required."
    elif len(str(entity_id).strip()) > ENTITY_ID_MAX_LENGTH:
        errors["entity_id"] = f"entity_id must be at most {ENTITY_ID_MAX_LENGTH} characters."
    if metadata is not None:
        if not isinstance(metadata, Mapping):
            errors["metadata"] = "metadata must be a mapping."
        else:
            try:
                json.dumps(metadata, cls=DjangoJSONEncoder)
            except (TypeError, ValueError) as exc:
                errors["metadata"] = f"metadata must be JSON-serializable: {exc}"
    return errors


class AuditService:
    """
    Central audit writer.

    Notes:
    - Entries are append-only; nothing here updates or deletes.
    - The insert runs in transaction.atomic(). Inside a caller's transaction it is a
      savepoint, so a StorageError raised here rolls back the caller's business write too.
    """

    @staticmethod
    def record(
        *,
        tenant_id: UUID,
        entity_type: str,
        entity_id: Any,
        action: str,
        actor_user_id: int | None = None,
        details: Optional[str] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLog:
        errors = _validate(entity_type=entity_type, entity_id=entity_id, action=action, metadata=metadata)
        if errors:
            raise ValidationError(errors)

        try:
            with transaction.atomic():
                entry = AuditLog.objects.create(
                    tenant_id=tenant_id,
                    entity_type=str(entity_type),
                    entity_id=str(entity_id).strip(),
                    action=str(action),
                    actor_user_id=actor_user_id,
                    details=details or None,
                    metadata=dict(metadata) if metadata is not None else None,
                    created_at=now(),
                )
        except DatabaseError as exc:
            logger.error(
                "Audit write failed for %s:%s (%s): %s",
                entity_type,
                entity_id,
                action,
                exc,
            )
            raise StorageError(f"Could not persist audit entry: {exc}") from exc

        logger.debug("Audit %s %s:%s by user=%s", action, entity_type, entity_id, actor_user_id)
        return entry

    @staticmethod
    def record_change(
        *,
        tenant_id: UUID,
        entity_type: str,
        entity_id: Any,
        actor_user_id: int | None,
        before: Mapping[str, Any],
        after: Mapping[str, Any],
        details: Optional[str] = None,
        action: str = AuditAction.UPDATE,
    ) -> AuditLog:
        """
        UPDATE entry whose metadata captures the changed keys only:
        {"before": {...}, "after": {...}, "changed": [...]}
        """
        changed = sorted(k for k in set(before) | set(after) if before.get(k) != after.get(k))
        metadata = {
            "before": {k: before.get(k) for k in changed},
            "after": {k: after.get(k) for k in changed},
            "changed": changed,
        }
        return AuditService.record(
            tenant_id=tenant_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor_user_id=actor_user_id,
            details=details,
            metadata=metadata,
        )
