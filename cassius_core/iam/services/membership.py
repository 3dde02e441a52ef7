# cassius_core/iam/services/membership.py
from __future__ import annotations

from uuid import UUID

from cassius_core.iam.models import TenantMembership


def is_user_member_of_tenant(*, user_id: int, tenant_id: UUID) -> bool:
    """
    Validate user -> organisation membership.
    This is the single source of truth used by scope enforcement.
    """
    return TenantMembership.objects.filter(
        is_active=True,
        tenant_id=tenant_id,
        user_id=user_id,
    ).exists()
