# cassius_core/iam/models.py
import uuid
from django.conf import settings
from django.db import models
from cassius_core.tenants.models import Tenant


class MembershipRole(models.TextChoices):
    ADMIN = "ADMIN", "Administrator"
    CHIRURGIEN = "CHIRURGIEN", "Surgeon"
    ASSISTANT = "ASSISTANT", "Assistant"


class TenantMembership(models.Model):
    """
    Assigns a user to an organisation with a role.
    This is the enforcement point for organisation-level access.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant = models.ForeignKey(Tenant, on_delete=models.PROTECT, related_name="memberships")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="tenant_memberships")
    role = models.CharField(max_length=32, choices=MembershipRole.choices, default=MembershipRole.ASSISTANT)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_tenant_membership"
        constraints = [
            models.UniqueConstraint(fields=["tenant", "user"], name="uq_tenant_user_membership"),
        ]
        indexes = [
            models.Index(fields=["tenant", "is_active"], name="iam_member_tenant_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id}@{self.tenant_id} ({self.role})"
