# cassius_core/iam/scope.py
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from rest_framework.exceptions import PermissionDenied, ValidationError

from cassius_core.iam.services.membership import is_user_member_of_tenant


@dataclass(frozen=True)
class Scope:
    tenant_id: UUID


HDR_TENANT = "X-Tenant-Id"

# Legacy variant sent by the first web client
HDR_TENANT_LEGACY = "X-Organisation-Id"

MISSING_SCOPE_MSG = "Missing scope header. Provide X-Tenant-Id."
INVALID_SCOPE_MSG = "Invalid scope header. Provide a valid UUID for X-Tenant-Id."


def _get_header(request, name: str) -> str | None:
    headers = getattr(request, "headers", None)
    if headers is None:
        return None
    return headers.get(name)


def resolve_scope_from_headers(request) -> Scope | None:
    """
    Reads the scope header. Returns None when absent,
    raises 400 ValidationError when it is not a UUID.
    """
    tenant_raw = _get_header(request, HDR_TENANT) or _get_header(request, HDR_TENANT_LEGACY)
    if not tenant_raw:
        return None

    try:
        tenant_id = UUID(str(tenant_raw))
    except ValueError:
        raise ValidationError({"detail": INVALID_SCOPE_MSG})
    return Scope(tenant_id=tenant_id)


def assert_user_membership(user, scope: Scope) -> None:
    """
    Ensures user is an active member of the organisation. Raises 403 if not.
    """
    if not user or not getattr(user, "is_authenticated", False):
        raise PermissionDenied("Authentication required to set scope.")

    if not is_user_member_of_tenant(user_id=user.id, tenant_id=scope.tenant_id):
        raise PermissionDenied("You do not have access to the selected organisation.")


def apply_scope_from_headers(request, *, user=None) -> Scope | None:
    """
    If the scope header is present: validate, verify membership and set
    request.tenant_id / request.scope. No header: do nothing.
    """
    scope = resolve_scope_from_headers(request)
    if scope is None:
        return None

    u = user or getattr(request, "user", None)
    assert_user_membership(u, scope)

    request.tenant_id = scope.tenant_id
    request.scope = scope
    return scope


def require_tenant_id(request) -> UUID:
    """
    Tenant for a DRF view: prefer what middleware/auth attached,
    otherwise resolve from headers. Missing scope -> 400.
    """
    tenant_id = getattr(request, "tenant_id", None)
    if tenant_id:
        return UUID(str(tenant_id))

    scope = apply_scope_from_headers(request)
    if scope is None:
        raise ValidationError({"detail": MISSING_SCOPE_MSG})
    return scope.tenant_id
