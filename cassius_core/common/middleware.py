from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from cassius_core.common.api.exceptions import build_error_envelope
from cassius_core.iam.scope import INVALID_SCOPE_MSG, MISSING_SCOPE_MSG


@dataclass(frozen=True)
class RequestScope:
    tenant_id: UUID


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


class TenantScopeMiddleware(MiddlewareMixin):
    """
    Enforces organisation (tenant) scope for API requests.

    Behavior:
      - Enforced for both /api/v1/* and /api/* (alias).
      - Auth token endpoints and docs/schema/admin never require scope.
      - Unauthenticated requests pass through (DRF answers 401).
      - Missing header -> 400, invalid UUID -> 400, not a member -> 403.
      - On success -> attaches request.scope and request.tenant_id.
    """

    TENANT_META_KEYS = ("HTTP_X_TENANT_ID", "HTTP_X_ORGANISATION_ID")

    ENFORCED_PREFIXES = ("/api/v1/", "/api/")

    PUBLIC_PATH_PREFIXES = (
        "/admin/",
        "/api/docs/",
        "/api/schema/",
    )

    AUTH_PATH_SUFFIXES = (
        "/auth/token/",
        "/auth/token/refresh/",
    )

    ALLOW_NO_SCOPE_EXACT_PATHS = (
        "/api/v1/",
        "/api/",
    )

    def _is_api_path(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.ENFORCED_PREFIXES)

    def _starts_with_any(self, path: str, prefixes: tuple[str, ...]) -> bool:
        return any(path.startswith(p) for p in prefixes)

    def _endswith_any(self, path: str, suffixes: tuple[str, ...]) -> bool:
        return any(path.endswith(s) for s in suffixes)

    def _get_meta_first(self, request, keys: tuple[str, ...]) -> Optional[str]:
        for k in keys:
            v = request.META.get(k)
            if v:
                return v
        return None

    def _json_error(self, request, *, status_code: int, code: str, message: str) -> JsonResponse:
        return JsonResponse(
            build_error_envelope(request=request, code=code, message=message, details=None),
            status=status_code,
        )

    def process_request(self, request):
        request.scope = None
        request.tenant_id = None

        path = getattr(request, "path", "") or ""

        if self._starts_with_any(path, self.PUBLIC_PATH_PREFIXES):
            return None

        if not self._is_api_path(path):
            return None

        if path in self.ALLOW_NO_SCOPE_EXACT_PATHS:
            return None

        if self._endswith_any(path, self.AUTH_PATH_SUFFIXES):
            return None

        # JWT users are only known inside DRF; the views re-check via require_tenant_id().
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        tenant_raw = self._get_meta_first(request, self.TENANT_META_KEYS)
        if not tenant_raw:
            return self._json_error(request, status_code=400, code="validation_error", message=MISSING_SCOPE_MSG)

        tenant_id = _parse_uuid(tenant_raw)
        if not tenant_id:
            return self._json_error(request, status_code=400, code="validation_error", message=INVALID_SCOPE_MSG)

        from cassius_core.iam.services.membership import is_user_member_of_tenant

        if not is_user_member_of_tenant(user_id=user.id, tenant_id=tenant_id):
            return self._json_error(
                request,
                status_code=403,
                code="permission_denied",
                message="You do not have access to the selected organisation.",
            )

        request.scope = RequestScope(tenant_id=tenant_id)
        request.tenant_id = tenant_id
        return None
