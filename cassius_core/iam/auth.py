# cassius_core/iam/auth.py

from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication

from cassius_core.iam.scope import apply_scope_from_headers


class ScopedJWTAuthentication(JWTAuthentication):
    """
    Authorization: Bearer <access>, then enforce the organisation scope header
    once the user is known (middleware runs before DRF authenticates JWT users).
    """

    def authenticate(self, request):
        auth_result = super().authenticate(request)
        if auth_result is None:
            return None

        user, token = auth_result
        apply_scope_from_headers(request, user=user)
        return user, token
