# cassius_core/api/urls.py
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from cassius_core.appointments.api.views import AppointmentViewSet
from cassius_core.audit.api.views import AuditHistoryView, AuditLogViewSet, RecentActivityView

router = DefaultRouter()

router.register(r"appointments", AppointmentViewSet, basename="appointments")
router.register(r"audit/events", AuditLogViewSet, basename="audit-events")

urlpatterns = [
    # Auth (JWT pair; tenant scope comes from X-Tenant-Id on every other call)
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    # Audit history
    path("audit/recent/", RecentActivityView.as_view(), name="audit-recent"),
    path(
        "audit/<str:entity_type>/<str:entity_id>/",
        AuditHistoryView.as_view(),
        name="audit-entity-history",
    ),

    path("", include(router.urls)),
]
