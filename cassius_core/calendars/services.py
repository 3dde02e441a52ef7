# cassius_core/calendars/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from django.db import transaction
from django.db.models import F
from django.utils.timezone import now as tz_now

from cassius_core.appointments.models import AppointmentStatus
from cassius_core.audit.models import AuditEntityType
from cassius_core.audit.services import AuditService
from cassius_core.calendars.models import AppointmentExternalLink, CalendarIntegration, SyncStatus
from cassius_core.calendars.providers import CalendarProvider, RemoteEvent, SyncTokenExpired, get_provider

logger = logging.getLogger(__name__)

REMOTE_CANCEL_REASON = "Cancelled in external calendar"


@dataclass
class SyncResult:
    integrations: int = 0
    failed: int = 0
    updated: int = 0
    cancelled: int = 0
    unchanged: int = 0
    unmatched: int = 0

    def merge(self, other: "SyncResult") -> None:
        self.integrations += other.integrations
        self.failed += other.failed
        self.updated += other.updated
        self.cancelled += other.cancelled
        self.unchanged += other.unchanged
        self.unmatched += other.unmatched


class CalendarSyncService:
    """
    Pull-only reconciliation of external calendar changes into appointments.

    Remote events without a local link are counted and ignored; no appointment
    is ever created from the remote side.
    """

    @staticmethod
    def _apply_event(*, integration: CalendarIntegration, event: RemoteEvent, result: SyncResult) -> None:
        link = (
            AppointmentExternalLink.objects.select_related("appointment")
            .select_for_update()
            .filter(
                integration=integration,
                external_event_id=event.external_event_id,
                appointment__tenant_id=integration.tenant_id,
            )
            .first()
        )
        if link is None:
            result.unmatched += 1
            return

        if event.etag and link.etag == event.etag and link.sync_status == SyncStatus.SYNCED:
            result.unchanged += 1
            return

        appt = link.appointment
        before = appt.audit_snapshot()
        changed_fields: list[str] = []

        if event.is_cancelled:
            if appt.status == AppointmentStatus.UPCOMING:
                appt.status = AppointmentStatus.CANCELLED
                appt.cancelled_at = tz_now()
                appt.cancel_reason = REMOTE_CANCEL_REASON
                changed_fields = ["status", "cancelled_at", "cancel_reason"]
        else:
            if event.start is not None and event.start != appt.date_start:
                appt.date_start = event.start
                changed_fields.append("date_start")
            if event.end is not None and event.end != appt.date_end:
                appt.date_end = event.end
                changed_fields.append("date_end")

        if changed_fields:
            appt.save(update_fields=[*changed_fields, "updated_at"])
            AuditService.record_change(
                tenant_id=appt.tenant_id,
                entity_type=AuditEntityType.APPOINTMENT,
                entity_id=appt.id,
                actor_user_id=None,
                before=before,
                after=appt.audit_snapshot(),
                details=f"Synced from {integration.provider} calendar",
            )
            if event.is_cancelled:
                result.cancelled += 1
            else:
                result.updated += 1
        else:
            result.unchanged += 1

        link.etag = event.etag or link.etag
        link.sync_status = SyncStatus.SYNCED
        link.last_synced_at = tz_now()
        link.last_error = ""
        link.save(update_fields=["etag", "sync_status", "last_synced_at", "last_error", "updated_at"])

    @staticmethod
    def sync_integration(
        integration: CalendarIntegration,
        *,
        provider: Optional[CalendarProvider] = None,
    ) -> SyncResult:
        provider = provider or get_provider(integration.provider)
        result = SyncResult(integrations=1)

        try:
            changes = provider.fetch_changes(integration, sync_token=integration.sync_token)
        except SyncTokenExpired:
            logger.warning("Sync token expired for calendar integration %s; running full resync", integration.id)
            changes = provider.fetch_changes(integration, sync_token="")

        with transaction.atomic():
            for event in changes.events:
                CalendarSyncService._apply_event(integration=integration, event=event, result=result)

            if changes.next_sync_token:
                integration.sync_token = changes.next_sync_token
            integration.last_sync_at = tz_now()
            integration.sync_error_count = 0
            integration.last_sync_error = ""
            integration.save(
                update_fields=["sync_token", "last_sync_at", "sync_error_count", "last_sync_error", "updated_at"]
            )

        return result

    @staticmethod
    def _record_failure(integration: CalendarIntegration, exc: Exception) -> None:
        CalendarIntegration.objects.filter(id=integration.id).update(
            sync_error_count=F("sync_error_count") + 1,
            last_sync_error=str(exc)[:2000],
            updated_at=tz_now(),
        )

    @staticmethod
    def sync_all(
        *,
        provider_factory: Optional[Callable[[CalendarIntegration], CalendarProvider]] = None,
    ) -> SyncResult:
        """
        Sync every enabled integration. One failing integration never stops the others;
        its error is stored on the row and logged.
        """
        total = SyncResult()
        for integration in CalendarIntegration.objects.filter(is_enabled=True).order_by("created_at"):
            provider = provider_factory(integration) if provider_factory else None
            try:
                total.merge(CalendarSyncService.sync_integration(integration, provider=provider))
            except Exception as exc:
                logger.error("Calendar sync failed for integration %s: %s", integration.id, exc)
                CalendarSyncService._record_failure(integration, exc)
                total.integrations += 1
                total.failed += 1

        logger.info(
            "Calendar sync: %d integration(s), %d failed, %d updated, %d cancelled, %d unchanged, %d unmatched",
            total.integrations,
            total.failed,
            total.updated,
            total.cancelled,
            total.unchanged,
            total.unmatched,
        )
        return total
