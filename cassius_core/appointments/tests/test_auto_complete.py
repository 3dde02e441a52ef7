from datetime import timedelta
from uuid import uuid4

import pytest
from django.utils import timezone

from cassius_core.appointments.models import Appointment, AppointmentStatus, AppointmentType
from cassius_core.appointments.services import AppointmentService
from cassius_core.audit.models import AuditLog

pytestmark = pytest.mark.django_db


def _appt(tenant, *, date_end, status=AppointmentStatus.UPCOMING, title="Follow-up"):
    start = (date_end or timezone.now()) - timedelta(hours=1)
    return Appointment.objects.create(
        tenant_id=tenant.id,
        patient_id=uuid4(),
        type=AppointmentType.SUIVI,
        status=status,
        title=title,
        date_start=start,
        date_end=date_end,
    )


def test_past_due_upcoming_is_completed_future_is_not(tenant):
    now = timezone.now()
    yesterday = _appt(tenant, date_end=now - timedelta(days=1), title="yesterday")
    tomorrow = _appt(tenant, date_end=now + timedelta(days=1), title="tomorrow")

    ids = AppointmentService.auto_complete_past_due(now=now)

    assert ids == [yesterday.id]

    yesterday.refresh_from_db()
    tomorrow.refresh_from_db()
    assert yesterday.status == AppointmentStatus.COMPLETED
    assert yesterday.completed_at is not None
    assert tomorrow.status == AppointmentStatus.UPCOMING
    assert tomorrow.completed_at is None


def test_only_upcoming_with_end_date_are_touched(tenant):
    now = timezone.now()
    past = now - timedelta(hours=2)
    cancelled = _appt(tenant, date_end=past, status=AppointmentStatus.CANCELLED)
    open_ended = _appt(tenant, date_end=None)

    assert AppointmentService.auto_complete_past_due(now=now) == []

    cancelled.refresh_from_db()
    open_ended.refresh_from_db()
    assert cancelled.status == AppointmentStatus.CANCELLED
    assert open_ended.status == AppointmentStatus.UPCOMING


def test_rerun_is_a_no_op(tenant):
    now = timezone.now()
    _appt(tenant, date_end=now - timedelta(minutes=5))
    _appt(tenant, date_end=now - timedelta(minutes=10))

    assert len(AppointmentService.auto_complete_past_due(now=now)) == 2
    assert AppointmentService.auto_complete_past_due(now=now) == []


def test_end_exactly_now_is_not_past_due(tenant):
    now = timezone.now()
    appt = _appt(tenant, date_end=now)

    assert AppointmentService.auto_complete_past_due(now=now) == []
    appt.refresh_from_db()
    assert appt.status == AppointmentStatus.UPCOMING


def test_spans_all_tenants_and_writes_no_audit(tenant, other_tenant):
    now = timezone.now()
    a = _appt(tenant, date_end=now - timedelta(hours=1))
    b = _appt(other_tenant, date_end=now - timedelta(hours=1))

    ids = AppointmentService.auto_complete_past_due(now=now)

    assert set(ids) == {a.id, b.id}
    assert AuditLog.objects.count() == 0
