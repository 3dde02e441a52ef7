from datetime import timedelta
from uuid import uuid4

import pytest
from django.utils import timezone

from cassius_core.appointments.models import Appointment, AppointmentStatus
from cassius_core.audit.models import AuditAction, AuditEntityType, AuditLog
from cassius_core.conftest import scope_headers

pytestmark = pytest.mark.django_db


def _create(api_client, tenant, **overrides):
    start = timezone.now() + timedelta(days=2)
    payload = {
        "patient_id": str(uuid4()),
        "type": "CHIRURGIE",
        "title": "Implant placement 36",
        "date_start": start.isoformat(),
        "date_end": (start + timedelta(hours=1)).isoformat(),
        **overrides,
    }
    return api_client.post("/api/v1/appointments/", payload, format="json", **scope_headers(tenant))


def _audit_for(appt_id):
    return AuditLog.objects.filter(entity_type=AuditEntityType.APPOINTMENT, entity_id=str(appt_id))


def test_create_records_audit_entry(api_client, tenant, user):
    resp = _create(api_client, tenant)

    assert resp.status_code == 201
    assert resp.data["status"] == "UPCOMING"

    entries = list(_audit_for(resp.data["id"]))
    assert len(entries) == 1
    assert entries[0].action == AuditAction.CREATE
    assert entries[0].actor_user_id == user.id
    assert entries[0].tenant_id == tenant.id


def test_create_rejects_end_before_start(api_client, tenant):
    start = timezone.now() + timedelta(days=1)
    resp = _create(
        api_client,
        tenant,
        date_start=start.isoformat(),
        date_end=(start - timedelta(hours=1)).isoformat(),
    )

    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "validation_error"
    assert Appointment.objects.count() == 0
    assert AuditLog.objects.count() == 0


def test_retrieve_records_view(api_client, tenant):
    appt_id = _create(api_client, tenant).data["id"]

    resp = api_client.get(f"/api/v1/appointments/{appt_id}/", **scope_headers(tenant))

    assert resp.status_code == 200
    assert _audit_for(appt_id).filter(action=AuditAction.VIEW).count() == 1


def test_retrieve_other_tenant_is_404(api_client, tenant, other_tenant, user):
    from cassius_core.iam.models import TenantMembership

    TenantMembership.objects.create(tenant=other_tenant, user=user)
    appt_id = _create(api_client, tenant).data["id"]

    resp = api_client.get(f"/api/v1/appointments/{appt_id}/", **scope_headers(other_tenant))

    assert resp.status_code == 404
    assert resp.data["error"]["code"] == "not_found"


def test_cancel_records_change_and_blocks_second_cancel(api_client, tenant):
    appt_id = _create(api_client, tenant).data["id"]
    url = f"/api/v1/appointments/{appt_id}/cancel/"

    resp = api_client.post(url, {"reason": "Patient unwell"}, format="json", **scope_headers(tenant))
    assert resp.status_code == 200
    assert resp.data["status"] == "CANCELLED"

    update = _audit_for(appt_id).get(action=AuditAction.UPDATE)
    assert "status" in update.metadata["changed"]
    assert update.metadata["before"]["status"] == AppointmentStatus.UPCOMING
    assert update.metadata["after"]["status"] == AppointmentStatus.CANCELLED

    resp = api_client.post(url, {}, format="json", **scope_headers(tenant))
    assert resp.status_code == 409
    assert resp.data["error"]["code"] == "conflict"


def test_list_filters_by_status(api_client, tenant):
    keep_id = _create(api_client, tenant).data["id"]
    cancel_id = _create(api_client, tenant).data["id"]
    api_client.post(f"/api/v1/appointments/{cancel_id}/cancel/", {}, format="json", **scope_headers(tenant))

    resp = api_client.get("/api/v1/appointments/?status=UPCOMING", **scope_headers(tenant))

    assert resp.status_code == 200
    assert resp.data["count"] == 1
    assert resp.data["results"][0]["id"] == keep_id
