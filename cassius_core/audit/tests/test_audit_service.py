from datetime import datetime, timedelta
from uuid import uuid4

import pytest
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils import timezone

from cassius_core.appointments.models import Appointment, AppointmentType
from cassius_core.appointments.services import AppointmentService
from cassius_core.audit.models import ENTITY_ID_MAX_LENGTH, UNKNOWN_ACTOR_LABEL, AuditAction, AuditEntityType, AuditLog
from cassius_core.audit.selectors import get_entity_history, list_recent_activity
from cassius_core.audit.services import AuditService
from cassius_core.common.exceptions import StorageError

pytestmark = pytest.mark.django_db


def _record(tenant, patient_id, action=AuditAction.UPDATE, **kwargs):
    return AuditService.record(
        tenant_id=tenant.id,
        entity_type=AuditEntityType.PATIENT,
        entity_id=patient_id,
        action=action,
        **kwargs,
    )


def _spread_created_at(entries):
    """Give entries distinct timestamps, oldest first."""
    base = timezone.now() - timedelta(hours=1)
    for i, entry in enumerate(entries):
        AuditLog.objects.filter(id=entry.id).update(created_at=base + timedelta(minutes=i))


def test_record_then_history_returns_entry(tenant, user):
    patient_id = uuid4()

    entry = _record(tenant, patient_id, action=AuditAction.CREATE, actor_user_id=user.id, details="Patient created")

    history = get_entity_history(
        tenant_id=tenant.id,
        entity_type=AuditEntityType.PATIENT,
        entity_id=patient_id,
    )
    assert history.total == 1
    assert [e.id for e in history.entries] == [entry.id]
    assert history.entries[0].details == "Patient created"
    assert history.has_more is False


def test_history_is_newest_first(tenant):
    patient_id = uuid4()
    entries = [_record(tenant, patient_id) for _ in range(3)]
    _spread_created_at(entries)

    history = get_entity_history(
        tenant_id=tenant.id,
        entity_type=AuditEntityType.PATIENT,
        entity_id=patient_id,
    )
    created = [e.created_at for e in history.entries]
    assert created == sorted(created, reverse=True)
    assert history.entries[0].id == entries[-1].id


def test_limit_returns_newest_and_remaining(tenant):
    patient_id = uuid4()
    entries = [_record(tenant, patient_id) for _ in range(5)]
    _spread_created_at(entries)

    history = get_entity_history(
        tenant_id=tenant.id,
        entity_type=AuditEntityType.PATIENT,
        entity_id=patient_id,
        limit=2,
    )
    assert [e.id for e in history.entries] == [entries[4].id, entries[3].id]
    assert history.total == 5
    assert history.remaining == 3
    assert history.has_more is True


def test_history_is_tenant_scoped(tenant, other_tenant):
    patient_id = uuid4()
    _record(tenant, patient_id)
    _record(other_tenant, patient_id)

    history = get_entity_history(
        tenant_id=tenant.id,
        entity_type=AuditEntityType.PATIENT,
        entity_id=patient_id,
    )
    assert history.total == 1
    assert history.entries[0].tenant_id == tenant.id


def test_unknown_action_raises_and_persists_nothing(tenant):
    with pytest.raises(ValidationError) as excinfo:
        _record(tenant, uuid4(), action="EXPLODE")

    assert "action" in excinfo.value.message_dict
    assert AuditLog.objects.count() == 0


def test_unknown_entity_type_raises_and_persists_nothing(tenant):
    with pytest.raises(ValidationError) as excinfo:
        AuditService.record(
            tenant_id=tenant.id,
            entity_type="SPACESHIP",
            entity_id=uuid4(),
            action=AuditAction.CREATE,
        )

    assert "entity_type" in excinfo.value.message_dict
    assert AuditLog.objects.count() == 0


def test_history_rejects_unknown_entity_type(tenant):
    with pytest.raises(ValidationError):
        get_entity_history(tenant_id=tenant.id, entity_type="SPACESHIP", entity_id="x")


def test_database_failure_surfaces_as_storage_error(tenant, monkeypatch):
    def boom(**kwargs):
        raise DatabaseError("disk full")

    monkeypatch.setattr(AuditLog.objects, "create", boom)

    with pytest.raises(StorageError) as excinfo:
        _record(tenant, uuid4())

    assert isinstance(excinfo.value.__cause__, DatabaseError)


def test_audit_failure_rolls_back_business_write(tenant, user, monkeypatch):
    def boom(**kwargs):
        raise DatabaseError("connection lost")

    monkeypatch.setattr(AuditLog.objects, "create", boom)

    with pytest.raises(StorageError):
        AppointmentService.create_appointment(
            tenant_id=tenant.id,
            actor_user_id=user.id,
            patient_id=uuid4(),
            type=AppointmentType.CONSULTATION,
            title="First consultation",
            date_start=timezone.now() + timedelta(days=1),
        )

    assert Appointment.objects.count() == 0


def test_actor_name_uses_full_name_or_fallback(tenant, user):
    with_actor = _record(tenant, uuid4(), actor_user_id=user.id)
    without_actor = _record(tenant, uuid4())

    assert with_actor.actor_display_name == "Alice Martin"
    assert without_actor.actor_display_name == UNKNOWN_ACTOR_LABEL


def test_entries_are_append_only(tenant):
    entry = _record(tenant, uuid4())

    entry.details = "rewritten"
    with pytest.raises(ValidationError):
        entry.save()

    with pytest.raises(ValidationError):
        entry.delete()

    assert AuditLog.objects.get(id=entry.id).details is None


def test_record_change_keeps_only_changed_keys(tenant):
    entry = AuditService.record_change(
        tenant_id=tenant.id,
        entity_type=AuditEntityType.APPOINTMENT,
        entity_id=uuid4(),
        actor_user_id=None,
        before={"status": "UPCOMING", "title": "Check-up"},
        after={"status": "CANCELLED", "title": "Check-up"},
    )

    assert entry.action == AuditAction.UPDATE
    assert entry.metadata == {
        "before": {"status": "UPCOMING"},
        "after": {"status": "CANCELLED"},
        "changed": ["status"],
    }


def test_recent_activity_spans_entities(tenant):
    entries = [_record(tenant, uuid4()) for _ in range(4)]
    _spread_created_at(entries)

    recent = list_recent_activity(tenant_id=tenant.id, limit=3)
    assert [e.id for e in recent] == [entries[3].id, entries[2].id, entries[1].id]


def test_metadata_with_uuids_and_datetimes_is_stored_as_strings(tenant):
    patient_id = uuid4()
    at = datetime(2026, 1, 1, 9, 30)

    entry = _record(tenant, uuid4(), metadata={"patient_id": patient_id, "at": at})

    stored = AuditLog.objects.get(id=entry.id).metadata
    assert stored == {"patient_id": str(patient_id), "at": "2026-01-01T09:30:00"}


def test_unserializable_metadata_raises_and_persists_nothing(tenant):
    with pytest.raises(ValidationError) as excinfo:
        _record(tenant, uuid4(), metadata={"tags": {"a", "b"}})

    assert "metadata" in excinfo.value.message_dict
    assert AuditLog.objects.count() == 0


def test_overlong_entity_id_raises_validation_error(tenant):
    with pytest.raises(ValidationError) as excinfo:
        _record(tenant, "x" * (ENTITY_ID_MAX_LENGTH + 1))

    assert "entity_id" in excinfo.value.message_dict
    assert AuditLog.objects.count() == 0


def test_padded_entity_id_is_found_again(tenant):
    _record(tenant, "  p1 ")

    history = get_entity_history(
        tenant_id=tenant.id,
        entity_type=AuditEntityType.PATIENT,
        entity_id=" p1",
    )
    assert history.total == 1
    assert history.entries[0].entity_id == "p1"
