# cassius_core/audit/presentation.py
from __future__ import annotations

from dataclasses import dataclass

from cassius_core.audit.models import AuditAction


@dataclass(frozen=True)
class ActionPresentation:
    label: str
    category: str  # success | info | danger | neutral | warning | accent


# One entry per AuditAction member; the test suite checks the mapping is exhaustive.
_ACTIONS: dict[AuditAction, ActionPresentation] = {
    AuditAction.CREATE: ActionPresentation(label="Created", category="success"),
    AuditAction.UPDATE: ActionPresentation(label="Updated", category="info"),
    AuditAction.DELETE: ActionPresentation(label="Deleted", category="danger"),
    AuditAction.VIEW: ActionPresentation(label="Viewed", category="neutral"),
    AuditAction.ARCHIVE: ActionPresentation(label="Archived", category="warning"),
    AuditAction.RESTORE: ActionPresentation(label="Restored", category="accent"),
}


def describe_action(action: str) -> ActionPresentation:
    """
    Display label + visual category for an audit action.
    An unknown value is schema drift and raises ValueError.
    """
    return _ACTIONS[AuditAction(action)]


def covered_actions() -> frozenset[str]:
    return frozenset(a.value for a in _ACTIONS)
