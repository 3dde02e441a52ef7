import pytest

from cassius_core.audit.models import AuditAction
from cassius_core.audit.presentation import covered_actions, describe_action


def test_every_action_has_a_presentation():
    assert covered_actions() == set(AuditAction.values)


@pytest.mark.parametrize("action", AuditAction.values)
def test_presentation_has_label_and_category(action):
    p = describe_action(action)
    assert p.label
    assert p.category in {"success", "info", "danger", "neutral", "warning", "accent"}


def test_known_labels():
    assert describe_action("CREATE").label == "Created"
    assert describe_action(AuditAction.DELETE).category == "danger"


def test_unknown_action_is_rejected():
    with pytest.raises(ValueError):
        describe_action("EXPLODE")
