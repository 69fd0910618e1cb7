import pytest
from fastapi import HTTPException

from models import User
from services.content_filter import filter_message
from services.limits import remaining
from services.permissions import (Capability, college_scope, ensure_in_scope, has_capability,
                                  require_capability)


def admin(role, college_code=None, status="active"):
    return User(username=f"{role}-user", password_hash="x", role=role, college_code=college_code, status=status)


def test_filter_masks_blocked_words_and_their_prefixes():
    assert filter_message("What the FUCK is this") == "What the **** is this"
    assert filter_message("shitty wifi again") == "****** wifi again"
    assert filter_message("Scunthorpe is a town") == "Scunthorpe is a town"
    assert filter_message("nothing to see") == "nothing to see"


def test_remaining_never_negative():
    assert remaining(0) == 5
    assert remaining(5) == 0
    assert remaining(7) == 0


@pytest.mark.parametrize("role,capability,allowed", [
    ("chief", Capability.manage_admins, True),
    ("chief", Capability.moderate_direct_messages, True),
    ("admin", Capability.manage_admins, False),
    ("admin", Capability.moderate_direct_messages, True),
    ("college", Capability.moderate_direct_messages, True),
    ("college", Capability.manage_colleges, False),
    ("normal", Capability.moderate_comments, True),
    ("normal", Capability.moderate_direct_messages, False),
])
def test_capability_table(role, capability, allowed):
    assert has_capability(admin(role, "UCLA123"), capability) is allowed


def test_inactive_admin_has_no_capabilities():
    user = admin("chief", status="inactive")
    assert not has_capability(user, Capability.moderate_confessions)
    with pytest.raises(HTTPException) as exc:
        require_capability(user, Capability.moderate_confessions)
    assert exc.value.status_code == 403


def test_unknown_role_has_no_capabilities():
    assert not has_capability(admin("overlord"), Capability.moderate_confessions)


def test_college_scope():
    assert college_scope(admin("chief")) is None
    assert college_scope(admin("admin")) is None
    assert college_scope(admin("college", "NYU456")) == "NYU456"
    # A college role without a college matches nothing
    assert college_scope(admin("normal")) == ""

    ensure_in_scope(admin("chief"), "UCLA123")
    ensure_in_scope(admin("college", "NYU456"), "NYU456")
    with pytest.raises(HTTPException) as exc:
        ensure_in_scope(admin("college", "NYU456"), "UCLA123")
    assert exc.value.status_code == 403
