import pytest

from happylunch.auth import Identity
from happylunch.permissions import authorize, can
from happylunch.responses import ApiError

ALICE = Identity(id=1, email="alice@example.com", role="user")
BOB = Identity(id=2, email="bob@example.com", role="user")
ADMIN = Identity(id=3, email="admin@example.com", role="admin")


def test_owner_or_admin():
    assert can(ALICE, "review:update", ALICE.id)
    assert not can(BOB, "review:update", ALICE.id)
    assert can(ADMIN, "review:delete", ALICE.id)
    assert not can(None, "review:view_unpublished", ALICE.id)


def test_admin_not_self():
    assert can(ADMIN, "account:block", ALICE.id)
    assert not can(ADMIN, "account:block", ADMIN.id)
    assert not can(ALICE, "account:delete", BOB.id)


def test_authorize_errors():
    with pytest.raises(ApiError) as excinfo:
        authorize(BOB, "review:delete", ALICE.id)
    assert excinfo.value.status_code == 403

    with pytest.raises(ApiError) as excinfo:
        authorize(ADMIN, "account:change_role", ADMIN.id)
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Cannot change your own role"

    authorize(ADMIN, "account:delete", BOB.id)
