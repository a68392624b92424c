"""Persistence failures surface as StoreUnavailableError and leave the session usable."""

import pytest

from capsule.errors import StoreUnavailableError
from capsule.models.roles import Role
from capsule.services.membership_store import MembershipStore

from conftest import OWNER, database_locked


def test_store_failure_rolls_back_and_raises(session, album, monkeypatch):
    album_id = album.id
    store = MembershipStore(session)

    rollbacks = []
    real_rollback = session.rollback

    def counting_rollback():
        rollbacks.append(True)
        real_rollback()

    monkeypatch.setattr(session, "rollback", counting_rollback)
    monkeypatch.setattr(session, "exec", database_locked)

    with pytest.raises(StoreUnavailableError) as exc_info:
        store.get_role(album_id, OWNER)

    err = exc_info.value
    assert err.code == "store_unavailable"
    assert err.details["operation"] == "get_role"
    assert "database is locked" in err.details["cause"]
    assert rollbacks == [True]

    monkeypatch.undo()
    assert store.get_role(album_id, OWNER) == Role.OWNER


def test_failed_write_is_not_retried(session, album, monkeypatch):
    album_id = album.id
    store = MembershipStore(session)

    calls = []

    def locked_connection(*args, **kwargs):
        calls.append(True)
        database_locked()

    monkeypatch.setattr(session, "connection", locked_connection)
    with pytest.raises(StoreUnavailableError):
        store.create(album_id, "usr_u2", Role.VIEWER)
    assert len(calls) == 1

    monkeypatch.undo()
    assert not store.is_member(album_id, "usr_u2")
