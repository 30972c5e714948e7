from datetime import timedelta

import pytest

from labmgr.core.credentials import CredentialStore, normalize_username
from labmgr.core.sessions import SessionStore, _utcnow
from labmgr.models.session import UserSession


@pytest.fixture()
def user(db):
    return CredentialStore().create(
        db,
        username="  Alice ",
        password="00.11",
        first_name="Alice",
        last_name="Tester",
        email="alice@lab.example.org",
    )


@pytest.fixture()
def store() -> SessionStore:
    return SessionStore(timedelta(minutes=30))


def _expire(db, sid: str) -> None:
    db.query(UserSession).filter(UserSession.sid == sid).update(
        {UserSession.expires_at: _utcnow() - timedelta(seconds=1)}
    )
    db.commit()


def test_credential_store_normalises_usernames(db, user) -> None:
    store = CredentialStore()

    assert user.username == "alice"
    assert normalize_username(" BoB ") == "bob"
    assert store.get_by_username(db, "ALICE").id == user.id


def test_create_returns_opaque_token_and_load_finds_it(db, user, store) -> None:
    sid = store.create(db, user.id, {"ip": "127.0.0.1"})

    row = store.load(db, sid)

    assert len(sid) >= 32
    assert row is not None
    assert row.user_id == user.id
    assert row.data == {"ip": "127.0.0.1"}


def test_each_login_gets_a_fresh_token(db, user, store) -> None:
    assert store.create(db, user.id) != store.create(db, user.id)


def test_load_pushes_expiry_forward(db, user, store) -> None:
    sid = store.create(db, user.id)
    db.query(UserSession).filter(UserSession.sid == sid).update(
        {UserSession.expires_at: _utcnow() + timedelta(minutes=1)}
    )
    db.commit()

    row = store.load(db, sid)

    assert row.expires_at > _utcnow() + timedelta(minutes=25)


def test_expired_session_is_not_loaded(db, user, store) -> None:
    sid = store.create(db, user.id)
    _expire(db, sid)

    assert store.load(db, sid) is None


def test_unknown_token_is_not_loaded(db, store) -> None:
    assert store.load(db, "does-not-exist") is None


def test_destroy_removes_only_that_session(db, user, store) -> None:
    first = store.create(db, user.id)
    second = store.create(db, user.id)

    store.destroy(db, first)

    assert store.load(db, first) is None
    assert store.load(db, second) is not None


def test_destroy_for_user_removes_every_session(db, user, store) -> None:
    store.create(db, user.id)
    store.create(db, user.id)

    assert store.destroy_for_user(db, user.id) == 2
    assert db.query(UserSession).count() == 0


def test_purge_expired_keeps_live_sessions(db, user, store) -> None:
    live = store.create(db, user.id)
    stale = store.create(db, user.id)
    _expire(db, stale)

    assert store.purge_expired(db) == 1
    assert store.load(db, live) is not None
    assert db.query(UserSession).filter(UserSession.sid == stale).first() is None
