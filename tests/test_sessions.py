"""Session Store and cookie/token resolution."""

import logging

import pytest
from sqlalchemy import select

from livetimers.crud import sessions as sessions_crud
from livetimers.crud.sessions import create_session, delete_session, find_session_user_id, get_session
from livetimers.models.login_session import LoginSession
from livetimers.services.auth import is_well_formed_user_id, resolve_user
from livetimers.services.timecalc import utcnow_iso


def test_session_id_and_token_resolve_to_same_user(db_session, make_user):
    user_id = make_user("ada")
    credentials = create_session(db_session, user_id)

    assert credentials.session_id != credentials.token
    by_cookie = resolve_user(db_session, session_id=credentials.session_id)
    by_token = resolve_user(db_session, token=credentials.token)
    assert by_cookie is not None and by_token is not None
    assert by_cookie.id == by_token.id == user_id
    assert by_cookie.username == "ada"


def test_sessions_for_the_same_user_are_independent(db_session, make_user):
    user_id = make_user("grace")
    first = create_session(db_session, user_id)
    second = create_session(db_session, user_id)

    assert first.session_id != second.session_id
    assert first.token != second.token

    delete_session(db_session, first.session_id)
    assert resolve_user(db_session, session_id=first.session_id) is None
    # The other browser stays logged in
    assert resolve_user(db_session, session_id=second.session_id).id == user_id


def test_credentials_do_not_cross_resolve(db_session, make_user):
    credentials = create_session(db_session, make_user("linus"))

    # A token is not a session id and vice versa
    assert resolve_user(db_session, session_id=credentials.token) is None
    assert resolve_user(db_session, token=credentials.session_id) is None


def test_unknown_credentials_resolve_to_none(db_session):
    assert resolve_user(db_session, token="nope") is None
    assert resolve_user(db_session, session_id="nope") is None


def test_malformed_owner_id_is_rejected(db_session):
    db_session.add(
        LoginSession(session_id="sid", token="tok", user_id="not-a-uuid", created_at=utcnow_iso())
    )
    db_session.commit()

    assert find_session_user_id(db_session, token="tok") == "not-a-uuid"
    assert resolve_user(db_session, token="tok") is None


def test_session_for_missing_user_resolves_to_none(db_session):
    db_session.add(
        LoginSession(
            session_id="sid",
            token="tok",
            user_id="0f1e2d3c4b5a69788796a5b4c3d2e1f0",
            created_at=utcnow_iso(),
        )
    )
    db_session.commit()

    assert resolve_user(db_session, session_id="sid") is None


def test_find_session_user_id_requires_exactly_one_key(db_session):
    with pytest.raises(ValueError):
        find_session_user_id(db_session)
    with pytest.raises(ValueError):
        find_session_user_id(db_session, session_id="a", token="b")


def test_delete_missing_session_only_warns(db_session, caplog):
    with caplog.at_level(logging.WARNING, logger="livetimers.crud.sessions"):
        assert delete_session(db_session, "never-issued") is False
    assert any(record.getMessage() == "session.delete_missing" for record in caplog.records)


def test_delete_session_removes_row(db_session, make_user):
    credentials = create_session(db_session, make_user())

    assert delete_session(db_session, credentials.session_id) is True
    assert get_session(db_session, credentials.session_id) is None
    # Deleting again is harmless
    assert delete_session(db_session, credentials.session_id) is False


def test_colliding_credentials_are_regenerated(db_session, make_user, monkeypatch):
    user_id = make_user()
    existing = create_session(db_session, user_id)

    issued = iter([existing.session_id, existing.token, "fresh-sid", "fresh-token"])
    monkeypatch.setattr(sessions_crud, "new_credential", lambda nbytes=None: next(issued))

    credentials = create_session(db_session, user_id)

    assert credentials.session_id == "fresh-sid"
    assert credentials.token == "fresh-token"
    rows = db_session.execute(select(LoginSession).where(LoginSession.user_id == user_id)).scalars().all()
    assert len(rows) == 2


def test_user_id_shape_check():
    assert is_well_formed_user_id("0f1e2d3c4b5a69788796a5b4c3d2e1f0")
    assert not is_well_formed_user_id("")
    assert not is_well_formed_user_id(None)
    assert not is_well_formed_user_id("12345")
