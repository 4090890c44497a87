import pytest

from bank_errors import InvalidCredentials
from bank_sessions import SessionManager


@pytest.fixture
def sessions(store):
    return SessionManager(store)


def test_login_issues_opaque_session(sessions):
    session = sessions.login("alice", "alice")
    assert session.username == "alice"
    assert len(session.sid) >= 32
    assert "alice" not in session.sid
    assert sessions.resolve(session.sid) is session


@pytest.mark.parametrize("username,password", [
    ("alice", "wrong"),
    ("alice", ""),
    ("alice", None),
    ("nobody", "alice"),
    ("", ""),
])
def test_bad_credentials(sessions, username, password):
    with pytest.raises(InvalidCredentials):
        sessions.login(username, password)
    assert len(sessions) == 0


def test_each_login_gets_a_fresh_session(sessions):
    first = sessions.login("alice", "alice")
    second = sessions.login("alice", "alice")
    assert first.sid != second.sid
    # separate browsers keep separate sessions
    assert sessions.resolve(first.sid) is first


def test_relogin_discards_presented_session(sessions):
    first = sessions.login("alice", "alice")
    second = sessions.login("bob", "bob", previous_sid=first.sid)
    assert sessions.resolve(first.sid) is None
    assert sessions.resolve(second.sid).username == "bob"


def test_failed_relogin_keeps_session(sessions):
    first = sessions.login("alice", "alice")
    with pytest.raises(InvalidCredentials):
        sessions.login("bob", "nope", previous_sid=first.sid)
    assert sessions.resolve(first.sid) is first


@pytest.mark.parametrize("sid", [None, "", "not-a-session"])
def test_resolve_unknown(sessions, sid):
    assert sessions.resolve(sid) is None


def test_destroy_is_idempotent(sessions):
    session = sessions.login("alice", "alice")
    sessions.destroy(session.sid)
    sessions.destroy(session.sid)
    sessions.destroy(None)
    assert sessions.resolve(session.sid) is None
    assert len(sessions) == 0
