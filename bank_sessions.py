# bank_sessions.py
# ============================================================
# SERVER-SIDE SESSION MANAGEMENT
# ============================================================
# The browser only ever holds an opaque random session id. Everything else
# (who is logged in, since when) stays in this process.
# ============================================================
import logging
import secrets
import threading
import time

from bank_errors import InvalidCredentials

logger = logging.getLogger(__name__)


class Session:
    __slots__ = ("sid", "username", "created_at")

    def __init__(self, sid, username, created_at=None):
        self.sid = sid
        self.username = username
        self.created_at = time.time() if created_at is None else created_at

    def __repr__(self):
        return f"Session(username={self.username!r})"


class SessionManager:
    """
    Issues, resolves and destroys sessions bound to accounts in ``store``.

    SECURITY FEATURES:
    - Session ids come from ``secrets`` (256 bits), never from user input
    - A fresh id on every login; the id the browser presented is discarded
    - Unknown usernames and wrong passwords fail the same way
    """

    def __init__(self, store):
        self.store = store
        self._sessions = {}
        self._lock = threading.Lock()

    def login(self, username, password, previous_sid=None):
        account = self.store.get(username)
        if account is None or not account.check_password(password or ""):
            logger.info("Failed login for %r", username)
            raise InvalidCredentials()

        if previous_sid:
            self.destroy(previous_sid)
        session = Session(secrets.token_urlsafe(32), account.username)
        with self._lock:
            self._sessions[session.sid] = session
        logger.info("Successful login for %r", account.username)
        return session

    def resolve(self, sid):
        if not sid:
            return None
        with self._lock:
            session = self._sessions.get(sid)
        if session is None or self.store.get(session.username) is None:
            return None
        return session

    def destroy(self, sid):
        if not sid:
            return
        with self._lock:
            session = self._sessions.pop(sid, None)
        if session is not None:
            logger.info("Session destroyed for %r", session.username)

    def __len__(self):
        with self._lock:
            return len(self._sessions)
