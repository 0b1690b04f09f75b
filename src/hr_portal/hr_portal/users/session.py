"""Explicit sign-in sessions.

A ``UserSession`` is opened at sign-in and closed at sign-out or once it has
been idle longer than the registry's timeout. Components that live for the
duration of a session (the attendance cycle, event listeners) register a
closer so they are torn down with it.
"""

from __future__ import annotations

import logging
import secrets
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from ..common.datetime_utils import now_local
from ..common.events import EventHub
from ..core.constants import SESSION_IDLE_MINUTES
from .service import SessionUser

logger = logging.getLogger(__name__)


class UserSession:
    def __init__(self, token: str, user: SessionUser, opened_at: datetime):
        self.token = token
        self.user = user
        self.opened_at = opened_at
        self.last_seen = opened_at
        self.events = EventHub()
        self.closed = False
        self._closers: List[Callable[[], None]] = []

    def on_close(self, closer: Callable[[], None]) -> None:
        self._closers.append(closer)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for closer in reversed(self._closers):
            try:
                closer()
            except Exception:
                logger.exception("Session teardown step failed (user %s)", self.user.user_id)
        self._closers.clear()


class SessionRegistry:
    """Process-local store of open sessions, keyed by an opaque token.

    Sessions idle for longer than ``idle_timeout`` are closed lazily: on lookup,
    and in a sweep every time a new session is opened. A browser that never
    signs out therefore cannot keep its session (and attendance cycle) alive.
    """

    def __init__(
        self,
        *,
        on_open: Optional[List[Callable[[UserSession], None]]] = None,
        clock: Callable[[], datetime] = now_local,
        idle_timeout: timedelta = timedelta(minutes=SESSION_IDLE_MINUTES),
    ):
        self._sessions: Dict[str, UserSession] = {}
        self._on_open = list(on_open or [])
        self._clock = clock
        self._idle_timeout = idle_timeout
        self._lock = threading.Lock()

    def add_open_hook(self, hook: Callable[[UserSession], None]) -> None:
        self._on_open.append(hook)

    def open(self, user: SessionUser) -> UserSession:
        self.expire_idle()
        user_session = UserSession(secrets.token_urlsafe(32), user, self._clock())
        with self._lock:
            self._sessions[user_session.token] = user_session
        for hook in self._on_open:
            hook(user_session)
        return user_session

    def get(self, token: Optional[str]) -> Optional[UserSession]:
        if not token:
            return None
        with self._lock:
            user_session = self._sessions.get(token)
            if user_session is None or not self._is_idle(user_session, self._clock()):
                return user_session
            self._sessions.pop(token, None)
        logger.info("Session for user %s expired after inactivity", user_session.user.user_id)
        user_session.close()
        return None

    def touch(self, user_session: UserSession) -> None:
        user_session.last_seen = self._clock()

    def expire_idle(self) -> int:
        """Close every idle session; returns how many were closed."""

        now = self._clock()
        with self._lock:
            expired = [s for s in self._sessions.values() if self._is_idle(s, now)]
            for user_session in expired:
                self._sessions.pop(user_session.token, None)
        for user_session in expired:
            user_session.close()
        if expired:
            logger.info("Closed %d idle session(s)", len(expired))
        return len(expired)

    def close(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            user_session = self._sessions.pop(token, None)
        if user_session is None:
            return False
        user_session.close()
        return True

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for user_session in sessions:
            user_session.close()

    def _is_idle(self, user_session: UserSession, now: datetime) -> bool:
        return now - user_session.last_seen > self._idle_timeout

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
