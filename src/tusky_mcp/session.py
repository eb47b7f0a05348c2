"""In-memory session token store.

Holds at most one session token. Setting a token replaces whatever was held
before. Expiry is lazy: there is no timer, an expired token is dropped the
first time its validity is evaluated.

All reads and writes of the single slot go through one lock so a ``clear()``
racing a privileged call is never observed half-applied.
"""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from .models import SessionStatus, SessionToken, as_utc

logger = structlog.get_logger()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionTokenStore:
    """Single-slot holder for the process's authenticated session."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._lock = threading.Lock()
        self._session: Optional[SessionToken] = None

    def set(self, token: str, expires_at: Optional[datetime] = None) -> SessionToken:
        """Install a session token, replacing any prior one."""
        session = SessionToken(token=token, expires_at=as_utc(expires_at))
        with self._lock:
            replaced = self._session is not None
            self._session = session
        logger.info(
            "session_set",
            expires_at=session.expires_at.isoformat() if session.expires_at else None,
            replaced=replaced,
        )
        return session

    def clear(self) -> bool:
        """Drop the held token.

        Returns:
            True if a token was held
        """
        with self._lock:
            had_session = self._session is not None
            self._session = None
        if had_session:
            logger.info("session_cleared")
        return had_session

    def get(self) -> Optional[str]:
        """Current token value, without checking validity."""
        with self._lock:
            return self._session.token if self._session else None

    def current(self) -> Optional[SessionToken]:
        """The held session if it is still valid, else None.

        Observing an expired session drops it.
        """
        with self._lock:
            return self._current_locked()

    def is_valid(self) -> bool:
        return self.current() is not None

    def status(self) -> SessionStatus:
        """Like ``is_valid`` but tells a lapsed session apart from no session."""
        with self._lock:
            if self._session is None:
                return SessionStatus.UNAUTHENTICATED
            if self._current_locked() is None:
                return SessionStatus.EXPIRED
            return SessionStatus.AUTHENTICATED

    def _current_locked(self) -> Optional[SessionToken]:
        session = self._session
        if session is None:
            return None
        if session.is_expired(self._clock()):
            self._session = None
            logger.info("session_expired")
            return None
        return session
