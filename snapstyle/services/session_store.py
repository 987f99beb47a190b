"""
In-memory session registry.

Sessions are immutable values keyed by session_id. Writes replace the whole
value, so a reader never sees a half-applied transition. State lives for the
lifetime of the process only.

Sessions idle for longer than the TTL (SESSION_TTL_SECONDS) are evicted.
Every get/put counts as access. Expired entries are swept on access, so a
tab closed without DELETE does not keep its images in memory.
"""

import logging
import time
from functools import lru_cache
from typing import Callable

from ..core.config import get_settings
from ..models.session import Session

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60


class SessionNotFound(KeyError):
    """No session with this id (never created, removed, or expired)."""


class SessionStore:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._last_access: dict[str, float] = {}

    def get(self, session_id: str) -> Session:
        """Raises SessionNotFound for unknown or expired ids."""
        self._sweep()
        try:
            session = self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None
        self._last_access[session_id] = self._clock()
        return session

    def put(self, session: Session) -> Session:
        self._sweep()
        self._sessions[session.session_id] = session
        self._last_access[session.session_id] = self._clock()
        return session

    def exists(self, session_id: str) -> bool:
        self._sweep()
        return session_id in self._sessions

    def remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._last_access.pop(session_id, None)
        logger.debug("Removed session: %s (%d active)", session_id, len(self._sessions))

    def _sweep(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        expired = [sid for sid, seen in self._last_access.items() if seen < cutoff]
        for session_id in expired:
            del self._sessions[session_id]
            del self._last_access[session_id]
        if expired:
            logger.info("Evicted %d idle session(s) (%d active)", len(expired), len(self._sessions))

    def __len__(self) -> int:
        self._sweep()
        return len(self._sessions)


@lru_cache
def get_session_store() -> SessionStore:
    return SessionStore(ttl_seconds=get_settings().session_ttl_seconds)
