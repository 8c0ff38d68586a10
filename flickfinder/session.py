"""In-memory state for authenticated users."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime

from .collection_store import CollectionStore
from .models import Movie

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = 28_800


@dataclass(slots=True)
class Session:
    """Everything one logged-in user accumulates until logout."""

    token: str
    user_id: int
    username: str
    collections: CollectionStore = field(default_factory=CollectionStore)
    last_results: list[Movie] = field(default_factory=list)
    recent_searches: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    last_seen: float = field(default_factory=time.time)

    def find_result(self, title: str | None) -> Movie | None:
        """Return the first movie in the last result list with ``title``."""

        if not title:
            return None
        for movie in self.last_results:
            if movie.title == title:
                return movie
        return None

    def remember_search(self, query: str, *, limit: int) -> None:
        if not query or limit <= 0:
            return
        if query in self.recent_searches:
            self.recent_searches.remove(query)
        self.recent_searches.insert(0, query)
        del self.recent_searches[limit:]


class SessionManager:
    """Issues opaque tokens and keeps the matching :class:`Session` objects.

    A session idle for longer than ``ttl_seconds`` is dropped the next time
    any session is opened or looked up.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_SESSION_TTL) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self.ttl_seconds = ttl_seconds

    def open(self, user_id: int, username: str) -> Session:
        session = Session(
            token=secrets.token_urlsafe(32), user_id=user_id, username=username
        )
        with self._lock:
            expired = self._prune_expired()
            self._sessions[session.token] = session
        self._discard(expired)
        logger.info("Opened session for user %s", username)
        return session

    def get(self, token: str | None) -> Session | None:
        with self._lock:
            expired = self._prune_expired()
            session = self._sessions.get(token) if token else None
            if session is not None:
                session.last_seen = time.time()
        self._discard(expired)
        return session

    def close(self, token: str | None) -> bool:
        if not token:
            return False
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is None:
            return False
        session.collections.clear()
        logger.info("Closed session for user %s", session.username)
        return True

    def _prune_expired(self) -> list[Session]:
        now = time.time()
        expired = [
            key
            for key, session in self._sessions.items()
            if session.last_seen + self.ttl_seconds <= now
        ]
        return [self._sessions.pop(key) for key in expired]

    @staticmethod
    def _discard(expired: list[Session]) -> None:
        for session in expired:
            session.collections.clear()
            logger.info("Expired idle session for user %s", session.username)

    def __len__(self) -> int:
        return len(self._sessions)
