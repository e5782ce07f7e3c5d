# scout_bot/session_store.py
"""
In-memory session store. Profiles live for the life of the process only,
and sessions idle longer than ``idle_ttl_seconds`` are evicted.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .errors import TurnInProgressError
from .models import TasteProfile
from .session import ChatSession

log = logging.getLogger(__name__)


@dataclass
class SessionState:
    chat: ChatSession
    profile: TasteProfile
    in_flight: bool = False
    last_seen: float = 0.0


class SessionStore:
    """
    Maps session ids to SessionState. Flask may serve requests from several
    threads, so lookups and the in-flight flag go through one lock.
    """

    def __init__(self, idle_ttl_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self._sessions: Dict[str, SessionState] = {}
        self._lock = threading.Lock()
        self.idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _evict_idle(self, now: float) -> None:
        # caller holds the lock; a session mid-turn is never evicted
        if not self.idle_ttl_seconds:
            return
        expired = [
            sid for sid, state in self._sessions.items()
            if not state.in_flight and now - state.last_seen > self.idle_ttl_seconds
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            log.info(f"SESSIONS_EVICTED | count={len(expired)} | remaining={len(self._sessions)}")

    def get(self, session_id: str) -> Optional[SessionState]:
        with self._lock:
            self._evict_idle(self._clock())
            return self._sessions.get(session_id)

    def get_or_create(self, session_id: str, factory: Callable[[str], SessionState]) -> SessionState:
        with self._lock:
            now = self._clock()
            self._evict_idle(now)
            state = self._sessions.get(session_id)
            if state is None:
                state = factory(session_id)
                self._sessions[session_id] = state
                log.info(f"SESSION_CREATED | session={session_id} | total={len(self._sessions)}")
            state.last_seen = now
            return state

    def publish(self, session_id: str, profile: TasteProfile) -> None:
        """Replace the session's profile snapshot wholesale."""
        with self._lock:
            state = self._sessions.get(session_id)
            if state is not None:
                state.profile = profile

    def begin_turn(self, session_id: str) -> None:
        with self._lock:
            state = self._sessions.get(session_id)
            if state is None:
                raise KeyError(session_id)
            if state.in_flight:
                raise TurnInProgressError(session_id)
            state.in_flight = True

    def end_turn(self, session_id: str) -> None:
        with self._lock:
            state = self._sessions.get(session_id)
            if state is not None:
                state.in_flight = False
                state.last_seen = self._clock()

    def drop(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        if removed:
            log.info(f"SESSION_DROPPED | session={session_id}")
        return removed
