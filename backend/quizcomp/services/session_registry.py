"""In-process session registry.

Maps an opaque bearer token to the logged-in user and role. Nothing is
persisted: a restart logs everybody out. FastAPI runs sync endpoints on a
worker thread pool, so every access goes through one lock.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from quizcomp.core.config import settings
from quizcomp.core.security import new_session_token


@dataclass(frozen=True)
class SessionInfo:
    user_id: int
    role: str
    expires_at: float


class SessionRegistry:
    def __init__(
        self,
        ttl_seconds: int,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: Optional[float] = None,
    ):
        self.ttl_seconds = int(ttl_seconds)
        # Expired tokens of clients that never come back are dropped by a
        # periodic sweep piggybacked on create()
        self.sweep_interval = float(sweep_interval if sweep_interval is not None else self.ttl_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, SessionInfo] = {}
        self._next_sweep = self._clock() + self.sweep_interval

    def _purge_locked(self, now: float) -> int:
        expired = [t for t, info in self._sessions.items() if info.expires_at <= now]
        for t in expired:
            del self._sessions[t]
        self._next_sweep = now + self.sweep_interval
        return len(expired)

    def create(self, user_id: int, role: str) -> str:
        token = new_session_token()
        now = self._clock()
        info = SessionInfo(user_id=int(user_id), role=str(role), expires_at=now + self.ttl_seconds)
        with self._lock:
            if now >= self._next_sweep:
                self._purge_locked(now)
            self._sessions[token] = info
        return token

    def get(self, token: Optional[str]) -> Optional[SessionInfo]:
        if not token:
            return None
        with self._lock:
            info = self._sessions.get(token)
            if info is None:
                return None
            if info.expires_at <= self._clock():
                del self._sessions[token]
                return None
            return info

    def revoke(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def revoke_user(self, user_id: int) -> int:
        with self._lock:
            tokens = [t for t, info in self._sessions.items() if info.user_id == int(user_id)]
            for t in tokens:
                del self._sessions[t]
        return len(tokens)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            return self._purge_locked(now)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


registry = SessionRegistry(ttl_seconds=settings.SESSION_TTL_SECONDS)
