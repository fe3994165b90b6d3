"""Roster Cache: in-process read cache for per-session enrollment rosters.

Invariants:
    - invalidate() takes no arguments and clears every roster
    - Entries older than ttl_seconds are treated as missing
    - Cached rosters are copied on the way in and out

Design Decisions:
    - Module-level singleton, same lifecycle as db_manager: single-process uvicorn,
      state lost on restart is acceptable for a read cache
    - Whole-cache invalidation: an operation batch can touch any session, and the
      dispatcher only knows that *something* changed
"""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class RosterCache:
    """session_id -> roster rows, with a TTL."""

    def __init__(
        self, ttl_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[int, tuple[float, list[dict]]] = {}

    def get(self, session_id: int) -> list[dict] | None:
        cached = self._entries.get(session_id)
        if cached is None:
            return None
        stored_at, roster = cached
        if self._clock() - stored_at > self.ttl_seconds:
            del self._entries[session_id]
            return None
        return [dict(row) for row in roster]

    def put(self, session_id: int, roster: list[dict]) -> None:
        self._entries[session_id] = (self._clock(), [dict(row) for row in roster])

    def invalidate(self) -> None:
        if self._entries:
            logger.debug(f"Roster cache cleared ({len(self._entries)} session(s))")
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


roster_cache = RosterCache()
