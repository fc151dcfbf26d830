# series_api/cache.py
from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Tuple


def make_key(*parts: str) -> str:
    """
    Enforce namespaced cache keys to avoid collisions.
    Example:
      make_key("standings", "indian-premier-league-2025") -> "standings:indian-premier-league-2025"
    """
    cleaned = [str(p).strip() for p in parts if str(p).strip()]
    if len(cleaned) < 2:
        raise ValueError("Cache namespace and key must be non-empty")
    return ":".join(cleaned)


class TTLCache:
    """
    Simple in-memory TTL cache (sufficient for single-instance deploys).

    Acts as the session-scoped key/value port used by the resolver and the
    standings service: plain get/set by string key, whole-value overwrites,
    no transactions.
    """

    def __init__(self, default_ttl_seconds: int = 60, clock: Callable[[], float] = time.time) -> None:
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        # key -> (expires_at_epoch, value)
        self._items: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        item = self._items.get(key)
        if not item:
            return None

        expires_at, value = item
        if self._clock() > expires_at:
            self._items.pop(key, None)
            return None

        return value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            # Do not cache if TTL is invalid
            return
        self._items[key] = (self._clock() + ttl, value)
