# agrisense/app/utils/cache.py
"""
Process-local TTL cache for upstream lookups (reverse geocodes, daily forecasts).

Entries are JSON-able values; each lookup type has its own TTL in CACHE_TTL.
"""
import asyncio
import logging
import threading
import time
from typing import Any, Dict, NamedTuple, Optional

log = logging.getLogger("agrisense.cache")

SWEEP_INTERVAL_SEC = 3600

CACHE_TTL = {
    "weather": 6 * 3600,    # Open-Meteo refreshes a few times a day
    "geocode": 24 * 3600,   # place names barely change
    "default": 3600,
}


class _Entry(NamedTuple):
    value: Any
    expires_at: Optional[float]   # None = never


class TTLCache:
    def __init__(self):
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at is not None and entry.expires_at <= time.time():
                del self._entries[key]
                return None
            return entry.value

    def put(self, key: str, value: Any, ttl: Optional[float]) -> None:
        expires_at = time.time() + ttl if ttl is not None else None
        with self._lock:
            self._entries[key] = _Entry(value, expires_at)

    def sweep(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = time.time()
        with self._lock:
            dead = [k for k, e in self._entries.items()
                    if e.expires_at is not None and e.expires_at <= now]
            for k in dead:
                del self._entries[k]
        return len(dead)

    def clear(self) -> int:
        with self._lock:
            n = len(self._entries)
            self._entries.clear()
        return n

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


cache = TTLCache()

_sweeper: Optional[asyncio.Task] = None


def _ttl_for(cache_type: str) -> int:
    return int(CACHE_TTL.get(cache_type, CACHE_TTL["default"]))


async def init_cache(default_ttl: Optional[int] = None):
    """Startup hook: set the default TTL and start the periodic sweeper."""
    global _sweeper
    if default_ttl is not None:
        CACHE_TTL["default"] = default_ttl
    if _sweeper is None or _sweeper.done():
        _sweeper = asyncio.create_task(_sweep_forever())
    log.info("💾 Cache ready (in-memory, default ttl %ss)", CACHE_TTL["default"])


async def close_cache():
    global _sweeper
    if _sweeper is not None:
        _sweeper.cancel()
        _sweeper = None


async def _sweep_forever():
    while True:
        await asyncio.sleep(SWEEP_INTERVAL_SEC)
        n = cache.sweep()
        if n:
            log.info("🧹 Cache sweep removed %d expired keys", n)


async def get_json(key: str, cache_type: str = "default") -> Optional[Any]:
    val = cache.get(key)
    if val is not None:
        log.debug("💾 %s cache hit: %s", cache_type, key)
    return val


async def set_json(key: str, val: Any, cache_type: str = "default"):
    ttl = _ttl_for(cache_type)
    cache.put(key, val, ttl)
    log.debug("💾 %s cached for %ds: %s", cache_type, ttl, key)


def flush_all() -> int:
    """Clear the whole cache; returns the number of keys dropped."""
    return cache.clear()
