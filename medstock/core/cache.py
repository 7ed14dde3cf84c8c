# medstock/core/cache.py
#
# Short-lived read cache for the rarely changing lists (posts, cabinets,
# contacts, cabinet order). One instance per process, handed to the storage
# layer; the storage layer invalidates it on every write.

import logging
import threading
import time

from medstock.core.config import settings

logger = logging.getLogger("medstock")


AMBULANCE_POSTS = "ambulance_posts"
CABINETS = "cabinets"
POST_CONTACTS = "post_contacts"
CABINET_ORDER = "cabinet_order"


def default_ttls() -> dict[str, float]:
    return {
        AMBULANCE_POSTS: settings.CACHE_TTL_POSTS,
        CABINETS: settings.CACHE_TTL_CABINETS,
        POST_CONTACTS: settings.CACHE_TTL_CONTACTS,
        CABINET_ORDER: settings.CACHE_TTL_CABINET_ORDER,
    }


class InventoryCache:
    def __init__(self, ttls: dict[str, float] | None = None, clock=time.monotonic):
        self._ttls = ttls if ttls is not None else default_ttls()
        self._clock = clock
        self._entries: dict[tuple[str, object], tuple[float, object]] = {}
        self._lock = threading.Lock()

    def get_or_load(self, kind: str, loader, key=None):
        """Return the cached value for (kind, key), calling ``loader`` on a miss."""
        ttl = self._ttls.get(kind, 0)

        with self._lock:
            entry = self._entries.get((kind, key))
            if entry is not None and entry[0] > self._clock():
                return entry[1]

        value = loader()

        if ttl > 0:
            with self._lock:
                self._entries[(kind, key)] = (self._clock() + ttl, value)

        return value

    def invalidate(self, *kinds: str):
        with self._lock:
            for cache_key in [k for k in self._entries if k[0] in kinds]:
                del self._entries[cache_key]

        logger.debug(f"Cache invalidated: {', '.join(kinds)}")

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        return len(self._entries)


cache = InventoryCache()


def get_cache() -> InventoryCache:
    return cache
