"""In-process read cache with tag-based invalidation.

Entries are stored under a key with a time-to-live and one or more tags.
``invalidate(tag)`` drops every entry carrying the tag immediately, whatever
TTL it has left. Write paths call it before returning so the next read
recomputes from storage.
"""
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
import logging
import threading
import time
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheTags:
    """Cache tags for revalidation."""

    POSTS = "posts"
    USERS = "users"
    ANALYTICS = "analytics"
    USER_POSTS = "user-posts"


@dataclass
class _Entry:
    value: Any
    expires_at: float
    tags: frozenset[str]


class TaggedCache:
    """Key/value cache whose entries expire by TTL or by tag.

    Misses are computed outside the lock, so two threads missing the same key
    may both compute; the later store wins. Computations are read-only, so the
    duplicate work is harmless. A value whose tags were invalidated while it
    was being computed is returned to its caller but not stored.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[Hashable, _Entry] = {}
        self._tag_index: dict[str, set[Hashable]] = {}
        self._generations: dict[str, int] = {}
        self._lock = threading.Lock()

    def get(
        self,
        key: Hashable,
        tags: Iterable[str],
        ttl: float,
        compute: Callable[[], T],
    ) -> T:
        """Return the cached value for ``key``, computing and storing it on a miss."""
        tag_set = frozenset(tags)
        if not tag_set:
            raise ValueError("Cached entries need at least one tag")

        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if entry.expires_at > now:
                    return entry.value
                self._drop(key)
            generations = {tag: self._generations.get(tag, 0) for tag in tag_set}

        value = compute()

        with self._lock:
            if any(self._generations.get(tag, 0) != gen for tag, gen in generations.items()):
                # A tag was invalidated while computing; the value may predate that write
                return value
            self._drop(key)
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl, tags=tag_set)
            for tag in tag_set:
                self._tag_index.setdefault(tag, set()).add(key)
        return value

    def invalidate(self, tag: str) -> int:
        """Expire every entry tagged ``tag``. Returns how many entries were dropped."""
        with self._lock:
            self._generations[tag] = self._generations.get(tag, 0) + 1
            keys = self._tag_index.pop(tag, set())
            for key in keys:
                self._drop(key)
        if keys:
            logger.debug(f"Invalidated {len(keys)} cache entries tagged {tag!r}")
        return len(keys)

    def invalidate_many(self, tags: Iterable[str]) -> int:
        return sum(self.invalidate(tag) for tag in tags)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._tag_index.clear()

    def _drop(self, key: Hashable) -> None:
        # Caller holds the lock
        entry = self._entries.pop(key, None)
        if entry is None:
            return
        for tag in entry.tags:
            keys = self._tag_index.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._tag_index[tag]

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and entry.expires_at > self._clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
