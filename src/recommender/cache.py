"""Time-bounded recommendation result cache.

Entries are keyed by ``(user_id, limit)``. An entry older than the TTL is
treated as absent; stale entries are not purged, only overwritten by the next
``put``. Any write for a user must call ``invalidate`` so later reads never
serve recommendations computed before it.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from src.recommender.models import ProductRecord, UserId

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600

CacheKey = Tuple[UserId, int]


@dataclass(frozen=True)
class CacheEntry:
    payload: List[ProductRecord]
    written_at: float


class RecommendationCache:
    """Per-engine memoization of resolved recommendation lists.

    No lock is taken: single-key dict operations are atomic, concurrent
    misses for one key may both compute, and the last ``put`` wins.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, user_id: UserId, limit: int) -> Optional[List[ProductRecord]]:
        """Return the cached payload, or None on a miss or expired entry."""
        entry = self._entries.get((user_id, limit))
        if entry is None:
            return None
        if self._clock() - entry.written_at >= self.ttl_seconds:
            return None
        return list(entry.payload)

    def put(self, user_id: UserId, limit: int, payload: List[ProductRecord]) -> None:
        self._entries[(user_id, limit)] = CacheEntry(
            payload=list(payload), written_at=self._clock()
        )

    def invalidate(self, user_id: UserId) -> int:
        """Drop every entry for ``user_id`` regardless of limit.

        Returns:
            Number of entries removed.
        """
        removed = 0
        for key in [k for k in list(self._entries) if k[0] == user_id]:
            if self._entries.pop(key, None) is not None:
                removed += 1
        if removed:
            logger.debug(f"Invalidated {removed} cache entries for user {user_id}")
        return removed

    def clear_all(self) -> None:
        self._entries.clear()
        logger.info("Cleared recommendation cache")
